"""
ECU Telemetry Conversion Package

Turns machine-generated ECU XML logs into compact, row-oriented CSV and
packs that CSV into a small compressed container for storage.

PIPELINE:
---------
    .ecu (XML)  ->  extractor  ->  ExtractedRecords
                ->  csv_writer ->  CSV blob (CR-terminated rows)
                ->  container  ->  .cmp (raw DEFLATE + NUL + length)

The reverse direction only restores bytes: a .cmp file is inflated back
to the exact CSV blob that produced it.

This package knows nothing about windows, dialogs or file pickers.
Callers hand it paths and a ConversionMode and get FileOutcome objects back.
"""

__version__ = "0.1.0"
