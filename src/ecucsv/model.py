"""
Core Conversion Model Objects

Defines the data structures passed between the conversion stages.

These are plain data classes representing:
    - LabelSeries (one named run of `value` attributes)
    - ExtractedRecords (everything pulled out of one XML file)
    - ConversionMode (what the caller asked for)
    - FileOutcome / BatchReport (what happened, per file and per batch)

ARCHITECTURAL RULE:
    These objects:
        - Live for exactly one file conversion (no cross-file state)
        - Know nothing about XML parsing or compression
        - Represent results, not behavior
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


@dataclass
class LabelSeries:
    """
    A named, ordered sequence of values.

    Built from repeated elements that carry the same `name` attribute,
    e.g. sensor channel samples:

        <sample name="ch1" value="1"/>
        <sample name="ch1" value="2"/>

    gives LabelSeries(name="ch1", values=["1", "2"]).

    Properties:
        name: Value of the `name` attribute that opened the series
        values: `value` attributes in encounter order
    """

    name: str
    values: List[str] = field(default_factory=list)


@dataclass
class ExtractedRecords:
    """
    Everything the extractor keeps from one XML document.

    Properties:
        scalars:
            The ScalarMap. Element name -> last non-empty text seen for it.
            Insertion order is the order keys were first written.

        series:
            LabelSeries in first-seen order of their names.
            Names are unique within the list.
    """

    scalars: Dict[str, str] = field(default_factory=dict)
    series: List[LabelSeries] = field(default_factory=list)

    def get_series(self, name: str) -> Optional[LabelSeries]:
        """Get a series by name."""
        for s in self.series:
            if s.name == name:
                return s
        return None

    def series_names(self) -> List[str]:
        return [s.name for s in self.series]


class ConversionMode(Enum):
    """What to do with an input file."""
    CSV_ONLY = "csv-only"      # .ecu -> .csv
    COMPRESS = "compress"      # .ecu -> .cmp
    DECOMPRESS = "decompress"  # .cmp -> .csv


class OutcomeStatus(Enum):
    """Result of converting one file."""
    CONVERTED = "converted"
    SKIPPED = "skipped"  # container had no trailer; nothing written
    FAILED = "failed"


@dataclass
class FileOutcome:
    """
    Completion notification for one input file.

    Properties:
        source: Input path as given by the caller
        mode: ConversionMode that was requested
        status: OutcomeStatus
        output: Path written, if any
        error: Human-readable error detail for SKIPPED/FAILED
        error_kind: "io", "malformed-xml", "corrupt-container" or "missing-trailer"
    """

    source: str
    mode: ConversionMode
    status: OutcomeStatus
    output: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.CONVERTED

    @property
    def display_name(self) -> str:
        """File name without its directory, as shown in a file list."""
        return os.path.basename(self.source)


@dataclass
class BatchReport:
    """Outcomes of one batch, in input order."""

    mode: ConversionMode
    outcomes: List[FileOutcome] = field(default_factory=list)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def converted(self) -> int:
        return self._count(OutcomeStatus.CONVERTED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    def failures(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]


__all__ = [
    "LabelSeries",
    "ExtractedRecords",
    "ConversionMode",
    "OutcomeStatus",
    "FileOutcome",
    "BatchReport",
]
