#!/usr/bin/env python3
"""
Complete Pipeline Demo: ECU XML → Records → CSV → Container → CSV

Shows the full workflow on a small generated log:
1. Extract scalars and label series from XML
2. Serialize them to a CR-separated CSV blob
3. Compress the blob into a .cmp container
4. Decompress the container and check it matches
"""

import os
import tempfile

from ecucsv.container import compress, read_trailer
from ecucsv.conversion import run_batch
from ecucsv.csv_writer import serialize
from ecucsv.extractor import extract
from ecucsv.model import ConversionMode


SAMPLE_XML = b"""<?xml version="1.0" encoding="utf-8"?>
<log>
  <vin>W0L000051T2123456</vin>
  <temp>98.6</temp>
  <sample name="ch1" value="1"/>
  <sample name="ch1" value="2"/>
  <sample name="ch2" value="9"/>
  <sample name="ch1" value="3"/>
</log>
"""


def main():
    workdir = tempfile.mkdtemp(prefix="ecucsv_demo_")
    source = os.path.join(workdir, "session.ecu")
    with open(source, "wb") as f:
        f.write(SAMPLE_XML)

    print("=" * 80)
    print("COMPLETE PIPELINE DEMO: XML → Records → CSV → Container → CSV")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Extract
    # =========================================================================
    print("\n1. EXTRACTING...")
    records = extract(source)
    print(f"   ✓ Scalars: {records.scalars}")
    for s in records.series:
        print(f"   ✓ Series {s.name}: {s.values}")

    # =========================================================================
    # STEP 2: Serialize
    # =========================================================================
    print("\n2. SERIALIZING...")
    csv_text = serialize(records)
    for row in csv_text.split("\r"):
        print(f"   {row}")

    # =========================================================================
    # STEP 3: Compress
    # =========================================================================
    print("\n3. COMPRESSING...")
    container = compress(csv_text)
    _, declared = read_trailer(container)
    print(f"   ✓ XML size: {len(SAMPLE_XML)} bytes")
    print(f"   ✓ Container size: {len(container)} bytes (declares {declared} CSV bytes)")

    # =========================================================================
    # STEP 4: Batch round trip on disk
    # =========================================================================
    print("\n4. ROUND TRIP ON DISK...")
    compressed = run_batch([source], ConversionMode.COMPRESS)
    restored = run_batch([o.output for o in compressed.outcomes], ConversionMode.DECOMPRESS)
    with open(restored.outcomes[0].output, "rb") as f:
        matches = f.read() == csv_text.encode("utf-8")
    print(f"   ✓ Wrote {compressed.outcomes[0].output}")
    print(f"   ✓ Restored {restored.outcomes[0].output} (matches: {matches})")

    print("\n" + "=" * 80)
    print(f"PIPELINE COMPLETE! Files in {workdir}")
    print("=" * 80)


if __name__ == "__main__":
    main()
