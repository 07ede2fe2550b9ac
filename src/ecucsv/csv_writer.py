"""
CSV Serializer (Layer 2: ExtractedRecords → CSV blob).

Output format (no header row, no quoting):

    temp,98.6          <- one row per scalar: key,value
    ch1,1,2            <- one row per series: name,value1,...,valueN
    ch2,9

Rows are stored horizontally so another tool can read a whole series
from one line. Every row ends with a carriage return (0x0D); trailing
whitespace is trimmed from the end of the blob, so the last row has none.

Values are joined with a bare comma. The source schema never puts commas
in values, so nothing is escaped.
"""

from typing import Dict, Iterable, List, Optional, Union

from ecucsv.model import ExtractedRecords, LabelSeries


ROW_TERMINATOR = "\r"
DELIMITER = ","


def scalar_lines(scalars: Dict[str, str]) -> List[str]:
    return [f"{key}{DELIMITER}{value}" for key, value in scalars.items()]


def series_lines(series: Iterable[LabelSeries]) -> List[str]:
    lines = []
    for s in series:
        # An empty series is just its name, without a dangling delimiter
        lines.append(DELIMITER.join([s.name, *s.values]))
    return lines


def serialize(
    records: Union[ExtractedRecords, Dict[str, str]],
    series: Optional[Iterable[LabelSeries]] = None,
) -> str:
    """
    Render records as a CR-separated CSV blob.

    Accepts either an ExtractedRecords, or a ScalarMap plus a series list.

    Args:
        records: ExtractedRecords, or the scalar map when series is given
        series: LabelSeries list (only when records is a plain dict)

    Returns:
        CSV text, scalars first then series, with trailing whitespace trimmed
    """
    if isinstance(records, ExtractedRecords):
        if series is not None:
            raise TypeError("series must not be passed together with ExtractedRecords")
        scalars, series = records.scalars, records.series
    else:
        scalars = records
        series = series or []

    blob = "".join(
        line + ROW_TERMINATOR
        for line in scalar_lines(scalars) + series_lines(series)
    )
    return blob.rstrip()


__all__ = ["serialize", "scalar_lines", "series_lines", "ROW_TERMINATOR", "DELIMITER"]
