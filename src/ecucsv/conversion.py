"""
Conversion Orchestrator.

Sequences the stages for one file and does the file-system work:

    CSV_ONLY:    read .ecu -> extract -> serialize -> write <base>.csv
    COMPRESS:    read .ecu -> extract -> serialize -> compress -> write <base>.cmp
    DECOMPRESS:  read .cmp -> decompress -> write <base>.csv (bytes verbatim)

<base> is everything before the FIRST dot of the input path, so
"a.b.ecu" becomes "a.csv". Existing archives were named this way; keep it.

Files are handled one at a time with no shared state. convert_batch()
reports a FileOutcome per input and carries on after a failure.
"""

import logging
import os
from typing import Iterable, Iterator, Optional

from ecucsv.config import ConversionConfig
from ecucsv.container import compress, decompress_bytes
from ecucsv.csv_writer import serialize
from ecucsv.errors import (
    ConversionError,
    ConversionIOError,
    CorruptContainerError,
    MalformedXmlError,
    MissingTrailerError,
)
from ecucsv.extractor import extract
from ecucsv.model import BatchReport, ConversionMode, FileOutcome, OutcomeStatus


logger = logging.getLogger(__name__)


def derive_output_path(path: str, extension: str) -> str:
    """
    Build the output path for an input file.

    Splits on the first '.' anywhere in the path and keeps what is before it.
    Paths with more than one dot are truncated at the first one.

    Args:
        path: Input file path
        extension: Output extension including the dot (e.g. ".csv")

    Returns:
        Output file path
    """
    return os.fspath(path).split(".", 1)[0] + extension


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ConversionIOError(f"Cannot read {path}: {e}", path=path) from e


def _write_bytes(path: str, data: bytes) -> None:
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ConversionIOError(f"Cannot write {path}: {e}", path=path) from e


def _csv_text(path: str, config: ConversionConfig) -> str:
    records = extract(path, chunk_size=config.chunk_size)
    logger.debug(
        "Extracted %d scalars and %d series from %s",
        len(records.scalars), len(records.series), path,
    )
    return serialize(records)


def convert_to_csv(path: str, config: Optional[ConversionConfig] = None) -> str:
    """
    Convert an XML file to plain CSV.

    Returns:
        Path of the written .csv file

    Raises:
        MalformedXmlError, ConversionIOError
    """
    config = config or ConversionConfig()
    output = derive_output_path(path, config.csv_extension)
    # Bytes, so the CR row terminators are written untranslated
    _write_bytes(output, _csv_text(path, config).encode("utf-8"))
    return output


def compress_file(path: str, config: Optional[ConversionConfig] = None) -> str:
    """
    Convert an XML file to CSV and store it as a compressed container.

    Returns:
        Path of the written .cmp file

    Raises:
        MalformedXmlError, ConversionIOError
    """
    config = config or ConversionConfig()
    output = derive_output_path(path, config.container_extension)
    _write_bytes(output, compress(_csv_text(path, config), level=config.compression_level))
    return output


def decompress_file(path: str, config: Optional[ConversionConfig] = None) -> Optional[str]:
    """
    Restore the CSV stored in a container.

    Returns:
        Path of the written .csv file, or None if the container has no
        size trailer (nothing is written in that case)

    Raises:
        CorruptContainerError, ConversionIOError
    """
    config = config or ConversionConfig()
    data = _read_bytes(path)
    try:
        payload = decompress_bytes(data)
    except MissingTrailerError:
        logger.warning("No size trailer in %s; nothing written", path)
        return None

    output = derive_output_path(path, config.csv_extension)
    _write_bytes(output, payload)
    return output


_HANDLERS = {
    ConversionMode.CSV_ONLY: convert_to_csv,
    ConversionMode.COMPRESS: compress_file,
    ConversionMode.DECOMPRESS: decompress_file,
}


def _error_kind(error: ConversionError) -> str:
    if isinstance(error, ConversionIOError):
        return "io"
    if isinstance(error, MalformedXmlError):
        return "malformed-xml"
    if isinstance(error, MissingTrailerError):
        return "missing-trailer"
    if isinstance(error, CorruptContainerError):
        return "corrupt-container"
    return "conversion"


def convert_file(
    path: str,
    mode: ConversionMode,
    config: Optional[ConversionConfig] = None,
) -> FileOutcome:
    """
    Convert one file and report what happened.

    ConversionErrors are returned as FAILED outcomes, not raised. A
    container without a size trailer gives a SKIPPED outcome.

    Args:
        path: Input file path
        mode: ConversionMode
        config: Optional ConversionConfig

    Returns:
        FileOutcome
    """
    mode = ConversionMode(mode)
    config = config or ConversionConfig()

    try:
        output = _HANDLERS[mode](path, config)
    except ConversionError as e:
        logger.error("Failed to %s %s: %s", mode.value, path, e)
        return FileOutcome(
            source=path,
            mode=mode,
            status=OutcomeStatus.FAILED,
            error=str(e),
            error_kind=_error_kind(e),
        )

    if output is None:
        return FileOutcome(
            source=path,
            mode=mode,
            status=OutcomeStatus.SKIPPED,
            error="Container has no size trailer",
            error_kind="missing-trailer",
        )

    logger.info("%s -> %s", path, output)
    return FileOutcome(source=path, mode=mode, status=OutcomeStatus.CONVERTED, output=output)


def convert_batch(
    paths: Iterable[str],
    mode: ConversionMode,
    config: Optional[ConversionConfig] = None,
) -> Iterator[FileOutcome]:
    """
    Convert files one after another, yielding an outcome as each finishes.

    The iterator is lazy and single-pass; call again with a fresh path list
    to restart.
    """
    config = config or ConversionConfig()
    for path in paths:
        yield convert_file(path, mode, config)


def run_batch(
    paths: Iterable[str],
    mode: ConversionMode,
    config: Optional[ConversionConfig] = None,
) -> BatchReport:
    mode = ConversionMode(mode)
    report = BatchReport(mode=mode, outcomes=list(convert_batch(paths, mode, config)))
    logger.info(
        "Batch %s: %d converted, %d skipped, %d failed",
        mode.value, report.converted, report.skipped, report.failed,
    )
    return report


__all__ = [
    "derive_output_path",
    "convert_to_csv",
    "compress_file",
    "decompress_file",
    "convert_file",
    "convert_batch",
    "run_batch",
]
