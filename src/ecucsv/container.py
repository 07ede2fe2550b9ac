"""
Container Codec for .cmp files.

Layout (no magic number, no version field):

    [raw DEFLATE bytes of the UTF-8 CSV blob][0x00][ASCII decimal length]

The length is the size in bytes of the *uncompressed* UTF-8 blob. The
trailer has no length-of-length field; it is found by scanning backward
for the last NUL byte. The digits never contain a NUL, so the last NUL
in the file is always the delimiter even when the DEFLATE payload itself
contains NUL bytes.

Existing .cmp files depend on this exact layout. Do not add a header.
"""

import sys
import zlib
from typing import Optional, Tuple

from ecucsv.errors import CorruptContainerError, MissingTrailerError


TRAILER_DELIMITER = b"\x00"
MAX_TRAILER_DIGITS = len(str(sys.maxsize))
RAW_DEFLATE_WBITS = -zlib.MAX_WBITS  # no zlib/gzip wrapper
DEFAULT_COMPRESSION_LEVEL = 6
TEXT_ENCODING = "utf-8"


def compress(csv_text: str, level: int = DEFAULT_COMPRESSION_LEVEL) -> bytes:
    """
    Pack a CSV blob into a container.

    Args:
        csv_text: CSV blob (any string, including "")
        level: DEFLATE compression level, 0-9

    Returns:
        Container bytes
    """
    payload = csv_text.encode(TEXT_ENCODING)
    compressor = zlib.compressobj(level, zlib.DEFLATED, RAW_DEFLATE_WBITS)
    deflated = compressor.compress(payload) + compressor.flush()
    return deflated + TRAILER_DELIMITER + str(len(payload)).encode("ascii")


def read_trailer(data: bytes) -> Optional[Tuple[int, int]]:
    """
    Locate the trailer and parse the declared size.

    A declared size of 0 is accepted on purpose: it is what compress("")
    writes, and the empty CSV blob has to round-trip.

    Args:
        data: Whole container

    Returns:
        (trailer_start, declared_size), where trailer_start is the index of
        the NUL byte. None if the container has no NUL byte at all.

    Raises:
        CorruptContainerError: If the bytes after the NUL are not decimal
            digits, or the size is too large to be a real payload length
    """
    trailer_start = data.rfind(TRAILER_DELIMITER)
    if trailer_start < 0:
        return None

    digits = data[trailer_start + 1:]
    # bytes.isdigit() is ASCII-only, so no sign, spaces or unicode digits
    if not digits or not digits.isdigit():
        raise CorruptContainerError(
            f"Container trailer is not a decimal length: {digits[:20]!r}"
        )
    if len(digits) > MAX_TRAILER_DIGITS:
        raise CorruptContainerError(
            f"Container trailer length has {len(digits)} digits, more than {MAX_TRAILER_DIGITS}"
        )

    try:
        declared_size = int(digits)
    except ValueError as e:
        raise CorruptContainerError(f"Container trailer is not a decimal length: {e}") from e
    if declared_size > sys.maxsize:
        raise CorruptContainerError(f"Container declares an impossible size: {declared_size}")
    return trailer_start, declared_size


def decompress_bytes(data: bytes) -> bytes:
    """
    Recover the exact CSV bytes stored in a container.

    Reads exactly the declared number of bytes from the DEFLATE stream.

    Raises:
        MissingTrailerError: If there is no NUL byte (size unknown)
        CorruptContainerError: If the trailer is unparseable, inflation
            fails, or the stream yields fewer bytes than declared
    """
    trailer = read_trailer(data)
    if trailer is None:
        raise MissingTrailerError("Container has no size trailer")
    trailer_start, declared_size = trailer

    if declared_size == 0:
        return b""

    decompressor = zlib.decompressobj(RAW_DEFLATE_WBITS)
    try:
        payload = decompressor.decompress(data[:trailer_start], declared_size)
    except (zlib.error, OverflowError, ValueError) as e:
        raise CorruptContainerError(f"Container payload does not inflate: {e}") from e

    if len(payload) < declared_size:
        raise CorruptContainerError(
            f"Container declares {declared_size} bytes but payload inflates to {len(payload)}"
        )
    return payload


def decompress(data: bytes) -> str:
    """
    Recover the CSV blob stored in a container, as text.

    Raises:
        MissingTrailerError, CorruptContainerError: see decompress_bytes()
    """
    payload = decompress_bytes(data)
    try:
        return payload.decode(TEXT_ENCODING)
    except UnicodeDecodeError as e:
        raise CorruptContainerError(f"Container payload is not valid UTF-8: {e}") from e


__all__ = [
    "compress",
    "decompress",
    "decompress_bytes",
    "read_trailer",
    "DEFAULT_COMPRESSION_LEVEL",
    "TRAILER_DELIMITER",
]
