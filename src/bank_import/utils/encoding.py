"""Byte encoding detection for bank CSV exports.

French banks historically export CSV files in Windows-1252 while newer
exports are UTF-8, sometimes with a BOM. Decoding with the wrong codec
silently corrupts every accented character, so the decision is made on the
raw bytes before any text processing:

1. UTF-8 BOM (EF BB BF) means UTF-8.
2. Structurally valid UTF-8 (pure ASCII included) means UTF-8.
3. Anything else is decoded with the legacy single-byte encoding.
"""

import codecs
import logging
from typing import Optional

from .error_handler import EncodingError


logger = logging.getLogger(__name__)

UTF8_BOM = codecs.BOM_UTF8
DEFAULT_LEGACY_ENCODING = "windows-1252"
DEFAULT_SCAN_LIMIT = 4096


def has_utf8_bom(data: bytes) -> bool:
    """Check if bytes start with the UTF-8 byte order mark"""
    return data[:3] == UTF8_BOM


def is_valid_utf8(data: bytes, scan_limit: int = DEFAULT_SCAN_LIMIT) -> bool:
    """Validate UTF-8 multi-byte structure over the first ``scan_limit`` bytes.

    Lead bytes 110xxxxx, 1110xxxx and 11110xxx must be followed by one, two
    or three 10xxxxxx continuation bytes that exist in the buffer. Any other
    byte above 0x7F fails validation.
    """
    limit = min(len(data), scan_limit)
    i = 0

    while i < limit:
        byte = data[i]

        if byte <= 0x7F:
            i += 1
            continue

        if byte & 0xE0 == 0xC0:
            width = 2
        elif byte & 0xF0 == 0xE0:
            width = 3
        elif byte & 0xF8 == 0xF0:
            width = 4
        else:
            # Single-byte legacy characters such as 0xE9 or 0xB0 land here
            return False

        if i + width > len(data):
            return False
        for offset in range(1, width):
            if data[i + offset] & 0xC0 != 0x80:
                return False
        i += width

    return True


def decode_csv_buffer(data: bytes,
                      preferred_encoding: Optional[str] = None,
                      scan_limit: int = DEFAULT_SCAN_LIMIT) -> str:
    """Decode raw CSV bytes with an auto-detected encoding.

    Args:
        data: Raw file content
        preferred_encoding: Legacy encoding used when the bytes are not UTF-8
        scan_limit: Number of leading bytes validated as UTF-8

    Returns:
        Decoded text. A UTF-8 BOM is always consumed.

    Raises:
        EncodingError: If the fallback encoding name is unknown
    """
    data = bytes(data)

    if has_utf8_bom(data):
        logger.debug("UTF-8 BOM detected")
        return data.decode('utf-8-sig', errors='replace')

    if is_valid_utf8(data, scan_limit):
        return data.decode('utf-8', errors='replace')

    encoding = preferred_encoding or DEFAULT_LEGACY_ENCODING
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise EncodingError(f"Unsupported encoding: {encoding}") from e

    logger.debug(f"Content is not valid UTF-8, decoding as {encoding}")
    return data.decode(encoding, errors='replace')
