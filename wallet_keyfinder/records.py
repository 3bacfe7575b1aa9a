"""
Tagged-record scanner

A tagged record is a literal 4-byte marker followed by a big-endian
16-bit length and a value blob of that length:

    | marker (4) | length (2, BE) | value (length) |

Berkeley DB wallet files store the encrypted master key under an "mkey"
entry, which is the default marker.
"""

import struct
import logging
from collections import namedtuple
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_MARKER = b'mkey'
MARKER_SIZE = 4
LENGTH_SIZE = 2
HEADER_SIZE = MARKER_SIZE + LENGTH_SIZE
KEY_LENGTH = 5


class TaggedRecord(namedtuple('TaggedRecord', ['offset', 'length', 'value', 'key_length'])):
    """One record found by the scanner; offset is the marker position."""

    __slots__ = ()

    @property
    def key(self) -> bytes:
        """Reported key material: the first key_length bytes of the value, never padded."""
        return self.value[:self.key_length]


class RecordScanner:
    """
    Linear scanner for marker/length/value records

    The scan state is only the buffer position, so a scanner can be reused
    across buffers. After each scan, truncated_at holds the offset of the
    marker whose record ran past the end of the buffer, or None if the
    scan ended normally.
    """

    def __init__(self, marker: bytes = DEFAULT_MARKER, key_length: int = KEY_LENGTH):
        if len(marker) != MARKER_SIZE:
            raise ValueError(f"marker must be exactly {MARKER_SIZE} bytes, got {marker!r}")
        if key_length < 0:
            raise ValueError(f"key length must not be negative, got {key_length}")
        self.marker = bytes(marker)
        self.key_length = key_length
        self.truncated_at: Optional[int] = None

    def scan(self, buffer: bytes) -> Iterator[TaggedRecord]:
        """
        Yield every complete record in scan order

        Bytes consumed by a record are never re-examined as a marker
        start. A marker whose length field or value runs past the end of
        the buffer stops the scan; nothing partial is yielded.

        Args:
            buffer: Raw wallet bytes

        Yields:
            TaggedRecord for each complete record
        """
        self.truncated_at = None
        buffer_len = len(buffer)
        pos = 0

        while buffer_len - pos >= HEADER_SIZE:
            found = buffer.find(self.marker, pos)
            if found == -1:
                break

            length_pos = found + MARKER_SIZE
            if length_pos + LENGTH_SIZE > buffer_len:
                self._truncated(found, "length field")
                break

            value_len, = struct.unpack('>H', buffer[length_pos:length_pos + LENGTH_SIZE])
            value_pos = length_pos + LENGTH_SIZE

            if value_pos + value_len > buffer_len:
                self._truncated(found, f"{value_len} byte value")
                break

            logger.debug("Found %r record at offset 0x%X (%d bytes)",
                         self.marker, found, value_len)

            yield TaggedRecord(
                offset=found,
                length=value_len,
                value=bytes(buffer[value_pos:value_pos + value_len]),
                key_length=self.key_length
            )

            pos = value_pos + value_len

    def _truncated(self, offset, what):
        self.truncated_at = offset
        logger.debug("Record at offset 0x%X is truncated (missing %s), stopping scan", offset, what)


def scan_tagged_records(buffer: bytes, marker: bytes = DEFAULT_MARKER) -> Iterator[TaggedRecord]:
    """
    Scan a buffer for tagged records

    Args:
        buffer: Raw wallet bytes
        marker: Literal 4-byte marker

    Returns:
        Lazy iterator of TaggedRecord in scan order
    """
    return RecordScanner(marker).scan(buffer)
