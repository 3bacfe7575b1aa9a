"""
Core key finder module for wallet database files
"""

import logging
from collections import namedtuple

from .entropy import calculate_entropy, find_entropy_key, DEFAULT_WINDOW
from .errors import WalletIOError
from .records import RecordScanner, DEFAULT_MARKER

logger = logging.getLogger(__name__)

SOURCE_ENTROPY = 'entropy-window'
SOURCE_TAGGED = 'tagged-record'

STRATEGIES = ('auto', 'tagged', 'entropy')

# Extraction results
KeyFound = namedtuple('KeyFound', ['key', 'source', 'offset', 'score', 'records'])
NoKeyFound = namedtuple('NoKeyFound', ['reason'])


def load_buffer(path):
    """
    Read a wallet file fully into memory.

    Args:
        path (str): Path to the wallet file

    Returns:
        bytes: The file contents

    Raises:
        WalletIOError: If the file is missing, unreadable or not permitted
    """
    try:
        with open(path, 'rb') as f:
            buffer = f.read()
    except OSError as e:
        raise WalletIOError(path, e.strerror or str(e)) from e

    logger.debug("Loaded %d bytes from %s", len(buffer), path)
    return buffer


class KeyFinder:
    """
    Runs the extraction strategies over a loaded wallet buffer.

    Strategies:
        tagged  - scan for marker/length/value records
        entropy - pick the most random fixed-width window
        auto    - tagged first, entropy window when no record is found
    """

    def __init__(self, strategy='auto', marker=DEFAULT_MARKER, window_len=DEFAULT_WINDOW):
        """
        Initialize the KeyFinder instance.

        Args:
            strategy (str): One of STRATEGIES
            marker (bytes): 4-byte record marker
            window_len (int): Key and entropy window length
        """
        if strategy not in STRATEGIES:
            raise ValueError(f"unknown strategy {strategy!r}, expected one of {', '.join(STRATEGIES)}")
        if window_len < 1:
            raise ValueError(f"window length must be at least 1, got {window_len}")

        self.strategy = strategy
        self.window_len = window_len
        self.scanner = RecordScanner(marker, key_length=window_len)

    @classmethod
    def from_options(cls, options):
        """Build a KeyFinder from an ExtractionOptions record."""
        return cls(strategy=options.strategy, marker=options.marker, window_len=options.window)

    @property
    def truncated_at(self):
        """Offset of the truncated record that stopped the last tagged scan, if any."""
        return self.scanner.truncated_at

    def extract(self, buffer):
        """
        Locate key material in a wallet buffer.

        Args:
            buffer (bytes): Raw wallet bytes

        Returns:
            KeyFound or NoKeyFound
        """
        if self.strategy in ('auto', 'tagged'):
            result = self.extract_tagged(buffer)
            if isinstance(result, KeyFound) or self.strategy == 'tagged':
                return result
            logger.info("No %r entries found, falling back to entropy window scan",
                        self.scanner.marker.decode('ascii', errors='replace'))

        return self.extract_entropy(buffer)

    def extract_tagged(self, buffer):
        """Run the tagged-record scan and report the first record's key."""
        records = tuple(self.scanner.scan(buffer))

        if self.scanner.truncated_at is not None:
            logger.warning("Scan stopped at truncated record at offset 0x%X",
                           self.scanner.truncated_at)

        if not records:
            marker = self.scanner.marker.decode('ascii', errors='replace')
            return NoKeyFound(reason=f"No {marker} entries found")

        logger.info("Found %d tagged record(s)", len(records))
        first = records[0]
        key = first.key

        return KeyFound(
            key=key,
            source=SOURCE_TAGGED,
            offset=first.offset,
            score=calculate_entropy(key) if key else 0.0,
            records=records
        )

    def extract_entropy(self, buffer):
        """Run the sliding-window scan and report the best window."""
        candidate = find_entropy_key(buffer, self.window_len)

        if candidate is None:
            return NoKeyFound(
                reason=f"Buffer of {len(buffer)} bytes is shorter than the {self.window_len} byte window"
            )

        return KeyFound(
            key=candidate.window,
            source=SOURCE_ENTROPY,
            offset=candidate.offset,
            score=candidate.score,
            records=()
        )

    def check_structure(self, buffer):
        """
        Read-only structure check of a wallet buffer.

        Args:
            buffer (bytes): Raw wallet bytes

        Returns:
            dict: size, clean record count and truncation offset
        """
        records = list(self.scanner.scan(buffer))
        return {
            'size': len(buffer),
            'records': len(records),
            'truncated_at': self.scanner.truncated_at
        }
