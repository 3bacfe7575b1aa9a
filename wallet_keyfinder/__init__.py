"""
Heuristic key material finder for wallet database files
"""

from .entropy import Candidate, calculate_entropy, find_entropy_key
from .errors import KeyFinderError, WalletIOError
from .finder import KeyFinder, KeyFound, NoKeyFound, load_buffer
from .records import RecordScanner, TaggedRecord, scan_tagged_records
from .report import format_hex

__version__ = '0.1.0'

__all__ = [
    'Candidate', 'calculate_entropy', 'find_entropy_key',
    'KeyFinderError', 'WalletIOError',
    'KeyFinder', 'KeyFound', 'NoKeyFound', 'load_buffer',
    'RecordScanner', 'TaggedRecord', 'scan_tagged_records',
    'format_hex',
]
