"""
Report rendering for extraction results
"""

import math
import binascii
from datetime import datetime

import base58

from .entropy import calculate_entropy
from .finder import KeyFound, SOURCE_TAGGED

# Confidence ratio thresholds for the entropy level label
HIGH_CONFIDENCE = 0.8
MEDIUM_CONFIDENCE = 0.5


def format_hex(data: bytes) -> str:
    """Uppercase hex, two digits per byte, no separators."""
    return binascii.hexlify(bytes(data)).decode('ascii').upper()


def format_base58(data: bytes) -> str:
    """Base58 rendering of key bytes (Bitcoin alphabet)."""
    return base58.b58encode(bytes(data)).decode('ascii')


def format_preview(buffer: bytes, length: int = 32) -> str:
    """
    Hex dump of the first bytes of a buffer, grouped by 8

    Used for the verbose pattern buffer line.
    """
    groups = []
    head = bytes(buffer[:length])
    for i in range(0, len(head), 8):
        groups.append(' '.join(f"{b:02X}" for b in head[i:i + 8]))
    return '   '.join(groups)


def confidence(score: float, key_len: int) -> float:
    """
    Entropy score as a fraction of the maximum for the key length

    A key of length 1 has a maximum of 0 bits and always scores 0.
    """
    if key_len <= 1:
        return 0.0
    return min(1.0, score / math.log2(key_len))


def entropy_level(score: float, key_len: int) -> str:
    """High / Medium / Low label derived from the computed score."""
    ratio = confidence(score, key_len)
    if ratio >= HIGH_CONFIDENCE:
        return "High"
    elif ratio >= MEDIUM_CONFIDENCE:
        return "Medium"
    return "Low"


def _summary(wallet_path, source, offset, key, score, options, analysed_at):
    key_len = len(key)
    lines = [
        "[ANALYSIS SUMMARY]",
        f"Wallet File      : {wallet_path}",
        f"Strategy         : {options.strategy} ({source})",
        f"Analysis Date    : {analysed_at.strftime('%Y-%m-%d %H:%M:%S')}",
        f"Key Offset       : 0x{offset:X}",
        f"Entropy Score    : {score:.4f} bits",
        f"Confidence Score : {confidence(score, key_len) * 100:.1f}%",
        f"Entropy Level    : {entropy_level(score, key_len)}",
        f"Final Key        : {format_hex(key)}",
    ]
    if options.base58:
        lines.append(f"Key (base58)     : {format_base58(key)}")
    return '\n'.join(lines) + '\n'


def format_report(result, wallet_path, options, analysed_at=None):
    """
    Render an extraction result as text

    Tagged results get one summary block per record, entropy results a
    single block, and NoKeyFound a single info line.

    Args:
        result: KeyFound or NoKeyFound
        wallet_path: Path shown in the summary
        options: ExtractionOptions (strategy, base58)
        analysed_at: Timestamp for the summary, defaults to now

    Returns:
        Report text
    """
    if not isinstance(result, KeyFound):
        return f"[INFO] {result.reason} in {wallet_path}\n"

    analysed_at = analysed_at or datetime.now()

    if result.source != SOURCE_TAGGED:
        return _summary(wallet_path, result.source, result.offset, result.key,
                        result.score, options, analysed_at)

    blocks = []
    for record in result.records:
        key = record.key
        score = calculate_entropy(key) if key else 0.0
        blocks.append(_summary(wallet_path, result.source, record.offset, key,
                               score, options, analysed_at))
    return '\n'.join(blocks)


def format_structure(check, wallet_path, marker):
    """Render the read-only structure check."""
    truncated = check['truncated_at']
    lines = [
        "[STRUCTURE CHECK]",
        f"Wallet File      : {wallet_path}",
        f"Wallet Size      : {check['size']:,} bytes",
        f"Marker           : {marker.decode('ascii', errors='replace')}",
        f"Records Found    : {check['records']}",
        f"Truncated Record : {'none' if truncated is None else f'0x{truncated:X}'}",
    ]
    return '\n'.join(lines) + '\n'
