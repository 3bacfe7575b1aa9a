"""
Shannon entropy scoring and the sliding-window key finder
"""

import math
import logging
from collections import defaultdict, namedtuple
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 5

# Best window seen by the sliding-window scan
Candidate = namedtuple('Candidate', ['offset', 'window', 'score'])


def calculate_entropy(window: bytes) -> float:
    """
    Calculate Shannon entropy of a byte window

    Higher values mean the byte values are more evenly spread out, which
    is what random key material looks like. The maximum for a window of
    length K is log2(K).

    Args:
        window: Non-empty byte window

    Returns:
        Entropy in bits, between 0 and log2(len(window))
    """
    if not window:
        raise ValueError("cannot score an empty window")

    # Count byte frequencies
    freq = defaultdict(int)
    for byte in window:
        freq[byte] += 1

    entropy = 0.0
    window_len = len(window)
    # Equal count multisets must score bit-for-bit equal
    for count in sorted(freq.values()):
        p = count / window_len
        entropy -= p * math.log2(p)

    # A single distinct value gives -1.0 * log2(1.0) == -0.0
    return abs(entropy)


def find_entropy_key(buffer: bytes, window_len: int = DEFAULT_WINDOW) -> Optional[Candidate]:
    """
    Slide a fixed-width window over the buffer and keep the most random one

    Every window at offsets 0..len(buffer) - window_len is scored. A later
    window only replaces the current best when its score is strictly
    higher, so ties keep the earliest offset.

    Args:
        buffer: Raw wallet bytes
        window_len: Window length K (must be at least 1)

    Returns:
        The best Candidate, or None when the buffer is shorter than K
    """
    if window_len < 1:
        raise ValueError(f"window length must be at least 1, got {window_len}")

    if len(buffer) < window_len:
        logger.debug("Buffer of %d bytes is shorter than the %d byte window",
                     len(buffer), window_len)
        return None

    best_offset = 0
    best_score = calculate_entropy(buffer[:window_len])

    for i in range(1, len(buffer) - window_len + 1):
        score = calculate_entropy(buffer[i:i + window_len])
        if score > best_score:
            best_offset = i
            best_score = score

    logger.debug("Best %d byte window at offset 0x%X (entropy=%.4f)",
                 window_len, best_offset, best_score)

    return Candidate(
        offset=best_offset,
        window=bytes(buffer[best_offset:best_offset + window_len]),
        score=best_score
    )
