"""
Exceptions raised by the key finder
"""


class KeyFinderError(Exception):
    """Base class for key finder errors."""


class WalletIOError(KeyFinderError, IOError):
    """
    The wallet file could not be opened or read.

    Carries the path and the underlying OS error message so the CLI can
    surface it verbatim.
    """

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read wallet file {path}: {reason}")
