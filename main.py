#!/usr/bin/env python3
"""
Main script for the wallet key finder
"""

import sys
from wallet_keyfinder.cli import main


if __name__ == "__main__":
    sys.exit(main())
