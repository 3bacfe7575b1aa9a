"""
Command line option schema, parsed options and logging setup
"""

import sys
import logging
import argparse
from collections import namedtuple

from .entropy import DEFAULT_WINDOW
from .finder import STRATEGIES
from .records import DEFAULT_MARKER, MARKER_SIZE

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# One entry per option: argparse flag, value type, default, validator, help
OptionSpec = namedtuple('OptionSpec', ['name', 'type', 'default', 'validator', 'help'])

ExtractionOptions = namedtuple('ExtractionOptions', [
    'wallet', 'extract_key', 'repair_wallet', 'strategy', 'marker', 'window',
    'timeout', 'output', 'verbose', 'force', 'no_backup', 'base58',
])


def _non_empty(value):
    if not value:
        raise ValueError("must not be empty")
    return value


def _marker(value):
    try:
        marker = value.encode('ascii')
    except UnicodeEncodeError:
        raise ValueError("must be ASCII") from None
    if len(marker) != MARKER_SIZE:
        raise ValueError(f"must be exactly {MARKER_SIZE} characters")
    return marker


def _strategy(value):
    if value not in STRATEGIES:
        raise ValueError(f"must be one of {', '.join(STRATEGIES)}")
    return value


def _at_least(minimum):
    def check(value):
        if value < minimum:
            raise ValueError(f"must be at least {minimum}")
        return value
    return check


OPTION_SCHEMA = [
    OptionSpec('wallet', str, None, _non_empty, "wallet.dat file path"),
    OptionSpec('extract-key', bool, False, None, "extract and display the key material"),
    OptionSpec('repair-wallet', bool, False, None,
               "check wallet record structure (read-only, never modifies the file)"),
    OptionSpec('strategy', str, 'auto', _strategy,
               "auto (tagged records, entropy fallback), tagged or entropy"),
    OptionSpec('marker', str, DEFAULT_MARKER.decode('ascii'), _marker, "4-character record marker"),
    OptionSpec('window', int, DEFAULT_WINDOW, _at_least(1), "key and entropy window length in bytes"),
    OptionSpec('timeout', int, 30, _at_least(1), "operation timeout in seconds"),
    OptionSpec('output', str, None, _non_empty, "also save the report to this file"),
    OptionSpec('verbose', bool, False, None, "enable detailed output"),
    OptionSpec('force', bool, False, None, "run without confirmation"),
    OptionSpec('no-backup', bool, False, None, "skip backup creation"),
    OptionSpec('base58', bool, False, None, "also show the key in Base58"),
]


def _argparse_type(spec):
    """Wrap type conversion and validation so failures become argparse errors."""
    def convert(raw):
        try:
            value = spec.type(raw)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid {spec.type.__name__} value: {raw!r}")
        if spec.validator is None:
            return value
        try:
            return spec.validator(value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(f"{raw!r} {e}")
    convert.__name__ = spec.name
    return convert


def build_parser():
    """Build the argparse parser from OPTION_SCHEMA."""
    parser = argparse.ArgumentParser(
        prog='wallet-keyfinder',
        description="Locate key material in a wallet database file"
    )
    for spec in OPTION_SCHEMA:
        flag = f"--{spec.name}"
        if spec.type is bool:
            parser.add_argument(flag, action='store_true', default=spec.default, help=spec.help)
        elif spec.name == 'wallet':
            parser.add_argument(flag, type=_argparse_type(spec), required=True,
                                metavar='PATH', help=spec.help)
        else:
            default = spec.default
            if default is not None and spec.validator is not None:
                default = spec.validator(default)
            parser.add_argument(flag, type=_argparse_type(spec), default=default,
                                help=f"{spec.help} (default: {spec.default})")
    return parser


def load_options(argv=None):
    """
    Parse the command line once into an immutable ExtractionOptions.

    Exits through argparse (status 2) on invalid input.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not (args.extract_key or args.repair_wallet):
        parser.error("no operation specified, use --extract-key or --repair-wallet")

    return ExtractionOptions(**{field: getattr(args, field) for field in ExtractionOptions._fields})


def configure_logging(verbose=False):
    """Console logging in the '[timestamp] [LEVEL] message' format."""
    handlers = [logging.StreamHandler(sys.stderr)]

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True
    )
