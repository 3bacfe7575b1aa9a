"""
Command line entry point for the wallet key finder
"""

import sys
import shutil
import logging
import threading

from .config import load_options, configure_logging
from .errors import WalletIOError
from .finder import KeyFinder, load_buffer
from .report import format_report, format_structure, format_preview

logger = logging.getLogger(__name__)

BANNER = """
===========================================
    Wallet Key Material Finder
===========================================
"""


def confirm(prompt="[CONFIRM] Continue with wallet analysis (y/n)? "):
    """Ask the operator before touching the wallet file."""
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower().startswith('y')


def backup_wallet(wallet_path):
    """
    Copy the wallet next to itself as <wallet>.bak

    Returns:
        Path of the backup file
    """
    backup_path = wallet_path + '.bak'
    shutil.copy2(wallet_path, backup_path)
    logger.info("Wallet backed up to %s", backup_path)
    return backup_path


def extract_with_timeout(finder, buffer, timeout):
    """
    Run the extraction in a daemon thread and wait at most timeout seconds.

    A scan that times out is abandoned; the daemon thread does not keep
    the process alive.

    Raises:
        TimeoutError: If the scan does not finish in time
    """
    outcome = {}

    def worker():
        try:
            outcome['result'] = finder.extract(buffer)
        except Exception as e:
            outcome['error'] = e

    thread = threading.Thread(target=worker, name='keyfinder-scan', daemon=True)
    thread.start()
    thread.join(timeout)

    if thread.is_alive():
        raise TimeoutError(f"extraction did not finish within {timeout} seconds")
    if 'error' in outcome:
        raise outcome['error']
    return outcome['result']


def write_output(report, output_path):
    with open(output_path, 'w') as f:
        f.write(report)
    logger.info("Output written to %s", output_path)


def run(options, out=None):
    """
    Run the requested operations.

    Args:
        options: ExtractionOptions
        out: Stream for the report, defaults to stdout

    Returns:
        Process exit status
    """
    out = out or sys.stdout

    if not options.force and not confirm():
        logger.info("Aborted by operator")
        return 0

    try:
        logger.info("Reading wallet structure from %s", options.wallet)
        buffer = load_buffer(options.wallet)
    except WalletIOError as e:
        logger.error("%s", e)
        return 1

    if not options.no_backup:
        try:
            backup_wallet(options.wallet)
        except OSError as e:
            logger.error("Could not create backup of %s: %s", options.wallet, e)
            return 1

    logger.debug("Pattern buffer (first 32 bytes): %s", format_preview(buffer))

    finder = KeyFinder.from_options(options)
    sections = []

    if options.repair_wallet:
        check = finder.check_structure(buffer)
        sections.append(format_structure(check, options.wallet, options.marker))

    if options.extract_key:
        logger.info("Extracting the unique key (strategy: %s)", options.strategy)
        try:
            result = extract_with_timeout(finder, buffer, options.timeout)
        except TimeoutError:
            logger.error("Extraction did not finish within %d seconds", options.timeout)
            return 1
        sections.append(format_report(result, options.wallet, options))

    report = '\n'.join(sections)
    out.write(report)

    if options.output:
        try:
            write_output(report, options.output)
        except OSError as e:
            logger.error("Could not write output file %s: %s", options.output, e)
            return 1

    logger.debug("Operation completed")
    return 0


def main(argv=None):
    """Main entry point for the wallet key finder."""
    options = load_options(argv)
    configure_logging(options.verbose)

    print(BANNER)

    return run(options)


if __name__ == "__main__":
    sys.exit(main())
