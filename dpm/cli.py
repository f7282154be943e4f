"""display-priority-manager command-line interface"""

import argparse
import logging
import sys
from typing import NoReturn, Optional

from dpm import __version__
from dpm.bootstrap import configFromArgs_load, controller_create, signalHandlers_install
from dpm.common.config import DEFAULT_LOG_FILE, ConfigurationError
from dpm.common.settings import settings
from dpm.common.types import FixMode
from dpm.dpm_logging import logging_setup
from dpm.fix.stop_token import StopToken

_MODE_HELP = """\
modes:
  auto     - Automatically select best method (default)
  kscreen  - Use kscreen-doctor to set priorities
  config   - Monitor and modify KScreen config files (not implemented)
  library  - Use LD_PRELOAD library injection (not implemented)
  check    - Check current configuration only
  daemon   - Run as daemon monitoring for changes (not implemented)
"""


def parser_create() -> argparse.ArgumentParser:
    """
    Create the argument parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="display-priority-manager",
        description=f"Dell Precision 7780 Display Priority Manager v{__version__}",
        epilog=_MODE_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version", action="version",
        version=f"Dell Precision 7780 Display Priority Manager v{__version__}",
    )

    parser.add_argument(
        "-m", "--mode",
        type=str,
        default=None,
        choices=[mode.value for mode in FixMode],
        help="Fix mode (default: auto, or fix.mode from config)",
    )

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    parser.add_argument(
        "-d", "--debug", action="store_true", help="Enable debug output (implies --verbose)"
    )

    parser.add_argument(
        "-f", "--force", action="store_true", help="Force fix even if hardware doesn't match"
    )

    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Show what would be done without making changes",
    )

    parser.add_argument(
        "-r", "--retries",
        type=int,
        default=None,
        metavar="N",
        help="Maximum retry attempts (default: 3)",
    )

    parser.add_argument(
        "-w", "--wait",
        type=int,
        default=None,
        metavar="SECONDS",
        help="Wait time between retries (default: 5)",
    )

    parser.add_argument(
        "-l", "--log",
        type=str,
        default=None,
        metavar="FILE",
        help=f"Log file path (default: {DEFAULT_LOG_FILE})",
    )

    parser.add_argument("-s", "--syslog", action="store_true", help="Use syslog for logging")

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config file (default: search standard locations)",
    )

    return parser


def arguments_parse(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments

    Args:
        argv: Argument list (sys.argv[1:] when None).

    Returns:
        Parsed CLI arguments.
    """
    return parser_create().parse_args(argv)


def run(argv: Optional[list[str]] = None) -> int:
    """
    Run the manager and return the process exit status.

    Args:
        argv: Argument list (sys.argv[1:] when None).

    Returns:
        0 on skip/no-fix/success, 1 on failure or bad configuration,
        130 when interrupted.
    """
    args = arguments_parse(argv)

    try:
        config = configFromArgs_load(args)
    except (ConfigurationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return settings.EXIT_FAILURE

    logging_setup(config.logging)
    log = logging.getLogger("dpm")
    log.info("=== Display Priority Manager Starting (v%s) ===", __version__)
    log.info(
        "Mode: %s, Verbose: %s, Debug: %s, Force: %s, Dry-run: %s",
        config.fix.mode.value,
        config.logging.verbose,
        config.logging.debug,
        config.fix.force,
        config.fix.dry_run,
    )

    stop_token = StopToken()
    signalHandlers_install(stop_token)
    controller = controller_create(config, stop_token)
    result = controller.run()
    return result.exit_code


def main() -> NoReturn:
    """
    Main entry point for the display-priority-manager command
    """
    sys.exit(run())


if __name__ == "__main__":
    main()
