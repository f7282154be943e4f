"""Bootstrap helpers for config loading and component wiring."""

from __future__ import annotations

import argparse
import logging
import signal
from pathlib import Path
from typing import Optional, TextIO

from dpm.common.config import Config, ConfigLoader
from dpm.common.types import CommandRunner
from dpm.fix.controller import RetryController
from dpm.fix.emitter import CommandEmitter
from dpm.fix.stop_token import StopToken
from dpm.fix.strategy import FixStrategy
from dpm.hardware.eligibility import EligibilityChecker
from dpm.hardware.probe import HostProbe
from dpm.kscreen.doctor import KscreenDoctor

logger = logging.getLogger(__name__)


def configFromArgs_load(args: argparse.Namespace) -> Config:
    """
    Load configuration and apply command-line overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Validated config.

    Raises:
        OSError: If --config names a missing or unreadable file.
        ConfigurationError: If the config or an override is invalid.
    """
    config_path: Path | None = Path(args.config) if args.config else None
    return ConfigLoader.configWithOverrides_load(
        file_path=config_path,
        mode=args.mode,
        max_retries=args.retries,
        retry_delay=args.wait,
        log_file=args.log,
        force=args.force,
        dry_run=args.dry_run,
        syslog=args.syslog,
        verbose=args.verbose,
        debug=args.debug,
    )


def controller_create(
    config: Config,
    stop_token: StopToken,
    runner: Optional[CommandRunner] = None,
    report_stream: Optional[TextIO] = None,
) -> RetryController:
    """
    Wire probe, gate, kscreen client, emitter and strategy into a controller.

    Args:
        config: Resolved configuration.
        stop_token: Cancellation token shared with the signal handlers.
        runner: subprocess.run-compatible callable (tests inject fakes).
        report_stream: Destination of the check-mode report.

    Returns:
        Ready-to-run retry controller.
    """
    runner_kwargs = {} if runner is None else {"runner": runner}
    probe = HostProbe(config.hardware, **runner_kwargs)
    checker = EligibilityChecker(config.hardware, probe)
    doctor = KscreenDoctor(config.kscreen, **runner_kwargs)
    emitter = CommandEmitter(doctor)
    strategy = FixStrategy(
        mode=config.fix.mode,
        doctor=doctor,
        emitter=emitter,
        dry_run=config.fix.dry_run,
        probe=probe,
        report_stream=report_stream,
    )
    return RetryController(config.fix, checker, strategy, stop_token=stop_token)


def signalHandlers_install(stop_token: StopToken) -> None:
    """
    Route SIGINT and SIGTERM to the stop token.

    Args:
        stop_token: Token the controller polls.
    """

    def _handler(signum: int, frame) -> None:
        logger.info("Received signal %d - shutting down", signum)
        stop_token.signalHandle_requestStop(signum, frame)

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
