"""
Logging configuration helpers.

This module owns runtime logging setup: a version-tagged format, an
optional log file, an optional syslog sink, and a stderr handler whose
threshold follows the verbosity flags (errors only by default).
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys

from dpm import __version__
from dpm.common.config import LoggingConfig
from dpm.common.settings import settings

__all__ = [
    "logging_setup",
    "handlers_build",
    "logFormatWithVersion_get",
    "streamLevel_get",
]


def logging_setup(config: LoggingConfig) -> None:
    """
    Configure root logging from the logging config section.

    Args:
        config: Resolved logging settings (after command-line overrides).
    """
    root_level: int = logging.DEBUG if config.debug else getattr(logging, config.level.upper())
    logging.basicConfig(
        level=root_level,
        format=logFormatWithVersion_get(config.format),
        handlers=handlers_build(config),
    )


def handlers_build(config: LoggingConfig) -> list[logging.Handler]:
    """
    Build the handler set for a logging config.

    A log file or syslog sink that cannot be opened is reported on stderr
    and skipped; logging to the remaining sinks continues.

    Args:
        config: Resolved logging settings.

    Returns:
        Handlers, stderr first.
    """
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setLevel(streamLevel_get(config))
    handlers: list[logging.Handler] = [stream_handler]

    if config.syslog:
        try:
            syslog_handler = logging.handlers.SysLogHandler(
                address=settings.SYSLOG_ADDRESS,
                facility=logging.handlers.SysLogHandler.LOG_USER,
            )
        except OSError as e:
            print(f"Warning: Failed to open syslog at {settings.SYSLOG_ADDRESS}: {e}", file=sys.stderr)
        else:
            syslog_handler.ident = f"{settings.SYSLOG_IDENT}[{os.getpid()}]: "
            syslog_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
            handlers.append(syslog_handler)
    elif config.file:
        try:
            handlers.append(logging.FileHandler(config.file))
        except OSError as e:
            print(f"Warning: Failed to open log file {config.file}: {e}", file=sys.stderr)

    return handlers


def streamLevel_get(config: LoggingConfig) -> int:
    """
    Threshold of the stderr handler.

    Args:
        config: Resolved logging settings.

    Returns:
        DEBUG with --debug, INFO with --verbose, otherwise ERROR.
    """
    if config.debug:
        return logging.DEBUG
    if config.verbose:
        return logging.INFO
    return logging.ERROR


def logFormatWithVersion_get(log_format: str) -> str:
    """
    Inject runtime version tag into timestamped log format.

    Args:
        log_format:
            Base formatter string.

    Returns:
        Formatter string with embedded version token.
    """
    return log_format.replace("%(asctime)s", f"%(asctime)s [v{__version__}]")
