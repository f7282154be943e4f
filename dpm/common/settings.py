"""Application constants - fixed values that are not user configuration

Anything a user may want to change lives in config.yml (see
dpm.common.config). This module only holds values that are part of the
contract with external tools or the process environment.

Usage:
    from dpm.common.settings import settings

    name = name[: settings.OUTPUT_NAME_MAX_LENGTH]
"""


class Settings:
    """Read-only constants shared across dpm modules"""

    # =========================================================================
    # Compositor Protocol
    # =========================================================================

    OUTPUT_MARKER: str = "Output:"
    """Marker that opens an output block in `kscreen-doctor -o` output"""

    PRIORITY_MARKER: str = "priority"
    """Marker of the line (or line fragment) carrying an output's priority"""

    OUTPUT_NAME_MAX_LENGTH: int = 63
    """Output names longer than this are truncated when parsed"""

    PRIMARY_PRIORITY: int = 1
    """Priority value the compositor treats as the primary display"""

    # =========================================================================
    # Process Exit Codes
    # =========================================================================

    EXIT_OK: int = 0
    EXIT_FAILURE: int = 1
    EXIT_INTERRUPTED: int = 130

    EXIT_COMMAND_NOT_FOUND: int = 127
    """Status reported when the priority command could not be launched

    Mirrors what a POSIX shell reports for a missing executable.
    """

    EXIT_COMMAND_TIMEOUT: int = 124
    """Status reported when the priority command exceeded its timeout

    Same value coreutils `timeout` uses.
    """

    # =========================================================================
    # Logging
    # =========================================================================

    SYSLOG_IDENT: str = "display-priority-manager"
    SYSLOG_ADDRESS: str = "/dev/log"


settings = Settings()
"""Shared constants instance

Import this anywhere in the application:
    from dpm.common.settings import settings
"""
