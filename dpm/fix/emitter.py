"""Command emitter: turns a FixDecision into one kscreen-doctor call."""

from __future__ import annotations

import logging
import shlex
from typing import Optional

from dpm.common.types import ApplyResult, FixDecision
from dpm.kscreen.doctor import KscreenDoctor

logger = logging.getLogger(__name__)


class CommandEmitter:
    """Renders and (unless simulating) executes priority assignments."""

    def __init__(self, doctor: KscreenDoctor, log: Optional[logging.Logger] = None) -> None:
        """
        Initialize emitter.

        Args:
            doctor: kscreen-doctor client that renders and runs commands.
            log: Logger to report through (module logger by default).
        """
        self._doctor: KscreenDoctor = doctor
        self._log: logging.Logger = log or logger

    def decision_apply(self, decision: FixDecision, dry_run: bool) -> ApplyResult:
        """
        Apply a decision with a single command invocation.

        Args:
            decision: Corrective priority layout.
            dry_run: Log the command instead of running it.

        Returns:
            ApplyResult carrying the rendered command and its exit status.
        """
        argv = self._doctor.priorityCommand_build(decision)
        command = shlex.join(argv)
        self._log.info("Executing: %s", command)

        if dry_run:
            self._log.info("Dry run mode - not executing command")
            return ApplyResult(command=command, exit_code=0, simulated=True)

        exit_code = self._doctor.command_execute(argv)
        if exit_code == 0:
            self._log.info("Display priority fix applied successfully")
        else:
            self._log.error("Failed to apply display priority fix (exit code: %d)", exit_code)
        return ApplyResult(command=command, exit_code=exit_code)
