"""kscreen-doctor client: status queries and priority commands."""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Optional

from dpm.common.config import KscreenConfig
from dpm.common.settings import settings
from dpm.common.types import CommandRunner, FixDecision, Topology
from dpm.kscreen.parser import topology_parse

logger = logging.getLogger(__name__)


class TopologyQueryError(RuntimeError):
    """The compositor status query could not be run"""


class KscreenDoctor:
    """Thin wrapper around the `kscreen-doctor` executable."""

    def __init__(
        self,
        config: KscreenConfig,
        runner: CommandRunner = subprocess.run,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize client.

        Args:
            config: kscreen section of the configuration.
            runner: subprocess.run-compatible callable.
            log: Logger to report through (module logger by default).
        """
        self._config: KscreenConfig = config
        self._runner: CommandRunner = runner
        self._log: logging.Logger = log or logger

    def outputStatus_read(self) -> str:
        """
        Run `kscreen-doctor -o` and return its stdout.

        Returns:
            Raw (possibly colorized) status dump.

        Raises:
            TopologyQueryError: If the tool could not be launched or timed out.
        """
        command = [self._config.command, "-o"]
        try:
            completed = self._runner(
                command,
                capture_output=True,
                text=True,
                check=False,
                timeout=self._config.timeout_seconds,
            )
        except OSError as exc:
            raise TopologyQueryError(f"Failed to run {self._config.command}: {exc}") from exc
        except subprocess.TimeoutExpired as exc:
            raise TopologyQueryError(
                f"{self._config.command} -o timed out after {exc.timeout} seconds"
            ) from exc

        if completed.returncode != 0:
            self._log.debug(
                "%s -o exited with %d: %s",
                self._config.command,
                completed.returncode,
                (completed.stderr or "").strip(),
            )
        return completed.stdout or ""

    def topology_query(self) -> Topology:
        """
        Query and parse the current output topology.

        Raises:
            TopologyQueryError: If the tool could not be launched.
        """
        return topology_parse(
            self.outputStatus_read(),
            internal_patterns=self._config.internal_patterns,
            log=self._log,
        )

    def priorityCommand_build(self, decision: FixDecision) -> list[str]:
        """
        Render one invocation that applies every assignment of a decision.

        Args:
            decision: Corrective priority layout.

        Returns:
            Argument vector, e.g.
            ["kscreen-doctor", "output.eDP-1.priority.1", "output.HDMI-1.priority.2"].
        """
        directives = [
            f"output.{assignment.name}.priority.{assignment.priority}"
            for assignment in decision.assignments()
        ]
        return [self._config.command, *directives]

    def command_execute(self, argv: list[str]) -> int:
        """
        Execute a mutating command and report its exit status.

        Args:
            argv: Argument vector from priorityCommand_build().

        Returns:
            Process exit status; EXIT_COMMAND_NOT_FOUND if it could not be
            launched, EXIT_COMMAND_TIMEOUT if it exceeded the timeout.
        """
        try:
            completed = self._runner(
                argv,
                capture_output=True,
                text=True,
                check=False,
                timeout=self._config.timeout_seconds,
            )
        except OSError as exc:
            self._log.error("Failed to launch %s: %s", shlex.join(argv), exc)
            return settings.EXIT_COMMAND_NOT_FOUND
        except subprocess.TimeoutExpired:
            self._log.error(
                "%s timed out after %s seconds", shlex.join(argv), self._config.timeout_seconds
            )
            return settings.EXIT_COMMAND_TIMEOUT
        return completed.returncode
