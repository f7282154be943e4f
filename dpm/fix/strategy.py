"""
Per-mode attempt bodies.

Each call to `FixStrategy.attempt_run()` is one attempt of the retry
controller. Failures are turned into typed AttemptResults here; nothing
below this layer decides whether to retry.
"""

from __future__ import annotations

import logging
import sys
from typing import Callable, Optional, TextIO

from dpm.common.types import (
    AttemptOutcome,
    AttemptResult,
    FixDecision,
    FixMode,
    HostProfile,
    ReconcileVerdict,
    Topology,
)
from dpm.fix.emitter import CommandEmitter
from dpm.fix.reconciler import reconcile
from dpm.hardware.probe import HostProbe
from dpm.kscreen.doctor import KscreenDoctor, TopologyQueryError

logger = logging.getLogger(__name__)

__all__ = ["FixStrategy", "topologyReport_format", "hostSummary_format"]

_NOT_IMPLEMENTED: dict[FixMode, str] = {
    FixMode.CONFIG: "Config monitoring mode not yet implemented",
    FixMode.LIBRARY: "Library injection mode not yet implemented",
    FixMode.DAEMON: "Daemon mode not yet implemented",
}


def hostSummary_format(profile: HostProfile) -> str:
    """
    One-line description of the host for the check report.

    Args:
        profile: Host snapshot.

    Returns:
        Summary line.
    """
    return (
        f"Host: {profile.vendor} {profile.product} "
        f"(discrete GPU: {'yes' if profile.has_discrete_gpu else 'no'}, "
        f"integrated GPU: {'yes' if profile.has_integrated_gpu else 'no'}, "
        f"connected displays: {profile.connected_displays})"
    )


def topologyReport_format(topology: Topology) -> str:
    """
    Render the check-mode display report.

    Args:
        topology: Parsed outputs.

    Returns:
        Multi-line report, one line per display.
    """
    lines = ["Display Configuration:", "----------------------"]
    for record in topology:
        lines.append(f"  {record.name}: priority={record.priority} ({record.classification.value})")
    return "\n".join(lines)


class FixStrategy:
    """Runs one attempt of the configured mode."""

    def __init__(
        self,
        mode: FixMode,
        doctor: KscreenDoctor,
        emitter: CommandEmitter,
        dry_run: bool,
        probe: Optional[HostProbe] = None,
        report_stream: Optional[TextIO] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize strategy.

        Args:
            mode: Selected fix mode.
            doctor: kscreen-doctor client used for topology queries.
            emitter: Command emitter for corrective assignments.
            dry_run: Simulate instead of executing commands.
            probe: Host probe, used for the host line of the check report.
            report_stream: Where check mode prints (stdout by default).
            log: Logger to report through (module logger by default).
        """
        self._mode: FixMode = mode
        self._doctor: KscreenDoctor = doctor
        self._emitter: CommandEmitter = emitter
        self._dry_run: bool = dry_run
        self._probe: Optional[HostProbe] = probe
        self._report_stream: Optional[TextIO] = report_stream
        self._log: logging.Logger = log or logger

    @property
    def mode(self) -> FixMode:
        """Fix mode this strategy runs."""
        return self._mode

    def attempt_run(self, applying_notify: Optional[Callable[[], None]] = None) -> AttemptResult:
        """
        Run one attempt.

        Args:
            applying_notify: Called right before a corrective command is emitted.

        Returns:
            Typed outcome of the attempt.
        """
        if self._mode in (FixMode.AUTO, FixMode.KSCREEN):
            return self.kscreenFix_attempt(applying_notify)
        if self._mode == FixMode.CHECK:
            return self.check_attempt()

        message = _NOT_IMPLEMENTED[self._mode]
        self._log.error(message)
        return AttemptResult(outcome=AttemptOutcome.NOT_IMPLEMENTED, detail=message)

    def kscreenFix_attempt(self, applying_notify: Optional[Callable[[], None]] = None) -> AttemptResult:
        """Query, reconcile and (if needed) apply through kscreen-doctor."""
        try:
            topology = self._doctor.topology_query()
        except TopologyQueryError as exc:
            self._log.error("%s", exc)
            return AttemptResult(outcome=AttemptOutcome.FAILED, detail=str(exc))

        verdict = reconcile(topology, log=self._log)
        if verdict == ReconcileVerdict.NO_FIX_NEEDED:
            return AttemptResult(outcome=AttemptOutcome.NO_FIX_NEEDED)
        if verdict == ReconcileVerdict.NOT_APPLICABLE:
            return AttemptResult(
                outcome=AttemptOutcome.NOT_APPLICABLE,
                detail="no internal display in topology",
            )

        assert isinstance(verdict, FixDecision)
        if applying_notify is not None:
            applying_notify()
        applied = self._emitter.decision_apply(verdict, dry_run=self._dry_run)
        if applied.isSuccess():
            return AttemptResult(outcome=AttemptOutcome.APPLIED, detail=applied.command, exit_code=0)
        return AttemptResult(
            outcome=AttemptOutcome.FAILED,
            detail=applied.command,
            exit_code=applied.exit_code,
        )

    def check_attempt(self) -> AttemptResult:
        """Print the current topology without changing anything."""
        try:
            topology = self._doctor.topology_query()
        except TopologyQueryError as exc:
            self._log.error("%s", exc)
            return AttemptResult(outcome=AttemptOutcome.FAILED, detail=str(exc))

        stream = self._report_stream or sys.stdout
        if self._probe is not None:
            print(hostSummary_format(self._probe.profile_collect()), file=stream)
        print(topologyReport_format(topology), file=stream, flush=True)
        return AttemptResult(outcome=AttemptOutcome.REPORTED, detail=f"{len(topology)} display(s)")
