"""Common types and data structures for dpm"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Union

from dpm.common.settings import settings

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


class FixMode(Enum):
    """Remediation strategies selectable from the command line"""
    AUTO = "auto"        # Pick the best available strategy (kscreen today)
    KSCREEN = "kscreen"  # Reassign priorities through kscreen-doctor
    CONFIG = "config"    # Rewrite KScreen config files (not implemented)
    LIBRARY = "library"  # LD_PRELOAD injection (not implemented)
    CHECK = "check"      # Report the current topology only
    DAEMON = "daemon"    # Standing monitor (not implemented)


class Classification(Enum):
    """Whether an output is the chassis panel or something plugged in"""
    INTERNAL = "internal"
    EXTERNAL = "external"


class ReconcileVerdict(Enum):
    """Reconciler results that carry no corrective assignment"""
    NO_FIX_NEEDED = "no_fix_needed"
    NOT_APPLICABLE = "not_applicable"


class AttemptOutcome(Enum):
    """Outcome of a single controller cycle"""
    SKIPPED = "skipped"
    NO_FIX_NEEDED = "no_fix_needed"
    NOT_APPLICABLE = "not_applicable"
    APPLIED = "applied"
    REPORTED = "reported"
    FAILED = "failed"
    NOT_IMPLEMENTED = "not_implemented"
    INTERRUPTED = "interrupted"

    def isTerminalSuccess(self) -> bool:
        """Check if this outcome ends the retry loop without error"""
        return self in (
            AttemptOutcome.APPLIED,
            AttemptOutcome.NO_FIX_NEEDED,
            AttemptOutcome.NOT_APPLICABLE,
            AttemptOutcome.REPORTED,
        )


class ControllerState(Enum):
    """Retry controller states; the last five are terminal"""
    IDLE = "idle"
    CHECKING = "checking"
    RECONCILING = "reconciling"
    APPLYING = "applying"
    FAILED_ATTEMPT = "failed_attempt"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    EXHAUSTED_RETRIES = "exhausted_retries"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


@dataclass(frozen=True)
class HostProfile:
    """Host identity and GPU/display facts gathered by introspection"""
    vendor: str
    product: str
    has_discrete_gpu: bool
    has_integrated_gpu: bool
    connected_displays: int


@dataclass(frozen=True)
class DisplayRecord:
    """One output as reported by the compositor"""
    name: str
    priority: int  # 1 = primary
    classification: Classification

    def isInternal(self) -> bool:
        """Check if this record is the chassis panel"""
        return self.classification == Classification.INTERNAL


@dataclass(frozen=True)
class Topology:
    """Ordered snapshot of outputs from one compositor query"""
    records: tuple[DisplayRecord, ...] = ()

    def __iter__(self) -> Iterator[DisplayRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def internal_first(self) -> Optional[DisplayRecord]:
        """First internal record in parse order, if any"""
        for record in self.records:
            if record.isInternal():
                return record
        return None

    def externals(self) -> list[DisplayRecord]:
        """External records in parse order"""
        return [record for record in self.records if not record.isInternal()]


@dataclass(frozen=True)
class PriorityAssignment:
    """Target priority for one output"""
    name: str
    priority: int


@dataclass(frozen=True)
class FixDecision:
    """Corrective priority layout: internal first, externals from 2 upward"""
    internal: PriorityAssignment
    externals: tuple[PriorityAssignment, ...] = ()

    def __post_init__(self) -> None:
        if self.internal.priority != settings.PRIMARY_PRIORITY:
            raise ValueError("internal target priority must be 1")
        expected = 2
        for assignment in self.externals:
            if assignment.priority != expected:
                raise ValueError(
                    f"external priorities must run 2, 3, ... (got {assignment.priority} "
                    f"for {assignment.name}, expected {expected})"
                )
            expected += 1

    def assignments(self) -> list[PriorityAssignment]:
        """All assignments, internal first"""
        return [self.internal, *self.externals]


ReconcileResult = Union[FixDecision, ReconcileVerdict]


@dataclass(frozen=True)
class ApplyResult:
    """Result of emitting one priority command"""
    command: str
    exit_code: int = 0
    simulated: bool = False

    def isSuccess(self) -> bool:
        """Check if the command succeeded (or was only simulated)"""
        return self.exit_code == 0


@dataclass(frozen=True)
class AttemptResult:
    """Outcome of one attempt plus whatever detail explains it"""
    outcome: AttemptOutcome
    detail: str = ""
    exit_code: Optional[int] = None


@dataclass(frozen=True)
class ControllerResult:
    """Terminal summary of a retry controller run"""
    state: ControllerState
    attempts: int = 0
    last_result: Optional[AttemptResult] = None
    history: tuple[AttemptResult, ...] = ()

    @property
    def exit_code(self) -> int:
        """Process exit status for this terminal state"""
        if self.state in (ControllerState.SUCCEEDED, ControllerState.SKIPPED):
            return settings.EXIT_OK
        if self.state == ControllerState.INTERRUPTED:
            return settings.EXIT_INTERRUPTED
        return settings.EXIT_FAILURE
