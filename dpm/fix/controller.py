"""
Retry controller.

Runs the eligibility gate once, then drives up to `max_retries` attempts
of the selected strategy with a fixed delay in between. The first
terminal outcome (applied, nothing to fix, not applicable, reported)
ends the loop. The gate is not re-run between attempts, so a display
hot-plugged during the retry window does not change the verdict.
"""

from __future__ import annotations

import logging
from typing import Optional

from dpm.common.config import FixConfig
from dpm.common.types import AttemptOutcome, AttemptResult, ControllerResult, ControllerState
from dpm.fix.stop_token import StopToken
from dpm.fix.strategy import FixStrategy
from dpm.hardware.eligibility import EligibilityChecker

logger = logging.getLogger(__name__)

__all__ = ["RetryController"]


class RetryController:
    """Bounded-retry state machine around one fix strategy."""

    def __init__(
        self,
        fix: FixConfig,
        checker: EligibilityChecker,
        strategy: FixStrategy,
        stop_token: Optional[StopToken] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """
        Initialize controller.

        Args:
            fix: Retry policy (max_retries, retry_delay, force).
            checker: Eligibility gate, consulted once per run.
            strategy: Attempt body.
            stop_token: Cancellation token set by signal handlers.
            log: Logger to report through (module logger by default).
        """
        self._fix: FixConfig = fix
        self._checker: EligibilityChecker = checker
        self._strategy: FixStrategy = strategy
        self._stop: StopToken = stop_token or StopToken()
        self._log: logging.Logger = log or logger
        self._state: ControllerState = ControllerState.IDLE
        self._attempts: int = 0
        self._last_result: Optional[AttemptResult] = None

    @property
    def state(self) -> ControllerState:
        """Current controller state."""
        return self._state

    @property
    def attempts(self) -> int:
        """Attempts started so far."""
        return self._attempts

    @property
    def last_result(self) -> Optional[AttemptResult]:
        """Most recent attempt result, if any."""
        return self._last_result

    def run(self) -> ControllerResult:
        """
        Run the gate and the attempt loop to a terminal state.

        Returns:
            Terminal state, attempt count and attempt history.
        """
        history: list[AttemptResult] = []

        if self._stop.isStopped():
            return self._finish(ControllerState.INTERRUPTED, history, self._interrupted_record())

        self._state_set(ControllerState.CHECKING)
        if not self._checker.isEligible(self._fix.force):
            self._log.info("Fix not needed for this hardware")
            return self._finish(ControllerState.SKIPPED, history, AttemptResult(outcome=AttemptOutcome.SKIPPED))

        max_retries = self._fix.max_retries
        while self._attempts < max_retries:
            if self._stop.isStopped():
                return self._finish(ControllerState.INTERRUPTED, history, self._interrupted_record())

            self._attempts += 1
            self._state_set(ControllerState.RECONCILING)
            self._log.info("Fix attempt %d of %d", self._attempts, max_retries)

            result = self._strategy.attempt_run(
                applying_notify=lambda: self._state_set(ControllerState.APPLYING)
            )
            history.append(result)
            self._last_result = result

            if result.outcome.isTerminalSuccess():
                self._log.info("Attempt %d finished: %s", self._attempts, result.outcome.value)
                return self._finish(ControllerState.SUCCEEDED, history, result)

            if result.outcome == AttemptOutcome.NOT_IMPLEMENTED:
                return self._finish(ControllerState.FAILED, history, result)

            self._state_set(ControllerState.FAILED_ATTEMPT)
            if self._attempts < max_retries:
                if self._stop.isStopped():
                    return self._finish(ControllerState.INTERRUPTED, history, self._interrupted_record())
                self._log.warning(
                    "Fix attempt %d failed, waiting %d seconds before retry...",
                    self._attempts,
                    self._fix.retry_delay,
                )
                if self._stop.wait(self._fix.retry_delay):
                    return self._finish(ControllerState.INTERRUPTED, history, self._interrupted_record())
            else:
                self._log.warning("Fix attempt %d failed", self._attempts)

        return self._finish(ControllerState.EXHAUSTED_RETRIES, history, self._last_result)

    def _state_set(self, state: ControllerState) -> None:
        self._log.debug("[STATE] %s -> %s", self._state.value, state.value)
        self._state = state

    def _interrupted_record(self) -> AttemptResult:
        result = AttemptResult(outcome=AttemptOutcome.INTERRUPTED, detail="stop requested")
        self._last_result = result
        return result

    def _finish(
        self,
        state: ControllerState,
        history: list[AttemptResult],
        last_result: Optional[AttemptResult],
    ) -> ControllerResult:
        self._state_set(state)
        self._last_result = last_result
        outcome = ControllerResult(
            state=state,
            attempts=self._attempts,
            last_result=last_result,
            history=tuple(history),
        )

        if state == ControllerState.SUCCEEDED and last_result is not None and last_result.outcome == AttemptOutcome.APPLIED:
            self._log.info("Display priority fix completed successfully")
        elif state == ControllerState.SUCCEEDED:
            outcome_name = last_result.outcome.value if last_result else "unknown"
            self._log.info("Finished without changes: %s", outcome_name)
        elif state == ControllerState.SKIPPED:
            self._log.info("Finished without changes: host not eligible")
        elif state == ControllerState.INTERRUPTED:
            self._log.error("Interrupted after %d attempt(s)", self._attempts)
        elif state == ControllerState.EXHAUSTED_RETRIES:
            self._log.error("All fix attempts failed (%d attempt(s))", self._attempts)
        else:
            detail = last_result.detail if last_result else ""
            self._log.error("Fix failed: %s", detail)
        return outcome
