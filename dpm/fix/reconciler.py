"""
Priority reconciliation.

Pure decision step: given one topology snapshot, decide whether the
internal panel must be promoted and, if so, what every output's target
priority is. Externals keep their parse order when renumbered; only
"internal is primary" matters to the fix, so the order among externals
is left as the compositor reported it.
"""

from __future__ import annotations

import logging
from typing import Optional

from dpm.common.settings import settings
from dpm.common.types import FixDecision, PriorityAssignment, ReconcileResult, ReconcileVerdict, Topology

logger = logging.getLogger(__name__)

__all__ = ["reconcile"]


def reconcile(topology: Topology, log: Optional[logging.Logger] = None) -> ReconcileResult:
    """
    Decide the corrective priority layout for a topology.

    Args:
        topology: Snapshot from the topology parser.
        log: Logger to report through (module logger by default).

    Returns:
        NOT_APPLICABLE when there is no internal display, NO_FIX_NEEDED when
        it is already primary, otherwise a FixDecision.
    """
    log = log or logger

    if len(topology) == 0:
        log.warning("No displays found")
        return ReconcileVerdict.NOT_APPLICABLE

    internal = topology.internal_first()
    if internal is None:
        log.warning("No internal display found")
        return ReconcileVerdict.NOT_APPLICABLE

    if internal.priority == settings.PRIMARY_PRIORITY:
        log.info("Internal display already has priority 1 - no fix needed")
        return ReconcileVerdict.NO_FIX_NEEDED

    log.info("Internal display %s has priority %d - fixing...", internal.name, internal.priority)

    externals = tuple(
        PriorityAssignment(name=record.name, priority=settings.PRIMARY_PRIORITY + offset)
        for offset, record in enumerate(topology.externals(), start=1)
    )
    return FixDecision(
        internal=PriorityAssignment(name=internal.name, priority=settings.PRIMARY_PRIORITY),
        externals=externals,
    )
