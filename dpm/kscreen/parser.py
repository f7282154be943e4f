"""
Parser for `kscreen-doctor -o` output status dumps.

The dump is a sequence of output blocks. Each block opens with an
`Output:` line and may carry a `priority N` line (or fragment) somewhere
after it:

    Output: 1 eDP-1 enabled connected
        priority 2
        Panel
    Output: 2 DP-3 enabled connected
        priority 1

Terminals get a colorized dump, so ANSI escapes are removed before any
line is interpreted. Blocks without a positive priority (disconnected or
disabled outputs) are dropped.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

from dpm.common.settings import settings
from dpm.common.types import Classification, DisplayRecord, Topology

logger = logging.getLogger(__name__)

__all__ = [
    "ansiEscapes_strip",
    "outputName_extract",
    "priority_extract",
    "classification_resolve",
    "topology_parse",
]

DEFAULT_INTERNAL_PATTERNS: tuple[str, ...] = ("eDP", "LVDS")

# ESC up to and including the terminating 'm'; an unterminated sequence
# runs to the end of the line.
_ANSI_ESCAPE_RE = re.compile(r"\x1b[^m]*m?")
_PRIORITY_RE = re.compile(r"priority:?\s+(-?\d+)")
_INDEX_RE = re.compile(r"-?\d+")


def ansiEscapes_strip(line: str) -> str:
    """
    Remove ANSI color/style sequences from a line.

    Args:
        line: Raw dump line.

    Returns:
        Line with every escape sequence removed.
    """
    return _ANSI_ESCAPE_RE.sub("", line)


def outputName_extract(line: str) -> str:
    """
    Pull the output name out of an `Output:` line.

    The name is the first token after the marker, skipping the numeric
    output index that kscreen-doctor prints before it. Names are capped
    at settings.OUTPUT_NAME_MAX_LENGTH characters.

    Args:
        line: ANSI-free line containing the output marker.

    Returns:
        Output name, or "" when the line carries none.
    """
    _, _, rest = line.partition(settings.OUTPUT_MARKER)
    tokens = rest.split()
    if tokens and _INDEX_RE.fullmatch(tokens[0]):
        tokens = tokens[1:]
    if not tokens:
        return ""
    return tokens[0][: settings.OUTPUT_NAME_MAX_LENGTH]


def priority_extract(line: str) -> Optional[int]:
    """
    Pull the integer following the priority marker.

    Args:
        line: ANSI-free line.

    Returns:
        Priority value, or None when the line has no `priority N` fragment.
    """
    match = _PRIORITY_RE.search(line)
    if match is None:
        return None
    return int(match.group(1))


def classification_resolve(name: str, internal_patterns: Iterable[str] = DEFAULT_INTERNAL_PATTERNS) -> Classification:
    """
    Classify an output by its connector naming convention.

    Args:
        name: Output name, e.g. `eDP-1` or `HDMI-A-1`.
        internal_patterns: Substrings that mark the chassis panel.

    Returns:
        INTERNAL if any pattern occurs in the name, else EXTERNAL.
    """
    if any(pattern in name for pattern in internal_patterns):
        return Classification.INTERNAL
    return Classification.EXTERNAL


def topology_parse(
    raw_output: str,
    internal_patterns: Iterable[str] = DEFAULT_INTERNAL_PATTERNS,
    log: Optional[logging.Logger] = None,
) -> Topology:
    """
    Parse a status dump into an ordered Topology.

    Args:
        raw_output: Full text printed by `kscreen-doctor -o`.
        internal_patterns: Substrings that mark the chassis panel.
        log: Logger to report through (module logger by default).

    Returns:
        Records in dump order; empty when no block carried a valid priority.
    """
    log = log or logger
    patterns = tuple(internal_patterns)
    records: list[DisplayRecord] = []
    seen: set[str] = set()

    current_name = ""
    current_priority: Optional[int] = None

    def _block_commit() -> None:
        if not current_name or current_priority is None or current_priority <= 0:
            return
        if current_name in seen:
            log.debug("Ignoring duplicate output block for %s", current_name)
            return
        record = DisplayRecord(
            name=current_name,
            priority=current_priority,
            classification=classification_resolve(current_name, patterns),
        )
        seen.add(record.name)
        records.append(record)
        log.debug(
            "Found display: %s (priority %d, internal=%s)",
            record.name,
            record.priority,
            record.isInternal(),
        )

    for raw_line in raw_output.splitlines():
        line = ansiEscapes_strip(raw_line)

        if settings.OUTPUT_MARKER in line:
            _block_commit()
            current_name = outputName_extract(line)
            # Single-line dumps put the priority on the Output line itself
            current_priority = priority_extract(line.partition(current_name)[2]) if current_name else None
        elif settings.PRIORITY_MARKER in line:
            value = priority_extract(line)
            if value is not None:
                current_priority = value

    _block_commit()
    return Topology(records=tuple(records))
