"""Rehabilitation mission — the operator's objectives in safe mode.

Tasks are never stored.  Each one is a predicate over the module
registry and fragment ledger, recomputed on every query, so the
checklist can never drift from the real state.

Leaving safe mode (``startx``) needs every *critical* task done **and**
the display driver online.  The ``gfx-online`` task itself is not
flagged critical: the checklist treats it as a bonus objective while
the exit gate still insists on it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias
from dataclasses import dataclass
from enum import StrEnum

from hackframe.fragments import FragmentLedger
from hackframe.modules import ModuleId, ModuleRegistry

_Predicate: TypeAlias = Callable[[ModuleRegistry, FragmentLedger], bool]


class TaskId(StrEnum):
    """Identifiers of the mission tasks, in display order."""

    AUTH_ONLINE = "auth-online"
    NET_ONLINE = "net-online"
    ENTROPY_ONLINE = "entropy-online"
    ALL_FRAGMENTS = "all-fragments"
    GFX_ONLINE = "gfx-online"


@dataclass(frozen=True)
class Task:
    """A derived mission objective."""

    label: str
    done: _Predicate
    critical: bool = False


def _module_online(module_id: ModuleId) -> _Predicate:
    """Build a predicate that checks a single module."""
    return lambda modules, _fragments: modules.is_online(module_id)


TASKS: dict[TaskId, Task] = {
    TaskId.AUTH_ONLINE: Task(
        "Initialize auth-module", _module_online(ModuleId.AUTH), critical=True
    ),
    TaskId.NET_ONLINE: Task(
        "Bring net-module online", _module_online(ModuleId.NET), critical=True
    ),
    TaskId.ENTROPY_ONLINE: Task("Stabilize entropy-core", _module_online(ModuleId.ENTROPY)),
    TaskId.ALL_FRAGMENTS: Task(
        "Resolve all boot fragments",
        lambda _modules, fragments: fragments.all_resolved(),
        critical=True,
    ),
    TaskId.GFX_ONLINE: Task(
        "Enable gfx-module (exit fallback TTY)", _module_online(ModuleId.GFX)
    ),
}

# Guidance shown by ``hint``, checked strictly in this order.
HINTS: tuple[tuple[TaskId, str], ...] = (
    (
        TaskId.AUTH_ONLINE,
        "[HINT] auth-module is still offline.\n"
        "Use 'load auth-module' to bring identity handshake online.",
    ),
    (
        TaskId.NET_ONLINE,
        "[HINT] Network stack is dormant.\nUse 'load net-module' to activate /net/ghost.",
    ),
    (
        TaskId.ENTROPY_ONLINE,
        "[HINT] Entropy index is pinned at 0.00.\n"
        "Use 'load entropy-core' before attempting to resolve entropy-related fragments.",
    ),
    (
        TaskId.ALL_FRAGMENTS,
        "[HINT] Boot fragments remain unresolved.\n"
        "Use 'fragment' to list them and 'fragment [id]' after the relevant module is online.",
    ),
    (
        TaskId.GFX_ONLINE,
        "[HINT] System is stable but display driver is missing.\n"
        "Use 'load package-core' then 'load core-utils' and finally 'load gfx-module'.",
    ),
)

ALL_DONE_HINT = (
    "[HINT] All critical tasks appear complete.\n"
    "Use 'status' to verify system health or explore freely."
)


def is_complete(modules: ModuleRegistry, fragments: FragmentLedger) -> bool:
    """Return True when safe mode may hand over to the desktop."""
    critical_done = all(t.done(modules, fragments) for t in TASKS.values() if t.critical)
    return critical_done and modules.is_online(ModuleId.GFX)


def report(modules: ModuleRegistry, fragments: FragmentLedger) -> str:
    """Render the mission checklist."""
    lines = ["[MISSION] Operator objectives:"]
    for task in TASKS.values():
        mark = "[x]" if task.done(modules, fragments) else "[ ]"
        tag = " (critical)" if task.critical else ""
        lines.append(f"  {mark} {task.label}{tag}")
    lines.extend(
        [
            "",
            "System exits degraded state when all critical tasks are complete.",
            "Use 'status', 'load', and 'fragment' to make progress.",
        ]
    )
    return "\n".join(lines)


def next_hint(modules: ModuleRegistry, fragments: FragmentLedger) -> str:
    """Return guidance for the first unmet step in priority order."""
    for task_id, hint in HINTS:
        if not TASKS[task_id].done(modules, fragments):
            return hint
    return ALL_DONE_HINT
