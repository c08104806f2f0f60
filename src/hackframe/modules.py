"""Module registry — the kernel subsystems that safe mode must restore.

The degraded image boots with every subsystem missing.  The operator
brings them back one at a time with ``load``:

    MISSING  →  OK

A module never goes back to MISSING.  Some modules sit on top of others
(``package-core`` → ``core-utils`` → ``gfx-module``), so a load is
refused until the prerequisite is online.

The display driver is special.  It also needs its boot fragment
resolved, and its first real attempt always fails to bind the frame
buffer; the operator has to try again.  That first failure is a fixed
part of the story, not a retry policy.
"""

from __future__ import annotations

from collections import Counter
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hackframe.fragments import FragmentLedger


class ModuleError(Exception):
    """Raise when a module cannot be loaded."""


class ModuleId(StrEnum):
    """The closed set of kernel modules known to the safe-mode image."""

    AUTH = "auth-module"
    NET = "net-module"
    ENTROPY = "entropy-core"
    LOCALE = "locale-config"
    TIME_SYNC = "time-sync"
    PACKAGE_CORE = "package-core"
    CORE_UTILS = "core-utils"
    GFX = "gfx-module"


class ModuleState(StrEnum):
    """Whether a module is online."""

    MISSING = "MISSING"
    OK = "OK"


# Each module has at most one prerequisite; the graph is a simple chain.
DEPENDENCIES: dict[ModuleId, ModuleId] = {
    ModuleId.CORE_UTILS: ModuleId.PACKAGE_CORE,
    ModuleId.GFX: ModuleId.CORE_UTILS,
}

# Modules that also need their own boot fragment resolved before loading.
FRAGMENT_GATED: frozenset[ModuleId] = frozenset({ModuleId.GFX})

# Modules whose first fully-qualified load attempt fails on purpose.
FLAKY_FIRST_ATTEMPT: frozenset[ModuleId] = frozenset({ModuleId.GFX})

MODULE_OUTPUTS: dict[ModuleId, str] = {
    ModuleId.AUTH: ("[LOAD] Subsystem /auth/null initialized\n[OK] User identity handshake active"),
    ModuleId.NET: (
        "[LOAD] Subsystem /net/ghost online\n[OK] IP stack: 127.0.0.1\n[OK] Ping loopback: success"
    ),
    ModuleId.ENTROPY: "[LOAD] entropy-core activated\n[OK] Entropy index: 0.42",
    ModuleId.LOCALE: (
        "[LOAD] Locale set: en_US.UTF-8\n[OK] Encoding: UTF-8\n[OK] Console dimensions fixed"
    ),
    ModuleId.TIME_SYNC: (
        "[LOAD] Clock sync: internal oscillator\n[OK] Kernel tick rate: 60Hz\n[OK] Timezone: UTC"
    ),
    ModuleId.PACKAGE_CORE: (
        "[LOAD] Package manager initialized\n[OK] Repositories mounted\n[OK] Ready to install tools"
    ),
    ModuleId.CORE_UTILS: (
        "[LOAD] core-utils online\n[OK] Added commands: ls, cat, ps, kill, cd, rm, mv"
    ),
    ModuleId.GFX: "[LOAD] gfx-module initializing...\n[OK] Subsystem /core/gfx ready.",
}

TRANSIENT_FAILURES: dict[ModuleId, str] = {
    ModuleId.GFX: (
        "[LOAD] gfx-module initializing...\n"
        "[ERROR] Subsystem /core/gfx failed to bind frame buffer."
    ),
}

# Column where status marks start in the module tree.
_TREE_WIDTH = 17
_TREE_INDENT = 3


def depth(module_id: ModuleId) -> int:
    """Return how many prerequisites sit above *module_id*."""
    level = 0
    current = DEPENDENCIES.get(module_id)
    while current is not None:
        level += 1
        current = DEPENDENCIES.get(current)
    return level


def render_tree(marks: dict[ModuleId, str]) -> list[str]:
    """Render the module hierarchy, one line per module.

    Args:
        marks: The status text to print next to each module.

    """
    lines: list[str] = []
    for module_id in ModuleId:
        level = depth(module_id)
        indent = " " * (_TREE_INDENT * level)
        name = module_id.value.ljust(_TREE_WIDTH - _TREE_INDENT * level)
        lines.append(f"  {indent}└─ {name}{marks[module_id]}")
    return lines


class ModuleRegistry:
    """Track the online state of every module in one session."""

    def __init__(self) -> None:
        """Create a registry with every module MISSING."""
        self._states: dict[ModuleId, ModuleState] = dict.fromkeys(ModuleId, ModuleState.MISSING)
        self._attempts: Counter[ModuleId] = Counter()

    def state(self, module_id: ModuleId) -> ModuleState:
        """Return the current state of *module_id*."""
        return self._states[module_id]

    def is_online(self, module_id: ModuleId) -> bool:
        """Return True if *module_id* has been loaded."""
        return self._states[module_id] is ModuleState.OK

    def count_loaded(self) -> int:
        """Return how many modules are online (progress display only)."""
        return sum(1 for s in self._states.values() if s is ModuleState.OK)

    def attempts(self, module_id: ModuleId) -> int:
        """Return how many fully-qualified load attempts *module_id* has seen."""
        return self._attempts[module_id]

    def load(self, module_id: str, *, fragments: FragmentLedger) -> str:
        """Bring a module online.

        Checks, in order: the id is known, its prerequisite is online,
        and (for fragment-gated modules) its boot fragment is resolved.
        A flaky module then fails its first attempt with a scripted
        message and no state change.

        Args:
            module_id: The module to load.
            fragments: The session's fragment ledger (for gated modules).

        Returns:
            The module's scripted output.  Loading an online module
            again returns the same text.

        Raises:
            ModuleError: If the module is unknown or a precondition fails.

        """
        try:
            mid = ModuleId(module_id)
        except ValueError:
            msg = f"Module '{module_id}' not found. Type 'load' to list available modules."
            raise ModuleError(msg) from None

        dependency = DEPENDENCIES.get(mid)
        if dependency is not None and not self.is_online(dependency):
            msg = f"{mid} requires {dependency} to be loaded"
            raise ModuleError(msg)

        if mid in FRAGMENT_GATED:
            fragment = fragments.for_module(mid)
            if fragment is not None and not fragment.resolved:
                msg = (
                    f"{mid} cannot initialize: unresolved fragment "
                    f"{fragment.fragment_id} ({fragment.description})"
                )
                raise ModuleError(msg)

        self._attempts[mid] += 1
        if mid in FLAKY_FIRST_ATTEMPT and self._attempts[mid] == 1:
            return TRANSIENT_FAILURES[mid]

        self._states[mid] = ModuleState.OK
        return MODULE_OUTPUTS[mid]

    def listing(self) -> str:
        """Render the ``load`` menu with ``[OK]`` / ``[ ]`` marks."""
        marks = {mid: "[OK]" if self.is_online(mid) else "[ ]" for mid in ModuleId}
        lines = ["[LOAD] Available modules:", *render_tree(marks)]
        lines.append("Type 'load [module]' to activate.")
        return "\n".join(lines)
