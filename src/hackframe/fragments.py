"""Boot fragments — corrupted traces left behind by the failed boot.

Each fragment belongs to the module whose initialisation produced it.
A fragment can only be resolved once that module is online (the display
driver's fragment only needs ``core-utils``, since the driver itself
waits on the fragment):

    UNRESOLVED  →  RESOLVED

Resolution is final.  The listing shows resolved fragments first, which
is purely cosmetic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from hackframe.modules import DEPENDENCIES, FRAGMENT_GATED, ModuleId

if TYPE_CHECKING:
    from hackframe.modules import ModuleRegistry


class FragmentError(Exception):
    """Raise when a fragment cannot be resolved."""


class FragmentStatus(StrEnum):
    """Resolution state of a boot fragment."""

    UNRESOLVED = "UNRESOLVED"
    RESOLVED = "RESOLVED"


@dataclass
class BootFragment:
    """A single boot fragment.

    Attributes:
        fragment_id: Short hex token such as ``0xa3``.
        description: What went wrong during boot.
        origin: The module whose initialisation produced it.
        status: Current resolution state.

    """

    fragment_id: str
    description: str
    origin: ModuleId
    status: FragmentStatus = FragmentStatus.UNRESOLVED

    @property
    def resolved(self) -> bool:
        """Return True once the fragment has been resolved."""
        return self.status is FragmentStatus.RESOLVED


# (id, description, origin) for every fragment on a fresh image.
DEFAULT_FRAGMENTS: tuple[tuple[str, str, ModuleId], ...] = (
    ("0xa3", "orphaned syscall", ModuleId.AUTH),
    ("0xb7", "ghost port pinged", ModuleId.NET),
    ("0xd4", "entropy seed missing", ModuleId.ENTROPY),
    ("0xf2", "invalid locale binding", ModuleId.LOCALE),
    ("0x9c", "oscillator drift detected", ModuleId.TIME_SYNC),
    ("0xe1", "repo mount failure", ModuleId.PACKAGE_CORE),
    ("0x8f", "framebuffer handshake failed", ModuleId.GFX),
)


class FragmentLedger:
    """Hold every boot fragment for one session."""

    def __init__(self) -> None:
        """Create a ledger with every default fragment unresolved."""
        self._fragments: dict[str, BootFragment] = {
            fid: BootFragment(fragment_id=fid, description=desc, origin=origin)
            for fid, desc, origin in DEFAULT_FRAGMENTS
        }

    @property
    def fragments(self) -> list[BootFragment]:
        """Return all fragments in their original order."""
        return list(self._fragments.values())

    def get(self, fragment_id: str) -> BootFragment | None:
        """Return the fragment with *fragment_id*, or None."""
        return self._fragments.get(fragment_id)

    def for_module(self, module_id: ModuleId) -> BootFragment | None:
        """Return the fragment originating from *module_id*, if any."""
        return next((f for f in self._fragments.values() if f.origin is module_id), None)

    def count_resolved(self) -> int:
        """Return how many fragments are resolved (progress display only)."""
        return sum(1 for f in self._fragments.values() if f.resolved)

    def count_unresolved(self) -> int:
        """Return how many fragments are still unresolved."""
        return len(self._fragments) - self.count_resolved()

    def all_resolved(self) -> bool:
        """Return True when no fragment is left unresolved."""
        return all(f.resolved for f in self._fragments.values())

    @staticmethod
    def required_module(fragment: BootFragment) -> ModuleId:
        """Return the module that must be online to resolve *fragment*.

        Usually that is the origin.  A fragment-gated origin cannot load
        before its own fragment is resolved, so its prerequisite stands
        in for it.
        """
        if fragment.origin in FRAGMENT_GATED:
            return DEPENDENCIES.get(fragment.origin, fragment.origin)
        return fragment.origin

    def resolve(self, fragment_id: str, *, modules: ModuleRegistry) -> str:
        """Resolve a fragment whose required module is online.

        Args:
            fragment_id: The fragment to resolve.
            modules: The session's module registry.

        Returns:
            The resolution transcript, or an "already resolved" note.

        Raises:
            FragmentError: If the fragment is unknown or its module is offline.

        """
        fragment = self._fragments.get(fragment_id)
        if fragment is None:
            msg = f"Fragment {fragment_id} not found"
            raise FragmentError(msg)
        if fragment.resolved:
            return f"[OK] Fragment {fragment_id} already resolved"
        required = self.required_module(fragment)
        if not modules.is_online(required):
            msg = f"Fragment {fragment_id} requires {required} to be loaded"
            raise FragmentError(msg)

        fragment.status = FragmentStatus.RESOLVED
        return "\n".join(
            [
                f"[FRAGMENT {fragment_id}]",
                f"[Module] {fragment.origin}",
                "[Status] resolving...",
                f"[OK] Dependency detected: {required} active",
                f"[OK] Fragment {fragment_id} resolved",
            ]
        )

    def listing(self) -> str:
        """Render every fragment, resolved entries first."""
        ordered = sorted(self._fragments.values(), key=lambda f: not f.resolved)
        lines = ["[FRAGMENTS] Retrieved boot fragment log..."]
        lines.extend(f" └─ [{f.fragment_id}] [{f.status}] {f.description}" for f in ordered)
        lines.append("Use 'fragment [id]' to resolve.")
        return "\n".join(lines)
