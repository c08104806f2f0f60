"""I/O subsystem — the simulated wireless interface.

Re-exports public symbols so callers can write::

    from hackframe.io import WirelessSubsystem
"""

from hackframe.io.wireless import (
    CRACKABLE_AP,
    AccessPoint,
    ApState,
    WirelessError,
    WirelessSubsystem,
)

__all__ = [
    "CRACKABLE_AP",
    "AccessPoint",
    "ApState",
    "WirelessError",
    "WirelessSubsystem",
]
