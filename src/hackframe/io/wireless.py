"""Simulated Wi-Fi — access points, a scripted attack, and one uplink.

Nothing here touches a real radio.  Three access points are always in
range, and each moves through a small state machine:

    LOCKED  →  CRACKED  →  (session) CONNECTED

Only one AP falls to the toolset; the others resist every attempt.  The
outcome is a fixed table, not a dice roll.  Connecting is a session
property: there is one wireless interface, bound to at most one AP.

Every operation except ``ping core`` needs ``net-module`` online.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from hackframe.modules import ModuleId

if TYPE_CHECKING:
    from hackframe.modules import ModuleRegistry

NET_LOG = "/var/log/net.log"

_STRONG_SIGNAL = 70
_MODERATE_SIGNAL = 40


class WirelessError(Exception):
    """Raise when a Wi-Fi operation's preconditions are not met."""


class ApState(StrEnum):
    """Where an access point sits in the attack lifecycle."""

    LOCKED = "locked"
    CRACKED = "cracked"


@dataclass
class AccessPoint:
    """A simulated access point.

    Attributes:
        ap_id: Stable identifier used on the command line.
        ssid: Display name.
        signal: Signal strength, 0–100.
        locked: Whether a key is still required.
        cracked: Whether the key has been recovered.

    """

    ap_id: str
    ssid: str
    signal: int
    locked: bool = True
    cracked: bool = False

    @property
    def state(self) -> ApState:
        """Return the lifecycle state derived from the flags."""
        return ApState.CRACKED if self.cracked else ApState.LOCKED


# (id, ssid, signal) for every AP in range.
DEFAULT_ACCESS_POINTS: tuple[tuple[str, str, int], ...] = (
    ("ap-01", "HF_LAB_NET_5G", 78),
    ("ap-02", "Café-Guest-2.4", 42),
    ("ap-ghost", "GHOSTLINK_encrypted", 15),
)

CRACKABLE_AP = "ap-01"

WIFI_HELP = (
    "[WIFI] Simulated wireless interface\n"
    "  wifi scan            List nearby access points\n"
    "  wifi crack [id]      Attempt to gain access (simulation only)\n"
    "  wifi connect [id]    Attach to a cracked AP\n"
    "  netcheck             Verify external connectivity state\n"
    "Note: Requires net-module to be online."
)

PING_USAGE = "[PING] usage: ping [core|net|external]"

_PING_REPLIES: dict[str, str] = {
    "core": (
        "[PING] PING core (sim://core) 64 bytes from core: icmp_seq=0 time=0.042ms\n"
        "[OK] Core services reachable inside simulation."
    ),
    "net": (
        "[PING] PING net 64 bytes from net: icmp_seq=0 time=0.028ms\n"
        "[OK] net-module responding on loopback route."
    ),
    "external": (
        "[PING] PING external 64 bytes from external: icmp_seq=0 time=12.345ms\n"
        "[OK] Simulated external host reachable via current Wi-Fi binding."
    ),
}

_PING_FAILURES: dict[str, str] = {
    "net": "[PING] PING net\n[ERROR] net-module is offline. Use 'load net-module' first.",
    "external": (
        "[PING] PING external\n"
        "[ERROR] No simulated external route. "
        "Ensure 'net-module' is online and Wi-Fi is connected."
    ),
}

_PING_ALIASES: dict[str, str] = {"sim://core": "core"}


def signal_quality(signal: int) -> str:
    """Describe a signal strength for the scan table."""
    if signal >= _STRONG_SIGNAL:
        return f"{signal}% (strong)"
    if signal >= _MODERATE_SIGNAL:
        return f"{signal}% (moderate)"
    return f"{signal}% (weak, unstable)"


class WirelessSubsystem:
    """The wireless interface and the access points it can see."""

    def __init__(
        self,
        *,
        modules: ModuleRegistry,
        audit: Callable[[str, str], object] | None = None,
    ) -> None:
        """Create the interface with every AP locked and nothing bound.

        Args:
            modules: The session's module registry (for the net-module gate).
            audit: Optional ``(path, line)`` sink for best-effort audit
                lines.  Its result is ignored.

        """
        self._modules = modules
        self._audit = audit
        self._aps: dict[str, AccessPoint] = {
            ap_id: AccessPoint(ap_id=ap_id, ssid=ssid, signal=signal)
            for ap_id, ssid, signal in DEFAULT_ACCESS_POINTS
        }
        self._connected_ap: str | None = None
        self._external_connectivity = False

    @property
    def access_points(self) -> list[AccessPoint]:
        """Return every access point in scan order."""
        return list(self._aps.values())

    @property
    def connected_ap(self) -> str | None:
        """Return the id of the bound AP, or None."""
        return self._connected_ap

    @property
    def has_external_connectivity(self) -> bool:
        """Return True once the interface is bound to a cracked AP."""
        return self._external_connectivity

    def _net_online(self) -> bool:
        return self._modules.is_online(ModuleId.NET)

    def _require_net(self) -> None:
        if not self._net_online():
            msg = "net-module offline. Use 'load net-module' before accessing Wi-Fi tools."
            raise WirelessError(msg)

    def _log(self, line: str) -> None:
        if self._audit is not None:
            self._audit(NET_LOG, line)

    def help(self) -> str:
        """Return the wifi usage text."""
        return WIFI_HELP

    def scan(self) -> str:
        """List every access point in range.

        Raises:
            WirelessError: If net-module is offline.

        """
        self._require_net()
        lines = ["[WIFI] Nearby access points (simulated):"]
        for ap in self._aps.values():
            lock = "locked=yes" if ap.locked else "locked=no"
            cracked = "cracked=yes" if ap.cracked else "cracked=no"
            signal = signal_quality(ap.signal)
            lines.append(f"  └─ [{ap.ap_id}] {ap.ssid}  signal={signal}  {lock}  {cracked}")
        lines.append("Use 'wifi crack [id]' to attempt access.")
        self._log("[WIFI] Scan requested via safe-mode terminal")
        return "\n".join(lines)

    def crack(self, ap_id: str) -> str:
        """Run the scripted attack against one access point.

        Only ``CRACKABLE_AP`` ever succeeds.  Every other AP returns the
        same failure transcript on every attempt and stays locked.

        Raises:
            WirelessError: If net-module is offline or the AP is unknown.

        """
        self._require_net()
        ap = self._aps.get(ap_id)
        if ap is None:
            msg = f"Access point '{ap_id}' not found. Use 'wifi scan' first."
            raise WirelessError(msg)
        if ap.cracked:
            return f"[WIFI] AP {ap_id} already cracked."

        if ap.ap_id != CRACKABLE_AP:
            self._log(f"[WIFI] Simulated crack failed for {ap.ssid} ({ap.ap_id})")
            return (
                f"[WIFI] Attempted attack on {ap.ssid}...\n"
                "[ERROR] Simulation: this AP resists current toolset. Try a different target."
            )

        ap.cracked = True
        ap.locked = False
        self._log(f"[WIFI] Simulated crack succeeded for {ap.ssid} ({ap.ap_id})")
        return "\n".join(
            [
                f"[WIFI] Running simulated attack against {ap.ssid}...",
                "[WIFI] Scanning for vulnerabilities...",
                "[WIFI] Exploiting WPS pin...",
                "[WIFI] Brute-forcing key space...",
                "[OK] Key material reconstructed (simulation only).",
                f"[OK] Access point {ap_id} marked as cracked. Use 'wifi connect {ap_id}'.",
            ]
        )

    def connect(self, ap_id: str) -> str:
        """Bind the interface to a cracked access point.

        Raises:
            WirelessError: If net-module is offline, the AP is unknown,
                or the AP has not been cracked.

        """
        self._require_net()
        ap = self._aps.get(ap_id)
        if ap is None:
            msg = f"Access point '{ap_id}' not found."
            raise WirelessError(msg)
        if not ap.cracked:
            msg = (
                f"Cannot connect to {ap_id}: access point not cracked in simulation.\n"
                f"Use 'wifi crack {ap_id}' first."
            )
            raise WirelessError(msg)

        self._connected_ap = ap.ap_id
        self._external_connectivity = True
        self._log(
            f"[WIFI] Interface bound to {ap.ssid} ({ap.ap_id}); "
            "external connectivity is SIMULATED-ONLINE"
        )
        return (
            f"[WIFI] Interface bound to {ap.ssid} ({ap.ap_id}).\n"
            "[NET] External connectivity: SIMULATED-ONLINE.\n"
            "Use 'netcheck' to verify status."
        )

    def net_check(self) -> str:
        """Report net-module state, the current binding, and connectivity."""
        if not self._net_online():
            return "[NETCHECK] net-module: OFFLINE\n[RESULT] External connectivity unavailable."

        if self._connected_ap is None or not self._external_connectivity:
            return (
                "[NETCHECK] net-module: ONLINE\n"
                "[NETCHECK] Wi-Fi binding: NONE\n"
                "[RESULT] No route to external network in simulation."
            )

        ap = self._aps[self._connected_ap]
        return (
            "[NETCHECK] net-module: ONLINE\n"
            f"[NETCHECK] Wi-Fi binding: {ap.ssid}\n"
            "[RESULT] External connectivity: SIMULATED-ONLINE."
        )

    def ping(self, target: str | None) -> str:
        """Ping one of the simulated targets: core, net, or external."""
        name = (target or "").strip()
        if not name:
            return PING_USAGE
        name = _PING_ALIASES.get(name, name)

        if name == "core":
            return _PING_REPLIES["core"]
        if name == "net":
            return _PING_REPLIES["net"] if self._net_online() else _PING_FAILURES["net"]
        if name == "external":
            reachable = self._net_online() and self._external_connectivity
            return _PING_REPLIES["external"] if reachable else _PING_FAILURES["external"]

        return f"[PING] Unknown target '{name}'.\nValid targets: core, net, external."
