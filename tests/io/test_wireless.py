"""Tests for the simulated wireless subsystem.

Every Wi-Fi tool is gated on net-module.  Only ``ap-01`` can be cracked,
and only a cracked AP can be connected to.
"""

import pytest

from hackframe.fragments import FragmentLedger
from hackframe.io.wireless import (
    CRACKABLE_AP,
    NET_LOG,
    PING_USAGE,
    WIFI_HELP,
    ApState,
    WirelessError,
    WirelessSubsystem,
    signal_quality,
)
from hackframe.modules import ModuleRegistry


def _wireless(*, net: bool = True) -> tuple[WirelessSubsystem, list[tuple[str, str]]]:
    """Create a wireless subsystem, optionally with net-module loaded.

    Returns the subsystem and the list its audit lines are recorded in.
    """
    modules = ModuleRegistry()
    if net:
        modules.load("net-module", fragments=FragmentLedger())
    lines: list[tuple[str, str]] = []
    wifi = WirelessSubsystem(modules=modules, audit=lambda path, line: lines.append((path, line)))
    return wifi, lines


class TestInitialState:
    """Verify the access points in range."""

    def test_three_locked_access_points(self) -> None:
        """All APs should start locked and uncracked."""
        wifi, _ = _wireless()
        assert [ap.ap_id for ap in wifi.access_points] == ["ap-01", "ap-02", "ap-ghost"]
        assert all(ap.locked and not ap.cracked for ap in wifi.access_points)
        assert all(ap.state is ApState.LOCKED for ap in wifi.access_points)
        assert wifi.connected_ap is None
        assert not wifi.has_external_connectivity

    def test_signal_quality_bands(self) -> None:
        """Signal should be described as strong, moderate or weak."""
        assert signal_quality(78) == "78% (strong)"
        assert signal_quality(42) == "42% (moderate)"
        assert signal_quality(15) == "15% (weak, unstable)"

    def test_help_text(self) -> None:
        """help() should return the usage block."""
        wifi, _ = _wireless(net=False)
        assert wifi.help() == WIFI_HELP


class TestScan:
    """Verify scanning."""

    def test_scan_requires_net(self) -> None:
        """Scanning with net-module offline should raise."""
        wifi, _ = _wireless(net=False)
        with pytest.raises(WirelessError, match="net-module offline"):
            wifi.scan()

    def test_scan_lists_every_ap(self) -> None:
        """Scan output should list each SSID with its lock state."""
        wifi, lines = _wireless()
        out = wifi.scan()
        assert "HF_LAB_NET_5G" in out
        assert "Café-Guest-2.4" in out
        assert "GHOSTLINK_encrypted" in out
        assert out.count("locked=yes") == 3  # noqa: PLR2004
        assert lines == [(NET_LOG, "[WIFI] Scan requested via safe-mode terminal")]


class TestCrack:
    """Verify the scripted attack."""

    def test_crack_designated_ap(self) -> None:
        """The designated AP should crack and unlock."""
        wifi, _ = _wireless()
        out = wifi.crack(CRACKABLE_AP)
        assert out.endswith("[OK] Access point ap-01 marked as cracked. Use 'wifi connect ap-01'.")
        ap = wifi.access_points[0]
        assert ap.cracked
        assert not ap.locked
        assert ap.state is ApState.CRACKED

    def test_other_aps_always_resist(self) -> None:
        """Non-designated APs should fail every time with no state change."""
        wifi, _ = _wireless()
        for _ in range(3):
            out = wifi.crack("ap-02")
            assert "this AP resists current toolset" in out
        ap = wifi.access_points[1]
        assert ap.locked
        assert not ap.cracked

    def test_crack_again_is_informational(self) -> None:
        """Cracking an already-cracked AP should just say so."""
        wifi, _ = _wireless()
        wifi.crack("ap-01")
        assert wifi.crack("ap-01") == "[WIFI] AP ap-01 already cracked."

    def test_crack_unknown_ap(self) -> None:
        """An unknown AP id should raise."""
        wifi, _ = _wireless()
        with pytest.raises(WirelessError, match="Access point 'ap-99' not found"):
            wifi.crack("ap-99")

    def test_crack_requires_net(self) -> None:
        """Cracking with net-module offline should raise."""
        wifi, _ = _wireless(net=False)
        with pytest.raises(WirelessError, match="net-module offline"):
            wifi.crack("ap-01")


class TestConnect:
    """Verify binding the interface."""

    def test_connect_requires_crack(self) -> None:
        """An uncracked AP should refuse the connection."""
        wifi, _ = _wireless()
        with pytest.raises(WirelessError, match="not cracked"):
            wifi.connect("ap-01")
        assert wifi.connected_ap is None

    def test_connect_after_crack(self) -> None:
        """A cracked AP should bind and bring connectivity up."""
        wifi, lines = _wireless()
        wifi.crack("ap-01")
        out = wifi.connect("ap-01")
        assert "SIMULATED-ONLINE" in out
        assert wifi.connected_ap == "ap-01"
        assert wifi.has_external_connectivity
        assert all(path == NET_LOG for path, _ in lines)

    def test_connect_unknown_ap(self) -> None:
        """An unknown AP id should raise."""
        wifi, _ = _wireless()
        with pytest.raises(WirelessError, match="not found"):
            wifi.connect("nope")


class TestNetCheck:
    """Verify the connectivity report."""

    def test_offline(self) -> None:
        """With net-module offline the report should say so."""
        wifi, _ = _wireless(net=False)
        assert "net-module: OFFLINE" in wifi.net_check()

    def test_online_unbound(self) -> None:
        """Online but unbound should report no binding."""
        wifi, _ = _wireless()
        assert "Wi-Fi binding: NONE" in wifi.net_check()

    def test_connected(self) -> None:
        """After connecting the report should name the SSID."""
        wifi, _ = _wireless()
        wifi.crack("ap-01")
        wifi.connect("ap-01")
        out = wifi.net_check()
        assert "Wi-Fi binding: HF_LAB_NET_5G" in out
        assert "External connectivity: SIMULATED-ONLINE." in out


class TestPing:
    """Verify the ping targets."""

    def test_core_always_reachable(self) -> None:
        """core should answer even with net-module offline."""
        wifi, _ = _wireless(net=False)
        assert "Core services reachable" in wifi.ping("core")
        assert "Core services reachable" in wifi.ping("sim://core")

    def test_net_needs_module(self) -> None:
        """net should fail offline and succeed online."""
        offline, _ = _wireless(net=False)
        online, _ = _wireless()
        assert "[ERROR] net-module is offline" in offline.ping("net")
        assert "[OK] net-module responding" in online.ping("net")

    def test_external_needs_connection(self) -> None:
        """external should only answer once connected."""
        wifi, _ = _wireless()
        assert "[ERROR] No simulated external route" in wifi.ping("external")
        wifi.crack("ap-01")
        wifi.connect("ap-01")
        assert "[OK] Simulated external host reachable" in wifi.ping("external")

    def test_usage_and_unknown(self) -> None:
        """Missing or unknown targets should return guidance."""
        wifi, _ = _wireless()
        assert wifi.ping(None) == PING_USAGE
        assert wifi.ping("mars").startswith("[PING] Unknown target 'mars'.")
