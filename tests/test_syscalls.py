"""Tests for the system call gateway.

Every domain error raised below the gateway must surface as a
``SyscallError``; results are plain strings, lists, and dicts.
"""

import pytest

from hackframe.kernel import Kernel
from hackframe.syscalls import FilesystemUnavailableError, SyscallError, SyscallNumber

TOTAL_MODULES = 8
TOTAL_FRAGMENTS = 7


def _booted_kernel(*, mount_filesystem: bool = True) -> Kernel:
    """Create and boot a kernel for testing."""
    kernel = Kernel(mount_filesystem=mount_filesystem)
    kernel.boot()
    return kernel


class TestGateway:
    """Verify dispatch basics."""

    def test_syscall_requires_running_kernel(self) -> None:
        """A halted kernel should refuse syscalls."""
        with pytest.raises(RuntimeError, match="not running"):
            Kernel().syscall(SyscallNumber.SYS_STATUS)

    def test_syscalls_are_logged(self) -> None:
        """Each syscall should leave a DEBUG entry."""
        kernel = _booted_kernel()
        kernel.syscall(SyscallNumber.SYS_STATUS)
        messages = [e.message for e in kernel.logger.filter(source="syscall")]
        assert messages == ["syscall SYS_STATUS"]


class TestModuleSyscalls:
    """Verify module and fragment syscalls."""

    def test_load_module(self) -> None:
        """SYS_LOAD_MODULE should return the module output."""
        kernel = _booted_kernel()
        out = kernel.syscall(SyscallNumber.SYS_LOAD_MODULE, module_id="net-module")
        assert "Subsystem /net/ghost online" in out

    def test_load_module_error_wrapped(self) -> None:
        """A ModuleError should surface as SyscallError."""
        kernel = _booted_kernel()
        with pytest.raises(SyscallError, match="requires package-core"):
            kernel.syscall(SyscallNumber.SYS_LOAD_MODULE, module_id="core-utils")

    def test_module_states(self) -> None:
        """SYS_MODULE_STATES should map every id to its state string."""
        kernel = _booted_kernel()
        kernel.syscall(SyscallNumber.SYS_LOAD_MODULE, module_id="auth-module")
        states = kernel.syscall(SyscallNumber.SYS_MODULE_STATES)
        assert len(states) == TOTAL_MODULES
        assert states["auth-module"] == "OK"
        assert states["gfx-module"] == "MISSING"

    def test_fragment_error_wrapped(self) -> None:
        """A FragmentError should surface as SyscallError."""
        kernel = _booted_kernel()
        with pytest.raises(SyscallError, match="requires auth-module"):
            kernel.syscall(SyscallNumber.SYS_RESOLVE_FRAGMENT, fragment_id="0xa3")

    def test_list_fragments(self) -> None:
        """SYS_LIST_FRAGMENTS should return every id."""
        ids = _booted_kernel().syscall(SyscallNumber.SYS_LIST_FRAGMENTS)
        assert len(ids) == TOTAL_FRAGMENTS
        assert "0xa3" in ids


class TestProgressSyscalls:
    """Verify counters and mission syscalls."""

    def test_progress_counters(self) -> None:
        """SYS_PROGRESS should track loads and resolutions."""
        kernel = _booted_kernel()
        kernel.syscall(SyscallNumber.SYS_LOAD_MODULE, module_id="auth-module")
        kernel.syscall(SyscallNumber.SYS_RESOLVE_FRAGMENT, fragment_id="0xa3")
        assert kernel.syscall(SyscallNumber.SYS_PROGRESS) == {
            "modules_loaded": 1,
            "modules_total": TOTAL_MODULES,
            "fragments_resolved": 1,
            "fragments_total": TOTAL_FRAGMENTS,
        }

    def test_mission_complete_false_at_start(self) -> None:
        """A fresh session is not complete."""
        assert _booted_kernel().syscall(SyscallNumber.SYS_MISSION_COMPLETE) is False


class TestWirelessSyscalls:
    """Verify Wi-Fi syscalls."""

    def test_scan_error_wrapped(self) -> None:
        """A WirelessError should surface as SyscallError."""
        kernel = _booted_kernel()
        with pytest.raises(SyscallError, match="net-module offline"):
            kernel.syscall(SyscallNumber.SYS_WIFI_SCAN)

    def test_list_access_points(self) -> None:
        """SYS_LIST_ACCESS_POINTS should return every AP id."""
        aps = _booted_kernel().syscall(SyscallNumber.SYS_LIST_ACCESS_POINTS)
        assert aps == ["ap-01", "ap-02", "ap-ghost"]


class TestFileSyscalls:
    """Verify file-system syscalls."""

    def test_stat(self) -> None:
        """SYS_STAT should report type and size."""
        kernel = _booted_kernel()
        assert kernel.syscall(SyscallNumber.SYS_STAT, path="/etc")["type"] == "directory"
        info = kernel.syscall(SyscallNumber.SYS_STAT, path="/etc/motd")
        assert info["type"] == "file"
        assert info["size"] > 0

    def test_stat_missing(self) -> None:
        """A missing path should raise SyscallError."""
        kernel = _booted_kernel()
        with pytest.raises(SyscallError, match="No such file or directory"):
            kernel.syscall(SyscallNumber.SYS_STAT, path="/nope")

    def test_list_dir_on_file(self) -> None:
        """Listing a file should raise SyscallError."""
        kernel = _booted_kernel()
        with pytest.raises(SyscallError, match="Not a directory"):
            kernel.syscall(SyscallNumber.SYS_LIST_DIR, path="/README")

    def test_read_directory(self) -> None:
        """Reading a directory should raise SyscallError."""
        kernel = _booted_kernel()
        with pytest.raises(SyscallError, match="Is a directory"):
            kernel.syscall(SyscallNumber.SYS_READ_FILE, path="/etc")

    def test_no_filesystem(self) -> None:
        """Without a disk every file syscall should raise the unavailable error."""
        kernel = _booted_kernel(mount_filesystem=False)
        with pytest.raises(FilesystemUnavailableError, match="filesystem not available"):
            kernel.syscall(SyscallNumber.SYS_READ_FILE, path="/README")
