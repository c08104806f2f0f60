"""The safe-mode kernel — owner of one operator session.

Everything the console knows lives on a single ``Kernel`` instance:
module states, boot fragments, access points, the Wi-Fi binding, the
simulated disk, and the kernel log.  Nothing is kept at module level,
so two kernels never share state.

The kernel has an explicit lifecycle:

    SHUTDOWN  →  BOOTING  →  RUNNING  →  SHUTTING_DOWN  →  SHUTDOWN

Boot sequence (order matters):
    0. Logger — capture events from the start.
    1. File system — mounted from an image, seeded, or left unmounted.
    2. Module registry — every module MISSING.
    3. Fragment ledger — every fragment UNRESOLVED.
    4. Wireless interface — every AP locked, nothing bound.

A boot always starts a fresh session; state does not survive a reboot
except for the disk image when ``image_path`` is configured.
"""

from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

from hackframe import mission
from hackframe.fragments import FragmentLedger
from hackframe.fs import FileSystem, dump_filesystem, load_filesystem
from hackframe.io import WirelessSubsystem
from hackframe.logging import DEFAULT_CAPACITY, Logger, LogLevel
from hackframe.modules import ModuleId, ModuleRegistry, ModuleState, render_tree
from hackframe.syscalls import SyscallNumber, dispatch_syscall

OS_VERSION = "HackFrameOS v0.1"

HACKFRAME_LOG = "/var/log/hackframe.log"

_AUDIT_TIMESTAMP = "%Y-%m-%d %H:%M:%S"

BOOT_BANNER: tuple[str, ...] = (
    "[BOOT] Kernel handshake........ OK",
    "[BOOT] Memory map.............. OK",
    "[BOOT] Display driver.......... MISSING",
    "[BOOT] Entering fallback terminal (TTY0)",
    "[STATE] Image status: DEGRADED (SAFE MODE)",
    "[STATE] Operator intervention required to restore core subsystems.",
    "[HINT] Type 'mission' to view objectives or 'help' for available commands.",
)


class KernelState(StrEnum):
    """Represent the lifecycle phases of the kernel."""

    SHUTDOWN = "shutdown"
    BOOTING = "booting"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class Kernel:
    """The central coordinator of one safe-mode session.

    Subsystem references are None when the kernel is not running,
    and are created fresh during boot.
    """

    def __init__(
        self,
        *,
        image_path: Path | None = None,
        mount_filesystem: bool = True,
        log_capacity: int = DEFAULT_CAPACITY,
    ) -> None:
        """Create a kernel in the SHUTDOWN state.

        Args:
            image_path: Optional JSON disk image.  When it exists the
                filesystem is restored from it at boot; when set, the
                filesystem is written back to it at shutdown.
            mount_filesystem: If False, boot without a disk.  Commands
                that read files report that the filesystem is not
                available and audit lines are dropped.
            log_capacity: Entries kept in the kernel log; older ones are
                evicted so a long session stays bounded.

        """
        self._state: KernelState = KernelState.SHUTDOWN
        self._image_path = image_path
        self._mount_filesystem = mount_filesystem
        self._log_capacity = log_capacity
        self._logger: Logger | None = None
        self._filesystem: FileSystem | None = None
        self._modules: ModuleRegistry | None = None
        self._fragments: FragmentLedger | None = None
        self._wireless: WirelessSubsystem | None = None

        # Boot log: dmesg-style messages from subsystem initialisation
        self._boot_log: list[str] = []

    # -- Lifecycle ---------------------------------------------------------

    @property
    def state(self) -> KernelState:
        """Return the current kernel state."""
        return self._state

    def _require_running(self) -> None:
        """Raise if the kernel is not in the RUNNING state."""
        if self._state is not KernelState.RUNNING:
            msg = f"Kernel is not running (state: {self._state})"
            raise RuntimeError(msg)

    def boot(self) -> None:
        """Transition the kernel from SHUTDOWN → RUNNING.

        Raises:
            RuntimeError: If the kernel is not in the SHUTDOWN state.

        """
        if self._state is not KernelState.SHUTDOWN:
            msg = f"Cannot boot: kernel is {self._state}, expected shutdown"
            raise RuntimeError(msg)

        self._state = KernelState.BOOTING
        self._boot_log = [OS_VERSION, *BOOT_BANNER]

        # 0. Logger: capture events from the start
        self._logger = Logger(capacity=self._log_capacity)
        self._logger.log(LogLevel.INFO, f"{OS_VERSION} booting", source="kernel")

        # 1. File system: image, fresh seed, or nothing
        self._filesystem = self._mount()

        # 2-4. Session state
        self._modules = ModuleRegistry()
        self._fragments = FragmentLedger()
        self._wireless = WirelessSubsystem(modules=self._modules, audit=self.audit)
        self._logger.log(
            LogLevel.INFO,
            f"{len(self._fragments.fragments)} boot fragments pending",
            source="kernel",
        )

        self._boot_log.append("Launching terminal interface...")
        self._state = KernelState.RUNNING
        self._logger.log(LogLevel.INFO, "Kernel running in safe mode", source="kernel")

    def _mount(self) -> FileSystem | None:
        """Mount the disk for this session."""
        assert self._logger is not None  # noqa: S101
        if not self._mount_filesystem:
            self._logger.log(LogLevel.WARNING, "Booting without a filesystem", source="fs")
            return None

        if self._image_path is not None and self._image_path.exists():
            try:
                fs = load_filesystem(self._image_path)
            except (OSError, ValueError) as e:
                self._logger.log(
                    LogLevel.WARNING,
                    f"Cannot mount image {self._image_path}: {e}",
                    source="fs",
                )
                return None
            self._logger.log(LogLevel.INFO, f"Mounted image {self._image_path}", source="fs")
            return fs

        self._logger.log(LogLevel.INFO, "Seeded default filesystem", source="fs")
        return FileSystem.with_default_tree()

    def shutdown(self) -> None:
        """Transition the kernel from RUNNING → SHUTDOWN.

        The disk is flushed to ``image_path`` (if configured) before the
        subsystems are torn down.  A failed flush is logged, not raised.

        Raises:
            RuntimeError: If the kernel is not in the RUNNING state.

        """
        if self._state is not KernelState.RUNNING:
            msg = f"Cannot shutdown: kernel is {self._state}, expected running"
            raise RuntimeError(msg)

        self._state = KernelState.SHUTTING_DOWN
        assert self._logger is not None  # noqa: S101

        if self._image_path is not None and self._filesystem is not None:
            try:
                dump_filesystem(self._filesystem, self._image_path)
            except OSError as e:
                self._logger.log(
                    LogLevel.WARNING,
                    f"Cannot write image {self._image_path}: {e}",
                    source="fs",
                )

        # Tear down in reverse order
        self._wireless = None
        self._fragments = None
        self._modules = None
        self._filesystem = None
        self._logger.log(LogLevel.INFO, "Kernel halted", source="kernel")
        self._logger = None
        self._state = KernelState.SHUTDOWN

    def dmesg(self) -> list[str]:
        """Return the kernel boot log (like Linux dmesg)."""
        return list(self._boot_log)

    # -- Subsystem access --------------------------------------------------

    @property
    def logger(self) -> Logger:
        """Return the kernel logger."""
        self._require_running()
        assert self._logger is not None  # noqa: S101
        return self._logger

    @property
    def filesystem(self) -> FileSystem | None:
        """Return the mounted filesystem, or None when running without one."""
        self._require_running()
        return self._filesystem

    @property
    def modules(self) -> ModuleRegistry:
        """Return the module registry."""
        self._require_running()
        assert self._modules is not None  # noqa: S101
        return self._modules

    @property
    def fragments(self) -> FragmentLedger:
        """Return the fragment ledger."""
        self._require_running()
        assert self._fragments is not None  # noqa: S101
        return self._fragments

    @property
    def wireless(self) -> WirelessSubsystem:
        """Return the wireless interface."""
        self._require_running()
        assert self._wireless is not None  # noqa: S101
        return self._wireless

    # -- Audit -------------------------------------------------------------

    def audit(self, path: str, line: str) -> bool:
        """Append a timestamped audit line to a log file on the simulated disk.

        Best effort: any failure to write (no disk, missing log file, a
        damaged tree) is recorded in the kernel log and reported as False,
        never raised.  Callers have already changed state by the time they
        audit.

        Returns:
            True if the line was written.

        """
        if self._filesystem is None:
            return False
        stamp = datetime.now(UTC).strftime(_AUDIT_TIMESTAMP)
        try:
            self._filesystem.append(path, f"[{stamp}] {line}\n")
        except Exception as e:  # noqa: BLE001
            if self._logger is not None:
                self._logger.log(LogLevel.WARNING, f"Audit dropped: {e}", source="audit")
            return False
        return True

    # -- Session operations ------------------------------------------------

    def load_module(self, module_id: str) -> str:
        """Load a module and record the transition.

        Raises:
            ModuleError: If the module is unknown or a precondition fails.

        """
        modules = self.modules
        before = modules.count_loaded()
        output = modules.load(module_id, fragments=self.fragments)

        mid = ModuleId(module_id)
        if modules.count_loaded() > before:
            self.logger.log(LogLevel.INFO, f"{mid} online", source="modules")
            detail = (
                "online, framebuffer bound"
                if mid is ModuleId.GFX
                else "loaded into safe-mode kernel"
            )
            self.audit(HACKFRAME_LOG, f"[OK] {mid} {detail} (simulation only)")
        elif not modules.is_online(mid):
            self.logger.log(
                LogLevel.WARNING,
                f"{mid} load attempt {modules.attempts(mid)} failed",
                source="modules",
            )
        return output

    def resolve_fragment(self, fragment_id: str) -> str:
        """Resolve a boot fragment and record the transition.

        Raises:
            FragmentError: If the fragment is unknown or its module is offline.

        """
        fragments = self.fragments
        before = fragments.count_resolved()
        output = fragments.resolve(fragment_id, modules=self.modules)
        if fragments.count_resolved() > before:
            self.logger.log(LogLevel.INFO, f"Fragment {fragment_id} resolved", source="fragments")
            self.audit(HACKFRAME_LOG, f"[OK] Fragment {fragment_id} resolved")
        return output

    def crack_access_point(self, ap_id: str) -> str:
        """Run the scripted attack against an AP and record a success.

        Raises:
            WirelessError: If net-module is offline or the AP is unknown.

        """
        wireless = self.wireless
        before = sum(1 for ap in wireless.access_points if ap.cracked)
        output = wireless.crack(ap_id)
        if sum(1 for ap in wireless.access_points if ap.cracked) > before:
            self.logger.log(LogLevel.INFO, f"Access point {ap_id} cracked", source="wifi")
        return output

    def connect_access_point(self, ap_id: str) -> str:
        """Bind the wireless interface to a cracked AP.

        Raises:
            WirelessError: If net-module is offline or the AP is not cracked.

        """
        output = self.wireless.connect(ap_id)
        self.logger.log(LogLevel.INFO, f"Interface bound to {ap_id}", source="wifi")
        return output

    def module_states(self) -> dict[ModuleId, ModuleState]:
        """Return every module's current state."""
        modules = self.modules
        return {mid: modules.state(mid) for mid in ModuleId}

    def count_loaded_modules(self) -> int:
        """Return how many modules are online (progress display only)."""
        return self.modules.count_loaded()

    def count_resolved_fragments(self) -> int:
        """Return how many fragments are resolved (progress display only)."""
        return self.fragments.count_resolved()

    def is_complete(self) -> bool:
        """Return True when safe mode may hand over to the desktop."""
        return mission.is_complete(self.modules, self.fragments)

    def mission_report(self) -> str:
        """Render the mission checklist."""
        return mission.report(self.modules, self.fragments)

    def next_hint(self) -> str:
        """Return guidance for the next unmet objective."""
        return mission.next_hint(self.modules, self.fragments)

    def status_report(self) -> str:
        """Render the ``status`` overview."""
        marks = {mid: f"[{state}]" for mid, state in self.module_states().items()}
        unresolved = self.fragments.count_unresolved()
        summary = f"{unresolved} unresolved" if unresolved else "all resolved"
        lines = [
            f"[STATUS] {OS_VERSION}",
            "  Kernel: initialized",
            "  Memory: 512KB base / 2048KB extended",
            "  Subsystems:",
            *render_tree(marks),
            f"  Boot fragments: {summary}",
        ]
        return "\n".join(lines)

    # -- Syscall gateway ---------------------------------------------------

    def syscall(self, number: SyscallNumber, **kwargs: Any) -> Any:
        """Execute a system call — the console → kernel gateway.

        Args:
            number: The syscall number identifying the operation.
            **kwargs: Arguments specific to the syscall.

        Returns:
            The syscall result (type depends on the operation).

        Raises:
            RuntimeError: If the kernel is not running.
            SyscallError: If the syscall fails.

        """
        self._require_running()
        self.logger.log(LogLevel.DEBUG, f"syscall {number.name}", source="syscall")
        return dispatch_syscall(self, number, **kwargs)
