"""The shell — command router for the safe-mode console.

The shell reads one line, splits it into a command name and arguments,
validates the arguments, dispatches to a handler, and returns a string.
It is the only thing the terminal and web front ends call.

- **Returns strings, never raises.**  Bad input, unmet preconditions,
  and internal faults all come back as text.  Precondition failures
  are ``[ERROR] ...`` lines; anything unexpected becomes
  ``[ERROR] Command execution failed: ...``.
- **Command dispatch via a dict.**  Adding a command means writing a
  method and adding one dict entry.
- **All kernel interaction goes through syscalls.**  The shell holds no
  session state of its own.
"""

import re
from collections.abc import Callable
from typing import TypeAlias

from hackframe.kernel import Kernel, KernelState
from hackframe.modules import ModuleId
from hackframe.syscalls import FilesystemUnavailableError, SyscallError, SyscallNumber

# Type alias for a command handler: takes a list of args, returns output.
_Handler: TypeAlias = Callable[[list[str]], str]

COMMAND_NOT_FOUND = "bash: command not found. Type 'help' for available commands."

# The front ends switch to the desktop scene when they see this line.
STARTX_MARKER = "[OK] Transitioning to desktop environment..."

STARTX_OUTPUT = f"[OK] Starting X server...\n[OK] Display subsystem initialized.\n{STARTX_MARKER}"

STARTX_NOT_READY = (
    "[ERROR] System not ready for GUI.\n"
    "Complete all critical tasks and enable gfx-module first.\n"
    "Use 'mission' to check progress."
)

CLEAR_SCREEN = "\x1bc"

HELP_TEXT = """Available commands:
  help                 Show this help message
  status               View current system state
  mission              Show high-level rehabilitation objectives
  hint                 Contextual guidance for the next step
  load                 List subsystems
  load [module]        Load a specific subsystem
  fragment             Inspect boot fragments
  fragment [id]        Attempt to resolve a fragment
  wifi scan            List nearby access points
  wifi crack [id]      Attempt to gain access to an AP
  wifi connect [id]    Connect to a cracked AP
  ping [target]        Test connectivity (core|net|external)
  netcheck             Verify network status
  fs ls [path]         List directory entries
  fs cat [path]        Show contents of a file
  startx               Launch desktop GUI (requires completion)
  clear                Clear the terminal screen"""

FS_HELP = """[FS] Filesystem tools
  fs ls [path]      List directory entries (default: /)
  fs cat [path]     Show contents of a file
Example paths:
  /README
  /etc/hackframe.conf
  /var/log/hackframe.log
  /var/log/net.log
Note: Filesystem is read-only and exists only inside this simulation."""

_MODULE_IDS: frozenset[str] = frozenset(m.value for m in ModuleId)

_FRAGMENT_ID = re.compile(r"^0x[0-9a-f]{2}$", re.IGNORECASE)


class Shell:
    """Command router that operates on a running safe-mode kernel.

    The constructor refuses a kernel that is not running, since there
    is no session to operate on.
    """

    def __init__(self, *, kernel: Kernel) -> None:
        """Create a shell attached to a running kernel.

        Args:
            kernel: A booted kernel instance.

        Raises:
            RuntimeError: If the kernel is not in the RUNNING state.

        """
        if kernel.state is not KernelState.RUNNING:
            msg = f"Shell requires a running kernel (state: {kernel.state}, not running)"
            raise RuntimeError(msg)

        self._kernel = kernel

        # Command dispatch table: maps command names to handler methods.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "status": self._cmd_status,
            "mission": self._cmd_mission,
            "hint": self._cmd_hint,
            "clear": self._cmd_clear,
            "load": self._cmd_load,
            "fragment": self._cmd_fragment,
            "startx": self._cmd_startx,
            "wifi": self._cmd_wifi,
            "ping": self._cmd_ping,
            "netcheck": self._cmd_netcheck,
            "fs": self._cmd_fs,
        }

    @property
    def kernel(self) -> Kernel:
        """Return the kernel this shell is attached to."""
        return self._kernel

    @property
    def command_names(self) -> list[str]:
        """Return every command name, sorted."""
        return sorted(self._commands)

    def execute(self, command: str) -> str:
        """Parse and execute one command line.

        Args:
            command: The raw input (e.g. "load net-module").

        Returns:
            The command output, an ``[ERROR]`` line, the not-found
            message, or ``""`` for blank input.

        """
        parts = command.split()
        if not parts:
            return ""

        name, args = parts[0], parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            return COMMAND_NOT_FOUND

        try:
            return handler(args)
        except SyscallError as e:
            return f"[ERROR] {e}"
        except Exception as e:  # noqa: BLE001
            return f"[ERROR] Command execution failed: {e}"

    # -- Command handlers ------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return HELP_TEXT

    def _cmd_status(self, _args: list[str]) -> str:
        """Show module and fragment state."""
        return self._kernel.syscall(SyscallNumber.SYS_STATUS)

    def _cmd_mission(self, _args: list[str]) -> str:
        """Show the mission checklist."""
        return self._kernel.syscall(SyscallNumber.SYS_MISSION_REPORT)

    def _cmd_hint(self, _args: list[str]) -> str:
        """Show the next suggested step."""
        return self._kernel.syscall(SyscallNumber.SYS_MISSION_HINT)

    def _cmd_clear(self, _args: list[str]) -> str:
        """Clear the terminal screen."""
        return CLEAR_SCREEN

    def _cmd_load(self, args: list[str]) -> str:
        """List modules, or load one."""
        if not args:
            return self._kernel.syscall(SyscallNumber.SYS_MODULE_LISTING)
        module_id = args[0]
        if module_id not in _MODULE_IDS:
            return (
                f"[ERROR] Invalid module name '{module_id}'. "
                "Type 'load' to see available modules."
            )
        return self._kernel.syscall(SyscallNumber.SYS_LOAD_MODULE, module_id=module_id)

    def _cmd_fragment(self, args: list[str]) -> str:
        """List fragments, or resolve one."""
        if not args:
            return self._kernel.syscall(SyscallNumber.SYS_FRAGMENT_LISTING)
        fragment_id = args[0]
        if not _FRAGMENT_ID.match(fragment_id):
            return "[ERROR] Invalid fragment ID format. Expected format: 0xXX (e.g., 0xa3)"
        return self._kernel.syscall(
            SyscallNumber.SYS_RESOLVE_FRAGMENT, fragment_id=fragment_id.lower()
        )

    def _cmd_startx(self, _args: list[str]) -> str:
        """Hand over to the desktop once the mission is complete."""
        if not self._kernel.syscall(SyscallNumber.SYS_MISSION_COMPLETE):
            return STARTX_NOT_READY
        return STARTX_OUTPUT

    def _cmd_wifi(self, args: list[str]) -> str:
        """Scan, crack, or connect to access points."""
        if not args:
            return self._kernel.syscall(SyscallNumber.SYS_WIFI_HELP)
        sub = args[0]
        if sub == "scan":
            return self._kernel.syscall(SyscallNumber.SYS_WIFI_SCAN)
        if sub in ("crack", "connect") and len(args) >= 2:  # noqa: PLR2004
            number = (
                SyscallNumber.SYS_WIFI_CRACK if sub == "crack" else SyscallNumber.SYS_WIFI_CONNECT
            )
            return self._kernel.syscall(number, ap_id=args[1])
        return self._kernel.syscall(SyscallNumber.SYS_WIFI_HELP)

    def _cmd_ping(self, args: list[str]) -> str:
        """Ping core, net, or external."""
        target = args[0] if args else None
        return self._kernel.syscall(SyscallNumber.SYS_PING, target=target)

    def _cmd_netcheck(self, _args: list[str]) -> str:
        """Report network connectivity."""
        return self._kernel.syscall(SyscallNumber.SYS_NETCHECK)

    def _cmd_fs(self, args: list[str]) -> str:
        """Browse the read-only filesystem."""
        if not args:
            return FS_HELP
        sub, rest = args[0], args[1:]
        if sub == "ls":
            return self._fs_ls(rest[0] if rest else "/")
        if sub == "cat":
            return self._fs_cat(rest[0] if rest else None)
        return FS_HELP

    def _fs_ls(self, path: str) -> str:
        """List a directory, or echo a file path."""
        try:
            info: dict[str, object] = self._kernel.syscall(SyscallNumber.SYS_STAT, path=path)
            if info["type"] == "file":
                return f"[FS] ls {path}\n  {path}"
            entries: list[str] = self._kernel.syscall(SyscallNumber.SYS_LIST_DIR, path=path)
        except FilesystemUnavailableError as e:
            return f"[FS] ls: {e}"
        except SyscallError as e:
            return f"[FS] ls: cannot access '{path}': {e}"

        if not entries:
            return f"[FS] ls {path}\n  <empty>"
        base = path.rstrip("/")
        lines = [f"[FS] ls {path}"]
        for name in entries:
            child_path = f"{base}/{name}"
            try:
                child: dict[str, object] = self._kernel.syscall(
                    SyscallNumber.SYS_STAT, path=child_path
                )
            except SyscallError as e:
                return f"[FS] ls: cannot access '{child_path}': {e}"
            suffix = "/" if child["type"] == "directory" else ""
            lines.append(f"  {name}{suffix}")
        return "\n".join(lines)

    def _fs_cat(self, path: str | None) -> str:
        """Print a file."""
        if not path:
            return "[FS] cat: missing operand\nUsage: fs cat /path/to/file"
        try:
            return self._kernel.syscall(SyscallNumber.SYS_READ_FILE, path=path)
        except FilesystemUnavailableError as e:
            return f"[FS] cat: {e}"
        except SyscallError as e:
            return f"[FS] cat: {path}: {e}"
