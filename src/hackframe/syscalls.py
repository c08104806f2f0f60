"""System call interface — the gateway between the console and the kernel.

The shell never reaches into the module registry, fragment ledger, or
wireless interface directly.  It asks the kernel through a numbered
system call:

1. ``SyscallNumber`` — an enum of every operation the safe-mode kernel
   supports.

2. ``SyscallError`` — the only exception the shell ever sees.  Domain
   errors (``ModuleError``, ``FragmentError``, ``WirelessError``,
   ``FileNotFoundError``) are caught here and re-raised as
   ``SyscallError`` so callers handle one type.

3. ``dispatch_syscall()`` — the trap handler.  It looks up the syscall
   number and calls the matching handler.
"""

from enum import IntEnum
from typing import Any

from hackframe.fragments import FragmentError
from hackframe.io.wireless import WirelessError
from hackframe.modules import ModuleError


class SyscallNumber(IntEnum):
    """Enumerate every system call the kernel supports."""

    # Module operations
    SYS_LOAD_MODULE = 10
    SYS_MODULE_LISTING = 11
    SYS_MODULE_STATES = 12

    # Fragment operations
    SYS_RESOLVE_FRAGMENT = 20
    SYS_FRAGMENT_LISTING = 21
    SYS_LIST_FRAGMENTS = 22

    # Mission operations
    SYS_MISSION_REPORT = 30
    SYS_MISSION_HINT = 31
    SYS_MISSION_COMPLETE = 32

    # System info
    SYS_STATUS = 40
    SYS_PROGRESS = 41

    # Wireless operations
    SYS_WIFI_HELP = 50
    SYS_WIFI_SCAN = 51
    SYS_WIFI_CRACK = 52
    SYS_WIFI_CONNECT = 53
    SYS_NETCHECK = 54
    SYS_PING = 55
    SYS_LIST_ACCESS_POINTS = 56

    # File-system operations
    SYS_STAT = 60
    SYS_LIST_DIR = 61
    SYS_READ_FILE = 62


class SyscallError(Exception):
    """Raised when a system call fails.

    This is the only exception the shell should ever see from a
    syscall.  Internal kernel exceptions are caught and wrapped.
    """


class FilesystemUnavailableError(SyscallError):
    """Raised when the kernel booted without a mounted filesystem."""


def dispatch_syscall(
    kernel: Any,
    number: SyscallNumber,
    **kwargs: Any,
) -> Any:
    """Dispatch a system call to the appropriate kernel subsystem.

    Args:
        kernel: The running kernel instance.
        number: The syscall number identifying the operation.
        **kwargs: Arguments specific to the syscall.

    Returns:
        The syscall result (type depends on the operation).

    Raises:
        SyscallError: If the syscall fails or the number is unknown.

    """
    handlers: dict[SyscallNumber, Any] = {
        SyscallNumber.SYS_LOAD_MODULE: _sys_load_module,
        SyscallNumber.SYS_MODULE_LISTING: _sys_module_listing,
        SyscallNumber.SYS_MODULE_STATES: _sys_module_states,
        SyscallNumber.SYS_RESOLVE_FRAGMENT: _sys_resolve_fragment,
        SyscallNumber.SYS_FRAGMENT_LISTING: _sys_fragment_listing,
        SyscallNumber.SYS_LIST_FRAGMENTS: _sys_list_fragments,
        SyscallNumber.SYS_MISSION_REPORT: _sys_mission_report,
        SyscallNumber.SYS_MISSION_HINT: _sys_mission_hint,
        SyscallNumber.SYS_MISSION_COMPLETE: _sys_mission_complete,
        SyscallNumber.SYS_STATUS: _sys_status,
        SyscallNumber.SYS_PROGRESS: _sys_progress,
        SyscallNumber.SYS_WIFI_HELP: _sys_wifi_help,
        SyscallNumber.SYS_WIFI_SCAN: _sys_wifi_scan,
        SyscallNumber.SYS_WIFI_CRACK: _sys_wifi_crack,
        SyscallNumber.SYS_WIFI_CONNECT: _sys_wifi_connect,
        SyscallNumber.SYS_NETCHECK: _sys_netcheck,
        SyscallNumber.SYS_PING: _sys_ping,
        SyscallNumber.SYS_LIST_ACCESS_POINTS: _sys_list_access_points,
        SyscallNumber.SYS_STAT: _sys_stat,
        SyscallNumber.SYS_LIST_DIR: _sys_list_dir,
        SyscallNumber.SYS_READ_FILE: _sys_read_file,
    }

    handler = handlers.get(number)
    if handler is None:
        msg = f"Unknown syscall: {number}"
        raise SyscallError(msg)

    return handler(kernel, **kwargs)


# -- Module syscall handlers ---------------------------------------------------


def _sys_load_module(kernel: Any, **kwargs: Any) -> str:
    """Load a module by id."""
    try:
        return kernel.load_module(kwargs["module_id"])
    except ModuleError as e:
        raise SyscallError(str(e)) from e


def _sys_module_listing(kernel: Any, **_kwargs: Any) -> str:
    """Render the load menu."""
    return kernel.modules.listing()


def _sys_module_states(kernel: Any, **_kwargs: Any) -> dict[str, str]:
    """Return every module's state keyed by id."""
    return {str(mid): str(state) for mid, state in kernel.module_states().items()}


# -- Fragment syscall handlers -------------------------------------------------


def _sys_resolve_fragment(kernel: Any, **kwargs: Any) -> str:
    """Resolve a fragment by id."""
    try:
        return kernel.resolve_fragment(kwargs["fragment_id"])
    except FragmentError as e:
        raise SyscallError(str(e)) from e


def _sys_fragment_listing(kernel: Any, **_kwargs: Any) -> str:
    """Render the fragment log."""
    return kernel.fragments.listing()


def _sys_list_fragments(kernel: Any, **_kwargs: Any) -> list[str]:
    """Return every fragment id."""
    return [f.fragment_id for f in kernel.fragments.fragments]


# -- Mission syscall handlers --------------------------------------------------


def _sys_mission_report(kernel: Any, **_kwargs: Any) -> str:
    """Render the mission checklist."""
    return kernel.mission_report()


def _sys_mission_hint(kernel: Any, **_kwargs: Any) -> str:
    """Return the next hint."""
    return kernel.next_hint()


def _sys_mission_complete(kernel: Any, **_kwargs: Any) -> bool:
    """Return whether safe mode may be exited."""
    return kernel.is_complete()


# -- System info handlers ------------------------------------------------------


def _sys_status(kernel: Any, **_kwargs: Any) -> str:
    """Render the status report."""
    return kernel.status_report()


def _sys_progress(kernel: Any, **_kwargs: Any) -> dict[str, int]:
    """Return the cosmetic progress counters."""
    return {
        "modules_loaded": kernel.count_loaded_modules(),
        "modules_total": len(kernel.module_states()),
        "fragments_resolved": kernel.count_resolved_fragments(),
        "fragments_total": len(kernel.fragments.fragments),
    }


# -- Wireless syscall handlers -------------------------------------------------


def _sys_wifi_help(kernel: Any, **_kwargs: Any) -> str:
    """Return the wifi usage text."""
    return kernel.wireless.help()


def _sys_wifi_scan(kernel: Any, **_kwargs: Any) -> str:
    """Scan for access points."""
    try:
        return kernel.wireless.scan()
    except WirelessError as e:
        raise SyscallError(str(e)) from e


def _sys_wifi_crack(kernel: Any, **kwargs: Any) -> str:
    """Attack an access point."""
    try:
        return kernel.crack_access_point(kwargs["ap_id"])
    except WirelessError as e:
        raise SyscallError(str(e)) from e


def _sys_wifi_connect(kernel: Any, **kwargs: Any) -> str:
    """Bind the interface to an access point."""
    try:
        return kernel.connect_access_point(kwargs["ap_id"])
    except WirelessError as e:
        raise SyscallError(str(e)) from e


def _sys_netcheck(kernel: Any, **_kwargs: Any) -> str:
    """Report network state."""
    return kernel.wireless.net_check()


def _sys_ping(kernel: Any, **kwargs: Any) -> str:
    """Ping a simulated target."""
    return kernel.wireless.ping(kwargs.get("target"))


def _sys_list_access_points(kernel: Any, **_kwargs: Any) -> list[str]:
    """Return every access point id."""
    return [ap.ap_id for ap in kernel.wireless.access_points]


# -- File-system syscall handlers ----------------------------------------------


def _require_filesystem(kernel: Any) -> Any:
    """Return the mounted filesystem or raise FilesystemUnavailableError."""
    if kernel.filesystem is None:
        msg = "filesystem not available"
        raise FilesystemUnavailableError(msg)
    return kernel.filesystem


def _sys_stat(kernel: Any, **kwargs: Any) -> dict[str, object]:
    """Return the type and size of a path."""
    fs = _require_filesystem(kernel)
    try:
        info = fs.stat(kwargs["path"])
    except FileNotFoundError as e:
        msg = "No such file or directory"
        raise SyscallError(msg) from e
    return {"type": str(info.file_type), "size": info.size}


def _sys_list_dir(kernel: Any, **kwargs: Any) -> list[str]:
    """List directory contents."""
    fs = _require_filesystem(kernel)
    try:
        return fs.list_dir(kwargs["path"])
    except FileNotFoundError as e:
        msg = "No such file or directory"
        raise SyscallError(msg) from e
    except NotADirectoryError as e:
        msg = "Not a directory"
        raise SyscallError(msg) from e


def _sys_read_file(kernel: Any, **kwargs: Any) -> str:
    """Read file contents."""
    fs = _require_filesystem(kernel)
    try:
        return fs.read(kwargs["path"])
    except FileNotFoundError as e:
        msg = "No such file"
        raise SyscallError(msg) from e
    except IsADirectoryError as e:
        msg = "Is a directory"
        raise SyscallError(msg) from e
