"""Interactive REPL (Read-Eval-Print Loop) for the safe-mode console.

The REPL boots a kernel, creates a shell, and enters the classic loop:

    1. **Read** — display a prompt and read user input.
    2. **Eval** — pass the command to ``shell.execute()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until the operator leaves safe mode.

The shell is fully testable (returns strings, no I/O); the REPL is the
thin I/O wrapper that connects it to ``stdin``/``stdout``.  When a
``startx`` result carries the desktop marker, the terminal session is
over and the loop ends.

The helper functions (``build_prompt``, ``format_boot_log``,
``is_desktop_transition``) are pure and testable.  The ``run()``
function is the I/O entrypoint.
"""

import argparse
import readline
from pathlib import Path

from hackframe.completer import Completer
from hackframe.kernel import Kernel, KernelState
from hackframe.shell import STARTX_MARKER, Shell
from hackframe.syscalls import SyscallNumber


def format_boot_log(boot_log: list[str]) -> str:
    """Format the boot log into a displayable banner string.

    Args:
        boot_log: List of boot messages from the kernel.

    Returns:
        A formatted string suitable for printing to the console.

    """
    return "\n".join(boot_log) + "\n"


def build_prompt(kernel: Kernel) -> str:
    """Build the shell prompt, showing module progress while in safe mode.

    Args:
        kernel: The running kernel.

    Returns:
        A prompt string like ``safe-mode [3/8] # ``.

    """
    if kernel.state is not KernelState.RUNNING:
        return "safe-mode # "

    progress: dict[str, int] = kernel.syscall(SyscallNumber.SYS_PROGRESS)
    return f"safe-mode [{progress['modules_loaded']}/{progress['modules_total']}] # "


def is_desktop_transition(output: str) -> bool:
    """Return True if *output* tells the front end to leave the terminal."""
    return STARTX_MARKER in output


def run(*, image_path: Path | None = None) -> None:
    """Boot the kernel and run the interactive REPL.

    This is the main entrypoint.  It handles:
    - Kernel boot and shell creation.
    - The read-eval-print loop.
    - The desktop hand-over after a successful ``startx``.
    - Graceful handling of Ctrl+C and Ctrl+D.
    - Clean shutdown (which flushes the disk image, if any).

    Args:
        image_path: Optional JSON disk image to mount and save back.

    """
    kernel = Kernel(image_path=image_path)
    kernel.boot()
    shell = Shell(kernel=kernel)

    # Wire up tab completion via readline.
    completer = Completer(shell)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    print(format_boot_log(kernel.dmesg()))  # noqa: T201

    try:
        while kernel.state is KernelState.RUNNING:
            try:
                command = input(build_prompt(kernel))
            except EOFError:
                # Ctrl+D: graceful exit
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result:
                print(result)  # noqa: T201
            if is_desktop_transition(result):
                print("\nSafe mode complete. Desktop session handed over.")  # noqa: T201
                break

    except KeyboardInterrupt:
        # Ctrl+C: graceful exit
        print("\nInterrupted.")  # noqa: T201

    finally:
        if kernel.state is KernelState.RUNNING:
            kernel.shutdown()
        print("System halted.")  # noqa: T201


def main(argv: list[str] | None = None) -> None:
    """Parse options and run the REPL.  This is the ``hackframe`` console entry point."""
    parser = argparse.ArgumentParser(prog="hackframe", description="HackFrameOS safe-mode console")
    parser.add_argument(
        "--image",
        type=Path,
        default=None,
        help="JSON disk image to mount at boot and save at shutdown",
    )
    args = parser.parse_args(argv)
    run(image_path=args.image)
