"""Context-aware tab completer for the safe-mode shell.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline integration in the REPL).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which looks at the words
already typed and returns candidate strings.
"""

from __future__ import annotations

import readline
from typing import TYPE_CHECKING

from hackframe.syscalls import SyscallError, SyscallNumber

if TYPE_CHECKING:
    from hackframe.kernel import Kernel
    from hackframe.shell import Shell

# Commands that accept subcommands as a second word.
_SUBCOMMANDS: dict[str, list[str]] = {
    "wifi": ["scan", "crack", "connect"],
    "fs": ["ls", "cat"],
    "ping": ["core", "net", "external"],
}

# (command, subcommand) pairs whose next word is an access point id.
_AP_SUBCOMMANDS: frozenset[str] = frozenset(["crack", "connect"])

_SECOND_WORD = 2
_THIRD_WORD = 3


class Completer:
    """Context-aware tab completer for the safe-mode shell."""

    def __init__(self, shell: Shell) -> None:
        """Create a completer attached to a shell instance.

        Args:
            shell: The shell whose commands and kernel are used to
                   generate completion candidates.

        """
        self._shell = shell
        self._kernel: Kernel = shell.kernel

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*.

        Args:
            text: The partial word being completed.
            state: Index into the candidate list (0, 1, 2, …).

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        Returns:
            Sorted list of matching candidates.

        """
        words = line.lstrip().split()
        # Index of the word being completed (1-based).
        position = len(words) + 1 if not words or line.endswith(" ") else len(words)

        if position == 1:
            return [cmd for cmd in self._shell.command_names if cmd.startswith(text)]

        cmd = words[0]
        if position == _SECOND_WORD:
            if cmd in _SUBCOMMANDS:
                return sorted(sub for sub in _SUBCOMMANDS[cmd] if sub.startswith(text))
            if cmd == "load":
                return self._from_syscall(SyscallNumber.SYS_MODULE_STATES, text)
            if cmd == "fragment":
                return self._from_syscall(SyscallNumber.SYS_LIST_FRAGMENTS, text)
            return []

        if position == _THIRD_WORD:
            if cmd == "wifi" and words[1] in _AP_SUBCOMMANDS:
                return self._from_syscall(SyscallNumber.SYS_LIST_ACCESS_POINTS, text)
            if cmd == "fs":
                return self._complete_paths(text)
        return []

    # -- private completers ------------------------------------------------

    def _from_syscall(self, number: SyscallNumber, text: str) -> list[str]:
        """Complete from the names a listing syscall returns."""
        try:
            names = list(self._kernel.syscall(number))
        except SyscallError:
            return []
        return sorted(name for name in names if name.startswith(text))

    def _complete_paths(self, text: str) -> list[str]:
        """Complete filesystem paths.

        Split the partial path into a directory and a name prefix,
        list the directory, and filter by prefix.  Directories get a
        trailing ``/`` suffix.
        """
        if not text:
            text = "/"
        if not text.startswith("/"):
            return []

        last_slash = text.rfind("/")
        directory = text[: last_slash + 1] or "/"
        prefix = text[last_slash + 1 :]

        try:
            entries: list[str] = self._kernel.syscall(SyscallNumber.SYS_LIST_DIR, path=directory)
        except SyscallError:
            return []

        candidates: list[str] = []
        for entry in entries:
            if entry.startswith(prefix):
                full = f"{directory.rstrip('/')}/{entry}"
                if self._is_directory(full):
                    full += "/"
                candidates.append(full)

        return sorted(candidates)

    def _is_directory(self, path: str) -> bool:
        """Return True if *path* is a directory in the filesystem."""
        try:
            info: dict[str, object] = self._kernel.syscall(SyscallNumber.SYS_STAT, path=path)
        except SyscallError:
            return False
        return info["type"] == "directory"
