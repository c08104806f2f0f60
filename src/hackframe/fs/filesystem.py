"""In-memory file system with inodes, directories, and path resolution.

The safe-mode console exposes a small, read-only view of the degraded
image (``fs ls`` / ``fs cat``).  Behind it sits a Unix-style tree:

- **Inode**: metadata record for a file or directory (type and data).
  The name lives in the parent directory, not in the inode.

- **Directory**: a special inode whose ``children`` map names to inode
  numbers.

- **Path resolution**: ``/var/log/net.log`` is walked component by
  component from the root inode.

Users only read from the tree.  The kernel writes to it for one reason:
appending audit lines to the log files under ``/var/log``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from itertools import count
from typing import Any


class FileType(StrEnum):
    """The kind of object an inode represents."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class InodeInfo:
    """Read-only snapshot of an inode's metadata (returned by stat)."""

    inode_number: int
    file_type: FileType
    size: int


@dataclass
class _Inode:
    """Internal inode.

    For files, ``data`` holds the text content.
    For directories, ``children`` maps names to inode numbers.
    """

    inode_number: int
    file_type: FileType
    data: str = ""
    children: dict[str, int] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]

    @property
    def size(self) -> int:
        """Return the size of the file data in characters."""
        return len(self.data)

    def to_info(self) -> InodeInfo:
        """Create a read-only snapshot of this inode."""
        return InodeInfo(
            inode_number=self.inode_number,
            file_type=self.file_type,
            size=self.size,
        )


ROOT_INODE = 0

# Contents of a freshly imaged safe-mode disk.
DEFAULT_TREE: dict[str, str] = {
    "/README": (
        "HackFrameOS Safe-Mode Environment\n"
        "\n"
        "SYSTEM STATUS: DEGRADED\n"
        "Last known good state: 2024-01-15 03:42:18 UTC\n"
        "Recovery protocol: ACTIVE\n"
        "\n"
        "This environment is a degraded OS image running in SAFE MODE.\n"
        "Nothing here touches your real filesystem or network interfaces.\n"
        "Use the terminal to explore, restore subsystems, and inspect logs.\n"
    ),
    "/boot/trace.log": (
        "Boot trace captured from degraded HackFrameOS image.\n"
        "Refer to /var/log/boot.log for full kernel stream.\n"
        "Multiple boot fragments detected with incomplete traces.\n"
    ),
    "/etc/hackframe.conf": (
        "# HackFrameOS configuration (simulated)\n"
        "image.state=DEGRADED\n"
        "safe_mode=true\n"
        "allowed_modules=auth-module,net-module,entropy-core,locale-config,"
        "time-sync,package-core,core-utils,gfx-module\n"
        "wireless.interface=wlan0\n"
        "wireless.mode=managed\n"
        "kernel.version=0.1.3-alpha\n"
        "build.date=2024-01-15\n"
    ),
    "/etc/motd": (
        "HackFrameOS v0.1.3-alpha (build 2024.01.15)\n"
        "System is running in SAFE MODE - degraded state detected.\n"
        "Type 'mission' to view recovery objectives.\n"
    ),
    "/var/log/boot.log": (
        "Boot log stream is mirrored from the BIOS boot sequence.\n"
        "Multiple warnings detected during initialization.\n"
    ),
    "/var/log/hackframe.log": (
        "[LOG] HackFrameOS safe-mode terminal initialized\n"
        "[LOG] Use 'mission' to view rehabilitation objectives\n"
        "[LOG] Network activity is simulated and remains sandboxed\n"
    ),
    "/var/log/net.log": (
        "[NET] Network log initialized (simulated only)\n"
        "[NET] Wireless interface: wlan0 (offline)\n"
    ),
}


def _split_path(path: str) -> tuple[str, str]:
    """Split a path into (parent_path, child_name).

    Examples::

        "/var/log/net.log" → ("/var/log", "net.log")
        "/README"          → ("/", "README")
        "/"                → ("", "")

    """
    if path == "/":
        return ("", "")
    path = path.rstrip("/")
    last_slash = path.rfind("/")
    if last_slash == 0:
        return ("/", path[1:])
    return (path[:last_slash], path[last_slash + 1 :])


class FileSystem:
    """An in-memory file system with inodes and hierarchical directories.

    All operations take absolute paths and resolve them by walking
    from the root inode.
    """

    def __init__(self) -> None:
        """Create a file system with an empty root directory."""
        self._inode_counter = count(start=ROOT_INODE)
        root = _Inode(inode_number=next(self._inode_counter), file_type=FileType.DIRECTORY)
        self._inodes: dict[int, _Inode] = {root.inode_number: root}
        self._root_ino: int = root.inode_number

    @classmethod
    def with_default_tree(cls) -> FileSystem:
        """Create a file system seeded with the default safe-mode image."""
        fs = cls()
        for path, content in DEFAULT_TREE.items():
            fs.makedirs(_split_path(path)[0])
            fs.create_file(path)
            fs.write(path, content)
        return fs

    def _resolve(self, path: str) -> _Inode | None:
        """Walk the path from root and return the target inode, or None."""
        if not path.startswith("/"):
            return None
        if path == "/":
            return self._inodes[self._root_ino]

        parts = [p for p in path.split("/") if p]
        current = self._inodes[self._root_ino]

        for part in parts:
            if current.file_type is not FileType.DIRECTORY:
                return None
            child_ino = current.children.get(part)
            if child_ino is None:
                return None
            child = self._inodes.get(child_ino)
            if child is None:
                return None
            current = child

        return current

    def _resolve_file(self, path: str) -> _Inode:
        """Resolve a path that must name a regular file."""
        inode = self._resolve(path)
        if inode is None:
            msg = f"Path not found: {path}"
            raise FileNotFoundError(msg)
        if inode.file_type is FileType.DIRECTORY:
            msg = f"Is a directory: {path}"
            raise IsADirectoryError(msg)
        return inode

    def exists(self, path: str) -> bool:
        """Check whether a path exists in the file system."""
        return self._resolve(path) is not None

    def is_dir(self, path: str) -> bool:
        """Return True if *path* exists and is a directory."""
        inode = self._resolve(path)
        return inode is not None and inode.file_type is FileType.DIRECTORY

    def stat(self, path: str) -> InodeInfo:
        """Return metadata for the given path.

        Raises:
            FileNotFoundError: If the path does not exist.

        """
        inode = self._resolve(path)
        if inode is None:
            msg = f"Path not found: {path}"
            raise FileNotFoundError(msg)
        return inode.to_info()

    def list_dir(self, path: str) -> list[str]:
        """List the names in a directory, sorted.

        Raises:
            FileNotFoundError: If the path does not exist.
            NotADirectoryError: If the path is not a directory.

        """
        inode = self._resolve(path)
        if inode is None:
            msg = f"Path not found: {path}"
            raise FileNotFoundError(msg)
        if inode.file_type is not FileType.DIRECTORY:
            msg = f"Not a directory: {path}"
            raise NotADirectoryError(msg)
        return sorted(inode.children.keys())

    def create_file(self, path: str) -> None:
        """Create an empty file at the given path.

        Raises:
            FileExistsError: If the path already exists.
            FileNotFoundError: If the parent directory does not exist.

        """
        self._create(path, FileType.FILE)

    def create_dir(self, path: str) -> None:
        """Create an empty directory at the given path.

        Raises:
            FileExistsError: If the path already exists.
            FileNotFoundError: If the parent directory does not exist.

        """
        self._create(path, FileType.DIRECTORY)

    def makedirs(self, path: str) -> None:
        """Create *path* and any missing parent directories."""
        current = ""
        for part in (p for p in path.split("/") if p):
            current = f"{current}/{part}"
            if not self.exists(current):
                self.create_dir(current)

    def _create(self, path: str, file_type: FileType) -> None:
        """Create an inode and link it into its parent directory."""
        if self.exists(path):
            _, name = _split_path(path)
            msg = f"Already exists: {name}"
            raise FileExistsError(msg)

        parent_path, name = _split_path(path)
        parent = self._resolve(parent_path)
        if parent is None or parent.file_type is not FileType.DIRECTORY:
            msg = f"Parent directory not found: {parent_path or name}"
            raise FileNotFoundError(msg)

        new_inode = _Inode(inode_number=next(self._inode_counter), file_type=file_type)
        self._inodes[new_inode.inode_number] = new_inode
        parent.children[name] = new_inode.inode_number

    def read(self, path: str) -> str:
        """Read the contents of a file.

        Raises:
            FileNotFoundError: If the path does not exist.
            IsADirectoryError: If the path is a directory.

        """
        return self._resolve_file(path).data

    def write(self, path: str, data: str) -> None:
        """Write data to a file (replaces existing content).

        Raises:
            FileNotFoundError: If the path does not exist.
            IsADirectoryError: If the path is a directory.

        """
        self._resolve_file(path).data = data

    def append(self, path: str, data: str) -> None:
        """Append data to an existing file.

        Raises:
            FileNotFoundError: If the path does not exist.
            IsADirectoryError: If the path is a directory.

        """
        inode = self._resolve_file(path)
        inode.data += data

    def to_dict(self) -> dict[str, Any]:
        """Serialize the filesystem to a JSON-friendly dictionary."""
        inodes = {}
        for ino_num, inode in self._inodes.items():
            inodes[str(ino_num)] = {
                "inode_number": inode.inode_number,
                "file_type": inode.file_type.value,
                "data": inode.data,
                "children": inode.children,
            }
        return {"root_ino": self._root_ino, "inodes": inodes}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileSystem:
        """Deserialize a filesystem from the format produced by ``to_dict()``.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a file type is not recognised, the inode table is
                not a mapping, or a directory names an inode that is absent.

        """
        fs = object.__new__(cls)
        fs._root_ino = data["root_ino"]
        fs._inodes = {}
        table = data["inodes"]
        if not isinstance(table, dict):
            msg = "Image inode table is not a mapping"
            raise ValueError(msg)
        for ino_data in table.values():
            inode = _Inode(
                inode_number=ino_data["inode_number"],
                file_type=FileType(ino_data["file_type"]),
                data=ino_data.get("data", ""),
                children=ino_data.get("children", {}),
            )
            fs._inodes[inode.inode_number] = inode
        if fs._root_ino not in fs._inodes:
            msg = f"Image has no root inode {fs._root_ino}"
            raise ValueError(msg)
        for inode in fs._inodes.values():
            for name, child_ino in inode.children.items():
                if child_ino not in fs._inodes:
                    msg = f"Entry {name!r} points at missing inode {child_ino}"
                    raise ValueError(msg)
        fs._inode_counter = count(start=max(fs._inodes) + 1)
        return fs
