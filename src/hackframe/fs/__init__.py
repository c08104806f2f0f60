"""File system subsystem — the in-memory disk image and its persistence.

Re-exports public symbols so callers can write::

    from hackframe.fs import FileSystem, load_filesystem
"""

from hackframe.fs.filesystem import DEFAULT_TREE, FileSystem, FileType, InodeInfo
from hackframe.fs.persistence import dump_filesystem, load_filesystem

__all__ = [
    "DEFAULT_TREE",
    "FileSystem",
    "FileType",
    "InodeInfo",
    "dump_filesystem",
    "load_filesystem",
]
