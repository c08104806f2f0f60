"""Filesystem persistence — save and load the safe-mode disk image.

The simulated disk lives in memory while the console runs.  To carry
audit logs across sessions the kernel can flush the tree to a **JSON
image** at shutdown and mount it again at the next boot:

    - ``dump_filesystem(fs, path)`` — save to a file (like ``sync`` or unmount).
    - ``load_filesystem(path)`` — restore from a file (like ``mount``).

There is no journal and no durability promise: a crash mid-write simply
loses the newest audit lines.
"""

import json
from pathlib import Path

from hackframe.fs.filesystem import FileSystem


def dump_filesystem(fs: FileSystem, path: Path) -> None:
    """Save a filesystem to a JSON file.

    Args:
        fs: The filesystem to save.
        path: The file path to write to.

    """
    data = fs.to_dict()
    path.write_text(json.dumps(data, indent=2))


def load_filesystem(path: Path) -> FileSystem:
    """Load a filesystem from a JSON file.

    Args:
        path: The file path to read from.

    Returns:
        A reconstructed FileSystem instance.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If the image is not valid JSON or is malformed.

    """
    text = path.read_text()
    data = json.loads(text)
    try:
        return FileSystem.from_dict(data)
    except (AttributeError, KeyError, TypeError) as e:
        msg = f"Malformed filesystem image: {path}"
        raise ValueError(msg) from e
