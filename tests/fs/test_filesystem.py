"""Tests for the in-memory file system behind ``fs ls`` / ``fs cat``."""

import pytest

from hackframe.fs.filesystem import DEFAULT_TREE, FileSystem, FileType


class TestEmptyFileSystem:
    """Verify a bare file system."""

    def test_root_exists(self) -> None:
        """The root directory should always exist."""
        fs = FileSystem()
        assert fs.exists("/")
        assert fs.is_dir("/")
        assert fs.list_dir("/") == []

    def test_relative_paths_never_resolve(self) -> None:
        """Paths must be absolute."""
        fs = FileSystem()
        assert not fs.exists("etc")

    def test_create_and_read(self) -> None:
        """A created file should be readable after a write."""
        fs = FileSystem()
        fs.create_file("/notes")
        fs.write("/notes", "hello")
        assert fs.read("/notes") == "hello"
        assert fs.stat("/notes").size == len("hello")

    def test_append(self) -> None:
        """Appending should extend the existing content."""
        fs = FileSystem()
        fs.create_file("/log")
        fs.append("/log", "a\n")
        fs.append("/log", "b\n")
        assert fs.read("/log") == "a\nb\n"

    def test_makedirs_creates_parents(self) -> None:
        """makedirs should create each missing level."""
        fs = FileSystem()
        fs.makedirs("/var/log")
        assert fs.is_dir("/var")
        assert fs.is_dir("/var/log")
        fs.makedirs("/var/log")  # already there: no error


class TestErrors:
    """Verify the errors raised for bad paths."""

    def test_create_existing_raises(self) -> None:
        """Creating the same path twice should fail."""
        fs = FileSystem()
        fs.create_dir("/etc")
        with pytest.raises(FileExistsError):
            fs.create_dir("/etc")

    def test_create_without_parent_raises(self) -> None:
        """A missing parent directory should fail."""
        fs = FileSystem()
        with pytest.raises(FileNotFoundError):
            fs.create_file("/missing/file")

    def test_read_missing_raises(self) -> None:
        """Reading a nonexistent file should fail."""
        with pytest.raises(FileNotFoundError):
            FileSystem().read("/nope")

    def test_read_directory_raises(self) -> None:
        """Reading a directory should fail."""
        fs = FileSystem()
        fs.create_dir("/etc")
        with pytest.raises(IsADirectoryError):
            fs.read("/etc")

    def test_list_file_raises(self) -> None:
        """Listing a regular file should fail."""
        fs = FileSystem()
        fs.create_file("/README")
        with pytest.raises(NotADirectoryError):
            fs.list_dir("/README")

    def test_stat_missing_raises(self) -> None:
        """stat on a nonexistent path should fail."""
        with pytest.raises(FileNotFoundError):
            FileSystem().stat("/nope")


class TestDefaultTree:
    """Verify the seeded safe-mode image."""

    def test_every_default_file_present(self) -> None:
        """Each seeded path should exist with its content."""
        fs = FileSystem.with_default_tree()
        for path, content in DEFAULT_TREE.items():
            assert fs.read(path) == content

    def test_root_listing(self) -> None:
        """The root should hold the top-level entries, sorted."""
        fs = FileSystem.with_default_tree()
        assert fs.list_dir("/") == ["README", "boot", "etc", "var"]
        assert fs.stat("/var").file_type is FileType.DIRECTORY
        assert fs.list_dir("/var/log") == ["boot.log", "hackframe.log", "net.log"]


class TestSerialisation:
    """Verify the dictionary form used for disk images."""

    def test_to_dict_then_from_dict(self) -> None:
        """A rebuilt tree should keep its files and accept new ones."""
        fs = FileSystem.with_default_tree()
        fs.append("/var/log/net.log", "extra\n")
        restored = FileSystem.from_dict(fs.to_dict())
        assert restored.read("/var/log/net.log").endswith("extra\n")
        restored.create_file("/var/log/new.log")
        assert restored.exists("/var/log/new.log")

    def test_missing_root_rejected(self) -> None:
        """An image whose root inode is absent should be rejected."""
        with pytest.raises(ValueError, match="no root inode"):
            FileSystem.from_dict({"root_ino": 5, "inodes": {}})
