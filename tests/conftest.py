"""Test configuration and fixtures for projingest."""

import pytest

from projingest.exceptions import AccessDenied
from projingest.file_system_tree.file_system import LocalFileSystem
from projingest.file_system_tree.file_system_tree import build_tree
from projingest.scan_rules.composite_rules import CompositeScanRules


def pytest_addoption(parser):
    """Add custom command-line options for tests."""
    parser.addoption("--run-cli-tests", action="store_true", default=False, help="Run CLI integration tests (slow)")


@pytest.fixture
def write_tree(tmp_path):
    """Return a function that writes a nested dict as files below tmp_path/root.

    Dict values are subdirectories, str values text files and bytes values raw files.
    """

    def _write(layout, root=None):
        root = root if root is not None else tmp_path / "root"
        root.mkdir(parents=True, exist_ok=True)
        for name, value in layout.items():
            path = root / name
            if isinstance(value, dict):
                _write(value, path)
            elif isinstance(value, bytes):
                path.write_bytes(value)
            else:
                path.write_text(value, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def make_tree(write_tree):
    """Return a function that writes a nested dict to disk and scans it into an unfiltered tree.

    Hidden entries are kept, so the tree mirrors the dict exactly.
    """

    def _make(layout):
        root = write_tree(layout)
        return build_tree(root, LocalFileSystem(CompositeScanRules()))

    return _make


@pytest.fixture
def sample_project(write_tree):
    """A small project with sources, docs, logs, a build directory and a binary file."""
    return write_tree(
        {
            "README.md": "# Sample\n",
            "a.log": "log line\n",
            ".env": "SECRET=1\n",
            "src": {
                "main.go": "package main\n\nfunc main() {}\n",
                "main_test.go": "package main\n",
            },
            "docs": {"readme.md": "Docs\n"},
            "build": {"out.bin": b"\x7fELF\x00\x00\x01"},
        }
    )


def find(root, relative_path):
    """Look up a node below root by relative path."""
    node = root
    for part in relative_path.strip("/").split("/"):
        node = next(child for child in node.children if child.name == part)
    return node


@pytest.fixture
def node_at():
    return find


class FlakyFileSystem(LocalFileSystem):
    """Local filesystem that refuses to read some file names, keeping hidden entries."""

    def __init__(self, unreadable):
        super().__init__(CompositeScanRules())
        self.unreadable = set(unreadable)

    def read_text(self, path):
        if path.name in self.unreadable:
            raise AccessDenied(str(path), "Permission denied")
        return super().read_text(path)


@pytest.fixture
def flaky_file_system():
    """Return a factory for filesystems that deny reads of the given file names."""
    return FlakyFileSystem
