"""Folder scanning functionality."""

import os
import stat
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Sequence

from .models import FilesystemError


class EntryKind(Enum):
    """Classification of a dequeued path."""
    DIRECTORY = "directory"
    FILE = "file"
    SKIP = "skip"


@contextmanager
def fs_operation(operation: str, path: Path) -> Iterator[None]:
    """Wrap any OSError raised inside the block as a fatal FilesystemError."""
    try:
        yield
    except OSError as e:
        raise FilesystemError(operation, path, e) from e


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def compute_file_hash(file_path: Path, new_hash: Callable, chunk_size: int = 65536) -> str:
    """Compute the hex fingerprint of a file's full content."""
    hasher = new_hash()
    with fs_operation("read", file_path):
        with open(file_path, 'rb') as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
    return hasher.hexdigest()


def classify_entry(path: Path, root: Path, recursive: bool) -> EntryKind:
    """
    Decide what to do with a path pulled off the work queue.

    The traversal root is stat'ed through symlinks; anything below it is not,
    so symlinks, devices and other special files are skipped. Hidden regular
    files are skipped as well. Subdirectories are only descended into when
    recursive is set.
    """
    is_root = path == root
    with fs_operation("stat", path):
        st = os.stat(path, follow_symlinks=is_root)

    if stat.S_ISDIR(st.st_mode):
        if not is_root and not recursive:
            return EntryKind.SKIP
        return EntryKind.DIRECTORY

    if not stat.S_ISREG(st.st_mode) or is_hidden(path):
        return EntryKind.SKIP
    return EntryKind.FILE


def list_children(directory: Path, root: Path, input_dirs: Sequence[Path]) -> list[Path]:
    """
    List the immediate children of a directory, in name order.

    Children that are themselves one of the other input directories are left
    out; each input directory is traversed only by its own scan.
    """
    others = {d for d in input_dirs if d != root}
    with fs_operation("read-dir", directory):
        names = sorted(os.listdir(directory))
    children = []
    for name in names:
        child = directory / name
        if child in others:
            continue
        children.append(child)
    return children
