"""Shared test fixtures."""

import tempfile
from pathlib import Path

import pytest

from folder_dedup.models import RunStats
from folder_dedup.report import Reporter


def build_sample_tree(base: Path) -> tuple[Path, Path]:
    """
    Create a destination and a source folder under base.

    dest/
      keep.txt        "shared content"
      foo.txt         "dest foo"
      .hidden         "shared content"
    source/
      copy.txt        "shared content"    duplicate of dest/keep.txt
      foo.txt         "source foo"        unique, name taken in dest
      unique.txt      "only in source"
      .secret         "only hidden"
      sub/nested.txt  "nested content"
      sub/deep_dup.txt "dest foo"         duplicate of dest/foo.txt
    """
    dest = base / "dest"
    source = base / "source"
    dest.mkdir(parents=True)
    (source / "sub").mkdir(parents=True)

    (dest / "keep.txt").write_text("shared content")
    (dest / "foo.txt").write_text("dest foo")
    (dest / ".hidden").write_text("shared content")

    (source / "copy.txt").write_text("shared content")
    (source / "foo.txt").write_text("source foo")
    (source / "unique.txt").write_text("only in source")
    (source / ".secret").write_text("only hidden")
    (source / "sub" / "nested.txt").write_text("nested content")
    (source / "sub" / "deep_dup.txt").write_text("dest foo")

    return dest, source


def read_tree(base: Path) -> dict[str, bytes]:
    """Map every file below base (relative POSIX path) to its content."""
    return {
        path.relative_to(base).as_posix(): path.read_bytes()
        for path in sorted(base.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def sample_folders(temp_dir):
    """Create a destination and a source folder with known duplicates."""
    return build_sample_tree(temp_dir)


@pytest.fixture
def recording_reporter():
    """A verbose reporter that collects its output lines instead of printing."""
    lines = []
    reporter = Reporter(RunStats(), verbose=True, write=lines.append, record=True)
    reporter.lines = lines
    return reporter
