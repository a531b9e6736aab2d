"""Core dedup and merge logic."""

import os
import stat
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Collection, Optional, Sequence

from .index import ContentIndex
from .models import ConfigError, FilesystemError, RunOptions, RunStats, StatsSnapshot
from .report import EventKind, Reporter
from .scanner import EntryKind, classify_entry, compute_file_hash, fs_operation, list_children
from .workqueue import WorkQueue


def find_available_path(directory: Path, name: str, taken: Collection[Path] = ()) -> Path:
    """
    Return the first free path for name inside directory.

    Tries name, then base-2.ext, base-3.ext and so on. A path is free when
    nothing exists there (a dangling symlink counts as existing) and it is
    not in taken.
    """
    base, ext = os.path.splitext(name)
    candidate = directory / name
    n = 1
    while os.path.lexists(candidate) or candidate in taken:
        n += 1
        candidate = directory / f"{base}-{n}{ext}"
    return candidate


class DestinationNamer:
    """
    Hands out non-colliding destination paths in one directory.

    Reservations are serialized and remembered, so concurrent workers never
    get the same path, and a dry run (which never creates the files) picks
    the same names a real run would.
    """

    def __init__(self, directory: Path):
        self.directory = directory
        self._lock = threading.Lock()
        self._reserved: set[Path] = set()

    def reserve(self, name: str) -> Path:
        with self._lock:
            path = find_available_path(self.directory, name, self._reserved)
            self._reserved.add(path)
            return path


@dataclass
class RunContext:
    """Everything one run shares between its workers."""
    options: RunOptions
    roots: list[Path]
    new_hash: Callable
    index: ContentIndex
    stats: RunStats
    namer: DestinationNamer
    reporter: Reporter

    @property
    def destination(self) -> Path:
        return self.roots[0]

    @classmethod
    def create(
        cls,
        roots: Sequence[Path],
        options: RunOptions,
        reporter: Optional[Reporter] = None
    ) -> "RunContext":
        if reporter is None:
            reporter = Reporter(
                RunStats(),
                verbose=options.verbose,
                dry_run=options.dry_run,
                progress=options.progress,
            )
        return cls(
            options=options,
            roots=list(roots),
            new_hash=options.algorithm.factory(),
            index=ContentIndex(),
            stats=reporter.stats,
            namer=DestinationNamer(roots[0]),
            reporter=reporter,
        )


def validate_directories(directories: Sequence) -> list[Path]:
    """
    Check that every input exists and is a directory.

    Returns the resolved paths, so two spellings of one directory (`d`,
    `d/../d`, a symlink to `d`) become the same root.
    """
    if not directories:
        raise ConfigError("At least one directory is required")
    roots = []
    for directory in directories:
        path = Path(directory)
        try:
            st = os.stat(path)
        except OSError as e:
            raise ConfigError(f"Cannot access directory: {path} ({e.strerror})") from e
        if not stat.S_ISDIR(st.st_mode):
            raise ConfigError(f"Must be directory: {path}")
        roots.append(path.resolve())
    return roots


def process_file(ctx: RunContext, path: Path, root: Path) -> None:
    """
    Fingerprint a regular file and delete, move or keep it.

    The first file seen with some content becomes canonical. Later copies are
    deleted unless keep is set. Canonical files found outside the
    destination are moved into it when merging.
    """
    no_merge = root == ctx.destination or not ctx.options.merge

    fingerprint = compute_file_hash(path, ctx.new_hash)
    ctx.stats.add_hashed()

    canonical, claimed = ctx.index.claim(fingerprint, path)
    if not claimed:
        if canonical == path:
            return  # already scanned
        if ctx.options.keep:
            return
        ctx.reporter.emit(EventKind.REMOVING, path, canonical)
        if not ctx.options.dry_run:
            with fs_operation("remove", path):
                os.remove(path)
        ctx.stats.add_deleted()
        return

    if no_merge:
        return

    destination = ctx.namer.reserve(path.name)
    ctx.reporter.emit(EventKind.MOVING, path, destination)
    if not ctx.options.dry_run:
        with fs_operation("rename", path):
            os.rename(path, destination)
    ctx.stats.add_moved()


def handle_entry(ctx: RunContext, queue: WorkQueue, path: Path, root: Path) -> None:
    """Classify one dequeued path and act on it."""
    kind = classify_entry(path, root, ctx.options.recursive)
    if kind is EntryKind.DIRECTORY:
        ctx.reporter.emit(EventKind.SCANNING, path)
        queue.enqueue(list_children(path, root, ctx.roots))
    elif kind is EntryKind.FILE:
        process_file(ctx, path, root)


def scan_root(ctx: RunContext, root: Path) -> None:
    """Process one input directory, blocking until its queue has drained."""

    def handler(path: Path) -> None:
        handle_entry(ctx, queue, path, root)

    queue = WorkQueue(handler, ctx.options.workers, on_progress=ctx.reporter.progress)
    with ctx.reporter.scanning(root):
        queue.run(root)


def dedup_folders(
    directories: Sequence,
    options: Optional[RunOptions] = None,
    reporter: Optional[Reporter] = None
) -> StatsSnapshot:
    """
    Deduplicate the given directories, optionally merging them into the first.

    Directories are processed strictly in order, the first one (the
    destination) included. Within one directory, entries are processed
    concurrently by options.workers threads.

    Raises ConfigError before touching anything if the options or
    directories are invalid. Raises FilesystemError, with the stats at the
    time of failure attached, on the first filesystem error.
    """
    if options is None:
        options = RunOptions()
    options.validate()
    roots = validate_directories(directories)

    ctx = RunContext.create(roots, options, reporter)
    try:
        for root in ctx.roots:
            scan_root(ctx, root)
    except FilesystemError as e:
        e.stats = ctx.stats.snapshot()
        raise

    ctx.reporter.done()
    return ctx.stats.snapshot()
