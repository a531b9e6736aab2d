"""Progress and action reporting."""

import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

from tqdm import tqdm

from .models import RunStats


class EventKind(Enum):
    """Kinds of events emitted by the dedup engine."""
    SCANNING = "scanning"
    REMOVING = "removing"
    MOVING = "moving"


@dataclass(frozen=True)
class Event:
    """A single engine decision. target is the canonical file for REMOVING
    and the destination for MOVING."""
    kind: EventKind
    path: Path
    target: Optional[Path] = None


def display(path: str) -> str:
    """Make spaces in paths visible."""
    return path.replace(" ", "·")


def trim_common_prefix(path_a: Path, path_b: Path) -> tuple[str, str, str]:
    """Split two paths into their shared leading directories and the rest."""
    parts_a = list(Path(path_a).parts)
    parts_b = list(Path(path_b).parts)
    common = []
    while parts_a and parts_b and parts_a[0] == parts_b[0]:
        common.append(parts_a.pop(0))
        parts_b.pop(0)

    def join(parts: list[str]) -> str:
        return str(Path(*parts)) if parts else ""

    return display(join(common)), display(join(parts_a)), display(join(parts_b))


def format_event(event: Event) -> str:
    if event.kind is EventKind.SCANNING:
        return f"Scanning {display(str(event.path))}"

    prefix, src, dst = trim_common_prefix(event.path, event.target)
    if event.kind is EventKind.REMOVING:
        body = f"{src} dupe-of {dst}"
        label = "Removing "
    else:
        body = f"{src} -> {dst}"
        label = "Moving: "
    if not prefix:
        return label + body
    return f"{label}{prefix.rstrip(os.sep)}/{{{body}}}"


class Reporter:
    """
    Receives engine events and turns them into output.

    In verbose mode each event is written as a line, prefixed in dry-run
    mode and suffixed with the run summary whenever it changed since the
    previous line. With record set, events are also kept in `events`.
    """

    def __init__(
        self,
        stats: RunStats,
        verbose: bool = False,
        dry_run: bool = False,
        progress: bool = False,
        write: Optional[Callable[[str], None]] = None,
        record: bool = False
    ):
        self.stats = stats
        self.verbose = verbose
        self.dry_run = dry_run
        self.show_progress = progress
        self.record = record
        self.events: list[Event] = []
        self._write = write or tqdm.write
        self._lock = threading.Lock()
        self._last_summary = ""
        self._last_status = 0
        self._bar: Optional[tqdm] = None

    def emit(self, kind: EventKind, path: Path, target: Optional[Path] = None) -> Event:
        event = Event(kind, path, target)
        if self.record:
            with self._lock:
                self.events.append(event)
        if self.verbose:
            self.log(format_event(event))
        return event

    def log(self, message: str) -> None:
        with self._lock:
            line = message
            if self.dry_run:
                line = "[DRYRUN] " + line
            summary = self.stats.summary()
            if summary != self._last_summary:
                line += f" ({summary})"
                self._last_summary = summary
            self._write(line)

    def progress(self, completed: int, submitted: int) -> None:
        """Queue progress callback: completed of submitted items."""
        with self._lock:
            bar = self._bar
            if bar is not None and not bar.disable:
                bar.total = submitted
                bar.n = completed
                bar.refresh()
        if not self.verbose or completed == 0 or completed % 100:
            return
        with self._lock:
            if completed == self._last_status:
                return
            self._last_status = completed
        self.log(f"Performed #{completed} actions with #{submitted - completed} queued")

    @contextmanager
    def scanning(self, root: Path) -> Iterator[None]:
        """Show a progress bar while one root is being processed."""
        bar = tqdm(
            total=0,
            desc=f"Scanning {root.name or root}",
            unit="item",
            leave=False,
            disable=None if self.show_progress else True,
        )
        with self._lock:
            self._last_status = 0
            self._bar = bar
        try:
            yield
        finally:
            with self._lock:
                self._bar = None
            bar.close()

    def done(self) -> None:
        self.log("Done")
