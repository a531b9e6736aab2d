"""Data models for folder dedup."""

import hashlib
import os
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

import xxhash


class DedupError(Exception):
    """Base class for all folder dedup errors."""


class ConfigError(DedupError):
    """Invalid configuration, reported before any traversal starts."""


class FilesystemError(DedupError):
    """A filesystem operation failed during traversal. Always fatal."""

    def __init__(self, operation: str, path: Path, error: OSError):
        super().__init__(f"{error} [{operation}: {path}]")
        self.operation = operation
        self.path = path
        self.error = error
        self.stats: Optional["StatsSnapshot"] = None


class DigestAlgorithm(Enum):
    """Supported content hash functions."""
    XXH64 = "xxh64"
    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"

    @classmethod
    def parse(cls, name: str) -> "DigestAlgorithm":
        try:
            return cls(name.lower())
        except ValueError:
            raise ConfigError(f"Unknown hashing algorithm: {name}") from None

    @classmethod
    def names(cls) -> list[str]:
        return [algorithm.value for algorithm in cls]

    def factory(self) -> Callable:
        """Return a zero-argument callable producing a fresh hasher."""
        if self is DigestAlgorithm.XXH64:
            return xxhash.xxh64
        return getattr(hashlib, self.value)


@dataclass
class RunOptions:
    """Options consumed by the dedup engine."""
    keep: bool = False
    merge: bool = False
    recursive: bool = False
    verbose: bool = False
    dry_run: bool = False
    workers: int = field(default_factory=lambda: os.cpu_count() or 1)
    algorithm: DigestAlgorithm = DigestAlgorithm.XXH64
    progress: bool = False

    def validate(self) -> None:
        if self.workers < 1:
            raise ConfigError(f"Number of workers must be at least 1, got {self.workers}")

    @classmethod
    def from_args(cls, args) -> "RunOptions":
        return cls(
            keep=args.keep,
            merge=args.merge,
            recursive=args.recursive,
            verbose=args.verbose,
            dry_run=args.dryrun,
            workers=args.workers,
            algorithm=DigestAlgorithm.parse(args.hash),
            progress=args.progress,
        )


@dataclass(frozen=True)
class StatsSnapshot:
    """Point-in-time copy of the run counters."""
    hashed: int = 0
    moved: int = 0
    deleted: int = 0

    def summary(self) -> str:
        parts = []
        if self.hashed:
            parts.append(f"hashed {self.hashed}")
        if self.moved:
            parts.append(f"moved {self.moved}")
        if self.deleted:
            parts.append(f"deleted {self.deleted}")
        if not parts:
            return "no changes"
        return ", ".join(parts)


class RunStats:
    """Counters for hashed, moved and deleted files, shared by all workers.

    Each counter is incremented atomically on its own; readers may observe
    a combination that never existed at a single instant, which is fine for
    reporting.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.hashed = 0
        self.moved = 0
        self.deleted = 0

    def add_hashed(self) -> None:
        with self._lock:
            self.hashed += 1

    def add_moved(self) -> None:
        with self._lock:
            self.moved += 1

    def add_deleted(self) -> None:
        with self._lock:
            self.deleted += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(hashed=self.hashed, moved=self.moved, deleted=self.deleted)

    def summary(self) -> str:
        return self.snapshot().summary()
