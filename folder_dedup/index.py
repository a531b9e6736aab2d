"""Content-addressed index of canonical files."""

import threading
from pathlib import Path


class ContentIndex:
    """
    Maps a content fingerprint to the first path seen with that content.

    All access goes through a single lock. Looking up a fingerprint and
    inserting it when absent happen under the same acquisition, so two
    workers hashing identical content can never both become canonical.

    The index is never told about files removed behind its back; a canonical
    path that disappears externally stays recorded for the rest of the run.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._paths: dict[str, Path] = {}

    def claim(self, fingerprint: str, path: Path) -> tuple[Path, bool]:
        """
        Record path as canonical for fingerprint unless one is already set.

        Returns the canonical path and whether this call inserted it.
        """
        with self._lock:
            existing = self._paths.get(fingerprint)
            if existing is not None:
                return existing, False
            self._paths[fingerprint] = path
            return path, True
