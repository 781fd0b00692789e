# File: mysqltranslate/utils.py
"""
MySQL Translate - Utility Functions & Helpers
===============================================
File I/O and timing helpers shared by the translators, the session
registry and the sync orchestrator.

Writes are plain whole-file overwrites: there is no temp-file staging, so
an interrupted write can leave a truncated file behind.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("mysqltranslate.utils")

PathLike = Union[str, Path]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: PathLike) -> None:
    """Create directory (and parents) if it doesn't exist."""
    Path(path).mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: PathLike, content: str) -> int:
    """
    Overwrite *path* with *content* (UTF-8), creating parent directories.

    Returns the number of bytes written.

    Raises:
        OSError: if the directory or file cannot be written.
    """
    file_path: Path = Path(path)
    if str(file_path.parent) not in ("", "."):
        ensure_directory(file_path.parent)
    encoded: bytes = content.encode("utf-8")
    file_path.write_bytes(encoded)
    logger.debug("Wrote %d bytes to %s", len(encoded), file_path)
    return len(encoded)


def read_file(path: PathLike) -> str:
    """Read a file and return its content as a string."""
    return Path(path).read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context manager measuring one sync step.

    ``elapsed`` holds the wall-clock seconds once the block exits, whether
    it exited normally or by exception.

    Usage:
        with Timer("introspect") as t:
            ...
        metric.elapsed_seconds = t.elapsed
    """

    __slots__ = ("label", "_started", "elapsed")

    def __init__(self, label: str) -> None:
        self.label: str = label
        self._started: Optional[float] = None
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._started is not None:
            self.elapsed = time.perf_counter() - self._started
        logger.debug("Step '%s' took %.4fs.", self.label, self.elapsed)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "PathLike",
    "ensure_directory",
    "write_file",
    "read_file",
    "Timer",
]

logger.debug("mysqltranslate.utils loaded.")
