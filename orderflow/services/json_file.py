"""
Locked JSON Files

Shared plumbing for the small JSON documents the pipeline keeps on disk
(order history, saved basket). A sibling ``.lock`` file keeps concurrent
processes from interleaving writes, and writes go to a temporary file that
is swapped in so readers never see a torn document.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Union

from filelock import FileLock

logger = logging.getLogger(__name__)


class LockedJsonFile:

    def __init__(self, path: Union[str, Path], lock_timeout: int):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout

    def _ensure_data_dir(self) -> None:
        """Create data directory if needed."""
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {self.path.parent}")

    def _lock(self) -> FileLock:
        return FileLock(str(self.lock_path), timeout=self.lock_timeout)

    def _read_raw(self, default: Any) -> Any:
        """Parsed document, or ``default`` when missing, unreadable or of another type."""
        if not self.path.exists():
            return default
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Error reading {self.path}: {e}")
            return default
        return data if isinstance(data, type(default)) else default

    def _write_raw(self, data: Any) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def _delete(self) -> None:
        with self._lock():
            if self.path.exists():
                self.path.unlink()
