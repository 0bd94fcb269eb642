"""
Saved Basket

Keeps the in-progress basket on disk so it survives a restart. The
selection store rewrites the file after every change and reloads it when a
session starts.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from filelock import Timeout

from orderflow.core.config import get_settings
from orderflow.schemas import CartLine
from orderflow.services.json_file import LockedJsonFile

logger = logging.getLogger(__name__)


class BasketFile(LockedJsonFile):
    """File-locked JSON copy of one basket's lines, in basket order."""

    def __init__(self, path: Optional[Union[str, Path]] = None, lock_timeout: Optional[int] = None):
        settings = get_settings()
        super().__init__(
            path or settings.basket_path,
            lock_timeout if lock_timeout is not None else settings.cache_lock_timeout,
        )

    def save(self, lines: Iterable[CartLine]) -> None:
        """
        Overwrite the saved basket.

        Raises:
            filelock.Timeout: If the lock cannot be acquired in time
            OSError: If the file cannot be written
        """
        self._ensure_data_dir()
        records = [line.model_dump(by_alias=True, mode="json") for line in lines]
        with self._lock():
            self._write_raw(records)

    def load(self) -> list[CartLine]:
        """Saved lines; malformed entries are skipped and a missing file is an empty basket."""
        if not self.path.exists():
            return []
        try:
            with self._lock():
                records = self._read_raw([])
        except Timeout:
            logger.error(f"Lock timeout ({self.lock_timeout}s) reading {self.path}")
            return []

        lines = []
        for record in records:
            try:
                lines.append(CartLine.model_validate(record))
            except ValueError as e:
                logger.warning(f"Skipping malformed saved cart line: {e}")
        return lines

    def clear(self) -> None:
        self._delete()
