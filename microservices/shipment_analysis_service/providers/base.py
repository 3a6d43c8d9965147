"""
JSON export sources - shared loading

Both upstream exports (TMS shipments, Windward tracking) are JSON files that
are read once and served from memory.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from pydantic import ValidationError

from ..models import LookupResult
from ..protocols import SourceDataError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors to "path: message, path: message" """
    return ", ".join(
        f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()
    )


class JsonFileSource(ABC, Generic[T]):
    """
    Keyed in-memory index built from a JSON file.

    The index is built on the first lookup, under a lock so concurrent first
    lookups read the file once. A failed load is not cached.
    """

    source_name = "JSON"
    load_error_prefix = "Failed to load data"

    def __init__(self, data_path: str):
        self.data_path = Path(data_path)
        self._index: Optional[Dict[str, T]] = None
        self._lock = asyncio.Lock()
        self.skipped_records = 0

    async def _lookup(self, key: str, not_found_message: str) -> LookupResult[T]:
        try:
            index = await self._ensure_loaded()
        except (OSError, ValueError, SourceDataError) as e:
            message = f"{self.load_error_prefix}: {e}"
            logger.error(f"[{self.source_name}] {message}")
            return LookupResult.failure(message)

        item = index.get(key)
        if item is None:
            return LookupResult.not_found(not_found_message)
        return LookupResult.found(item, message=f"{key} retrieved successfully")

    async def _ensure_loaded(self) -> Dict[str, T]:
        if self._index is not None:
            return self._index
        async with self._lock:
            if self._index is None:
                raw = await asyncio.to_thread(self._read_json)
                index, skipped = self._build_index(raw)
                self.skipped_records = skipped
                self._index = index
                if skipped:
                    logger.warning(
                        f"[{self.source_name}] Loaded {len(index)} records, {skipped} invalid record(s) skipped"
                    )
                else:
                    logger.info(f"[{self.source_name}] Loaded {len(index)} records from {self.data_path}")
        return self._index

    def _read_json(self) -> Any:
        with self.data_path.open("r", encoding="utf-8") as f:
            return json.load(f)

    @abstractmethod
    def _build_index(self, raw: Any) -> Tuple[Dict[str, T], int]:
        """Map raw JSON to (key -> item, number of skipped invalid entries)"""
        ...


__all__ = ["JsonFileSource", "format_validation_error"]
