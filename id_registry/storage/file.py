"""
JSON file identifier storage.

This module persists the registry to a single UTF-8 JSON document:

    {
      "ids": {"<id_type>": ["<id_code>", ...]},
      "counters": {"<id_type>": <non-negative integer>}
    }

Invariants:
    - The file is read lazily, on the first operation
    - Every mutation (add, remove, set_counter, clear) rewrites the whole
      file before returning; in-memory state changes only after the write
      succeeds, so a failed write leaves the storage as it was
    - A missing file is an empty registry
    - A corrupt file is an empty registry unless strict_load is set, in
      which case StorageLoadError is raised
    - Write failures raise PersistenceError and are never retried

How to change safely:
    - Keep the document shape stable; other processes may read it
    - There is no temp-file-and-rename: a crash mid-write can leave a
      truncated file, which the next load treats as corrupt
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Set, Tuple

from ..errors import PersistenceError, StorageLoadError
from .base import check_counter_value

logger = logging.getLogger(__name__)


class FileIdStorage:
    """File-backed implementation of IdStorage.

    Thread safety:
        Load-mutate-save sequences are serialized with an asyncio lock.
        Two processes writing the same file are not coordinated.

    Example:
        >>> storage = FileIdStorage("/var/lib/ids/registry.json")
        >>> await storage.add("isbn", "0306406152")   # file rewritten here
    """

    def __init__(self, path: str | Path, strict_load: bool = False) -> None:
        """Initialize the file storage.

        Args:
            path: JSON file holding the registry state
            strict_load: Raise StorageLoadError on a corrupt file instead
                of starting empty
        """
        self.path = Path(path)
        self.strict_load = strict_load
        self._ids: Dict[str, Set[str]] = {}
        self._counters: Dict[str, int] = {}
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        """Whether the file has been read yet."""
        return self._loaded

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        try:
            self._ids, self._counters = self._read_file()
        except (OSError, UnicodeDecodeError, ValueError, TypeError) as e:
            if self.strict_load:
                raise StorageLoadError(
                    f"Failed to load registry file {self.path}: {e}",
                    path=str(self.path),
                ) from e
            logger.warning(
                "Registry file unreadable, starting with empty state",
                extra={"path": str(self.path), "error": str(e)},
            )
            self._ids, self._counters = {}, {}
        self._loaded = True

    def _read_file(self) -> Tuple[Dict[str, Set[str]], Dict[str, int]]:
        if not self.path.exists():
            return {}, {}

        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("top-level JSON value must be an object")

        raw_ids = data.get("ids") or {}
        raw_counters = data.get("counters") or {}
        if not isinstance(raw_ids, dict) or not isinstance(raw_counters, dict):
            raise ValueError("'ids' and 'counters' must be objects")

        ids: Dict[str, Set[str]] = {}
        for id_type, codes in raw_ids.items():
            if not isinstance(codes, list):
                raise ValueError(f"codes for '{id_type}' must be a list")
            if codes:
                ids[id_type] = {str(code) for code in codes}

        counters = {
            id_type: check_counter_value(value)
            for id_type, value in raw_counters.items()
        }

        logger.debug(
            "Registry file loaded",
            extra={"path": str(self.path), "types": len(ids), "counters": len(counters)},
        )
        return ids, counters

    def _save(self, ids: Dict[str, Set[str]], counters: Dict[str, int]) -> None:
        document: Dict[str, Any] = {
            "ids": {id_type: sorted(codes) for id_type, codes in sorted(ids.items())},
            "counters": dict(sorted(counters.items())),
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                f"Failed to persist data to {self.path}: {e}",
                path=str(self.path),
            ) from e

    def _commit(self, ids: Dict[str, Set[str]], counters: Dict[str, int]) -> None:
        # Memory only changes once the file holds the new state.
        self._save(ids, counters)
        self._ids, self._counters = ids, counters

    async def add(self, id_type: str, id_code: str) -> None:
        async with self._lock:
            self._ensure_loaded()
            ids = dict(self._ids)
            ids[id_type] = self._ids.get(id_type, set()) | {id_code}
            self._commit(ids, self._counters)
        logger.debug(
            "Code added to file storage",
            extra={"id_type": id_type, "id_code": id_code, "path": str(self.path)},
        )

    async def remove(self, id_type: str, id_code: str) -> None:
        async with self._lock:
            self._ensure_loaded()
            ids = dict(self._ids)
            remaining = self._ids.get(id_type, set()) - {id_code}
            if remaining:
                ids[id_type] = remaining
            else:
                ids.pop(id_type, None)
            self._commit(ids, self._counters)

    async def contains(self, id_type: str, id_code: str) -> bool:
        self._ensure_loaded()
        return id_code in self._ids.get(id_type, ())

    async def get_all(self, id_type: str) -> Set[str]:
        self._ensure_loaded()
        return set(self._ids.get(id_type, ()))

    async def get_all_types(self) -> Set[str]:
        self._ensure_loaded()
        return set(self._ids)

    async def get_counter(self, id_type: str) -> int:
        self._ensure_loaded()
        return self._counters.get(id_type, 0)

    async def set_counter(self, id_type: str, value: int) -> None:
        value = check_counter_value(value)
        async with self._lock:
            self._ensure_loaded()
            self._commit(self._ids, {**self._counters, id_type: value})

    async def clear(self) -> None:
        async with self._lock:
            self._ensure_loaded()
            self._commit({}, {})
        logger.debug("File storage cleared", extra={"path": str(self.path)})
