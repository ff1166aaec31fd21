"""Key-value stores backing the persisted active timer"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class TimerStore(Protocol):
    """
    Persistence port used by Timer.

    Values are the serialized snapshot text; the timer only ever touches
    ACTIVE_TIMER_KEY.
    """

    async def get_item(self, key: str) -> Optional[str]:
        ...

    async def set_item(self, key: str, value: str) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...


class InMemoryTimerStore:
    """Store kept in process memory; nothing survives a restart"""

    def __init__(self):
        self._items: Dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class JsonFileTimerStore:
    """
    Store persisted as a single JSON object on disk.

    File I/O runs in a worker thread. Operations are serialized by a lock, so
    writes land in the order they were submitted.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the store.

        Args:
            path: JSON file to read and write; created on the first write
        """
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get_item(self, key: str) -> Optional[str]:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
        return items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            items[key] = value
            await asyncio.to_thread(self._write, items)

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read)
            if key not in items:
                return
            del items[key]
            await asyncio.to_thread(self._write, items)

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.warning(f"Ignoring unreadable timer store {self._path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring timer store {self._path}: top level is not an object")
            return {}

        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, items: Dict[str, str]) -> None:
        # Write to a sibling file first so a crash never leaves a truncated store
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(items), encoding="utf-8")
        os.replace(tmp_path, self._path)
