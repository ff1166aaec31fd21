"""Shared fixtures: recording store/notifier and a controllable clock"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from clock.features.timer.domain import ACTIVE_TIMER_KEY
from clock.features.timer.repository import InMemoryTimerStore
from clock.features.timer.timer import Timer

T0 = 1_700_000_000_000


class RecordingStore(InMemoryTimerStore):
    """In-memory store that records every call in order"""

    def __init__(self):
        super().__init__()
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    async def set_item(self, key: str, value: str) -> None:
        self.calls.append(("set_item", key, value))
        await super().set_item(key, value)

    async def remove_item(self, key: str) -> None:
        self.calls.append(("remove_item", key, None))
        await super().remove_item(key)

    @property
    def writes(self) -> List[Tuple[str, Dict[str, Any]]]:
        return [(key, json.loads(value)) for op, key, value in self.calls if op == "set_item"]

    @property
    def removals(self) -> List[str]:
        return [key for op, key, _ in self.calls if op == "remove_item"]

    @property
    def stored(self) -> Optional[Dict[str, Any]]:
        raw = self._items.get(ACTIVE_TIMER_KEY)
        return json.loads(raw) if raw is not None else None


class FailingStore(InMemoryTimerStore):
    async def set_item(self, key: str, value: str) -> None:
        raise OSError("disk full")

    async def remove_item(self, key: str) -> None:
        raise OSError("disk full")


class RecordingNotifier:
    def __init__(self):
        self.vibrations: List[List[int]] = []
        self.sounds: List[str] = []

    def vibrate(self, pattern: List[int]) -> None:
        self.vibrations.append(pattern)

    def play_sound(self, sound: str) -> None:
        self.sounds.append(sound)


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


async def settle(rounds: int = 5) -> None:
    """Let pending fire-and-forget tasks run"""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_timer(store, notifier, clock):
    created: List[Timer] = []

    def factory(start_at: int, end_at: int, **kwargs) -> Timer:
        kwargs.setdefault("store", store)
        kwargs.setdefault("notifier", notifier)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("interval", 0.01)
        timer = Timer(start_at, end_at, **kwargs)
        created.append(timer)
        return timer

    yield factory

    for timer in created:
        timer.suspend()
