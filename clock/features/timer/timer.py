"""Countdown timer state machine"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, List, Optional, Set

from clock.features.timer.domain import ACTIVE_TIMER_KEY, TimerSnapshot, TimerState
from clock.features.timer.emitter import Emitter, Handler
from clock.features.timer.notifier import LoggingNotifier, Notifier
from clock.features.timer.repository import InMemoryTimerStore, TimerStore
from clock.utils.time_helper import now_ms

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL = 1.0
DEFAULT_VIBRATION_PATTERN = [200, 200, 200, 200, 200]


class Timer:
    """
    A single countdown from start_at to end_at (epoch millis).

    The timer persists a snapshot of itself on every transition and tick so a
    restarted process can rebuild it. Elapsed and remaining time are always
    derived from the clock against the absolute instants, never accumulated
    per tick.

    Events:
        tick: remaining milliseconds, once per interval while STARTED
        end: no payload, once when the countdown runs out
    """

    INITIALIZED = TimerState.INITIALIZED
    STARTED = TimerState.STARTED
    PAUSED = TimerState.PAUSED
    CANCELED = TimerState.CANCELED
    REACTIVATING = TimerState.REACTIVATING

    def __init__(
        self,
        start_at: int,
        end_at: int,
        pause_at: int = 0,
        duration: Optional[int] = None,
        state: TimerState | int = TimerState.INITIALIZED,
        sound: Optional[str] = None,
        *,
        store: Optional[TimerStore] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], int] = now_ms,
        interval: float = DEFAULT_TICK_INTERVAL,
        vibration_pattern: Optional[List[int]] = None,
    ):
        """
        Build a timer from fresh values or from a persisted snapshot.

        Args:
            start_at: Countdown start instant (epoch millis)
            end_at: Countdown end instant (epoch millis)
            pause_at: Instant the timer was paused, 0 when not paused
            duration: Nominal countdown length, defaults to end_at - start_at
            state: Lifecycle state; STARTED is reclassified as REACTIVATING
            sound: Sound identifier played on expiry
            store: Persistence backend, defaults to an in-memory store
            notifier: Device feedback backend, defaults to LoggingNotifier
            clock: Returns the current instant in epoch millis
            interval: Tick period in seconds
            vibration_pattern: Vibration pattern in millis used by notify()
        """
        self.start_at = start_at
        self.end_at = end_at
        self.pause_at = pause_at or 0
        self.duration = duration if duration is not None else end_at - start_at
        self.lapsed = 0
        self.state = TimerState.coerce(state)
        self.sound = sound

        # A STARTED record was computed before the last restart; rebase on start()
        if self.state == TimerState.STARTED:
            self.state = TimerState.REACTIVATING

        # Instants are trusted, this is where a range check would be enforced
        if self.end_at <= self.start_at:
            logger.warning(
                f"Timer end_at ({self.end_at}) is not after start_at ({self.start_at})"
            )

        self.interval = interval
        self.vibration_pattern = list(
            vibration_pattern if vibration_pattern is not None else DEFAULT_VIBRATION_PATTERN
        )
        self._store: TimerStore = store if store is not None else InMemoryTimerStore()
        self._notifier: Notifier = notifier if notifier is not None else LoggingNotifier()
        self._clock = clock
        self._events = Emitter()
        self._ticker: Optional[asyncio.Task] = None
        self._writes: Set[asyncio.Task] = set()

    @classmethod
    def from_snapshot(cls, snapshot: TimerSnapshot, **kwargs: Any) -> "Timer":
        """Rebuild a timer from a persisted snapshot; kwargs are passed to __init__"""
        return cls(
            start_at=snapshot.start_at,
            end_at=snapshot.end_at,
            pause_at=snapshot.pause_at,
            duration=snapshot.duration,
            state=snapshot.state,
            sound=snapshot.sound,
            **kwargs,
        )

    def to_snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            start_at=self.start_at,
            end_at=self.end_at,
            pause_at=self.pause_at,
            duration=self.duration,
            state=self.state,
            sound=self.sound,
        )

    # Events

    def on(self, event: str, handler: Handler) -> None:
        self._events.subscribe(event, handler)

    def off(self, event: str, handler: Handler) -> None:
        self._events.unsubscribe(event, handler)

    def once(self, event: str, handler: Handler) -> None:
        self._events.once(event, handler)

    # Lifecycle

    @property
    def is_ticking(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def remaining(self) -> int:
        """Milliseconds left, as the panel would display them"""
        if self.state == TimerState.STARTED:
            return max(0, self.end_at - self._clock())
        if self.state == TimerState.PAUSED:
            return max(0, self.end_at - self.pause_at)
        if self.state == TimerState.CANCELED:
            return 0
        return self.duration

    def start(self) -> None:
        """
        Move the timer to STARTED and begin ticking.

        A PAUSED or REACTIVATING timer restarts its full nominal duration from
        now; the time remaining when it was paused or interrupted is not kept.
        Without a running event loop nothing changes.
        """
        if self.state == TimerState.CANCELED:
            logger.info("Ignoring start() on a canceled timer")
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, timer left in state {self.state.name}")
            return

        previous = self.state
        if previous in (TimerState.REACTIVATING, TimerState.PAUSED):
            now = self._clock()
            self.start_at = now
            self.end_at = now + self.duration
            self.pause_at = 0

        self.state = TimerState.STARTED
        self.lapsed = 0
        self._persist()
        logger.info(
            f"Timer started from {previous.name}: {self.duration}ms, ends at {self.end_at}"
        )

        self._stop_ticking()
        self.tick()

        # The first tick may already have expired the timer
        if self.state == TimerState.STARTED:
            self._ticker = loop.create_task(self._tick_loop())

    def tick(self) -> None:
        """Recompute elapsed/remaining time, persist, publish; expire when due"""
        if self.state != TimerState.STARTED:
            return

        now = self._clock()
        remaining = self.end_at - now
        self.lapsed = max(0, (now - self.start_at) // 1000)

        self._persist()
        logger.debug(f"Timer tick: {remaining}ms remaining, {self.lapsed}s lapsed")
        self._events.publish("tick", remaining)

        # A tick handler may have paused or canceled the timer
        if remaining <= 0 and self.state == TimerState.STARTED:
            self._stop_ticking()
            self.cancel()
            try:
                self.notify()
            except Exception:
                logger.exception("Timer notification failed")
            logger.info("Timer ended")
            self._events.publish("end")

    def pause(self) -> None:
        if self.state != TimerState.STARTED:
            logger.info(f"Ignoring pause() in state {self.state.name}")
            return

        self.pause_at = self._clock()
        self.state = TimerState.PAUSED
        self._stop_ticking()
        self._persist()
        logger.info(f"Timer paused at {self.pause_at}")

    def cancel(self) -> None:
        """Stop ticking and remove the persisted record; repeated calls do nothing"""
        self._stop_ticking()
        if self.state == TimerState.CANCELED:
            return

        self.state = TimerState.CANCELED
        self.pause_at = 0
        self._submit(self._store.remove_item(ACTIVE_TIMER_KEY))
        logger.info("Timer canceled")

    def notify(self) -> None:
        """Trigger device feedback: vibration, then the configured sound if any"""
        self._notifier.vibrate(list(self.vibration_pattern))
        if self.sound:
            self._notifier.play_sound(self.sound)

    def suspend(self) -> None:
        """
        Stop ticking without touching state or storage.

        Used when the host goes away; the persisted STARTED record brings the
        timer back as REACTIVATING on the next restore.
        """
        self._stop_ticking()

    async def flush(self) -> None:
        """Wait until every persistence write submitted so far has finished"""
        if self._writes:
            await asyncio.gather(*list(self._writes), return_exceptions=True)

    # Internals

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def _stop_ticking(self) -> None:
        ticker, self._ticker = self._ticker, None
        if ticker is not None and not ticker.done():
            ticker.cancel()

    def _persist(self) -> None:
        self._submit(self._store.set_item(ACTIVE_TIMER_KEY, self.to_snapshot().to_json()))

    def _submit(self, operation: Coroutine[Any, Any, None]) -> None:
        # Storage calls are fire-and-forget: never awaited, never retried
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            operation.close()
            logger.warning("No running event loop, timer state was not persisted")
            return

        task = loop.create_task(operation)
        self._writes.add(task)
        task.add_done_callback(self._on_write_done)

    def _on_write_done(self, task: asyncio.Task) -> None:
        self._writes.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Timer persistence failed: {error}")
