"""Business logic for the active timer"""

import logging
from typing import Callable, List, Optional

from clock import config
from clock.features.timer.domain import ACTIVE_TIMER_KEY, TimerSnapshot, TimerState
from clock.features.timer.notifier import ExpoPushNotifier, LoggingNotifier, Notifier
from clock.features.timer.repository import InMemoryTimerStore, JsonFileTimerStore, TimerStore
from clock.features.timer.schemas import TimerStatusResponse
from clock.features.timer.timer import DEFAULT_TICK_INTERVAL, Timer
from clock.utils.time_helper import format_duration, now_ms

logger = logging.getLogger(__name__)


class TimerNotFoundError(ValueError):
    """No active timer"""


class TimerStateError(ValueError):
    """The requested transition is not valid in the timer's current state"""


class TimerService:
    """Owns the single active timer of the clock"""

    def __init__(
        self,
        store: TimerStore,
        notifier: Notifier,
        clock: Callable[[], int] = now_ms,
        interval: float = DEFAULT_TICK_INTERVAL,
        vibration_pattern: Optional[List[int]] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.interval = interval
        self.vibration_pattern = vibration_pattern
        self.timer: Optional[Timer] = None

    def _dependencies(self) -> dict:
        return {
            "store": self.store,
            "notifier": self.notifier,
            "clock": self.clock,
            "interval": self.interval,
            "vibration_pattern": self.vibration_pattern,
        }

    def _track(self, timer: Timer) -> Timer:
        self.timer = timer
        timer.on("end", lambda: self._on_end(timer))
        return timer

    def _on_end(self, timer: Timer) -> None:
        if self.timer is timer:
            self.timer = None
        logger.info("Active timer finished")

    def _require_active(self) -> Timer:
        if self.timer is None or self.timer.state == TimerState.CANCELED:
            raise TimerNotFoundError("No active timer")
        return self.timer

    async def restore(self) -> Optional[Timer]:
        """
        Load the persisted timer at startup.

        A timer that was running when the process went away comes back as
        REACTIVATING and is started again. A paused timer stays paused.

        Returns:
            The restored timer, or None when nothing usable was stored
        """
        try:
            raw = await self.store.get_item(ACTIVE_TIMER_KEY)
        except OSError as e:
            logger.warning(f"Could not read stored timer: {e}")
            return None

        if raw is None:
            return None

        snapshot = TimerSnapshot.from_json(raw)
        if snapshot is None or snapshot.state == TimerState.CANCELED:
            logger.warning("Discarding stored timer record")
            await self.store.remove_item(ACTIVE_TIMER_KEY)
            return None

        timer = self._track(Timer.from_snapshot(snapshot, **self._dependencies()))
        logger.info(f"Restored timer in state {timer.state.name}")

        if timer.state == TimerState.REACTIVATING:
            timer.start()

        return timer

    def create(self, duration_ms: int, sound: Optional[str] = None) -> Timer:
        """
        Replace any active timer with a new one and start it.

        Args:
            duration_ms: Countdown length in milliseconds
            sound: Sound identifier played on expiry

        Returns:
            The started timer

        Raises:
            ValueError: If duration_ms is not positive
        """
        if duration_ms <= 0:
            raise ValueError(f"Timer duration must be positive, got {duration_ms}")

        if self.timer is not None:
            self.timer.cancel()

        now = self.clock()
        timer = self._track(
            Timer(now, now + duration_ms, sound=sound, **self._dependencies())
        )
        timer.start()
        return timer

    def pause(self) -> Timer:
        timer = self._require_active()
        if timer.state != TimerState.STARTED:
            raise TimerStateError(f"Cannot pause a timer in state {timer.state.name}")
        timer.pause()
        return timer

    def resume(self) -> Timer:
        timer = self._require_active()
        if timer.state != TimerState.PAUSED:
            raise TimerStateError(f"Cannot resume a timer in state {timer.state.name}")
        timer.start()
        return timer

    def cancel(self) -> None:
        timer = self._require_active()
        timer.cancel()
        self.timer = None

    def status(self) -> TimerStatusResponse:
        if self.timer is None or self.timer.state == TimerState.CANCELED:
            return TimerStatusResponse(active=False)

        timer = self.timer
        remaining = timer.remaining
        return TimerStatusResponse(
            active=True,
            state=timer.state.name,
            start_at=timer.start_at,
            end_at=timer.end_at,
            pause_at=timer.pause_at,
            duration=timer.duration,
            lapsed=timer.lapsed,
            remaining=remaining,
            display=format_duration(remaining),
            sound=timer.sound,
        )

    async def shutdown(self) -> None:
        """Stop ticking and wait for outstanding writes and pushes, keeping the stored record"""
        if self.timer is not None:
            self.timer.suspend()
            await self.timer.flush()

        flush = getattr(self.notifier, "flush", None)
        if flush is not None:
            await flush()


_timer_service: Optional[TimerService] = None


def get_timer_service() -> TimerService:
    """Get or create the TimerService singleton from configuration"""
    global _timer_service

    if _timer_service is None:
        if config.TIMER_STORE_PATH:
            store = JsonFileTimerStore(config.TIMER_STORE_PATH)
        else:
            store = InMemoryTimerStore()

        if config.EXPO_PUSH_TOKEN:
            notifier = ExpoPushNotifier(config.EXPO_PUSH_TOKEN)
        else:
            notifier = LoggingNotifier()

        _timer_service = TimerService(
            store=store,
            notifier=notifier,
            interval=config.TIMER_TICK_INTERVAL,
            vibration_pattern=config.TIMER_VIBRATION_PATTERN,
        )

    return _timer_service


def reset_timer_service():
    """Reset the TimerService singleton (useful for testing)"""
    global _timer_service
    _timer_service = None
