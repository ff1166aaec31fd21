"""Timer feature module"""

from clock.features.timer.api import router
from clock.features.timer.domain import ACTIVE_TIMER_KEY, TimerSnapshot, TimerState
from clock.features.timer.emitter import Emitter
from clock.features.timer.notifier import ExpoPushNotifier, LoggingNotifier, Notifier
from clock.features.timer.repository import InMemoryTimerStore, JsonFileTimerStore, TimerStore
from clock.features.timer.schemas import StartTimerRequest, TimerStatusResponse
from clock.features.timer.service import (
    TimerNotFoundError,
    TimerService,
    TimerStateError,
    get_timer_service,
    reset_timer_service,
)
from clock.features.timer.timer import Timer

__all__ = [
    "router",
    "ACTIVE_TIMER_KEY",
    "TimerSnapshot",
    "TimerState",
    "Emitter",
    "ExpoPushNotifier",
    "LoggingNotifier",
    "Notifier",
    "InMemoryTimerStore",
    "JsonFileTimerStore",
    "TimerStore",
    "StartTimerRequest",
    "TimerStatusResponse",
    "TimerNotFoundError",
    "TimerService",
    "TimerStateError",
    "get_timer_service",
    "reset_timer_service",
    "Timer",
]
