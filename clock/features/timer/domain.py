"""Domain models for the Timer feature"""

import json
import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Storage key holding the single persisted timer
ACTIVE_TIMER_KEY = "active_timer"


class TimerState(int, Enum):
    """Timer lifecycle phase, persisted as its integer code"""
    INITIALIZED = 0
    STARTED = 1
    PAUSED = 2
    CANCELED = 3
    REACTIVATING = 4

    @classmethod
    def coerce(cls, value) -> "TimerState":
        """Map a raw state code to a TimerState, unknown codes become INITIALIZED"""
        try:
            return cls(value)
        except ValueError:
            logger.warning(f"Unknown timer state {value!r}, falling back to INITIALIZED")
            return cls.INITIALIZED


class TimerSnapshot(BaseModel):
    """Serialized timer record stored under ACTIVE_TIMER_KEY"""
    start_at: int = Field(0, alias="startAt")
    end_at: int = Field(0, alias="endAt")
    pause_at: int = Field(0, alias="pauseAt")
    duration: Optional[int] = None
    state: TimerState = TimerState.INITIALIZED
    sound: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("start_at", "end_at", "pause_at", mode="before")
    @classmethod
    def default_missing_instant(cls, value):
        # null instants default to 0; fractional millis are truncated
        if value is None:
            return 0
        if isinstance(value, float):
            return int(value)
        return value

    @field_validator("duration", mode="before")
    @classmethod
    def truncate_duration(cls, value):
        if isinstance(value, float):
            return int(value)
        return value

    @field_validator("state", mode="before")
    @classmethod
    def coerce_state(cls, value):
        if value is None:
            return TimerState.INITIALIZED
        return TimerState.coerce(value)

    def to_json(self) -> str:
        """Serialize with the camelCase keys used by the storage record"""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: Optional[str]) -> Optional["TimerSnapshot"]:
        """
        Parse a stored record.

        Args:
            raw: JSON text read from the store

        Returns:
            TimerSnapshot, or None when the record is missing or unreadable
        """
        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Stored timer is not valid JSON: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Stored timer is not an object: {type(data).__name__}")
            return None

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Stored timer failed validation: {e}")
            return None
