"""Request and response schemas for Timer API"""

from typing import Optional

from pydantic import BaseModel, Field


class StartTimerRequest(BaseModel):
    """Request model for creating and starting a timer"""
    duration_ms: int = Field(gt=0, description="Countdown length in milliseconds")
    sound: Optional[str] = Field(default=None, description="Sound played when the timer ends")


class TimerStatusResponse(BaseModel):
    """Current state of the active timer"""
    active: bool
    state: Optional[str] = None
    start_at: Optional[int] = None
    end_at: Optional[int] = None
    pause_at: Optional[int] = None
    duration: Optional[int] = None
    lapsed: Optional[int] = None
    remaining: Optional[int] = None
    display: Optional[str] = None
    sound: Optional[str] = None
