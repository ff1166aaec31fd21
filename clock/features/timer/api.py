"""Timer API endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from clock.features.timer.schemas import StartTimerRequest, TimerStatusResponse
from clock.features.timer.service import (
    TimerNotFoundError,
    TimerService,
    TimerStateError,
    get_timer_service,
)

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/timer", tags=["timer"])


def _raise_http(e: ValueError) -> None:
    if isinstance(e, TimerNotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, TimerStateError):
        raise HTTPException(status_code=409, detail=str(e))
    raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=TimerStatusResponse)
async def get_timer(service: TimerService = Depends(get_timer_service)):
    """Get the active timer, or {"active": false} when there is none"""
    return service.status()


@router.post("/", response_model=TimerStatusResponse)
async def start_timer(
    request: StartTimerRequest,
    service: TimerService = Depends(get_timer_service),
):
    """
    Create and start a timer, replacing any active one.

    Returns:
        Status of the started timer
    """
    try:
        service.create(request.duration_ms, request.sound)
    except ValueError as e:
        logger.error(f"Failed to start timer: {e}")
        _raise_http(e)

    logger.info(f"Timer started via API: {request.duration_ms}ms")
    return service.status()


@router.post("/pause", response_model=TimerStatusResponse)
async def pause_timer(service: TimerService = Depends(get_timer_service)):
    """Pause the running timer"""
    try:
        service.pause()
    except ValueError as e:
        _raise_http(e)
    return service.status()


@router.post("/resume", response_model=TimerStatusResponse)
async def resume_timer(service: TimerService = Depends(get_timer_service)):
    """
    Resume a paused timer.

    The countdown restarts with its full duration.
    """
    try:
        service.resume()
    except ValueError as e:
        _raise_http(e)
    return service.status()


@router.post("/cancel", response_model=TimerStatusResponse)
async def cancel_timer(service: TimerService = Depends(get_timer_service)):
    """Cancel the active timer and clear its stored record"""
    try:
        service.cancel()
    except ValueError as e:
        _raise_http(e)
    return service.status()
