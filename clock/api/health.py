"""Health check endpoints"""

from fastapi import APIRouter, Depends

from clock.features.timer.service import TimerService, get_timer_service

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/")
async def health_check(service: TimerService = Depends(get_timer_service)):
    """Basic health check endpoint, reports whether a timer is ticking"""
    timer = service.timer
    return {
        "status": "healthy",
        "service": "clock-timer",
        "timer_ticking": bool(timer is not None and timer.is_ticking),
    }
