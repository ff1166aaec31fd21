from fastapi import APIRouter
from clock.api import health
from clock.features.timer import router as timer_router

api_router = APIRouter()

# Include all sub-routers
api_router.include_router(health.router)
api_router.include_router(timer_router)
