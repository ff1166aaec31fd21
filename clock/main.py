import logging

from clock import config

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from clock.api.base import api_router  # noqa: E402
from clock.features.timer.service import get_timer_service  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Bring back a timer left running or paused by the previous process
    service = get_timer_service()
    timer = await service.restore()
    if timer is not None:
        logger.info(f"Active timer restored: {timer.state.name}")

    yield

    await service.shutdown()


app = FastAPI(
    title="Clock Timer API",
    description="Countdown timer of the device clock",
    version="1.0.0",
    lifespan=lifespan,
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Clock Timer API",
        "docs": "/docs",
        "version": "1.0.0"
    }
