# API module exports
from clock.api import health
from clock.api.base import api_router

__all__ = ["health", "api_router"]
