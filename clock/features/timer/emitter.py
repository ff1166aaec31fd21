"""In-process observer list used by Timer to publish tick/end events"""
import functools
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class Emitter:

    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}

    def subscribe(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if not handlers:
            return

        for registered in handlers:
            # bound methods compare equal, not identical
            if registered == handler or getattr(registered, "__wrapped__", None) == handler:
                handlers.remove(registered)
                return

    def once(self, event: str, handler: Handler) -> None:
        """Subscribe a handler that is removed after its first call"""

        @functools.wraps(handler)
        def wrapper(*args: Any) -> Any:
            self.unsubscribe(event, wrapper)
            return handler(*args)

        self.subscribe(event, wrapper)

    def publish(self, event: str, *args: Any) -> None:
        """
        Call every handler registered for the event, in subscription order.

        A failing handler is logged and does not stop the remaining handlers.
        """
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(*args)
            except Exception:
                logger.exception(f"Handler for '{event}' event failed")

    def clear(self) -> None:
        self._handlers.clear()
