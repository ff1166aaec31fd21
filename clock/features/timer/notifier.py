"""
Device feedback for an expired timer

Vibration and sound are device capabilities. The clock either logs them
(no device attached) or forwards them to the paired phone via Expo Push API.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol, Set

import httpx

logger = logging.getLogger(__name__)

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"


class Notifier(Protocol):
    """Notification port used by Timer.notify()"""

    def vibrate(self, pattern: List[int]) -> None:
        ...

    def play_sound(self, sound: str) -> None:
        ...


class LoggingNotifier:
    """Notifier for hosts without a device, records the alert in the log"""

    def vibrate(self, pattern: List[int]) -> None:
        logger.info(f"Vibrate: {pattern}")

    def play_sound(self, sound: str) -> None:
        logger.info(f"Play sound: {sound}")


class ExpoPushNotifier:
    """Forward timer alerts to a device through Expo push notifications"""

    def __init__(
        self,
        push_token: str,
        title: str = "Timer",
        body: str = "Time's up!",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            push_token: Expo push token of the target device
            title: Notification title
            body: Notification body
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.push_token = push_token
        self.title = title
        self.body = body
        self._transport = transport
        self._pending: Set[asyncio.Task] = set()

    def vibrate(self, pattern: List[int]) -> None:
        self._dispatch(self._build_message(
            sound=None,
            data={"action": "vibrate", "pattern": list(pattern)},
        ))

    def play_sound(self, sound: str) -> None:
        self._dispatch(self._build_message(
            sound=sound,
            data={"action": "play_sound", "sound": sound},
        ))

    async def flush(self) -> None:
        """Wait for every push submitted so far"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _build_message(self, sound: Optional[str], data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "to": self.push_token,
            "title": self.title,
            "body": self.body,
            "data": data,
            "sound": sound,
            "priority": "high",
            "channelId": "timer",
        }

    def _dispatch(self, message: Dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, dropping push notification")
            return

        task = loop.create_task(self.send(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def send(self, message: Dict[str, Any]) -> bool:
        """
        Send one message to Expo Push API.

        Args:
            message: Expo push message

        Returns:
            True when Expo accepted the message
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    EXPO_PUSH_URL,
                    json=[message],
                    headers={
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                        "Accept-Encoding": "gzip, deflate",
                    },
                    timeout=10.0,
                )
        except httpx.HTTPError as e:
            logger.error(f"Error sending timer push notification: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"Expo API error {response.status_code}: {response.text}")
            return False

        try:
            tickets = response.json().get("data", [])
        except ValueError as e:
            logger.error(f"Unreadable Expo response: {e}")
            return False

        errors = [t for t in tickets if t.get("status") == "error"]
        if errors:
            for error in errors:
                logger.warning(f"Expo rejected timer push: {error.get('message', '')}")
            return False

        logger.info(f"Timer push sent: {message['data'].get('action')}")
        return True
