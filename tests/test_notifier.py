import json
import logging

import httpx

from clock.features.timer.notifier import EXPO_PUSH_URL, ExpoPushNotifier, LoggingNotifier


def _expo(handler):
    sent = []

    def record(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return handler(request)

    return sent, httpx.MockTransport(record)


def test_logging_notifier(caplog):
    notifier = LoggingNotifier()

    with caplog.at_level(logging.INFO):
        notifier.vibrate([200, 100])
        notifier.play_sound("bell.ogg")

    assert "Vibrate: [200, 100]" in caplog.text
    assert "Play sound: bell.ogg" in caplog.text


async def test_expo_notifier_sends_vibrate_and_sound():
    sent, transport = _expo(
        lambda request: httpx.Response(200, json={"data": [{"status": "ok", "id": "t1"}]})
    )
    notifier = ExpoPushNotifier("ExponentPushToken[abc]", transport=transport)

    notifier.vibrate([200, 200])
    notifier.play_sound("bell.ogg")
    await notifier.flush()

    assert len(sent) == 2
    by_action = {batch[0]["data"]["action"]: batch[0] for batch in sent}
    vibrate, sound = by_action["vibrate"], by_action["play_sound"]
    assert vibrate["to"] == "ExponentPushToken[abc]"
    assert vibrate["data"] == {"action": "vibrate", "pattern": [200, 200]}
    assert vibrate["sound"] is None
    assert sound["data"] == {"action": "play_sound", "sound": "bell.ogg"}
    assert sound["sound"] == "bell.ogg"


async def test_expo_notifier_posts_to_push_endpoint():
    urls = []

    def handler(request):
        urls.append(str(request.url))
        return httpx.Response(200, json={"data": [{"status": "ok"}]})

    notifier = ExpoPushNotifier("token", transport=httpx.MockTransport(handler))

    assert await notifier.send(notifier._build_message(None, {"action": "vibrate"}))
    assert urls == [EXPO_PUSH_URL]


async def test_expo_notifier_logs_http_errors(caplog):
    _, transport = _expo(lambda request: httpx.Response(500, text="unavailable"))
    notifier = ExpoPushNotifier("token", transport=transport)

    with caplog.at_level(logging.ERROR):
        ok = await notifier.send(notifier._build_message(None, {"action": "vibrate"}))

    assert ok is False
    assert "Expo API error 500" in caplog.text


async def test_expo_notifier_logs_rejected_tickets(caplog):
    _, transport = _expo(lambda request: httpx.Response(
        200, json={"data": [{"status": "error", "message": "DeviceNotRegistered"}]}
    ))
    notifier = ExpoPushNotifier("token", transport=transport)

    with caplog.at_level(logging.WARNING):
        ok = await notifier.send(notifier._build_message("bell", {"action": "play_sound"}))

    assert ok is False
    assert "DeviceNotRegistered" in caplog.text


async def test_expo_notifier_survives_transport_failure(caplog):
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    notifier = ExpoPushNotifier("token", transport=httpx.MockTransport(handler))

    with caplog.at_level(logging.ERROR):
        notifier.vibrate([100])
        await notifier.flush()

    assert "Error sending timer push notification" in caplog.text


def test_expo_notifier_without_event_loop(caplog):
    notifier = ExpoPushNotifier("token")

    with caplog.at_level(logging.WARNING):
        notifier.vibrate([100])

    assert "dropping push notification" in caplog.text
