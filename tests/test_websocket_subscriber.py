from __future__ import annotations

import asyncio
import json

from starlette.websockets import WebSocketState

from obsentra.services import RelayHub, WebSocketSubscriber


class RecordingWebSocket:
    """Stands in for a Starlette WebSocket; `stuck` makes every write hang."""

    def __init__(self, *, stuck: bool = False):
        self.client = None
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.stuck = stuck
        self.sent: list[str] = []
        self.close_codes: list[int] = []

    async def send_text(self, data: str) -> None:
        if self.stuck:
            await asyncio.Event().wait()
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.close_codes.append(code)
        self.application_state = WebSocketState.DISCONNECTED


def test_slow_client_is_dropped_when_outbox_fills() -> None:
    async def scenario() -> tuple[RecordingWebSocket, RelayHub, WebSocketSubscriber]:
        ws = RecordingWebSocket(stuck=True)
        hub = RelayHub()
        sub = WebSocketSubscriber(ws, max_pending=2)
        sub.start()

        assert hub.connect(sub) is True
        # Writer picks up the greeting and hangs on it
        await asyncio.sleep(0)

        for i in range(5):
            hub.report_reading("temp", i)

        await sub.wait_closed()
        return ws, hub, sub

    ws, hub, sub = asyncio.run(scenario())

    assert len(hub.registry) == 0
    assert sub.is_open() is False
    assert ws.close_codes == [WebSocketSubscriber.DROP_CLOSE_CODE]


def test_send_refused_once_outbox_is_full() -> None:
    async def scenario() -> list[bool]:
        sub = WebSocketSubscriber(RecordingWebSocket(stuck=True), max_pending=2)
        # No writer running, so nothing drains the outbox
        return [sub.send(f"m{i}") for i in range(3)]

    assert asyncio.run(scenario()) == [True, True, False]


def test_writer_delivers_in_order() -> None:
    async def scenario() -> RecordingWebSocket:
        ws = RecordingWebSocket()
        hub = RelayHub()
        sub = WebSocketSubscriber(ws, max_pending=8)
        sub.start()
        hub.connect(sub)
        hub.report_reading("temp", 1)
        hub.set_selection("humidity")

        for _ in range(10):
            await asyncio.sleep(0)
        hub.disconnect(sub)
        await sub.wait_closed()
        return ws

    ws = asyncio.run(scenario())

    assert [json.loads(m)["type"] for m in ws.sent] == ["SENSOR_UPDATE", "SENSOR_DATA", "SENSOR_UPDATE"]


def test_closed_socket_refuses_sends() -> None:
    async def scenario() -> bool:
        ws = RecordingWebSocket()
        ws.client_state = WebSocketState.DISCONNECTED
        return WebSocketSubscriber(ws).send("late")

    assert asyncio.run(scenario()) is False
