from __future__ import annotations

from contextlib import ExitStack

from fastapi.testclient import TestClient

from obsentra.services import RelayHub


def test_snapshot_on_connect(client: TestClient) -> None:
    client.post("/set-sensor", json={"sensor": "X"})

    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "SENSOR_UPDATE", "sensor": "X"}


def test_greeting_is_none_before_any_selection(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        assert ws.receive_json() == {"type": "SENSOR_UPDATE", "sensor": "NONE"}


def test_root_path_also_streams(client: TestClient) -> None:
    with client.websocket_connect("/") as ws:
        assert ws.receive_json()["type"] == "SENSOR_UPDATE"


def test_reading_fans_out_to_all_streams(client: TestClient) -> None:
    with ExitStack() as stack:
        sockets = [stack.enter_context(client.websocket_connect("/ws")) for _ in range(3)]
        for ws in sockets:
            ws.receive_json()

        client.post("/sensor-data", json={"sensor": "temp", "value": 21.5})

        for ws in sockets:
            msg = ws.receive_json()
            assert msg["type"] == "SENSOR_DATA"
            assert msg["sensor"] == "temp"
            assert msg["value"] == 21.5
            assert msg["timestamp"]


def test_stream_selection_round_trip(client: TestClient) -> None:
    with client.websocket_connect("/ws") as sender, client.websocket_connect("/ws") as other:
        sender.receive_json()
        other.receive_json()

        sender.send_json({"type": "SENSOR_UPDATE", "sensor": "humidity"})

        expected = {"type": "SENSOR_UPDATE", "sensor": "humidity"}
        assert sender.receive_json() == expected
        assert other.receive_json() == expected
        assert client.get("/get-sensor").json() == {"sensor": "humidity"}


def test_malformed_stream_messages_keep_connection_open(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()

        ws.send_text("definitely not json")
        ws.send_json({"type": "SOMETHING_ELSE"})
        ws.send_json({"type": "SENSOR_UPDATE", "sensor": 5})
        ws.send_bytes(b"\xff\xfe")
        ws.send_json({"type": "SENSOR_UPDATE", "sensor": "pressure"})

        assert ws.receive_json() == {"type": "SENSOR_UPDATE", "sensor": "pressure"}
        assert client.get("/get-sensor").json() == {"sensor": "pressure"}


def test_status_counts_connected_streams(client: TestClient, hub: RelayHub) -> None:
    with client.websocket_connect("/ws") as a, client.websocket_connect("/ws") as b:
        a.receive_json()
        b.receive_json()

        assert client.get("/status").json()["subscriber_count"] == 2

    assert len(hub.registry) == 0


def test_http_selection_reaches_stream(client: TestClient) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()

        client.post("/set-sensor", json={"sensor": "light"})

        assert ws.receive_json() == {"type": "SENSOR_UPDATE", "sensor": "light"}


def test_deeply_nested_stream_message_keeps_connection_open(client: TestClient, hub: RelayHub) -> None:
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()

        ws.send_text("[" * 200000)
        ws.send_text('{"type": "SENSOR_UPDATE", "sensor": "x", "extra": ' + "[" * 200000 + "]" * 200000 + "}")
        ws.send_json({"type": "SENSOR_UPDATE", "sensor": "wind"})

        assert ws.receive_json() == {"type": "SENSOR_UPDATE", "sensor": "wind"}
        assert len(hub.registry) == 1
