from uuid import UUID

import pytest
from fastapi import WebSocketDisconnect, status
from fastapi.testclient import TestClient

from familyhub.services import family_service
from familyhub.services.realtime import MessageBroker


def register(client: TestClient, email: str, name: str) -> str:
    response = client.post(
        "/auth/register",
        json={"email": email, "password": "testpass123", "name": name},
    )
    assert response.status_code == 201
    return response.json()["token"]["access_token"]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def household(ws_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    monkeypatch.setattr(family_service, "new_invite_code", lambda: "abc123")
    tokens = {
        "mom": register(ws_client, "mom@example.com", "Mom"),
        "dad": register(ws_client, "dad@example.com", "Dad"),
        "kid": register(ws_client, "kid@example.com", "Kid"),
    }
    family_res = ws_client.post("/families", json={"name": "The Smiths"}, headers=auth(tokens["mom"]))
    assert family_res.status_code == 201
    for name in ("dad", "kid"):
        join_res = ws_client.post("/families/join", json={"invite_code": "abc123"}, headers=auth(tokens[name]))
        assert join_res.status_code == 200
    tokens["family_id"] = family_res.json()["id"]
    return tokens


def test_stream_rejects_invalid_token(ws_client: TestClient) -> None:
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect("/messages/ws?token=not-a-jwt"):
            pass
    assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION


def test_stream_rejects_member_without_family(ws_client: TestClient) -> None:
    token = register(ws_client, "onboarding@example.com", "New")
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect(f"/messages/ws?token={token}"):
            pass
    assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION


def test_third_member_receives_messages_in_send_order(
    ws_client: TestClient,
    household: dict[str, str],
    live_broker: MessageBroker,
) -> None:
    family_id = UUID(household["family_id"])

    with ws_client.websocket_connect(f"/messages/ws?token={household['mom']}") as mom_stream:
        with ws_client.websocket_connect(f"/messages/ws?token={household['kid']}") as kid_stream:
            assert live_broker.subscriber_count(family_id) == 2

            sent = ws_client.post("/messages", json={"content": "Leaving now"}, headers=auth(household["kid"]))
            ping = ws_client.post("/messages/ping", json={"ping_type": "call_me"}, headers=auth(household["dad"]))
            assert sent.status_code == 201
            assert ping.status_code == 201

            first = mom_stream.receive_json()
            second = mom_stream.receive_json()
            assert [first["id"], second["id"]] == [sent.json()["id"], ping.json()["id"]]
            assert first["content"] == "Leaving now"
            assert first["sender"]["name"] == "Kid"
            assert second["message_type"] == "ping"
            assert second["content"] == "Call me"
            assert second["sender"]["name"] == "Dad"

            # The sender's own stream carries its message too; clients de-duplicate by id.
            assert kid_stream.receive_json()["id"] == sent.json()["id"]
            assert kid_stream.receive_json()["id"] == ping.json()["id"]

    assert live_broker.subscriber_count(family_id) == 0


def test_open_stream_does_not_hold_a_database_connection(
    ws_client: TestClient,
    household: dict[str, str],
) -> None:
    with ws_client.websocket_connect(f"/messages/ws?token={household['mom']}") as mom_stream:
        me_res = ws_client.get("/auth/me", headers=auth(household["mom"]))
        assert me_res.status_code == 200

        sent = ws_client.post("/messages", json={"content": "Still here"}, headers=auth(household["dad"]))
        assert sent.status_code == 201
        assert mom_stream.receive_json()["id"] == sent.json()["id"]


def test_signing_out_closes_the_stream(
    ws_client: TestClient,
    household: dict[str, str],
    live_broker: MessageBroker,
) -> None:
    family_id = UUID(household["family_id"])

    with ws_client.websocket_connect(f"/messages/ws?token={household['mom']}") as mom_stream:
        logout_res = ws_client.post("/auth/logout", headers=auth(household["mom"]))
        assert logout_res.status_code == 200

        with pytest.raises(WebSocketDisconnect) as exc_info:
            mom_stream.receive_text()
        assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION
        assert live_broker.subscriber_count(family_id) == 0

        after = ws_client.post("/messages", json={"content": "Anyone?"}, headers=auth(household["dad"]))
        assert after.status_code == 201

    with pytest.raises(WebSocketDisconnect) as exc_info:
        with ws_client.websocket_connect(f"/messages/ws?token={household['mom']}"):
            pass
    assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION
