"""
HTTP and WebSocket tests through the FastAPI application.
"""

import json
import pytest

from treasury_chat.config import settings
from treasury_chat.models.activity_log import ActivityLog
from treasury_chat.models.user import UserRole
from treasury_chat.services.chat_orchestrator import FEATURE_MESSAGES
from treasury_chat.services.chat_store import ChatStore


@pytest.fixture
def trade_body(chat_turn, officer):
    session, message = chat_turn
    return {
        "user_id": officer.id,
        "session_id": session.session_id,
        "message_id": message.id,
        "trade_type": "Loan/Borrowing with Barclays Bank",
        "amount": "£5m at 4.5%",
        "details": "Borrow £5m at 4.5%",
        "rate": "4.5%",
    }


class TestAuth:
    """Registration, login and identity."""

    def test_root(self, client):
        assert client.get("/").json() == {"message": "Council Treasury Chat API"}

    def test_register_login_me(self, client):
        response = client.post("/api/auth/register", json={
            "email": "new.officer@council.gov.uk",
            "username": "new.officer",
            "password": "password123",
        })
        assert response.status_code == 200
        assert response.json()["role"] == "user"

        response = client.post("/api/auth/login", data={
            "username": "new.officer@council.gov.uk",
            "password": "password123",
        })
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["username"] == "new.officer"

    def test_duplicate_email(self, client, officer):
        response = client.post("/api/auth/register", json={
            "email": officer.email, "username": "someone.else", "password": "password123",
        })
        assert response.status_code == 400

    def test_super_user_cannot_self_register(self, client):
        response = client.post("/api/auth/register", json={
            "email": "boss@council.gov.uk",
            "username": "boss",
            "password": "password123",
            "role": "super_user",
        })
        assert response.status_code == 403

    def test_wrong_password(self, client, officer):
        response = client.post("/api/auth/login", data={"username": officer.email, "password": "nope"})
        assert response.status_code == 401

    def test_missing_token(self, client):
        assert client.get("/api/auth/me").status_code == 401


class TestChatRoutes:
    """Chat turns and session history."""

    def test_feature_request(self, client, officer, auth_headers):
        response = client.post("/api/chat", json={"message": "Show me my trades"}, headers=auth_headers(officer))
        assert response.status_code == 200
        body = response.json()
        assert body["sessionId"]
        payload = json.loads(body["message"])
        assert payload["feature"] == "trades"
        assert payload["message"] == FEATURE_MESSAGES[("trades", "view")]

    def test_empty_message_rejected(self, client, officer, auth_headers):
        response = client.post("/api/chat", json={"message": ""}, headers=auth_headers(officer))
        assert response.status_code == 422

    def test_chat_trade_shows_in_my_trades(self, client, officer, auth_headers):
        headers = auth_headers(officer)
        client.post("/api/chat", json={"message": "We can offer £10m for 3 months at 4.6%"}, headers=headers)

        trades = client.get("/api/trades/mine", headers=headers).json()
        assert len(trades) == 1
        assert trades[0]["status"] == "negotiation"
        assert trades[0]["rate"] == "4.6%"

    def test_sessions_and_messages(self, client, officer, auth_headers):
        headers = auth_headers(officer)
        session_id = client.post("/api/sessions", headers=headers).json()["sessionId"]
        client.post("/api/chat", json={"message": "Hello", "sessionId": session_id}, headers=headers)

        sessions = client.get("/api/sessions", headers=headers).json()
        assert [s["session_id"] for s in sessions] == [session_id]

        messages = client.get(f"/api/messages/{session_id}", headers=headers).json()
        assert [m["is_user"] for m in messages] == [True, False]
        assert messages[0]["content"] == "Hello"

    def test_unknown_session_messages(self, client, officer, auth_headers):
        response = client.get("/api/messages/unknown", headers=auth_headers(officer))
        assert response.status_code == 404

    def test_other_users_session_cannot_be_read(self, client, chat_turn, make_user, auth_headers):
        session, _ = chat_turn
        intruder = make_user("intruder")
        response = client.get(f"/api/messages/{session.session_id}", headers=auth_headers(intruder))
        assert response.status_code == 404

    def test_other_users_session_cannot_be_written(self, db, client, chat_turn, make_user, auth_headers):
        session, _ = chat_turn
        intruder = make_user("intruder")
        response = client.post(
            "/api/chat",
            json={"message": "Hello", "sessionId": session.session_id},
            headers=auth_headers(intruder),
        )
        assert response.status_code == 404
        db.expire_all()
        assert len(ChatStore(db).list_session_messages(session.session_id)) == 1

    def test_council_info(self, client, officer, auth_headers):
        response = client.get("/api/council", headers=auth_headers(officer))
        assert response.status_code == 200
        assert response.json() == {
            "id": 1,
            "name": "Birmingham City Council",
            "councilId": "BCC-4578",
            "financialYear": "2023/24",
        }


class TestTradeRoutes:
    """Trade creation, review and approval."""

    def test_create_trade(self, client, officer, auth_headers, trade_body):
        response = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer))
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "pending"
        assert body["approved_by"] is None

    def test_create_trade_unknown_session(self, client, officer, auth_headers, trade_body):
        trade_body["session_id"] = "does-not-exist"
        response = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer))
        assert response.status_code == 404

    def test_create_trade_unknown_message(self, client, officer, auth_headers, trade_body):
        trade_body["message_id"] = 9999
        response = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer))
        assert response.status_code == 404

    def test_officer_cannot_create_for_another_user(self, client, officer, make_user, auth_headers, trade_body):
        colleague = make_user("colleague")
        trade_body["user_id"] = colleague.id
        response = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer))
        assert response.status_code == 403

    def test_officer_cannot_use_another_users_session(self, client, make_user, auth_headers, trade_body):
        intruder = make_user("intruder")
        trade_body["user_id"] = intruder.id
        response = client.post("/api/trades/", json=trade_body, headers=auth_headers(intruder))
        assert response.status_code == 404

    def test_reviewer_can_create_for_another_user(self, client, super_user, auth_headers, trade_body):
        response = client.post("/api/trades/", json=trade_body, headers=auth_headers(super_user))
        assert response.status_code == 200
        assert response.json()["user_id"] == trade_body["user_id"]

    def test_listing_requires_reviewer(self, client, officer, super_user, auth_headers, trade_body):
        client.post("/api/trades/", json=trade_body, headers=auth_headers(officer))
        assert client.get("/api/trades/", headers=auth_headers(officer)).status_code == 403

        pending = client.get("/api/trades/?status=pending", headers=auth_headers(super_user)).json()
        assert len(pending) == 1
        assert client.get("/api/trades/?status=executed", headers=auth_headers(super_user)).json() == []

    def test_get_trade(self, client, officer, super_user, make_user, auth_headers, trade_body):
        trade_id = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer)).json()["id"]
        assert client.get(f"/api/trades/{trade_id}", headers=auth_headers(officer)).status_code == 200
        assert client.get(f"/api/trades/{trade_id}", headers=auth_headers(super_user)).status_code == 200

        stranger = make_user("stranger")
        assert client.get(f"/api/trades/{trade_id}", headers=auth_headers(stranger)).status_code == 403
        assert client.get("/api/trades/9999", headers=auth_headers(officer)).status_code == 404

    def test_only_super_user_updates_status(self, client, officer, auth_headers, trade_body):
        trade_id = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer)).json()["id"]
        response = client.patch(
            f"/api/trades/{trade_id}/status", json={"status": "approved"}, headers=auth_headers(officer)
        )
        assert response.status_code == 403

    def test_approve_then_execute(self, db, client, officer, super_user, auth_headers, trade_body):
        headers = auth_headers(super_user)
        trade_id = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer)).json()["id"]

        approved = client.patch(f"/api/trades/{trade_id}/status", json={
            "status": "approved", "approval_comment": "Within limits",
        }, headers=headers).json()
        assert approved["status"] == "approved"
        assert approved["approved_by"] == super_user.id
        assert approved["approval_comment"] == "Within limits"

        executed = client.patch(f"/api/trades/{trade_id}/status", json={
            "status": "executed", "rate": "4.55%",
        }, headers=headers).json()
        assert executed["status"] == "executed"
        assert executed["rate"] == "4.55%"
        assert executed["approved_by"] == super_user.id

        activity = client.get(f"/api/trades/{trade_id}/activity", headers=headers).json()
        assert len(activity) == 2
        assert db.query(ActivityLog).filter(ActivityLog.trade_id == trade_id).count() == 2

    def test_approver_is_always_the_caller(self, client, officer, super_user, make_user, auth_headers, trade_body):
        other_approver = make_user("other.approver", UserRole.super_user)
        trade_id = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer)).json()["id"]

        response = client.patch(f"/api/trades/{trade_id}/status", json={
            "status": "approved", "approved_by": other_approver.id,
        }, headers=auth_headers(super_user))
        assert response.status_code == 200
        assert response.json()["approved_by"] == super_user.id

    def test_update_missing_trade(self, client, super_user, auth_headers):
        response = client.patch(
            "/api/trades/9999/status", json={"status": "approved"}, headers=auth_headers(super_user)
        )
        assert response.status_code == 404

    def test_enforced_transition_conflict(self, client, officer, super_user, auth_headers, trade_body, monkeypatch):
        monkeypatch.setattr(settings, "enforce_trade_transitions", True)
        trade_id = client.post("/api/trades/", json=trade_body, headers=auth_headers(officer)).json()["id"]
        response = client.patch(
            f"/api/trades/{trade_id}/status", json={"status": "executed"}, headers=auth_headers(super_user)
        )
        assert response.status_code == 409


class TestNotificationsSocket:
    """WebSocket authentication and keep-alive."""

    def test_missing_token(self, client):
        with client.websocket_connect("/ws/notifications") as websocket:
            message = websocket.receive_json()
        assert message["error"] == "Authentication failed"
        assert message["details"] == "Missing authentication token"

    def test_connected_and_ping(self, client, officer, auth_headers):
        token = auth_headers(officer)["Authorization"].split()[1]
        with client.websocket_connect(f"/ws/notifications?token={token}") as websocket:
            assert websocket.receive_json() == {"type": "connected", "userId": officer.id}
            websocket.send_text("ping")
            assert websocket.receive_text() == "pong"
