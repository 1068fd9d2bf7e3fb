"""
Test the ``requests`` based API client against a mocked session.
"""
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from event_manager_api.client import EventManagerAPI


def make_response(status_code: int, payload=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.url = "http://testserver/api"
    response._content = json.dumps(payload).encode() if payload is not None else b""
    return response


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session) -> EventManagerAPI:
    return EventManagerAPI(base_url="http://testserver/api/", session=session)


def sent(session: MagicMock) -> dict:
    return session.request.call_args.kwargs


class TestSession:
    def test_login_stores_token(self, api, session):
        session.request.return_value = make_response(
            200, {"success": True, "message": "Login successful", "user": {"id": 7}, "token": "tok"}
        )
        data, error = api.login("a@example.com", "secret123")

        assert error is None
        assert data["token"] == "tok"
        assert api.token == "tok"
        assert api.user == {"id": 7}
        assert sent(session)["url"] == "http://testserver/api/auth/login"
        assert sent(session)["method"] == "POST"

        session.request.return_value = make_response(200, {"user": {"id": 7}})
        api.get_profile()
        assert sent(session)["headers"]["Authorization"] == "Bearer tok"

    def test_failed_login_keeps_no_token(self, api, session):
        session.request.return_value = make_response(401, {"message": "Invalid email or password"})
        data, error = api.login("a@example.com", "bad")
        assert data is None
        assert error == {"status_code": 401, "message": "Invalid email or password"}
        assert api.token is None

    def test_unauthorized_response_clears_session(self, session):
        api = EventManagerAPI(base_url="http://testserver/api", token="stale", session=session)
        api.user = {"id": 1}
        session.request.return_value = make_response(401, {"message": "Token expired"})

        data, error = api.get_stats()
        assert data is None
        assert error["message"] == "Token expired"
        assert api.token is None
        assert api.user is None

    def test_forbidden_keeps_session(self, session):
        api = EventManagerAPI(base_url="http://testserver/api", token="tok", session=session)
        session.request.return_value = make_response(403, {"message": "Only event creator can perform this action"})
        ok, error = api.delete_event(3)
        assert ok is False
        assert error["status_code"] == 403
        assert api.token == "tok"

    def test_no_authorization_header_without_token(self, api, session):
        session.request.return_value = make_response(200, {"events": [], "total": 0})
        api.list_events()
        assert "Authorization" not in sent(session)["headers"]


class TestEvents:
    def test_list_events(self, api, session):
        session.request.return_value = make_response(200, {"events": [{"id": 1}], "total": 1})
        events, error = api.list_events()
        assert events == [{"id": 1}]
        assert error is None

    def test_list_error_returns_empty_list(self, api, session):
        session.request.return_value = make_response(500, {"message": "Internal server error"})
        events, error = api.list_events()
        assert events == []
        assert error == {"status_code": 500, "message": "Internal server error"}

    def test_search_sends_only_given_filters(self, api, session):
        session.request.return_value = make_response(200, {"events": [], "total": 0})
        api.search_events(q="yoga", date_from=datetime(2099, 1, 1, tzinfo=timezone.utc))
        assert sent(session)["params"] == {"q": "yoga", "date_from": "2099-01-01T00:00:00+00:00"}
        assert sent(session)["url"].endswith("/events/search")

    def test_create_event_sends_full_body(self, api, session):
        session.request.return_value = make_response(201, {"message": "Event created successfully", "event": {"id": 5}})
        event, error = api.create_event("Yoga", "2099-01-01T10:00:00Z", "Hall", 10)
        assert event == {"id": 5}
        assert sent(session)["json"] == {
            "title": "Yoga",
            "description": None,
            "date_time": "2099-01-01T10:00:00Z",
            "location": "Hall",
            "max_capacity": 10,
        }

    def test_validation_error_message(self, api, session):
        session.request.return_value = make_response(
            400,
            {"message": "Validation failed", "errors": [{"field": "title", "message": "Title is required"}]},
        )
        event, error = api.update_event(5, "", "2099-01-01T10:00:00Z", "Hall", 10)
        assert event is None
        assert error == {"status_code": 400, "message": "Validation failed"}
        assert sent(session)["method"] == "PUT"

    def test_network_failure(self, api, session):
        session.request.side_effect = requests.ConnectionError("connection refused")
        event, error = api.get_event(1)
        assert event is None
        assert error["status_code"] is None
        assert "connection refused" in error["message"]


class TestRegistrations:
    def test_register_and_cancel(self, api, session):
        session.request.return_value = make_response(201, {"registration": {"id": 9, "event_id": 3}})
        registration, error = api.register_for_event(3)
        assert registration["id"] == 9
        assert sent(session)["url"] == "http://testserver/api/events/3/register"

        session.request.return_value = make_response(200, {"message": "Registration cancelled successfully"})
        ok, error = api.cancel_registration(3)
        assert ok is True
        assert sent(session)["method"] == "DELETE"

    def test_list_registrations_defaults_to_logged_in_user(self, api, session):
        api.token = "tok"
        api.user = {"id": 42}
        session.request.return_value = make_response(200, {"registrations": [{"id": 1}], "total": 1})
        registrations, error = api.list_registrations()
        assert registrations == [{"id": 1}]
        assert sent(session)["url"].endswith("/events/users/42/registrations")

    def test_list_registrations_requires_user(self, api, session):
        registrations, error = api.list_registrations()
        assert registrations == []
        assert error["message"] == "Not logged in"
        session.request.assert_not_called()


class TestProfile:
    def test_update_profile_refreshes_user(self, api, session):
        session.request.return_value = make_response(
            200, {"message": "Profile updated successfully", "user": {"id": 1, "name": "New"}}
        )
        user, error = api.update_profile("New", "new@example.com")
        assert user == {"id": 1, "name": "New"}
        assert api.user == user

    def test_change_password_uses_wire_names(self, api, session):
        session.request.return_value = make_response(200, {"message": "Password changed successfully"})
        ok, error = api.change_password("old-pass", "new-pass")
        assert ok is True
        assert sent(session)["json"] == {"currentPassword": "old-pass", "newPassword": "new-pass"}
