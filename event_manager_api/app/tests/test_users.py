"""
Test profile maintenance, password change and user statistics.
"""
from fastapi.testclient import TestClient

from event_manager_api.app.tests.helpers import iso_in


class TestProfile:
    def test_get_profile(self, client: TestClient, alice):
        response = client.get("/api/users/profile", headers=alice["headers"])
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == alice["id"]
        assert user["email"] == "alice@example.com"
        assert user["name"] == "Alice"
        assert user["created_at"]
        assert "password_hash" not in user

    def test_update_profile(self, client: TestClient, alice):
        response = client.put(
            "/api/users/profile",
            json={"name": "Alice Smith", "email": "Alice.Smith@Example.com"},
            headers=alice["headers"],
        )
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Profile updated successfully"
        assert body["user"]["name"] == "Alice Smith"
        assert body["user"]["email"] == "alice.smith@example.com"

        # The token carries the user id, so it keeps working.
        profile = client.get("/api/users/profile", headers=alice["headers"]).json()["user"]
        assert profile["email"] == "alice.smith@example.com"

        login = client.post(
            "/api/auth/login",
            json={"email": "alice.smith@example.com", "password": alice["password"]},
        )
        assert login.status_code == 200

    def test_keep_own_email(self, client: TestClient, alice):
        response = client.put(
            "/api/users/profile",
            json={"name": "Renamed", "email": "alice@example.com"},
            headers=alice["headers"],
        )
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Renamed"

    def test_email_taken_by_other_user(self, client: TestClient, alice, bob):
        response = client.put(
            "/api/users/profile",
            json={"name": "Alice", "email": "BOB@example.com"},
            headers=alice["headers"],
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Email is already taken by another user"

    def test_invalid_profile(self, client: TestClient, alice):
        response = client.put(
            "/api/users/profile", json={"name": "", "email": "nope"}, headers=alice["headers"]
        )
        assert response.status_code == 400
        fields = {err["field"] for err in response.json()["errors"]}
        assert fields == {"name", "email"}

    def test_requires_authentication(self, client: TestClient):
        response = client.put("/api/users/profile", json={"name": "X", "email": "x@example.com"})
        assert response.status_code == 401


class TestChangePassword:
    def test_change_password(self, client: TestClient, alice):
        response = client.put(
            "/api/users/change-password",
            json={"currentPassword": alice["password"], "newPassword": "brand-new-pass"},
            headers=alice["headers"],
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Password changed successfully"}

        old = client.post("/api/auth/login", json={"email": alice["email"], "password": alice["password"]})
        assert old.status_code == 401
        new = client.post("/api/auth/login", json={"email": alice["email"], "password": "brand-new-pass"})
        assert new.status_code == 200

    def test_wrong_current_password(self, client: TestClient, alice):
        response = client.put(
            "/api/users/change-password",
            json={"currentPassword": "not-it", "newPassword": "brand-new-pass"},
            headers=alice["headers"],
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Current password is incorrect"

        login = client.post("/api/auth/login", json={"email": alice["email"], "password": alice["password"]})
        assert login.status_code == 200

    def test_new_password_too_short(self, client: TestClient, alice):
        response = client.put(
            "/api/users/change-password",
            json={"currentPassword": alice["password"], "newPassword": "123"},
            headers=alice["headers"],
        )
        assert response.status_code == 400
        assert response.json()["errors"] == [
            {"field": "newPassword", "message": "New password must be at least 6 characters long"}
        ]


class TestStats:
    def test_new_user_has_zero_stats(self, client: TestClient, alice):
        response = client.get("/api/users/stats", headers=alice["headers"])
        assert response.status_code == 200
        assert response.json() == {
            "stats": {"events_created": 0, "events_registered": 0, "upcoming_events": 0}
        }

    def test_counts(self, client: TestClient, app, alice, bob, make_event):
        make_event(alice)
        make_event(alice, date_time=iso_in(-1))
        upcoming = make_event(bob, date_time=iso_in(3))
        past = make_event(bob, date_time=iso_in(5))
        client.post(f"/api/events/{upcoming['id']}/register", headers=alice["headers"])
        client.post(f"/api/events/{past['id']}/register", headers=alice["headers"])
        with app.state.db.connection() as conn:
            conn.execute("UPDATE events SET date_time = '2000-01-01 00:00:00' WHERE id = ?", (past["id"],))
            conn.commit()

        stats = client.get("/api/users/stats", headers=alice["headers"]).json()["stats"]
        assert stats == {"events_created": 2, "events_registered": 2, "upcoming_events": 1}

        bob_stats = client.get("/api/users/stats", headers=bob["headers"]).json()["stats"]
        assert bob_stats == {"events_created": 2, "events_registered": 0, "upcoming_events": 0}
