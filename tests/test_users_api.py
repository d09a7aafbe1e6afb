"""Tests for the user profile API and actor resolution"""

import pytest
from postgrest.exceptions import APIError

from attenthive.core.exceptions import InternalError
from attenthive.modules.users.service import EXTERNAL_AUTH_PASSWORD_PLACEHOLDER, UserService


class TestProfileEndpoints:
    def test_get_profile(self, client, alice):
        response = client.get("/api/v1/users/me", headers=alice.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == alice.email
        assert data["name"] == "Alice"
        assert data["phone"] is None

    def test_partial_update(self, client, db, alice):
        response = client.patch(
            "/api/v1/users/me",
            json={"phone": "555-0100"},
            headers=alice.headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["phone"] == "555-0100"
        assert data["name"] == "Alice"

    def test_empty_update(self, client, alice):
        response = client.patch("/api/v1/users/me", json={}, headers=alice.headers)
        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"

    def test_requires_auth(self, client):
        assert client.get("/api/v1/users/me").status_code == 401


class TestActorResolution:
    def test_first_request_creates_users_row(self, client, db):
        account = db.auth.create_account("newcomer@example.com", name="Newcomer")
        token = db.auth.issue_token(account)
        response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        [row] = db.tables["users"]
        assert row["email"] == "newcomer@example.com"
        assert row["name"] == "Newcomer"
        assert row["password_hash"] == EXTERNAL_AUTH_PASSWORD_PLACEHOLDER

    def test_existing_row_reused(self, client, db, alice):
        client.get("/api/v1/users/me", headers=alice.headers)
        client.get("/api/v1/users/me", headers=alice.headers)
        assert len(db.tables["users"]) == 1

    def test_token_lookup_cached(self, client, db, alice):
        client.get("/api/v1/users/me", headers=alice.headers)
        client.get("/api/v1/users/me", headers=alice.headers)
        assert db.auth.get_user_calls == 1


class TestGetOrCreate:
    def test_lost_insert_race_reads_winner(self, db, monkeypatch):
        service = UserService(db)
        winner = db.insert_rows("users", {"email": "race@example.com", "name": "Winner"})[0]
        lookups = iter([None, winner])
        monkeypatch.setattr(service, "get_user_by_email", lambda email: next(lookups))

        actor = service.get_or_create_by_email("race@example.com", "Loser")
        assert actor.id == winner["id"]
        assert len(db.tables["users"]) == 1

    def test_other_insert_errors_surface(self, db, monkeypatch):
        service = UserService(db)

        def broken_create(email, name=""):
            raise APIError({"code": "XX000", "message": "boom", "hint": None, "details": None})

        monkeypatch.setattr(service, "create_user", broken_create)
        with pytest.raises(InternalError):
            service.get_or_create_by_email("someone@example.com")
