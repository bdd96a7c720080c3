"""Integration tests for the account endpoints."""

from sqlalchemy import func, select

from formly.models.form import Form
from formly.models.user import User


class TestSignIn:
    """Test suite for POST /api/auth/signin."""

    def test_success_sets_cookie(self, client, alice, sign_in):
        """Test that signing in returns the user and a session cookie."""
        response = sign_in(client, "alice@example.com")

        assert response.status_code == 200
        body = response.json()
        assert body == {
            "id": alice.id,
            "name": "Alice",
            "email": "alice@example.com",
            "redirect": "/dashboard",
        }
        assert "auth-token" in response.cookies
        set_cookie = response.headers["set-cookie"]
        assert "HttpOnly" in set_cookie
        assert "SameSite=strict" in set_cookie

    def test_email_case_ignored(self, client, alice, sign_in):
        assert sign_in(client, "ALICE@example.com").status_code == 200

    def test_wrong_password(self, client, alice, sign_in):
        """Test that bad credentials get a uniform 401."""
        response = sign_in(client, "alice@example.com", "wrong-password")

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}
        assert "auth-token" not in response.cookies

    def test_unknown_email_same_error(self, client, sign_in):
        response = sign_in(client, "ghost@example.com")

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    def test_malformed_body(self, client):
        """Test that body validation failures are 400 with a field name."""
        response = client.post("/api/auth/signin", json={"email": "not-an-email", "password": "x"})

        assert response.status_code == 400
        assert response.json()["error"].startswith("email")


class TestSignUp:
    """Test suite for POST /api/auth/signup."""

    def test_creates_account_and_signs_in(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"name": "Dana", "email": "Dana@Example.com", "password": "secret1"},
        )

        assert response.status_code == 201
        assert response.json()["email"] == "dana@example.com"
        assert client.get("/api/auth/me").json()["name"] == "Dana"

    def test_duplicate_email(self, client, alice):
        response = client.post(
            "/api/auth/signup",
            json={"email": "alice@example.com", "password": "secret1"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Email is already registered"}

    def test_short_password(self, client):
        response = client.post(
            "/api/auth/signup", json={"email": "e@example.com", "password": "123"}
        )

        assert response.status_code == 400


class TestSession:
    """Test suite for session-protected account endpoints."""

    def test_me_requires_session(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    def test_tampered_cookie(self, client, alice):
        client.cookies.set("auth-token", "tampered.token.value")

        assert client.get("/api/auth/me").status_code == 401

    def test_signout_clears_cookie(self, alice_client):
        response = alice_client.post("/api/auth/signout")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert alice_client.get("/api/auth/me").status_code == 401

    def test_update_profile(self, alice_client, db_session):
        response = alice_client.put(
            "/api/auth/me", json={"name": "Alicia", "email": "alicia@example.com"}
        )

        assert response.status_code == 200
        assert response.json()["email"] == "alicia@example.com"
        assert "auth-token" in response.cookies
        db_session.expire_all()
        assert User.get_by_email(db_session, "alicia@example.com").name == "Alicia"

    def test_update_profile_to_taken_email(self, alice_client, bob):
        response = alice_client.put(
            "/api/auth/me", json={"name": "Alice", "email": "bob@example.com"}
        )

        assert response.status_code == 400

    def test_change_password(self, alice_client, client, sign_in):
        response = alice_client.put(
            "/api/auth/password",
            json={"currentPassword": "correct-horse", "newPassword": "battery-staple"},
        )

        assert response.status_code == 200
        assert sign_in(client, "alice@example.com", "battery-staple").status_code == 200
        assert sign_in(client, "alice@example.com", "correct-horse").status_code == 401

    def test_change_password_wrong_current(self, alice_client):
        response = alice_client.put(
            "/api/auth/password",
            json={"currentPassword": "nope", "newPassword": "battery-staple"},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Current password is incorrect"}

    def test_delete_account_removes_forms(self, alice_client, db_session):
        """Test that deleting an account takes its forms with it."""
        created = alice_client.post(
            "/api/forms", json={"title": "Mine", "questions": [{"text": "Q1"}]}
        )
        assert created.status_code == 200

        response = alice_client.delete("/api/auth/delete")

        assert response.status_code == 200
        db_session.expire_all()
        assert db_session.execute(select(func.count()).select_from(Form)).scalar_one() == 0
        assert User.get_by_email(db_session, "alice@example.com") is None
        assert alice_client.get("/api/auth/me").status_code == 401
