"""Tests for local accounts and bearer tokens."""

from datetime import datetime, timedelta, timezone

from voice_studio.services.auth import create_token, hash_password, verify_password, verify_token


class TestTokens:
    def test_round_trip(self):
        token = create_token("user-1", "secret", expiry_hours=1)
        assert verify_token(token, "secret") == "user-1"

    def test_wrong_secret(self):
        token = create_token("user-1", "secret", expiry_hours=1)
        assert verify_token(token, "other-secret") is None

    def test_tampered_user(self):
        token = create_token("user-1", "secret", expiry_hours=1)
        _, expiry, signature = token.split("|")
        assert verify_token(f"user-2|{expiry}|{signature}", "secret") is None

    def test_expired(self):
        token = create_token("user-1", "secret", expiry_hours=-1)
        assert verify_token(token, "secret") is None

    def test_malformed(self):
        assert verify_token("not-a-token", "secret") is None
        expiry = (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat()
        assert verify_token(f"user-1|{expiry}", "secret") is None


class TestPasswords:
    def test_verify(self):
        stored = hash_password("hunter22")
        assert verify_password("hunter22", stored)
        assert not verify_password("hunter23", stored)

    def test_salted(self):
        assert hash_password("same") != hash_password("same")


class TestAuthEndpoints:
    def test_register_then_me(self, client):
        response = client.post(
            "/v1/auth/register",
            json={"email": "Dana@Example.com", "password": "pw-123456", "name": "Dana"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["tokenType"] == "bearer"

        me = client.get(
            "/v1/auth/me", headers={"Authorization": f"Bearer {body['accessToken']}"}
        ).json()
        assert me["email"] == "dana@example.com"
        assert me["userId"] == body["user"]["userId"]

    def test_duplicate_email(self, client, auth_headers):
        response = client.post(
            "/v1/auth/register",
            json={"email": "OWNER@example.com", "password": "another-pass", "name": "Again"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Email already registered"}

    def test_login(self, client, auth_headers):
        ok = client.post(
            "/v1/auth/login", json={"email": "owner@example.com", "password": "correct-horse"}
        )
        assert ok.status_code == 200

        bad = client.post(
            "/v1/auth/login", json={"email": "owner@example.com", "password": "wrong"}
        )
        assert bad.status_code == 401
        assert bad.json() == {"error": "Invalid email or password"}

    def test_invalid_email_rejected(self, client):
        response = client.post(
            "/v1/auth/register", json={"email": "nope", "password": "x", "name": "N"}
        )
        assert response.status_code == 400

    def test_bad_headers(self, client):
        assert client.get("/v1/auth/me", headers={"Authorization": "Token abc"}).status_code == 401
        assert client.get("/v1/auth/me", headers={"Authorization": "Bearer abc"}).status_code == 401
        assert client.get("/v1/auth/me", headers={"Authorization": "Bearer"}).status_code == 401

    def test_token_for_deleted_user(self, client, settings):
        token = create_token("ghost", settings.token_secret, expiry_hours=1)
        response = client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "version": "0.1.0"}
