"""Tests for registration, login, tokens and the caller's profile."""

from datetime import timedelta

from autologic.security import REFRESH_TOKEN, create_token, decode_token, hash_password, verify_password

from .conftest import PASSWORD, auth_headers, make_user


def register_payload(**overrides):
    payload = {
        "firstName": "Sara",
        "lastName": "Ali",
        "email": "Sara@Example.com",
        "phone": "+966 50 123 4567",
        "password": "secret123",
        "confirmPassword": "secret123",
    }
    payload.update(overrides)
    return payload


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("hunter22")
        assert hashed != "hunter22"
        assert verify_password("hunter22", hashed)
        assert not verify_password("wrong", hashed)

    def test_garbage_hash_does_not_raise(self):
        assert not verify_password("x", "not-a-hash")


class TestTokens:
    def test_access_token_round_trip(self):
        payload = decode_token(create_token(7))
        assert payload["sub"] == "7"
        assert payload["type"] == "access"

    def test_refresh_token_is_not_an_access_token(self):
        token = create_token(7, REFRESH_TOKEN)
        assert decode_token(token) is None
        assert decode_token(token, REFRESH_TOKEN)["sub"] == "7"

    def test_expired_token(self):
        assert decode_token(create_token(7, expires_delta=timedelta(seconds=-1))) is None


class TestRegister:
    def test_register_customer(self, client, sent_emails):
        resp = client.post("/api/auth/register", json=register_payload())
        assert resp.status_code == 201
        body = resp.json()
        user = body["data"]["user"]
        assert user["email"] == "sara@example.com"
        assert user["phone"] == "+966501234567"
        assert user["role"] == "customer"
        assert user["preferredLanguage"] == "ar"
        assert "password" not in user and "passwordHash" not in user
        assert body["token"] and body["refreshToken"]
        assert sent_emails[0]["to"] == "sara@example.com"

    def test_role_cannot_be_chosen(self, client):
        resp = client.post("/api/auth/register", json=register_payload(role="admin"))
        assert resp.json()["data"]["user"]["role"] == "customer"

    def test_duplicate_email(self, client, db):
        make_user(db, "customer", email="sara@example.com")
        resp = client.post("/api/auth/register", json=register_payload())
        assert resp.status_code == 400
        assert resp.json()["message"] == "User already exists with this email"

    def test_password_mismatch(self, client):
        resp = client.post("/api/auth/register", json=register_payload(confirmPassword="other123"))
        assert resp.status_code == 400
        assert resp.json()["errors"][0]["message"] == "Passwords do not match"

    def test_invalid_email_and_phone(self, client):
        resp = client.post("/api/auth/register", json=register_payload(email="nope", phone="12"))
        fields = {error["field"] for error in resp.json()["errors"]}
        assert fields == {"email", "phone"}


class TestLogin:
    def test_login(self, client, customer):
        resp = client.post("/api/auth/login", json={"email": customer.email, "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.json()
        assert body["data"]["user"]["id"] == customer.id
        assert body["data"]["user"]["lastLogin"] is not None
        assert decode_token(body["token"])["sub"] == str(customer.id)

    def test_wrong_password(self, client, customer):
        resp = client.post("/api/auth/login", json={"email": customer.email, "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid email or password"

    def test_unknown_email_gets_same_message(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid email or password"

    def test_deactivated_account(self, client, db):
        user = make_user(db, "customer", email="off@example.com", is_active=False)
        resp = client.post("/api/auth/login", json={"email": user.email, "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Account is deactivated"


class TestRefresh:
    def test_refresh_issues_new_pair(self, client, customer):
        refresh_token = create_token(customer.id, REFRESH_TOKEN)
        resp = client.post("/api/auth/refresh", json={"refreshToken": refresh_token})
        assert resp.status_code == 200
        assert decode_token(resp.json()["token"])["sub"] == str(customer.id)

    def test_access_token_cannot_refresh(self, client, customer):
        resp = client.post("/api/auth/refresh", json={"refreshToken": create_token(customer.id)})
        assert resp.status_code == 401


class TestBearerAuth:
    def test_malformed_token(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer abc"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Not authorized, token failed"

    def test_token_for_deleted_user(self, client):
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {create_token(999)}"})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Not authorized, user not found"

    def test_deactivated_user_token(self, client, db):
        user = make_user(db, "customer", email="gone@example.com", is_active=False)
        resp = client.get("/api/auth/me", headers=auth_headers(user))
        assert resp.status_code == 401


class TestProfile:
    def test_me(self, client, customer):
        resp = client.get("/api/auth/me", headers=auth_headers(customer))
        assert resp.json()["data"]["user"]["email"] == customer.email

    def test_update_profile(self, client, customer):
        resp = client.put(
            "/api/auth/me",
            json={"firstName": "Noura", "preferredLanguage": "en"},
            headers=auth_headers(customer),
        )
        user = resp.json()["data"]["user"]
        assert user["firstName"] == "Noura"
        assert user["preferredLanguage"] == "en"
        assert user["lastName"] == "Tester"

    def test_change_password(self, client, customer):
        resp = client.put(
            "/api/auth/change-password",
            json={"currentPassword": PASSWORD, "newPassword": "newpass1", "confirmPassword": "newpass1"},
            headers=auth_headers(customer),
        )
        assert resp.status_code == 200
        login = client.post("/api/auth/login", json={"email": customer.email, "password": "newpass1"})
        assert login.status_code == 200

    def test_change_password_needs_current(self, client, customer):
        resp = client.put(
            "/api/auth/change-password",
            json={"currentPassword": "wrong", "newPassword": "newpass1", "confirmPassword": "newpass1"},
            headers=auth_headers(customer),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Current password is incorrect"

    def test_logout(self, client, customer):
        resp = client.post("/api/auth/logout", headers=auth_headers(customer))
        assert resp.json() == {"status": "success", "message": "Logged out successfully"}
