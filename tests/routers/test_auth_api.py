"""Account registration, login and token use through the API."""

from __future__ import annotations


def _login(client, email: str, password: str):
    return client.post(
        "/api/auth/jwt/login", data={"username": email, "password": password}
    )


class TestRegister:
    def test_register_creates_plain_user(self, client, db_session):
        response = client.post(
            "/api/auth/register",
            json={
                "email": "new@example.com",
                "password": "s3cret-pass",
                "name": "New Writer",
                "role": "admin",
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new@example.com"
        assert body["name"] == "New Writer"
        assert body["role"] == "user"
        assert "hashed_password" not in body
        assert "password" not in body

    def test_short_password_rejected(self, client, db_session):
        response = client.post(
            "/api/auth/register",
            json={"email": "short@example.com", "password": "123", "name": "Shorty"},
        )
        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "REGISTER_INVALID_PASSWORD"

    def test_duplicate_email_rejected(self, client, author):
        response = client.post(
            "/api/auth/register",
            json={
                "email": "author@example.com",
                "password": "another-pass",
                "name": "Copy",
            },
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "REGISTER_USER_ALREADY_EXISTS"

    def test_name_required(self, client, db_session):
        response = client.post(
            "/api/auth/register",
            json={"email": "nameless@example.com", "password": "long-enough"},
        )
        assert response.status_code == 422


class TestLogin:
    def test_login_issues_usable_token(
        self, client, author, category, user_password
    ):
        response = _login(client, "author@example.com", user_password)
        assert response.status_code == 200
        token = response.json()["access_token"]
        assert response.json()["token_type"] == "bearer"

        created = client.post(
            "/api/posts",
            json={
                "title": "Written after login",
                "content": "Body",
                "author": str(author.id),
                "category": str(category.id),
            },
            headers={"Authorization": f"Bearer {token}"},
        )
        assert created.status_code == 201

    def test_wrong_password(self, client, author):
        response = _login(client, "author@example.com", "not-the-password")
        assert response.status_code == 400
        assert response.json()["detail"] == "LOGIN_BAD_CREDENTIALS"

    def test_current_user(self, client, author, auth_headers):
        response = client.get("/api/users/me", headers=auth_headers(author))
        assert response.status_code == 200
        assert response.json()["name"] == "Ada Author"

    def test_inactive_user_token_refused(
        self, client, user_factory, category, auth_headers, db_session
    ):
        user = user_factory("dormant@example.com", name="Dormant")
        user.is_active = False
        db_session.commit()
        response = client.post(
            "/api/posts",
            json={
                "title": "Should not land",
                "content": "Body",
                "author": str(user.id),
                "category": str(category.id),
            },
            headers=auth_headers(user),
        )
        assert response.status_code == 401
