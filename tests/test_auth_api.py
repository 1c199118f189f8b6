from datetime import UTC, datetime, timedelta

import jwt
from fastapi.testclient import TestClient

from eventsnap.auth_utils import authsettings, create_refresh_token, hash_password
from eventsnap.repositories.host_repository import HostRepository
from tests.helpers import auth_headers, host_headers


class TestRegisterAndLogin:
    def test_register_login_me(self, client: TestClient):
        response = client.post("/auth/register", json={"email": "new@example.com", "password": "password123", "display_name": "Nova"})
        assert response.status_code == 201

        response = client.post("/auth/login", json={"email": "new@example.com", "password": "password123"})
        assert response.status_code == 200
        tokens = response.json()["tokens"]

        me = client.get("/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "new@example.com"
        assert me.json()["display_name"] == "Nova"
        assert me.json()["role"] == "organizer"

    def test_duplicate_email(self, client: TestClient, organizer):
        response = client.post("/auth/register", json={"email": "organizer@example.com", "password": "password123"})
        assert response.status_code == 400

    def test_wrong_password(self, client: TestClient, organizer):
        response = client.post("/auth/login", json={"email": "organizer@example.com", "password": "wrongpass1"})
        assert response.status_code == 401

    def test_admin_role(self, client: TestClient, admin):
        assert client.get("/me", headers=auth_headers(admin)).json()["role"] == "admin"


class TestTokens:
    def test_refresh(self, client: TestClient, organizer):
        response = client.post("/auth/refresh", json={"refresh_token": create_refresh_token(str(organizer.id))})
        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_access_token_is_not_a_refresh_token(self, client: TestClient, organizer):
        access = auth_headers(organizer)["Authorization"].split()[1]
        assert client.post("/auth/refresh", json={"refresh_token": access}).status_code == 401

    def test_missing_token(self, client: TestClient):
        assert client.get("/me").status_code == 401

    def test_expired_token(self, client: TestClient, organizer):
        payload = {"sub": str(organizer.id), "type": "access", "exp": datetime.now(UTC) - timedelta(minutes=1)}
        token = jwt.encode(payload, authsettings.jwt_secret_key, algorithm=authsettings.jwt_algorithm)
        response = client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token expired"

    def test_garbage_token(self, client: TestClient):
        assert client.get("/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


class TestHostLogin:
    def test_host_login_and_me(self, client: TestClient, make_event, db_session):
        event = make_event()
        HostRepository(db_session).create_host(event.public_event_id, event.title, "host@example.com", hash_password("secret1"))

        response = client.post("/auth/host/login", json={"event_id": event.public_event_id, "password": "secret1"})
        assert response.status_code == 200
        body = response.json()
        assert body["public_event_id"] == event.public_event_id

        me = client.get("/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.json() == {"id": None, "email": None, "display_name": None, "role": "host", "event_id": event.public_event_id}

    def test_host_login_wrong_password(self, client: TestClient, make_event, db_session):
        event = make_event()
        HostRepository(db_session).create_host(event.public_event_id, event.title, "host@example.com", hash_password("secret1"))
        response = client.post("/auth/host/login", json={"event_id": event.public_event_id, "password": "nope"})
        assert response.status_code == 401

    def test_host_token_without_credential_rejected(self, client: TestClient):
        assert client.get("/me", headers=host_headers("evt_revoked_00000")).status_code == 401
