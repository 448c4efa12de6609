"""
Tests for the secret endpoints.
"""
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from priv8.core.auth import Identity, create_access_token
from priv8.core.config import Settings
from priv8.core.db.tables.secret import Secret

NOT_FOUND_BODY = {"code": 404, "error": "Secret doesn't exist or was already read"}


def create_secret(client, secret="launch codes", ttl=300, passphrase=None):
    body = {"secret": secret, "ttl": ttl}
    if passphrase is not None:
        body["passphrase"] = passphrase
    response = client.post("/api/secrets", json=body)
    assert response.status_code == 201
    return response.json()


class TestCreateSecret:
    """Tests for POST /api/secrets."""

    def test_create_ok(self, db_session, client_factory):
        client = client_factory(db_session)
        before = datetime.now(timezone.utc)

        response = client.post("/api/secrets", json={"secret": "launch codes", "ttl": 300})

        assert response.status_code == 201
        data = response.json()
        assert data["code"]
        assert data["secret"] == "launch codes"
        expires_at = datetime.fromisoformat(data["expires_at"])
        assert before + timedelta(seconds=299) <= expires_at <= before + timedelta(seconds=302)

    def test_blank_secret(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.post("/api/secrets", json={"secret": "", "ttl": 300})

        assert response.status_code == 400
        assert "secret" in response.json()["errors"]

    def test_short_ttl(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.post("/api/secrets", json={"secret": "test", "ttl": 30})

        assert response.status_code == 400
        assert response.json()["errors"] == {"ttl": "TTL must be greater than 5 minutes"}

    def test_huge_ttl(self, db_session, client_factory):
        client = client_factory(db_session)

        for ttl in (10**14, 2**63):
            response = client.post("/api/secrets", json={"secret": "x", "ttl": ttl})

            assert response.status_code == 400
            assert "ttl" in response.json()["errors"]

        count = db_session.execute(select(func.count()).select_from(Secret)).scalar_one()
        assert count == 0

    def test_too_long(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.post("/api/secrets", json={"secret": "x" * 129, "ttl": 300})

        assert response.status_code == 400

    def test_malformed_json(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.post(
            "/api/secrets",
            content='"secret":"test"}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_missing_ttl(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.post("/api/secrets", json={"secret": "test"})

        assert response.status_code == 400
        assert "ttl" in response.json()["errors"]


class TestGetSecret:
    """Tests for GET /api/secrets/{id}."""

    def test_get_metadata(self, db_session, client_factory):
        client = client_factory(db_session)
        created = create_secret(client)

        response = client.get(f"/api/secrets/{created['code']}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["code"]
        assert data["ttl"] == 300
        assert "launch codes" not in response.text
        assert "ciphertext" not in data

    def test_get_unknown(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.get("/api/secrets/1234")

        assert response.status_code == 404

    def test_no_store_header(self, db_session, client_factory):
        client = client_factory(db_session)
        response = client.get("/api/secrets/1234")

        assert response.headers["Cache-Control"] == "no-store"


class TestReadSecret:
    """Tests for POST /api/secrets/{id} (read and burn)."""

    def test_read_and_burn_flow(self, db_session, client_factory):
        client = client_factory(db_session)
        created = create_secret(client)

        assert client.get(f"/api/secrets/{created['code']}").status_code == 200

        first = client.post(f"/api/secrets/{created['code']}", json={"passphrase": ""})
        assert first.status_code == 200
        assert first.json() == {"message": "launch codes"}

        second = client.post(f"/api/secrets/{created['code']}", json={"passphrase": ""})
        assert second.status_code == 200
        assert second.json() == NOT_FOUND_BODY

        assert client.get(f"/api/secrets/{created['code']}").status_code == 404

    def test_read_without_body(self, db_session, client_factory):
        client = client_factory(db_session)
        created = create_secret(client)

        response = client.post(f"/api/secrets/{created['code']}")

        assert response.status_code == 200
        assert response.json() == {"message": "launch codes"}

    def test_wrong_passphrase_is_indistinguishable(self, db_session, client_factory):
        client = client_factory(db_session)
        created = create_secret(client, passphrase="open sesame")

        wrong = client.post(f"/api/secrets/{created['code']}", json={"passphrase": "nope"})
        missing = client.post("/api/secrets/doesnotexist", json={"passphrase": "nope"})

        assert wrong.status_code == missing.status_code == 200
        assert wrong.json() == missing.json() == NOT_FOUND_BODY

        right = client.post(f"/api/secrets/{created['code']}", json={"passphrase": "open sesame"})
        assert right.json() == {"message": "launch codes"}


class TestDeleteSecret:
    """Tests for DELETE /api/secrets/{id}."""

    def test_delete_ok(self, db_session, client_factory, admin_token):
        client = client_factory(db_session)
        created = create_secret(client)
        admin = client_factory(db_session, token=admin_token)

        response = admin.delete(f"/api/secrets/{created['code']}")

        assert response.status_code == 200
        assert response.json()["id"] == created["code"]
        assert client.get(f"/api/secrets/{created['code']}").status_code == 404

    def test_delete_unknown(self, db_session, client_factory, admin_token):
        admin = client_factory(db_session, token=admin_token)
        response = admin.delete("/api/secrets/456")

        assert response.status_code == 404

    def test_delete_requires_token(self, db_session, client_factory):
        client = client_factory(db_session)
        created = create_secret(client)

        response = client.delete(f"/api/secrets/{created['code']}")

        assert response.status_code == 401
        assert client.get(f"/api/secrets/{created['code']}").status_code == 200

    def test_delete_rejects_foreign_token(self, db_session, client_factory):
        forged = create_access_token(
            Identity(id="admin", name="admin"),
            Settings(salt="x", jwt_signing_key="some-other-key"),
        )
        client = client_factory(db_session, token=forged)

        response = client.delete("/api/secrets/123")

        assert response.status_code == 401
