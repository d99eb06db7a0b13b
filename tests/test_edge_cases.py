"""Edge case and error handling tests."""
from fastapi import status
from tests.conftest import client, register_user, ADMIN_HEADERS
from trainingcog.main import app


class TestEdgeCases:
    """Test edge cases and error handling."""

    def test_invalid_json_payload(self):
        response = client.post(
            "/api/access",
            content="invalid json",
            headers={"Content-Type": "application/json"}
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_missing_path(self):
        response = client.post("/api/access", json={"role": "utente"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_seed_requires_admin_key(self):
        response = client.post("/api/seed/profiles", json={
            "id": "x1", "nome": "X", "cognome": "Y", "ruolo": "utente"
        }, headers={"Authorization": "Bearer wrong"})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_duplicate_profile(self):
        register_user("dup1", "utente")
        response = client.post("/api/seed/profiles", json={
            "id": "dup1", "nome": "Dup", "cognome": "Test", "ruolo": "utente"
        }, headers=ADMIN_HEADERS)
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_duplicate_token(self):
        register_user("dup2", "utente", token="shared-token-1")
        response = client.post("/api/seed/sessions", json={
            "token": "shared-token-1", "id_utente": "someone-else"
        }, headers=ADMIN_HEADERS)
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_admin_api_requires_identity(self):
        response = client.get("/api/admin/sedi")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_admin_api_rejects_unknown_token(self):
        response = client.get("/api/admin/sedi", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_admin_api_rejects_identity_without_profile(self):
        headers = register_user("noprof1", None, with_profile=False)
        response = client.get("/api/admin/sedi", headers=headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "profile" in response.json()["detail"].lower()

    def test_admin_api_forbidden_for_educator(self):
        headers = register_user("edu9", "educatore")
        response = client.get("/api/admin/sedi", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_update_missing_sede(self):
        headers = register_user("admin9", "amministratore")
        response = client.put("/api/admin/sedi/99999", json={"nome": "X"}, headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "not found" in response.json()["detail"].lower()

    def test_delete_missing_sede(self):
        headers = register_user("admin10", "amministratore")
        response = client.delete("/api/admin/sedi/99999", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_duplicate_sede_name(self):
        headers = register_user("admin11", "amministratore")
        assert client.post("/api/admin/sedi", json={"nome": "Sede Unica"}, headers=headers).status_code == 201
        response = client.post("/api/admin/sedi", json={"nome": "Sede Unica"}, headers=headers)
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_invalid_sede_state(self):
        headers = register_user("admin12", "amministratore")
        response = client.post("/api/admin/sedi", json={"nome": "Sede X", "stato": "demolita"}, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_static_assets_bypass_access_checks(self):
        response = client.get("/admin/logo.png", follow_redirects=False)
        # Asset-looking paths never consult identity
        assert response.status_code != status.HTTP_307_TEMPORARY_REDIRECT

    def test_failed_fetch_returns_retry_hint(self, monkeypatch):
        headers = register_user("admin13", "amministratore")

        def broken(db):
            raise RuntimeError("database unreachable")

        monkeypatch.setattr("trainingcog.crud.list_sedi", broken)
        response = client.get("/api/admin/sedi", headers=headers)
        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["retry"] is True
        assert "admin:sedi" not in app.state.cache

    def test_aborted_fetch_is_quiet(self, monkeypatch):
        headers = register_user("admin14", "amministratore")

        def aborted(db):
            raise RuntimeError("AbortError: the request was aborted")

        monkeypatch.setattr("trainingcog.crud.list_sedi", aborted)
        response = client.get("/api/admin/sedi", headers=headers)
        assert response.status_code == 499
        assert "admin:sedi" not in app.state.cache
        assert not app.state.loader.is_pending("admin:sedi")


class TestHealth:

    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["cache"]["ttl_seconds"] == 300
        assert body["checks"]["access_policy"]["fail_closed"] is False
