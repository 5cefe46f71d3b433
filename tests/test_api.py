"""End to end tests through the HTTP API, on a sqlite file."""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from bugwatch_core import models
from bugwatch_core.api.main import create_app
from bugwatch_core.config import get_settings

DEV_TOKEN = "d" * 40
OTHER_TOKEN = "o" * 40


def seed(path):
    engine = create_engine(f"sqlite:///{path}")
    models.Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all([
            models.User(id="user_1", email_address="dev@example.com"),
            models.User(id="user_2", email_address="other@example.com"),
            models.Organization(id="org_a", name="Acme", settings={}),
            models.Organization(id="org_b", name="Globex", settings={}),
        ])
        session.flush()
        session.add_all([
            models.OrganizationMember(
                organization_id="org_a", user_id="user_1", role=models.MemberRole.OWNER, joined_at=datetime(2026, 1, 1),
            ),
            models.OrganizationMember(organization_id="org_b", user_id="user_2", role=models.MemberRole.OWNER),
            models.Project(id="proj_a", organization_id="org_a", name="Website", settings={}),
            models.Project(id="proj_a2", organization_id="org_a", name="Docs", settings={}),
            models.Project(id="proj_b", organization_id="org_b", name="Other tenant", settings={}),
        ])
        session.flush()
        session.add_all([
            models.Token(id=DEV_TOKEN, organization_id="org_a", user_id="user_1"),
            models.Token(id=OTHER_TOKEN, organization_id="org_b", user_id="user_2"),
            models.Token(id="c" * 40, organization_id="org_a", project_id="proj_a"),
        ])
        session.commit()
    engine.dispose()


@pytest.fixture
def client(tmp_path, monkeypatch):
    path = tmp_path / "api.db"
    seed(path)
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    monkeypatch.setenv("CREATE_SCHEMA_ON_STARTUP", "false")
    monkeypatch.setenv("RUN_JOBS_IN_PROCESS", "false")
    get_settings.cache_clear()

    with TestClient(create_app()) as test_client:
        test_client.headers["Authorization"] = f"Bearer {DEV_TOKEN}"
        yield test_client

    get_settings.cache_clear()


class TestService:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_root(self, client):
        assert client.get("/").json()["name"] == "Bugwatch Core API"


class TestAuthentication:
    """Test bearer token resolution."""

    def test_missing_header(self, client):
        response = client.get("/api/v2/projects/proj_a", headers={"Authorization": ""})
        assert response.status_code == 401

    def test_wrong_scheme(self, client):
        response = client.get("/api/v2/projects/proj_a", headers={"Authorization": f"Basic {DEV_TOKEN}"})
        assert response.status_code == 401

    def test_project_token_cannot_authenticate(self, client):
        response = client.get("/api/v2/projects/proj_a", headers={"Authorization": f"Bearer {'c' * 40}"})
        assert response.status_code == 401


class TestProjectsApi:
    """Test the projects endpoints."""

    def test_get(self, client):
        response = client.get("/api/v2/projects/proj_a")
        assert response.status_code == 200
        assert response.json()["name"] == "Website"

    def test_get_other_organization(self, client):
        response = client.get("/api/v2/projects/proj_b")
        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}

    def test_create(self, client):
        response = client.post("/api/v2/projects/", json={"name": "Mobile"})
        assert response.status_code == 201
        body = response.json()
        assert body["organization_id"] == "org_a"
        assert response.headers["location"].endswith(f"/api/v2/projects/{body['id']}")

        assert client.get(f"/api/v2/projects/{body['id']}").status_code == 200

    def test_create_without_body(self, client):
        assert client.post("/api/v2/projects/").status_code == 400

    def test_create_in_other_organization(self, client):
        response = client.post("/api/v2/projects/", json={"name": "Mobile", "organization_id": "org_b"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid organization id specified."

    def test_patch(self, client):
        response = client.patch("/api/v2/projects/proj_a", json={"name": "Marketing"})
        assert response.status_code == 200
        assert response.json()["name"] == "Marketing"
        assert response.json()["organization_id"] == "org_a"

    def test_patch_empty(self, client):
        response = client.patch("/api/v2/projects/proj_a", json={})
        assert response.status_code == 200
        assert response.json()["name"] == "Website"

    def test_patch_organization_id(self, client):
        response = client.patch("/api/v2/projects/proj_a", json={"organization_id": "org_b"})
        assert response.status_code == 400
        assert response.json() == {"id": "proj_a", "message": "OrganizationId cannot be modified."}

    def test_patch_null_settings(self, client):
        response = client.patch("/api/v2/projects/proj_a", json={"settings": None})
        assert response.status_code == 400
        assert "settings" in response.json()["errors"]

        response = client.get("/api/v2/projects/proj_a")
        assert response.status_code == 200
        assert response.json()["settings"] == {}

    def test_setting(self, client):
        response = client.post("/api/v2/projects/proj_a/settings/theme", json={"value": "dark"})
        assert response.status_code == 200
        assert response.json()["settings"] == {"theme": "dark"}

    def test_delete(self, client):
        response = client.delete("/api/v2/projects/proj_a")
        assert response.status_code == 202
        assert len(response.json()["workers"]) == 1

    def test_delete_mixed(self, client):
        response = client.delete("/api/v2/projects/missing,proj_b,proj_a2")
        assert response.status_code == 400
        body = response.json()
        assert body["not_found"] == ["missing"]
        assert body["failure"] == [{"id": "proj_b", "message": None}]
        assert body["success"] == ["proj_a2"]
        assert len(body["workers"]) == 1

    def test_delete_other_organization(self, client):
        assert client.delete("/api/v2/projects/proj_b").status_code == 404


class TestTokensApi:
    """Test the tokens endpoints."""

    def test_create_and_disable(self, client):
        response = client.post("/api/v2/tokens/", json={"project_id": "proj_a", "notes": "ci"})
        assert response.status_code == 201
        token_id = response.json()["id"]

        response = client.post(f"/api/v2/tokens/{token_id}/disable")
        assert response.status_code == 200
        assert response.json()[0]["is_disabled"] is True

        response = client.post(f"/api/v2/tokens/{token_id}/enable")
        assert response.json()[0]["is_disabled"] is False

    def test_create_for_other_project(self, client):
        response = client.post("/api/v2/tokens/", json={"project_id": "proj_b"})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid project id specified."

    def test_patch_null_is_disabled(self, client):
        token_id = "c" * 40
        response = client.patch(f"/api/v2/tokens/{token_id}", json={"is_disabled": None})
        assert response.status_code == 400
        assert "is_disabled" in response.json()["errors"]

        response = client.get(f"/api/v2/tokens/{token_id}")
        assert response.status_code == 200
        assert response.json()["is_disabled"] is False

    def test_delete_is_immediate(self, client):
        response = client.delete(f"/api/v2/tokens/{'c' * 40}")
        assert response.status_code == 202
        assert response.json() == {"workers": []}
        assert client.get(f"/api/v2/tokens/{'c' * 40}").status_code == 404


class TestOrganizationsApi:
    """Test the organizations endpoints."""

    def test_create(self, client):
        response = client.post("/api/v2/organizations/", json={"name": "Initech"})
        assert response.status_code == 201
        assert response.json()["is_owner"] is True

    def test_get(self, client):
        response = client.get("/api/v2/organizations/org_a")
        assert response.status_code == 200
        assert response.json()["is_owner"] is True
        assert client.get("/api/v2/organizations/org_b").status_code == 404

    def test_patch_null_settings(self, client):
        response = client.patch("/api/v2/organizations/org_a", json={"settings": None})
        assert response.status_code == 400
        assert client.get("/api/v2/organizations/org_a").json()["settings"] == {}

    def test_patch_outside_membership(self, client):
        response = client.patch("/api/v2/organizations/org_b", json={"name": "Mine"})
        assert response.status_code == 404

    def test_delete(self, client):
        response = client.delete("/api/v2/organizations/org_a,org_b")
        assert response.status_code == 400
        body = response.json()
        assert body["success"] == ["org_a"]
        assert body["failure"] == [{"id": "org_b", "message": None}]
