import pytest
from fastapi.testclient import TestClient

from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def register_and_login(client: TestClient, email: str, role: str | None, password: str = "secret") -> str:
    payload = {"email": email, "password": password}
    if role:
        payload["role"] = role
    client.post("/auth/register", json=payload)
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_project(client: TestClient, token: str, name: str = "Website", rate: float = 50.0):
    return client.post("/projects/", json={"name": name, "hourly_rate": rate}, headers=auth(token))


def test_payer_creates_project():
    client = TestClient(app)
    payer = register_and_login(client, "payer@example.com", "PAYER")
    resp = create_project(client, payer)
    assert resp.status_code == 201
    data = resp.json()
    assert data["name"] == "Website"
    assert float(data["hourly_rate"]) == 50.0
    assert data["owner"]["email"] == "payer@example.com"
    assert data["members"] == []


def test_freelancer_cannot_create_project():
    client = TestClient(app)
    freelancer = register_and_login(client, "free@example.com", "FREELANCER")
    resp = create_project(client, freelancer)
    assert resp.status_code == 403


def test_user_without_role_cannot_create_project():
    client = TestClient(app)
    token = register_and_login(client, "norole@example.com", None)
    assert create_project(client, token).status_code == 403


def test_project_validation_rejects_short_name_and_negative_rate():
    client = TestClient(app)
    payer = register_and_login(client, "payer@example.com", "PAYER")
    resp = client.post("/projects/", json={"name": "A", "hourly_rate": -1}, headers=auth(payer))
    assert resp.status_code == 400
    fields = {tuple(err["loc"]) for err in resp.json()["errors"]}
    assert ("body", "name") in fields
    assert ("body", "hourly_rate") in fields


def test_add_member_and_list_by_role():
    client = TestClient(app)
    payer = register_and_login(client, "payer@example.com", "PAYER")
    freelancer = register_and_login(client, "free@example.com", "FREELANCER")
    project_id = create_project(client, payer).json()["id"]
    create_project(client, payer, name="Other")

    resp = client.post(f"/projects/{project_id}/members", json={"email": "free@example.com"}, headers=auth(payer))
    assert resp.status_code == 200
    assert [m["email"] for m in resp.json()] == ["free@example.com"]

    payer_projects = client.get("/projects/", headers=auth(payer)).json()
    assert len(payer_projects) == 2

    freelancer_projects = client.get("/projects/", headers=auth(freelancer)).json()
    assert [p["id"] for p in freelancer_projects] == [project_id]

    members = client.get(f"/projects/{project_id}/members", headers=auth(freelancer))
    assert members.status_code == 200
    assert members.json()[0]["email"] == "free@example.com"


def test_add_member_rules():
    client = TestClient(app)
    payer = register_and_login(client, "payer@example.com", "PAYER")
    other_payer = register_and_login(client, "payer2@example.com", "PAYER")
    register_and_login(client, "free@example.com", "FREELANCER")
    project_id = create_project(client, payer).json()["id"]
    url = f"/projects/{project_id}/members"

    assert client.post(url, json={"email": "missing@example.com"}, headers=auth(payer)).status_code == 404
    assert client.post(url, json={"email": "payer2@example.com"}, headers=auth(payer)).status_code == 400
    assert client.post(url, json={"email": "free@example.com"}, headers=auth(other_payer)).status_code == 403
    assert client.post(url, json={"email": "free@example.com"}, headers=auth(payer)).status_code == 200

    duplicate = client.post(url, json={"email": "free@example.com"}, headers=auth(payer))
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "User is already a member of this project"

    assert client.post("/projects/999/members", json={"email": "free@example.com"}, headers=auth(payer)).status_code == 404


def test_get_project_access_control():
    client = TestClient(app)
    payer = register_and_login(client, "payer@example.com", "PAYER")
    outsider = register_and_login(client, "outsider@example.com", "FREELANCER")
    project_id = create_project(client, payer).json()["id"]

    assert client.get(f"/projects/{project_id}", headers=auth(payer)).status_code == 200
    assert client.get(f"/projects/{project_id}", headers=auth(outsider)).status_code == 403
    assert client.get("/projects/999", headers=auth(payer)).status_code == 404
