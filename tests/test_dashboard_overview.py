from decimal import Decimal

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


def register_and_login(client: TestClient, email: str, role: str, password: str = "secret") -> str:
    client.post("/auth/register", json={"email": email, "password": password, "role": role})
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return resp.json()["access_token"]


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def test_dashboard_requires_auth():
    client = TestClient(app)
    assert client.get("/dashboard/overview").status_code == 401


def test_dashboard_empty_for_new_user():
    client = TestClient(app)
    token = register_and_login(client, "payer@example.com", "PAYER")
    data = client.get("/dashboard/overview", headers=auth(token)).json()
    assert data["total_projects"] == 0
    assert data["recent_projects"] == []
    assert data["recent_time_entries"] == []
    assert data["total_hours"] == 0
    assert data["total_payments"] == 0
    assert Decimal(data["total_payment_amount"]) == Decimal("0")
    assert data["recent_payments"] == []


def test_dashboard_is_role_scoped():
    client = TestClient(app)
    payer = register_and_login(client, "payer@example.com", "PAYER")
    freelancer = register_and_login(client, "free@example.com", "FREELANCER")
    other_payer = register_and_login(client, "payer2@example.com", "PAYER")

    project_id = client.post("/projects/", json={"name": "Website", "hourly_rate": 40}, headers=auth(payer)).json()["id"]
    client.post("/projects/", json={"name": "Other", "hourly_rate": 10}, headers=auth(other_payer))
    client.post(f"/projects/{project_id}/members", json={"email": "free@example.com"}, headers=auth(payer))
    freelancer_id = client.get("/auth/me", headers=auth(freelancer)).json()["id"]

    entry_ids = []
    for day in range(1, 8):
        resp = client.post(
            "/time-entries/",
            json={
                "project_id": project_id,
                "start_time": f"2030-01-0{day}T09:00:00Z",
                "end_time": f"2030-01-0{day}T10:30:00Z",
            },
            headers=auth(freelancer),
        )
        entry_ids.append(resp.json()["id"])

    for entry_id, amount in ((entry_ids[0], "60.00"), (entry_ids[1], "40.50")):
        resp = client.post(
            "/payments/",
            json={"project_id": project_id, "receiver_id": freelancer_id, "time_entry_ids": [entry_id], "amount": amount},
            headers=auth(payer),
        )
        assert resp.status_code == 201

    freelancer_view = client.get("/dashboard/overview", headers=auth(freelancer)).json()
    assert freelancer_view["total_projects"] == 1
    assert [p["id"] for p in freelancer_view["recent_projects"]] == [project_id]
    assert len(freelancer_view["recent_time_entries"]) == 5
    assert freelancer_view["recent_time_entries"][0]["id"] == entry_ids[-1]
    assert freelancer_view["total_hours"] == 10.5
    assert freelancer_view["total_payments"] == 2
    assert Decimal(freelancer_view["total_payment_amount"]) == Decimal("100.50")

    payer_view = client.get("/dashboard/overview", headers=auth(payer)).json()
    assert payer_view["total_projects"] == 1
    assert payer_view["recent_time_entries"] == []
    assert payer_view["total_hours"] == 0
    assert payer_view["total_payments"] == 2
    assert len(payer_view["recent_payments"]) == 2

    other_view = client.get("/dashboard/overview", headers=auth(other_payer)).json()
    assert other_view["total_projects"] == 1
    assert other_view["total_payments"] == 0
