"""
End-to-end tests through the HTTP layer.

Each test gets its own app around a freshly seeded store, so writes never
leak between tests.
"""

import logging
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from eudr_api.main import create_app
from eudr_api.seed import ADMIN_PASSWORD, ADMIN_USERNAME, seed_demo_data
from eudr_api.store import MemStorage

NEW_SUPPLIER = {
    "name": "Acme Farms",
    "products": "Cocoa",
    "country": "Ghana",
    "category": "Tier 1",
    "status": "Pending Review",
    "riskLevel": "Medium",
    "riskScore": 60,
}


def latest_activity(client):
    return client.get("/api/activities", params={"limit": 1}).json()[0]


# ---------------------------------------------------------------------------
# Session handling
# ---------------------------------------------------------------------------

class TestAuth:

    @pytest.mark.parametrize("path", [
        "/api/dashboard",
        "/api/suppliers",
        "/api/declarations",
        "/api/tasks/upcoming",
        "/api/users",
    ])
    def test_requires_login(self, client, path):
        resp = client.get(path)
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Unauthorized"

    def test_unknown_username(self, client):
        resp = client.post("/api/auth/login", json={"username": "nobody", "password": "x"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid username"

    def test_wrong_password(self, client):
        resp = client.post("/api/auth/login", json={"username": "admin", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid password"

    def test_login_hides_password(self, admin_client):
        user = admin_client.get("/api/auth/user").json()
        assert user["username"] == "admin"
        assert user["fullName"] == "Admin User"
        assert "password" not in user

    def test_session_user_without_login(self, client):
        resp = client.get("/api/auth/user")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Not authenticated"

    def test_logout_ends_session(self, admin_client):
        resp = admin_client.post("/api/auth/logout")
        assert resp.json() == {"success": True}
        assert admin_client.get("/api/dashboard").status_code == 401

    def test_register(self, client):
        resp = client.post("/api/auth/register", json={
            "username": "jsmith",
            "password": "correct-horse",
            "email": "jane@example.com",
            "fullName": "Jane Smith",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["role"] == "user"
        assert "password" not in body

        login = client.post("/api/auth/login", json={"username": "jsmith", "password": "correct-horse"})
        assert login.status_code == 200

    def test_register_duplicates(self, client):
        taken = client.post("/api/auth/register", json={
            "username": "admin", "password": "x", "email": "other@example.com",
        })
        assert taken.status_code == 400
        assert taken.json()["detail"] == "Username already taken"

        email = client.post("/api/auth/register", json={
            "username": "someone", "password": "x", "email": "admin@example.com",
        })
        assert email.status_code == 400
        assert email.json()["detail"] == "Email already registered"

    def test_register_invalid_body(self, client):
        resp = client.post("/api/auth/register", json={"username": "incomplete"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["detail"] == "Invalid input"
        assert body["errors"]

    def test_users_list_hides_passwords(self, admin_client):
        users = admin_client.get("/api/users").json()
        assert [u["username"] for u in users] == ["admin"]
        assert all("password" not in u for u in users)


# ---------------------------------------------------------------------------
# Dashboard and compliance
# ---------------------------------------------------------------------------

class TestDashboard:

    def test_dashboard_payload(self, admin_client):
        data = admin_client.get("/api/dashboard").json()

        assert set(data) == {
            "metrics", "riskCategories", "recentActivities",
            "upcomingTasks", "suppliers", "declarationStats",
        }
        assert data["metrics"]["overallCompliance"] == 78
        assert len(data["riskCategories"]) == 4
        assert len(data["recentActivities"]) == 4
        assert len(data["upcomingTasks"]) == 4
        assert data["declarationStats"]["total"] == 5

    def test_empty_store(self):
        app = create_app(storage=MemStorage(), seed_demo=False)
        with TestClient(app) as c:
            c.post("/api/auth/register", json={
                "username": "first", "password": "pw", "email": "first@example.com",
            })
            c.post("/api/auth/login", json={"username": "first", "password": "pw"})

            data = c.get("/api/dashboard").json()
            assert data["metrics"] is None
            assert data["declarationStats"]["total"] == 0
            assert c.get("/api/compliance/current").status_code == 404

    def test_compliance_history(self, admin_client):
        history = admin_client.get("/api/compliance/history").json()
        assert len(history) == 7
        assert history[-1]["overallCompliance"] == 78

    def test_zero_months_means_default_window(self, admin_client):
        default = admin_client.get("/api/compliance/history").json()
        zero = admin_client.get("/api/compliance/history", params={"months": 0}).json()
        assert zero == default

        assert admin_client.get("/api/compliance/history", params={"months": -1}).status_code == 400
        assert admin_client.get("/api/compliance/history", params={"months": "six"}).status_code == 400

    def test_zero_limit_means_default(self, admin_client):
        for i in range(12):
            admin_client.put("/api/suppliers/1", json={"riskScore": 80 + i % 5})

        assert len(admin_client.get("/api/activities", params={"limit": 0}).json()) == 10
        assert len(admin_client.get("/api/activities", params={"limit": 3}).json()) == 3

    def test_record_metrics_becomes_current(self, admin_client):
        resp = admin_client.post("/api/compliance/metrics", json={
            "overallCompliance": 81,
            "documentStatus": 85,
            "supplierCompliance": 88,
            "riskLevel": "Low",
            "issuesDetected": 12,
        })
        assert resp.status_code == 201
        assert admin_client.get("/api/compliance/current").json()["id"] == resp.json()["id"]


# ---------------------------------------------------------------------------
# Suppliers and customers
# ---------------------------------------------------------------------------

class FlakyActivityStorage(MemStorage):
    """A store whose activity log can be made to fail on demand."""

    fail_activities = False

    def create_activity(self, data):
        if self.fail_activities:
            raise RuntimeError("activity log unavailable")
        return super().create_activity(data)


class TestSuppliers:

    def test_failed_activity_write_keeps_supplier(self, clock, caplog):
        """
        The supplier and its activity entry are written separately. When the
        second write fails the client gets a 500 but the supplier stays.
        """
        storage = FlakyActivityStorage(clock=clock)
        seed_demo_data(storage)
        app = create_app(storage=storage)

        with TestClient(app, raise_server_exceptions=False) as c:
            c.post("/api/auth/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD})
            storage.fail_activities = True

            with caplog.at_level(logging.ERROR, logger="eudr_api.routes.activities"):
                resp = c.post("/api/suppliers", json=NEW_SUPPLIER)

        assert resp.status_code == 500
        assert [s.name for s in storage.list_suppliers()][-1] == "Acme Farms"
        assert len(storage.list_suppliers()) == 5
        assert storage.counts()["activities"] == 4

        failures = [r for r in caplog.records if r.name == "eudr_api.routes.activities"]
        assert len(failures) == 1
        assert "log is missing: New supplier Acme Farms was added" in failures[0].getMessage()
        assert failures[0].exc_info[0] is RuntimeError

    def test_create_writes_activity(self, admin_client):
        resp = admin_client.post("/api/suppliers", json=NEW_SUPPLIER)
        assert resp.status_code == 201
        supplier = resp.json()
        assert supplier["riskLevel"] == "medium"
        assert supplier["location"] == ""

        activity = latest_activity(admin_client)
        assert activity["description"] == "New supplier Acme Farms was added"
        assert activity["entityType"] == "supplier"
        assert activity["entityId"] == supplier["id"]
        assert activity["userId"] == 1

    def test_partial_update(self, admin_client, clock):
        before = admin_client.get("/api/suppliers/2").json()
        clock.advance(hours=1)
        resp = admin_client.put("/api/suppliers/2", json={"riskLevel": "HIGH"})
        assert resp.status_code == 200

        after = resp.json()
        assert after["riskLevel"] == "high"
        assert after["name"] == before["name"]
        assert datetime.fromisoformat(after["lastUpdated"].replace("Z", "+00:00")) == clock.current
        assert latest_activity(admin_client)["description"] == "Supplier Tropical Harvest Ltd was updated"

    def test_update_missing(self, admin_client):
        resp = admin_client.put("/api/suppliers/999", json={"name": "Ghost"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Supplier not found"

    def test_null_required_field(self, admin_client):
        resp = admin_client.put("/api/suppliers/1", json={"name": None})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid input"
        assert admin_client.get("/api/suppliers/1").json()["name"] == "EcoFarm Industries"

    def test_invalid_create(self, admin_client):
        resp = admin_client.post("/api/suppliers", json={**NEW_SUPPLIER, "riskScore": 150})
        assert resp.status_code == 400

    def test_stats(self, admin_client):
        stats = admin_client.get("/api/suppliers/stats").json()
        assert stats == {
            "total": 4,
            "lowRisk": 2,
            "mediumRisk": 1,
            "highRisk": 1,
            "averageRiskScore": 67.5,
        }

    def test_related_records(self, admin_client):
        documents = admin_client.get("/api/suppliers/1/documents").json()
        assert [d["title"] for d in documents] == ["EcoFarm Certificate"]

        declarations = admin_client.get("/api/suppliers/1/declarations").json()
        assert {d["supplierId"] for d in declarations} == {1}
        assert len(declarations) == 2

        pending = admin_client.get("/api/suppliers/1/saqs", params={"status": "pending"}).json()
        assert [s["title"] for s in pending] == ["Social Compliance Questionnaire"]

        stats = admin_client.get("/api/suppliers/1/saqs/stats").json()
        assert stats == {"total": 3, "pending": 1, "inProgress": 0, "completed": 2}

    def test_get_missing(self, admin_client):
        assert admin_client.get("/api/suppliers/999").status_code == 404


class TestCustomers:

    def test_create_and_update(self, admin_client):
        resp = admin_client.post("/api/customers", json={
            "type": "business",
            "companyName": "Blue Bean BV",
            "firstName": "Daan",
            "lastName": "de Vries",
            "email": "daan@bluebean.example",
            "billingCountry": "Netherlands",
            "billingAddressLine1": "Damrak 1",
            "billingCity": "Amsterdam",
            "billingState": "Noord-Holland",
            "billingPostalCode": "1012 LG",
        })
        assert resp.status_code == 201
        customer = resp.json()
        assert customer["status"] == "active"

        updated = admin_client.put(f"/api/customers/{customer['id']}", json={"status": "inactive"})
        assert updated.json()["status"] == "inactive"
        assert updated.json()["companyName"] == "Blue Bean BV"

    def test_stats_and_related(self, admin_client):
        stats = admin_client.get("/api/customers/stats").json()
        assert stats["total"] == 4
        assert stats["inactive"] == 1

        declarations = admin_client.get("/api/customers/1/declarations").json()
        assert [d["productName"] for d in declarations] == ["Roasted Coffee Blend"]

        saqs = admin_client.get("/api/customers/1/saqs").json()
        assert [s["status"] for s in saqs] == ["in-progress"]

    def test_update_missing(self, admin_client):
        assert admin_client.put("/api/customers/999", json={"status": "active"}).status_code == 404


# ---------------------------------------------------------------------------
# Declarations, documents, tasks, questionnaires
# ---------------------------------------------------------------------------

class TestDeclarations:

    def test_type_filter(self, admin_client):
        inbound = admin_client.get("/api/declarations", params={"type": "inbound"}).json()
        assert len(inbound) == 3
        assert all(d["type"] == "inbound" for d in inbound)

        everything = admin_client.get("/api/declarations", params={"type": "all"}).json()
        assert len(everything) == 5

        assert admin_client.get("/api/declarations", params={"type": "sideways"}).status_code == 400

    def test_create_defaults_author(self, admin_client):
        resp = admin_client.post("/api/declarations", json={
            "type": "inbound",
            "supplierId": 2,
            "productName": "Palm Kernel Oil",
        })
        assert resp.status_code == 201
        declaration = resp.json()
        assert declaration["createdBy"] == 1
        assert declaration["status"] == "pending"

        stats = admin_client.get("/api/declarations/stats").json()
        assert stats["total"] == 6
        assert stats["pending"] == 2
        assert latest_activity(admin_client)["description"] == \
            "New inbound declaration for Palm Kernel Oil was created"

        newest = admin_client.get("/api/declarations").json()[0]
        assert newest["id"] == declaration["id"]

    def test_status_change(self, admin_client):
        resp = admin_client.put("/api/declarations/3", json={"status": "approved"})
        assert resp.json()["status"] == "approved"
        assert admin_client.get("/api/declarations/stats").json()["review"] == 0

    def test_unknown_status_rejected(self, admin_client):
        assert admin_client.put("/api/declarations/3", json={"status": "shipped"}).status_code == 400

    def test_missing(self, admin_client):
        assert admin_client.get("/api/declarations/999").status_code == 404
        assert admin_client.put("/api/declarations/999", json={"status": "approved"}).status_code == 404


class TestDocuments:

    def test_uploader_is_session_user(self, admin_client):
        resp = admin_client.post("/api/documents", json={
            "title": "Acme Land Title",
            "supplierId": 1,
            "status": "Pending",
            "documentType": "Land Title",
            "uploadedBy": 42,
        })
        assert resp.status_code == 201
        document = resp.json()
        assert document["uploadedBy"] == 1
        assert admin_client.get(f"/api/documents/{document['id']}").json() == document
        assert latest_activity(admin_client)["description"] == "Document Acme Land Title was uploaded"
        assert len(admin_client.get("/api/documents").json()) == 5


class TestTasks:

    def test_upcoming(self, admin_client):
        upcoming = admin_client.get("/api/tasks/upcoming", params={"limit": 2}).json()
        assert len(upcoming) == 2
        assert upcoming[0]["status"] == "overdue"

    def test_mine(self, admin_client):
        assert len(admin_client.get("/api/tasks").json()) == 4

    def test_complete_writes_activity(self, admin_client):
        resp = admin_client.put("/api/tasks/1", json={"completed": True})
        assert resp.json()["completed"] is True

        activity = latest_activity(admin_client)
        assert activity["description"].startswith('Task "Review supplier documentation')
        assert activity["description"].endswith('was completed')

        upcoming = admin_client.get("/api/tasks/upcoming").json()
        assert 1 not in [t["id"] for t in upcoming]

    def test_plain_edit_is_not_logged(self, admin_client):
        before = latest_activity(admin_client)
        admin_client.put("/api/tasks/2", json={"priority": "high"})
        assert latest_activity(admin_client) == before

    def test_create(self, admin_client):
        resp = admin_client.post("/api/tasks", json={
            "title": "Chase missing geolocation",
            "assignedTo": 1,
            "dueDate": "2026-04-01T09:00:00Z",
        })
        assert resp.status_code == 201
        assert resp.json()["completed"] is False
        assert latest_activity(admin_client)["description"] == 'New task "Chase missing geolocation" was created'


class TestSaqs:

    def test_completion_sets_completed_at(self, admin_client):
        resp = admin_client.put("/api/saqs/4", json={
            "status": "completed",
            "score": 74,
            "answers": {"childLabourPolicy": True},
        })
        assert resp.status_code == 200
        saq = resp.json()
        assert saq["completedAt"] is not None
        assert saq["answers"] == {"childLabourPolicy": True}
        assert latest_activity(admin_client)["description"] == \
            'Questionnaire "Social Compliance Questionnaire" was completed'

        stats = admin_client.get("/api/suppliers/1/saqs/stats").json()
        assert stats["completed"] == 3

    def test_create_and_get(self, admin_client):
        resp = admin_client.post("/api/saqs", json={
            "title": "Plot Geolocation Survey",
            "description": "Coordinates for every production plot",
            "supplierId": 3,
            "customerId": 3,
        })
        assert resp.status_code == 201
        saq = resp.json()
        assert saq["status"] == "pending"
        assert admin_client.get(f"/api/saqs/{saq['id']}").json() == saq

    def test_missing(self, admin_client):
        assert admin_client.get("/api/saqs/999").status_code == 404
        assert admin_client.put("/api/saqs/999", json={"score": 1}).status_code == 404


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------

class TestSystem:

    def test_health(self, client):
        resp = client.get("/v1/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["storage"] == "memory"
        assert body["recordsStored"]["suppliers"] == 4

    def test_request_id_headers(self, client):
        resp = client.get("/v1/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"
        assert int(resp.headers["X-Processing-Time-MS"]) >= 0

        generated = client.get("/v1/health")
        assert generated.headers["X-Request-ID"]

    def test_risk_categories(self, admin_client):
        resp = admin_client.post("/api/risk-categories", json={
            "name": "Legality", "score": 64, "color": "#7239ea",
        })
        assert resp.status_code == 201
        names = [c["name"] for c in admin_client.get("/api/risk-categories").json()]
        assert names[-1] == "Legality"
