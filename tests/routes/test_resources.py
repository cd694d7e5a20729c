"""
Tests for the vendor, expense, project and timesheet endpoints.

All four share the CRUD contract from routes/crud.py; each class checks the
resource-specific defaults, filters and extra endpoints.
"""

import pytest

EXPENSE = {
    "expense_date": "2025-09-12",
    "description": "Printer toner",
    "amount": "89.90",
    "vendor": "Office Depot",
    "account": "Operating",
}


class TestVendorRoutes:
    """Tests for /vendors"""

    def test_create_with_defaults(self, client, mock_auth):
        response = client.post("/vendors", json={"name": "Jane Doe"})

        assert response.status_code == 201
        data = response.json()
        assert data["display_name"] == "Jane Doe"
        assert data["currency"] == "USD"
        assert data["payment_terms"] == "Due on Receipt"
        assert data["status"] == "active"

    def test_search(self, client, mock_auth):
        client.post("/vendors", json={"name": "Paper Co", "email": "orders@paper.co"})
        client.post("/vendors", json={"name": "Ink Ltd"})

        response = client.get("/vendors", params={"search": "orders@"})

        assert [v["name"] for v in response.json()["vendors"]] == ["Paper Co"]

    def test_update_and_delete(self, client, mock_auth):
        vendor = client.post("/vendors", json={"name": "Old Name"}).json()

        updated = client.patch(f"/vendors/{vendor['id']}", json={"status": "inactive"})
        deleted = client.delete(f"/vendors/{vendor['id']}")
        missing = client.delete(f"/vendors/{vendor['id']}")

        assert updated.json()["status"] == "inactive"
        assert deleted.status_code == 204
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    def test_requires_authentication(self, client):
        assert client.get("/vendors").status_code == 401


class TestExpenseRoutes:
    """Tests for /expenses"""

    def test_create_with_defaults(self, client, mock_auth):
        response = client.post("/expenses", json=EXPENSE)

        assert response.status_code == 201
        data = response.json()
        assert data["amount"] == "89.90"
        assert data["category"] == "Other"
        assert data["payment_method"] == "Cash"
        assert data["status"] == "unbilled"
        assert data["billable"] is False

    def test_negative_amount(self, client, mock_auth):
        response = client.post("/expenses", json={**EXPENSE, "amount": "-1"})
        assert response.status_code == 422

    def test_filters(self, client, mock_auth):
        client.post("/expenses", json=EXPENSE)
        client.post("/expenses", json={**EXPENSE, "category": "Travel", "expense_date": "2025-10-01"})

        travel = client.get("/expenses", params={"category": "Travel"}).json()
        september = client.get("/expenses", params={"to_date": "2025-09-30"}).json()
        toner = client.get("/expenses", params={"search": "toner"}).json()

        assert travel["count"] == 1
        assert september["count"] == 1
        assert toner["count"] == 2

    def test_get_missing(self, client, mock_auth):
        assert client.get("/expenses/missing").status_code == 404


class TestProjectRoutes:
    """Tests for /projects and /projects/{id}/stats"""

    def test_stats(self, client, mock_auth):
        project = client.post("/projects", json={"name": "Website", "budget": "1000", "revenue": "400"}).json()
        client.post(
            "/timesheets",
            json={
                "project_id": project["id"],
                "user_name": "Sam",
                "task": "Design",
                "entry_date": "2025-09-01",
                "hours": "3",
            },
        )
        client.post("/expenses", json={**EXPENSE, "amount": "100", "project_id": project["id"]})

        response = client.get(f"/projects/{project['id']}/stats")

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_hours"] == "3.00"
        assert stats["billable_hours"] == "3.00"
        assert stats["total_expenses"] == "100.00"
        assert stats["budget_remaining"] == "900.00"
        assert stats["net_profit"] == "300.00"
        assert stats["profit_margin"] == "75.00"

    def test_stats_for_missing_project(self, client, mock_auth):
        response = client.get("/projects/missing/stats")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_status_filter(self, client, mock_auth):
        client.post("/projects", json={"name": "Done", "status": "completed"})
        client.post("/projects", json={"name": "Ongoing"})

        response = client.get("/projects", params={"status": "active"})

        assert [p["name"] for p in response.json()["projects"]] == ["Ongoing"]


class TestTimesheetRoutes:
    """Tests for /timesheets"""

    @pytest.fixture
    def entry(self, client, mock_auth):
        response = client.post(
            "/timesheets",
            json={"user_name": "Sam", "task": "Build", "entry_date": "2025-09-02", "hours": "1.5"},
        )
        assert response.status_code == 201
        return response.json()

    def test_defaults(self, entry):
        assert entry["billable"] is True
        assert entry["status"] == "pending"
        assert entry["hours"] == "1.50"

    def test_start_and_stop(self, client, mock_auth, entry):
        started = client.post(f"/timesheets/{entry['id']}/start")
        again = client.post(f"/timesheets/{entry['id']}/start")
        stopped = client.post(f"/timesheets/{entry['id']}/stop")

        assert started.status_code == 200
        assert started.json()["status"] == "active"
        assert started.json()["timer_started_at"] is not None
        assert again.status_code == 400
        assert stopped.json()["status"] == "completed"
        assert stopped.json()["timer_started_at"] is None
        assert stopped.json()["hours"] == "1.50"

    def test_stats(self, client, mock_auth, entry):
        client.post(
            "/timesheets",
            json={"user_name": "Sam", "task": "Docs", "entry_date": "2025-09-03", "hours": "2", "billable": False},
        )

        response = client.get("/timesheets/stats")

        assert response.status_code == 200
        stats = response.json()
        assert stats["total_entries"] == 2
        assert stats["total_hours"] == "3.50"
        assert stats["non_billable_hours"] == "2.00"
        assert stats["by_status"]["pending"] == 2

    def test_patch_cannot_activate(self, client, mock_auth, entry):
        response = client.patch(f"/timesheets/{entry['id']}", json={"status": "active"})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"
        assert client.get(f"/timesheets/{entry['id']}").json()["status"] == "pending"

    def test_start_missing(self, client, mock_auth):
        assert client.post("/timesheets/missing/start").status_code == 404
