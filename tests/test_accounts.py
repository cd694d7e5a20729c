"""
Tests for account endpoints.

Tests cover:
- Account creation with an opening balance
- Account listing (ordered by name, scoped to the user)
- Account retrieval by ID
- Authentication and error cases
"""

from unittest.mock import patch

import pytest

from ledgerbooks.services.account_service import create_account
from ledgerbooks.utils.errors import ErrorKind, ServiceResult
from tests.conftest import OTHER_USER_ID


@pytest.fixture
def mock_account():
    """Mock account data."""
    return {
        "id": "account-123",
        "user_id": "test-user-id",
        "name": "Operating account",
        "type": "bank",
        "currency": "USD",
        "balance": "1500.00",
        "description": None,
        "created_at": "2025-11-05T10:00:00Z",
        "updated_at": "2025-11-05T10:00:00Z",
    }


class TestCreateAccount:
    """Tests for POST /accounts"""

    def test_create_account_success(self, client, mock_auth):
        response = client.post(
            "/accounts",
            json={"name": "  Operating account ", "opening_balance": "1500", "currency": "usd"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Operating account"
        assert data["balance"] == "1500.00"
        assert data["currency"] == "USD"
        assert data["type"] == "bank"
        assert data["user_id"] == "test-user-id"

    def test_default_opening_balance_is_zero(self, client, mock_auth):
        response = client.post("/accounts", json={"name": "Petty cash", "type": "cash"})

        assert response.status_code == 201
        assert response.json()["balance"] == "0.00"

    def test_missing_name(self, client, mock_auth):
        response = client.post("/accounts", json={"opening_balance": "10"})
        assert response.status_code == 422

    def test_blank_name_is_invalid_request(self, client, mock_auth):
        response = client.post("/accounts", json={"name": "   "})

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    @patch("ledgerbooks.routes.accounts.create_account")
    def test_create_account_uses_service(self, mock_create, client, mock_auth, mock_account):
        mock_create.return_value = ServiceResult.success(mock_account)

        response = client.post("/accounts", json={"name": "Operating account", "opening_balance": "1500"})

        assert response.status_code == 201
        assert response.json()["id"] == "account-123"
        assert mock_create.call_args.args[1] == "test-user-id"


class TestListAccounts:
    """Tests for GET /accounts"""

    def test_list_is_sorted_and_scoped(self, client, mock_auth, db):
        client.post("/accounts", json={"name": "Savings"})
        client.post("/accounts", json={"name": "Checking"})

        response = client.get("/accounts")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [a["name"] for a in data["accounts"]] == ["Checking", "Savings"]

    @pytest.mark.asyncio
    async def test_other_users_accounts_hidden(self, client, mock_auth, db):
        await create_account(db, OTHER_USER_ID, name="Not mine")

        response = client.get("/accounts")

        assert response.json() == {"accounts": [], "count": 0}


class TestGetAccount:
    """Tests for GET /accounts/{id}"""

    def test_get_account(self, client, mock_auth):
        created = client.post("/accounts", json={"name": "Checking", "opening_balance": "12.5"}).json()

        response = client.get(f"/accounts/{created['id']}")

        assert response.status_code == 200
        assert response.json()["balance"] == "12.50"

    def test_get_account_not_found(self, client, mock_auth):
        response = client.get("/accounts/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_requires_authentication(self, client):
        response = client.get("/accounts")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"


class TestServiceFailure:

    @patch("ledgerbooks.routes.accounts.create_account")
    def test_persistence_error(self, mock_create, client, mock_auth):
        mock_create.return_value = ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to save account")

        response = client.post("/accounts", json={"name": "Checking"})

        assert response.status_code == 500
        assert response.json()["error"] == "persistence_error"
