"""
Tests for the bank transaction lifecycle service.

Covers the balance invariant: an account's balance always equals its
opening balance plus the amounts of its existing transactions, whatever
succeeds or fails.
"""

from decimal import Decimal

import pytest
import pytest_asyncio

from ledgerbooks.services.bank_transaction_service import (
    TRANSACTION_TABLE,
    categorize_transaction,
    create_transaction,
    delete_transaction,
    get_transaction_by_id,
    get_transaction_categories,
    get_transaction_summary,
    list_transactions,
    reconcile_transaction,
    update_transaction,
)
from ledgerbooks.db import Query, UnitOfWork
from ledgerbooks.services.account_service import ACCOUNT_TABLE
from ledgerbooks.utils.errors import ErrorKind
from tests.conftest import OTHER_USER_ID, TEST_USER_ID
from tests.helpers import FailingMemoryDatabase, account_vanishes, balance_of, make_account


async def _count_transactions(db) -> int:
    return len(await db.fetch(Query(TRANSACTION_TABLE)))


class TestCreateTransaction:

    @pytest.mark.asyncio
    async def test_deposit_raises_balance(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")

        result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="25.50")

        assert result.ok
        assert result.value["type"] == "deposit"
        assert result.value["status"] == "pending"
        assert result.value["reconciled"] is False
        assert await balance_of(db, account["id"]) == Decimal("125.50")

    @pytest.mark.asyncio
    async def test_withdrawal_lowers_balance(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")

        result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30")

        assert result.ok
        assert result.value["type"] == "withdrawal"
        assert result.value["amount"] == "-30.00"
        assert await balance_of(db, account["id"]) == Decimal("70.00")

    @pytest.mark.asyncio
    async def test_record_is_persisted(self, db):
        account = await make_account(db, TEST_USER_ID)

        result = await create_transaction(
            db, TEST_USER_ID,
            account_id=account["id"],
            amount="12.00",
            txn_date="2025-03-01",
            description="Card refund",
            category="Refunds",
            tags=["card"],
        )

        stored = await get_transaction_by_id(db, TEST_USER_ID, result.value["id"])
        assert stored is not None
        assert stored["txn_date"] == "2025-03-01"
        assert stored["category"] == "Refunds"
        assert stored["tags"] == ["card"]

    @pytest.mark.asyncio
    async def test_zero_amount_is_rejected(self, db):
        account = await make_account(db, TEST_USER_ID)

        result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount=0)

        assert result.error == ErrorKind.VALIDATION
        assert await _count_transactions(db) == 0
        assert await balance_of(db, account["id"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_non_numeric_amount_is_rejected(self, db):
        account = await make_account(db, TEST_USER_ID)

        result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="abc")

        assert result.error == ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_unknown_account_leaves_no_record(self, db):
        result = await create_transaction(db, TEST_USER_ID, account_id="missing", amount="10")

        assert result.error == ErrorKind.ACCOUNT_NOT_FOUND
        assert await _count_transactions(db) == 0

    @pytest.mark.asyncio
    async def test_other_users_account_is_not_found(self, db):
        account = await make_account(db, OTHER_USER_ID)

        result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="10")

        assert result.error == ErrorKind.ACCOUNT_NOT_FOUND
        assert await balance_of(db, account["id"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_store_failure_applies_nothing(self):
        db = FailingMemoryDatabase(fail_on="increment")
        account = await make_account(db, TEST_USER_ID, "100.00")
        db.armed = True

        result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-40")

        assert result.error == ErrorKind.PERSISTENCE
        assert await _count_transactions(db) == 0
        assert await balance_of(db, account["id"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_account_removed_before_commit(self):
        db = FailingMemoryDatabase(fail_on="increment")
        account = await make_account(db, TEST_USER_ID)
        db.error = account_vanishes(account["id"])
        db.armed = True

        result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="5")

        assert result.error == ErrorKind.ACCOUNT_NOT_FOUND
        assert await _count_transactions(db) == 0


class TestDeleteTransaction:

    @pytest.mark.asyncio
    async def test_delete_reverts_effect(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30")

        result = await delete_transaction(db, TEST_USER_ID, created.value["id"])

        assert result.ok
        assert await get_transaction_by_id(db, TEST_USER_ID, created.value["id"]) is None
        assert await balance_of(db, account["id"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_round_trip_is_exact(self, db):
        account = await make_account(db, TEST_USER_ID, "0.10")

        for amount in ("0.01", "-0.07", "1234567.89", "-0.005", "33.335"):
            created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount=amount)
            assert created.ok
            deleted = await delete_transaction(db, TEST_USER_ID, created.value["id"])
            assert deleted.ok
            assert await balance_of(db, account["id"]) == Decimal("0.10")

    @pytest.mark.asyncio
    async def test_absent_id_is_not_found_and_changes_nothing(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="10")

        result = await delete_transaction(db, TEST_USER_ID, "does-not-exist")

        assert result.error == ErrorKind.NOT_FOUND
        assert await _count_transactions(db) == 1
        assert await balance_of(db, account["id"]) == Decimal("110.00")

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-20")

        first = await delete_transaction(db, TEST_USER_ID, created.value["id"])
        second = await delete_transaction(db, TEST_USER_ID, created.value["id"])

        assert first.ok
        assert second.error == ErrorKind.NOT_FOUND
        assert await balance_of(db, account["id"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_other_user_cannot_delete(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-20")

        result = await delete_transaction(db, OTHER_USER_ID, created.value["id"])

        assert result.error == ErrorKind.NOT_FOUND
        assert await balance_of(db, account["id"]) == Decimal("80.00")

    @pytest.mark.asyncio
    async def test_store_failure_keeps_record_and_balance(self):
        db = FailingMemoryDatabase(fail_on="delete")
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30")
        db.armed = True

        result = await delete_transaction(db, TEST_USER_ID, created.value["id"])

        assert result.error == ErrorKind.PERSISTENCE
        assert await get_transaction_by_id(db, TEST_USER_ID, created.value["id"]) is not None
        assert await balance_of(db, account["id"]) == Decimal("70.00")

    @pytest.mark.asyncio
    async def test_missing_account_keeps_transaction(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30")
        uow = UnitOfWork("remove_account")
        uow.delete(ACCOUNT_TABLE, account["id"])
        await db.commit(uow)

        result = await delete_transaction(db, TEST_USER_ID, created.value["id"])

        assert result.error == ErrorKind.ACCOUNT_NOT_FOUND
        stored = await get_transaction_by_id(db, TEST_USER_ID, created.value["id"])
        assert stored is not None
        assert stored["amount"] == "-30.00"
        assert await _count_transactions(db) == 1


class TestBalanceScenario:

    @pytest.mark.asyncio
    async def test_withdraw_reconcile_delete(self, db):
        """100 -> withdraw 30 -> 70 -> reconcile -> 70 -> delete -> 100."""
        account = await make_account(db, TEST_USER_ID, "100.00")

        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30.00")
        assert await balance_of(db, account["id"]) == Decimal("70.00")

        reconciled = await reconcile_transaction(db, TEST_USER_ID, created.value["id"])
        assert reconciled.value["reconciled"] is True
        assert reconciled.value["status"] == "reconciled"
        assert await balance_of(db, account["id"]) == Decimal("70.00")

        await delete_transaction(db, TEST_USER_ID, created.value["id"])
        assert await balance_of(db, account["id"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_balance_equals_opening_plus_existing_amounts(self, db):
        account = await make_account(db, TEST_USER_ID, "250.00")
        amounts = ["10.10", "-5.05", "99.99", "-200.00", "0.01"]
        created = []
        for amount in amounts:
            result = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount=amount)
            created.append(result.value)

        await delete_transaction(db, TEST_USER_ID, created[1]["id"])
        await delete_transaction(db, TEST_USER_ID, created[3]["id"])

        remaining = await db.fetch(Query(TRANSACTION_TABLE).eq("account_id", account["id"]))
        expected = Decimal("250.00") + sum(Decimal(t["amount"]) for t in remaining)
        assert await balance_of(db, account["id"]) == expected == Decimal("360.10")


class TestReconcileAndCategorize:

    @pytest.mark.asyncio
    async def test_reconcile_missing_is_not_found(self, db):
        result = await reconcile_transaction(db, TEST_USER_ID, "missing")
        assert result.error == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_categorize_sets_category_and_tags(self, db):
        account = await make_account(db, TEST_USER_ID)
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-8")

        result = await categorize_transaction(
            db, TEST_USER_ID, created.value["id"], "Office", tags=["supplies"]
        )

        assert result.ok
        stored = await get_transaction_by_id(db, TEST_USER_ID, created.value["id"])
        assert stored["category"] == "Office"
        assert stored["tags"] == ["supplies"]
        assert await balance_of(db, account["id"]) == Decimal("92.00")

    @pytest.mark.asyncio
    async def test_categorize_requires_category(self, db):
        result = await categorize_transaction(db, TEST_USER_ID, "any", "  ")
        assert result.error == ErrorKind.VALIDATION


class TestUpdateTransaction:

    @pytest.mark.asyncio
    async def test_amount_change_moves_balance(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30")

        result = await update_transaction(db, TEST_USER_ID, created.value["id"], {"amount": "-45.25"})

        assert result.ok
        assert result.value["amount"] == "-45.25"
        assert await balance_of(db, account["id"]) == Decimal("54.75")

    @pytest.mark.asyncio
    async def test_account_change_moves_effect(self, db):
        source = await make_account(db, TEST_USER_ID, "100.00", name="Source")
        target = await make_account(db, TEST_USER_ID, "0.00", name="Target")
        created = await create_transaction(db, TEST_USER_ID, account_id=source["id"], amount="40")

        result = await update_transaction(db, TEST_USER_ID, created.value["id"], {"account_id": target["id"]})

        assert result.ok
        assert await balance_of(db, source["id"]) == Decimal("100.00")
        assert await balance_of(db, target["id"]) == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_move_to_unknown_account_changes_nothing(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="40")

        result = await update_transaction(db, TEST_USER_ID, created.value["id"], {"account_id": "missing"})

        assert result.error == ErrorKind.ACCOUNT_NOT_FOUND
        stored = await get_transaction_by_id(db, TEST_USER_ID, created.value["id"])
        assert stored["account_id"] == account["id"]
        assert await balance_of(db, account["id"]) == Decimal("140.00")

    @pytest.mark.asyncio
    async def test_descriptive_change_leaves_balance(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="40")

        result = await update_transaction(
            db, TEST_USER_ID, created.value["id"], {"description": "Invoice 17 payment"}
        )

        assert result.value["description"] == "Invoice 17 payment"
        assert await balance_of(db, account["id"]) == Decimal("140.00")

    @pytest.mark.asyncio
    async def test_sign_flip_rederives_type(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30")

        result = await update_transaction(db, TEST_USER_ID, created.value["id"], {"amount": "50"})

        assert result.value["type"] == "deposit"
        summary = await get_transaction_summary(db, TEST_USER_ID)
        assert summary["by_type"] == {"deposit": 1}
        assert summary["income"] == Decimal("50.00")
        assert await balance_of(db, account["id"]) == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_sign_flip_keeps_custom_type(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(
            db, TEST_USER_ID, account_id=account["id"], amount="-30", transaction_type="fee"
        )

        result = await update_transaction(db, TEST_USER_ID, created.value["id"], {"amount": "5"})

        assert result.value["type"] == "fee"

    @pytest.mark.asyncio
    async def test_explicit_type_wins_over_sign(self, db):
        account = await make_account(db, TEST_USER_ID, "100.00")
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="-30")

        result = await update_transaction(
            db, TEST_USER_ID, created.value["id"], {"amount": "50", "type": "refund"}
        )

        assert result.value["type"] == "refund"

    @pytest.mark.asyncio
    async def test_zero_amount_update_is_rejected(self, db):
        account = await make_account(db, TEST_USER_ID)
        created = await create_transaction(db, TEST_USER_ID, account_id=account["id"], amount="40")

        result = await update_transaction(db, TEST_USER_ID, created.value["id"], {"amount": "0"})

        assert result.error == ErrorKind.VALIDATION
        assert await balance_of(db, account["id"]) == Decimal("140.00")


class TestListAndSummary:

    @pytest_asyncio.fixture
    async def seeded(self, db):
        checking = await make_account(db, TEST_USER_ID, "0", name="Checking")
        savings = await make_account(db, TEST_USER_ID, "0", name="Savings")
        rows = [
            (checking, "1000.00", "2025-01-05", "Salary", "Payroll January"),
            (checking, "-120.00", "2025-01-10", "Utilities", "Power bill"),
            (checking, "-45.50", "2025-02-02", "Office", "Printer paper"),
            (savings, "300.00", "2025-02-15", "Transfer", "Monthly saving"),
        ]
        for account, amount, day, category, description in rows:
            await create_transaction(
                db, TEST_USER_ID,
                account_id=account["id"],
                amount=amount,
                txn_date=day,
                category=category,
                description=description,
            )
        return {"checking": checking, "savings": savings}

    @pytest.mark.asyncio
    async def test_newest_first(self, db, seeded):
        transactions = await list_transactions(db, TEST_USER_ID)

        dates = [t["txn_date"] for t in transactions]
        assert dates == sorted(dates, reverse=True)
        assert len(transactions) == 4

    @pytest.mark.asyncio
    async def test_same_day_newest_created_first(self, db):
        account = await make_account(db, TEST_USER_ID)
        ids = []
        for stamp in ("2025-04-01T09:00:00+00:00", "2025-04-01T17:00:00+00:00"):
            created = await create_transaction(
                db, TEST_USER_ID, account_id=account["id"], amount="1", txn_date="2025-04-01"
            )
            uow = UnitOfWork("set_created_at")
            uow.update(TRANSACTION_TABLE, created.value["id"], {"created_at": stamp})
            await db.commit(uow)
            ids.append(created.value["id"])

        transactions = await list_transactions(db, TEST_USER_ID)

        assert [t["id"] for t in transactions] == [ids[1], ids[0]]

    @pytest.mark.asyncio
    async def test_filters(self, db, seeded):
        by_account = await list_transactions(db, TEST_USER_ID, account_id=seeded["savings"]["id"])
        in_january = await list_transactions(db, TEST_USER_ID, from_date="2025-01-01", to_date="2025-01-31")
        searched = await list_transactions(db, TEST_USER_ID, search="PRINTER")

        assert [t["amount"] for t in by_account] == ["300.00"]
        assert len(in_january) == 2
        assert [t["category"] for t in searched] == ["Office"]

    @pytest.mark.asyncio
    async def test_reconciled_filter(self, db, seeded):
        transactions = await list_transactions(db, TEST_USER_ID)
        await reconcile_transaction(db, TEST_USER_ID, transactions[0]["id"])

        reconciled = await list_transactions(db, TEST_USER_ID, reconciled=True)
        pending = await list_transactions(db, TEST_USER_ID, status="pending")

        assert [t["id"] for t in reconciled] == [transactions[0]["id"]]
        assert len(pending) == 3

    @pytest.mark.asyncio
    async def test_empty_result_is_empty_list(self, db):
        assert await list_transactions(db, TEST_USER_ID) == []

    @pytest.mark.asyncio
    async def test_paging(self, db, seeded):
        first = await list_transactions(db, TEST_USER_ID, limit=3, offset=0)
        rest = await list_transactions(db, TEST_USER_ID, limit=3, offset=3)

        assert len(first) == 3
        assert len(rest) == 1

    @pytest.mark.asyncio
    async def test_summary(self, db, seeded):
        summary = await get_transaction_summary(db, TEST_USER_ID)

        assert summary["total_transactions"] == 4
        assert summary["income"] == Decimal("1300.00")
        assert summary["expenses"] == Decimal("165.50")
        assert summary["total_amount"] == Decimal("1134.50")
        assert summary["unreconciled"] == 4
        assert summary["by_category"]["Utilities"]["amount"] == Decimal("-120.00")
        assert summary["by_type"] == {"deposit": 2, "withdrawal": 2}

    @pytest.mark.asyncio
    async def test_categories(self, db, seeded):
        await create_transaction(db, TEST_USER_ID, account_id=seeded["checking"]["id"], amount="1")

        categories = await get_transaction_categories(db, TEST_USER_ID)

        assert categories == ["Office", "Salary", "Transfer", "Utilities"]
