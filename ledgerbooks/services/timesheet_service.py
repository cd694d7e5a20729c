"""
Timesheet service.

Time entries can be logged with hours directly or timed: start_timer marks
the entry active and records when it started; stop_timer adds the elapsed
hours and completes the entry.
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from ledgerbooks.db import Database, PersistenceError, RowNotFoundError, UnitOfWork
from ledgerbooks.services.resource_service import Resource, get_resource, list_resources
from ledgerbooks.utils.errors import ErrorKind, ServiceResult
from ledgerbooks.utils.money import ZERO, money_str, read_money

logger = logging.getLogger(__name__)

TIMESHEET_STATUSES = ("pending", "active", "completed")


class TimesheetResource(Resource):
    """Timesheet CRUD; 'active' is reserved for entries with a running timer."""

    def _check_status(self, values: Dict[str, Any]) -> None:
        if values.get("status") == "active":
            raise ValueError("Use the start endpoint to make an entry active")

    async def prepare_create(self, db: Database, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        self._check_status(values)
        return self.normalize(values)

    async def prepare_update(
        self,
        db: Database,
        user_id: str,
        existing: Dict[str, Any],
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        if changes.get("status") is not None and existing.get("timer_started_at"):
            raise ValueError("Stop the running timer before changing the status")
        self._check_status(changes)
        return self.normalize(changes)


TIMESHEETS = TimesheetResource(
    table="timesheet",
    label="Timesheet entry",
    search_columns=("task", "user_name", "description"),
    date_column="entry_date",
    order_by="entry_date",
    defaults={"billable": True, "status": "pending", "hours": "0.00"},
    amount_fields=("hours",),
    choices={"status": TIMESHEET_STATUSES},
)

SECONDS_PER_HOUR = Decimal("3600")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def _write(
    db: Database,
    user_id: str,
    entry: Dict[str, Any],
    values: Dict[str, Any],
    label: str,
) -> ServiceResult[Dict[str, Any]]:
    uow = UnitOfWork(label)
    uow.update(TIMESHEETS.table, entry["id"], values)
    try:
        await db.commit(uow)
    except RowNotFoundError:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Timesheet entry {entry['id']} not found")
    except PersistenceError as e:
        logger.error(f"{label} failed for entry {entry['id']} (user {user_id}): {e}", exc_info=True)
        return ServiceResult.failure(ErrorKind.PERSISTENCE, "Failed to update timesheet entry")
    return ServiceResult.success({**entry, **values})


async def start_timer(db: Database, user_id: str, entry_id: str) -> ServiceResult[Dict[str, Any]]:
    """Start timing an entry. Starting a running timer is a VALIDATION error."""
    entry = await get_resource(db, TIMESHEETS, user_id, entry_id)
    if not entry:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Timesheet entry {entry_id} not found")
    if entry.get("timer_started_at"):
        return ServiceResult.failure(ErrorKind.VALIDATION, "Timer is already running")

    logger.info(f"Starting timer for timesheet entry {entry_id} (user {user_id})")
    return await _write(
        db, user_id, entry,
        {"status": "active", "timer_started_at": _utc_now().isoformat()},
        "start_timer",
    )


async def stop_timer(db: Database, user_id: str, entry_id: str) -> ServiceResult[Dict[str, Any]]:
    """Stop the timer, add the elapsed hours and complete the entry."""
    entry = await get_resource(db, TIMESHEETS, user_id, entry_id)
    if not entry:
        return ServiceResult.failure(ErrorKind.NOT_FOUND, f"Timesheet entry {entry_id} not found")

    hours = read_money(entry.get("hours"))
    started = entry.get("timer_started_at")
    if started:
        started_at = datetime.fromisoformat(str(started).replace("Z", "+00:00"))
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)
        elapsed = Decimal(str((_utc_now() - started_at).total_seconds())) / SECONDS_PER_HOUR
        hours += max(elapsed, ZERO)

    logger.info(f"Stopping timer for timesheet entry {entry_id} (user {user_id})")
    return await _write(
        db, user_id, entry,
        {"status": "completed", "timer_started_at": None, "hours": money_str(hours)},
        "stop_timer",
    )


async def get_timesheet_stats(
    db: Database,
    user_id: str,
    project_id: Optional[str] = None,
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Total, billable and non-billable hours plus entry counts per status."""
    entries = await list_resources(
        db, TIMESHEETS, user_id,
        filters={"project_id": project_id},
        from_date=from_date,
        to_date=to_date,
        limit=None,
    )

    total = ZERO
    billable = ZERO
    for entry in entries:
        hours = read_money(entry.get("hours"))
        total += hours
        if entry.get("billable"):
            billable += hours

    by_status = Counter(entry.get("status") or "pending" for entry in entries)
    return {
        "total_entries": len(entries),
        "total_hours": money_str(total),
        "billable_hours": money_str(billable),
        "non_billable_hours": money_str(total - billable),
        "by_status": {status: by_status.get(status, 0) for status in TIMESHEET_STATUSES},
    }
