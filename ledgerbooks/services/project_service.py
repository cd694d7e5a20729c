"""
Project service.

Projects group timesheet entries, expenses and invoices. Project stats
aggregate those records for one project.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from ledgerbooks.db import Database, Query
from ledgerbooks.services.document_service import document_total
from ledgerbooks.services.expense_service import EXPENSES
from ledgerbooks.services.invoice_service import INVOICES
from ledgerbooks.services.resource_service import Resource, get_resource
from ledgerbooks.services.timesheet_service import TIMESHEETS
from ledgerbooks.utils.money import ZERO, money_str, read_money

logger = logging.getLogger(__name__)

PROJECT_STATUSES = ("active", "completed", "on_hold")

PROJECTS = Resource(
    table="project",
    label="Project",
    search_columns=("name", "customer_name", "description"),
    defaults={"status": "active", "budget": "0.00", "revenue": "0.00"},
    amount_fields=("budget", "revenue"),
    choices={"status": PROJECT_STATUSES},
)


async def get_project_stats(
    db: Database,
    user_id: str,
    project_id: str,
) -> Optional[Dict[str, Any]]:
    """
    Aggregate hours, expenses and invoiced amounts for a project.

    Returns:
        Stats dict, or None if the project doesn't exist for this user
    """
    project = await get_resource(db, PROJECTS, user_id, project_id)
    if not project:
        return None

    def _for_project(table: str) -> Query:
        return Query(table).eq("user_id", user_id).eq("project_id", project_id)

    entries = await db.fetch(_for_project(TIMESHEETS.table))
    expenses = await db.fetch(_for_project(EXPENSES.table))
    invoices = await db.fetch(_for_project(INVOICES.table))

    total_hours = sum((read_money(e.get("hours")) for e in entries), ZERO)
    billable_hours = sum((read_money(e.get("hours")) for e in entries if e.get("billable")), ZERO)
    total_expenses = sum((read_money(e.get("amount")) for e in expenses), ZERO)
    total_invoiced = sum((document_total(i) for i in invoices if i.get("status") != "void"), ZERO)
    paid_invoiced = sum((document_total(i) for i in invoices if i.get("status") == "paid"), ZERO)

    revenue = read_money(project.get("revenue"))
    budget = read_money(project.get("budget"))
    net_profit = revenue - total_expenses
    profit_margin = (net_profit / revenue * Decimal("100")) if revenue > 0 else ZERO

    logger.info(f"Computed stats for project {project_id} (user {user_id})")
    return {
        "project_id": project_id,
        "total_hours": money_str(total_hours),
        "billable_hours": money_str(billable_hours),
        "time_entries": len(entries),
        "total_expenses": money_str(total_expenses),
        "total_invoiced": money_str(total_invoiced),
        "paid_invoiced": money_str(paid_invoiced),
        "budget_remaining": money_str(budget - total_expenses),
        "net_profit": money_str(net_profit),
        "profit_margin": money_str(profit_margin),
    }
