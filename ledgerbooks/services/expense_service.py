"""Expense records (bills paid to vendors, optionally billable to a customer)."""

from ledgerbooks.services.resource_service import Resource

EXPENSE_STATUSES = ("unbilled", "invoiced", "reimbursed", "billable", "non-billable")

EXPENSES = Resource(
    table="expense",
    label="Expense",
    search_columns=("description", "vendor", "reference", "notes"),
    date_column="expense_date",
    defaults={
        "category": "Other",
        "payment_method": "Cash",
        "status": "unbilled",
        "billable": False,
    },
    amount_fields=("amount",),
    choices={"status": EXPENSE_STATUSES},
)
