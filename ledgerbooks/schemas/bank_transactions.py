"""
Pydantic schemas for bank transaction endpoints.

Amounts are signed: positive amounts are deposits (money into the
account), negative amounts are withdrawals (money out). A zero amount is
rejected by the service with 400 invalid_request.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


# --- Request models ---

class BankTransactionCreateRequest(BaseModel):
    """Request to record a bank transaction against an account."""
    account_id: str = Field(..., min_length=1, description="UUID of the account")
    amount: Decimal = Field(
        ...,
        description="Signed amount: positive = deposit, negative = withdrawal",
        examples=["250.00", "-42.10"],
    )
    txn_date: Optional[date] = Field(None, description="Date of the transaction (defaults to today)")
    type: Optional[str] = Field(
        None,
        max_length=40,
        description="Transaction type (deposit, withdrawal, transfer, fee, ...). Derived from the sign when omitted",
    )
    description: Optional[str] = Field(None, max_length=500, description="Bank statement description")
    category: Optional[str] = Field(None, max_length=80, description="Category (defaults to 'Uncategorized')")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    reference: Optional[str] = Field(None, max_length=120, description="Cheque number, bank reference, ...")


class BankTransactionUpdateRequest(BaseModel):
    """
    Partial update. Changing `amount` or `account_id` moves the balance
    effect atomically.
    """
    account_id: Optional[str] = Field(None, min_length=1, description="Move to another account")
    amount: Optional[Decimal] = Field(None, description="New signed amount")
    txn_date: Optional[date] = Field(None, description="New transaction date")
    type: Optional[str] = Field(None, max_length=40)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=80)
    tags: Optional[List[str]] = Field(None)
    reference: Optional[str] = Field(None, max_length=120)


class BankTransactionCategorizeRequest(BaseModel):
    category: str = Field(..., min_length=1, max_length=80, description="Category to assign")
    tags: Optional[List[str]] = Field(None, description="Replace the tags when provided")


# --- Response models ---

class BankTransactionResponse(BaseModel):
    """A single bank transaction."""
    id: str = Field(..., description="Transaction UUID")
    user_id: str = Field(..., description="Owner user ID")
    account_id: str = Field(..., description="Account UUID")
    amount: Decimal = Field(..., description="Signed amount")
    type: Optional[str] = Field(None, description="Transaction type")
    txn_date: date = Field(..., description="Transaction date")
    description: Optional[str] = Field(None)
    category: Optional[str] = Field(None)
    tags: List[str] = Field(default_factory=list)
    reference: Optional[str] = Field(None)
    status: Literal["pending", "reconciled"] = Field("pending", description="Reconciliation status")
    reconciled: bool = Field(False, description="Matched against a bank statement")
    created_at: str = Field(..., description="ISO-8601 creation timestamp")
    updated_at: Optional[str] = Field(None, description="ISO-8601 timestamp of last update")


class BankTransactionPageSummary(BaseModel):
    """Totals over the returned page."""
    total: Decimal = Field(..., description="Net amount (income - expenses)")
    income: Decimal = Field(..., description="Sum of deposits")
    expenses: Decimal = Field(..., description="Sum of withdrawals, as a positive number")


class BankTransactionListResponse(BaseModel):
    """Response for GET /bank-transactions."""
    transactions: List[BankTransactionResponse]
    count: int = Field(..., description="Number of transactions returned")
    limit: int
    offset: int
    summary: BankTransactionPageSummary


class CategoryTotal(BaseModel):
    count: int
    amount: Decimal


class BankTransactionSummaryResponse(BaseModel):
    """Response for GET /bank-transactions/summary."""
    total_transactions: int
    total_amount: Decimal
    income: Decimal
    expenses: Decimal
    reconciled: int
    unreconciled: int
    by_category: Dict[str, CategoryTotal]
    by_type: Dict[str, int]


class BankTransactionCategoriesResponse(BaseModel):
    categories: List[str] = Field(..., description="Distinct categories in use")
