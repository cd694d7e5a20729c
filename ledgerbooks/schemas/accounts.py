"""
Pydantic schemas for account endpoints.

An account holds the current balance of a bank or cash account. The
balance is set once at creation (opening balance) and afterwards only
moves through bank transactions.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class AccountCreateRequest(BaseModel):
    """Request to create a new account with an opening balance."""
    name: str = Field(..., min_length=1, max_length=120, description="Account name", examples=["Operating account"])
    type: str = Field("bank", max_length=40, description="Account type (bank, cash, credit_card, ...)")
    currency: str = Field("USD", min_length=3, max_length=3, description="ISO currency code")
    opening_balance: Decimal = Field(
        Decimal("0"),
        description="Balance before any recorded transaction",
        examples=["1500.00"],
    )
    description: Optional[str] = Field(None, max_length=500, description="Free-form notes")


class AccountResponse(BaseModel):
    """A single account."""
    id: str = Field(..., description="Account UUID")
    user_id: str = Field(..., description="Owner user ID")
    name: str = Field(..., description="Account name")
    type: str = Field(..., description="Account type")
    currency: str = Field(..., description="ISO currency code")
    balance: Decimal = Field(..., description="Current balance")
    description: Optional[str] = Field(None, description="Free-form notes")
    created_at: str = Field(..., description="ISO-8601 creation timestamp")
    updated_at: Optional[str] = Field(None, description="ISO-8601 timestamp of last update")


class AccountListResponse(BaseModel):
    """Response for GET /accounts."""
    accounts: List[AccountResponse] = Field(..., description="User's accounts ordered by name")
    count: int = Field(..., description="Number of accounts returned")
