"""Pydantic schemas for expense endpoints."""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ExpenseStatus = Literal["unbilled", "invoiced", "reimbursed", "billable", "non-billable"]


class ExpenseCreateRequest(BaseModel):
    expense_date: date = Field(..., description="Date the expense was incurred")
    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal = Field(..., ge=0, description="Amount spent (non-negative)", examples=["89.90"])
    vendor: str = Field(..., min_length=1, max_length=200, description="Vendor name")
    account: str = Field(..., min_length=1, max_length=120, description="Paid-through account")
    category: Optional[str] = Field(None, max_length=80, description="Defaults to 'Other'")
    payment_method: Optional[str] = Field(None, max_length=40, description="Defaults to 'Cash'")
    reference: Optional[str] = Field(None, max_length=120)
    notes: Optional[str] = Field(None, max_length=2000)
    status: Optional[ExpenseStatus] = Field(None, description="Defaults to 'unbilled'")
    billable: Optional[bool] = Field(None)
    customer_name: Optional[str] = Field(None, max_length=200)
    project_id: Optional[str] = Field(None)


class ExpenseUpdateRequest(BaseModel):
    expense_date: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    amount: Optional[Decimal] = Field(None, ge=0)
    vendor: Optional[str] = Field(None, min_length=1, max_length=200)
    account: Optional[str] = Field(None, min_length=1, max_length=120)
    category: Optional[str] = Field(None, max_length=80)
    payment_method: Optional[str] = Field(None, max_length=40)
    reference: Optional[str] = Field(None, max_length=120)
    notes: Optional[str] = Field(None, max_length=2000)
    status: Optional[ExpenseStatus] = None
    billable: Optional[bool] = None
    customer_name: Optional[str] = Field(None, max_length=200)
    project_id: Optional[str] = None


class ExpenseResponse(BaseModel):
    id: str
    user_id: str
    expense_date: date
    description: str
    amount: Decimal
    vendor: str
    account: str
    category: str = "Other"
    payment_method: str = "Cash"
    reference: Optional[str] = None
    notes: Optional[str] = None
    status: ExpenseStatus = "unbilled"
    billable: bool = False
    customer_name: Optional[str] = None
    project_id: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
    count: int
    limit: int
    offset: int
