"""
Pydantic schemas for invoice endpoints.

Totals (sub_total, discount_amount, tax_amount, total) are always computed
by the server from the line items; any totals sent by the client are ignored.
"""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

InvoiceStatus = Literal["draft", "sent", "paid", "overdue", "void"]


class LineItem(BaseModel):
    """One billable line on an invoice or estimate."""
    description: str = Field(..., min_length=1, max_length=500, examples=["Consulting, October"])
    quantity: Decimal = Field(Decimal("1"), ge=0, description="Units billed")
    rate: Decimal = Field(..., ge=0, description="Price per unit")
    tax_amount: Decimal = Field(Decimal("0"), ge=0, description="Tax charged on this line")


class LineItemResponse(LineItem):
    amount: Decimal = Field(..., description="quantity * rate")


class PricingFields(BaseModel):
    """Adjustments applied on top of the line items."""
    discount: Optional[Decimal] = Field(None, ge=0, description="Discount value (percent or flat)")
    discount_type: Optional[Literal["percentage", "flat"]] = Field(None, description="How `discount` is applied")
    shipping_charges: Optional[Decimal] = Field(None, ge=0)
    adjustment: Optional[Decimal] = Field(None, description="Manual adjustment (may be negative)")
    round_off: Optional[Decimal] = Field(None, description="Rounding correction (may be negative)")


class InvoiceCreateRequest(PricingFields):
    customer_name: str = Field(..., min_length=1, max_length=200, description="Billed customer")
    customer_email: Optional[str] = Field(None, max_length=200)
    invoice_number: Optional[str] = Field(None, max_length=40, description="Assigned as INV-000001... when omitted")
    invoice_date: date = Field(..., description="Issue date")
    due_date: Optional[date] = Field(None)
    reference: Optional[str] = Field(None, max_length=120)
    project_id: Optional[str] = Field(None, description="Project the invoice bills for")
    items: List[LineItem] = Field(..., min_length=1, description="Line items")
    notes: Optional[str] = Field(None, max_length=2000)
    terms: Optional[str] = Field(None, max_length=2000)


class InvoiceUpdateRequest(PricingFields):
    """Partial update. Totals are recomputed when items or pricing fields change."""
    customer_name: Optional[str] = Field(None, min_length=1, max_length=200)
    customer_email: Optional[str] = Field(None, max_length=200)
    invoice_date: Optional[date] = Field(None)
    due_date: Optional[date] = Field(None)
    reference: Optional[str] = Field(None, max_length=120)
    project_id: Optional[str] = Field(None)
    items: Optional[List[LineItem]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=2000)
    terms: Optional[str] = Field(None, max_length=2000)


class InvoiceResponse(BaseModel):
    id: str
    user_id: str
    invoice_number: str
    customer_name: str
    customer_email: Optional[str] = None
    invoice_date: date
    due_date: Optional[date] = None
    reference: Optional[str] = None
    project_id: Optional[str] = None
    status: InvoiceStatus
    items: List[LineItemResponse]
    discount: Optional[Decimal] = None
    discount_type: str = "flat"
    shipping_charges: Optional[Decimal] = None
    adjustment: Optional[Decimal] = None
    round_off: Optional[Decimal] = None
    sub_total: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    notes: Optional[str] = None
    terms: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class InvoiceListResponse(BaseModel):
    invoices: List[InvoiceResponse]
    count: int
    limit: int
    offset: int


class InvoiceStatusUpdateRequest(BaseModel):
    status: InvoiceStatus = Field(..., description="Target status")


class NextNumberResponse(BaseModel):
    next_number: str = Field(..., examples=["INV-000042"])
