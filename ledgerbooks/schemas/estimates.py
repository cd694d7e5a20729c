"""Pydantic schemas for estimate (quote) endpoints. Totals follow the invoice rules."""

from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ledgerbooks.schemas.invoices import LineItem, LineItemResponse, PricingFields

EstimateStatus = Literal["draft", "sent", "accepted", "declined", "expired"]


class EstimateCreateRequest(PricingFields):
    customer_name: str = Field(..., min_length=1, max_length=200)
    estimate_number: Optional[str] = Field(None, max_length=40, description="Assigned as EST-000001... when omitted")
    estimate_date: date = Field(...)
    expiry_date: Optional[date] = Field(None)
    reference: Optional[str] = Field(None, max_length=120)
    project_id: Optional[str] = Field(None)
    items: List[LineItem] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=2000)


class EstimateUpdateRequest(PricingFields):
    customer_name: Optional[str] = Field(None, min_length=1, max_length=200)
    estimate_date: Optional[date] = Field(None)
    expiry_date: Optional[date] = Field(None)
    reference: Optional[str] = Field(None, max_length=120)
    project_id: Optional[str] = Field(None)
    items: Optional[List[LineItem]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=2000)


class EstimateResponse(BaseModel):
    id: str
    user_id: str
    estimate_number: str
    customer_name: str
    estimate_date: date
    expiry_date: Optional[date] = None
    reference: Optional[str] = None
    project_id: Optional[str] = None
    status: EstimateStatus
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
    created_at: str
    updated_at: Optional[str] = None


class EstimateListResponse(BaseModel):
    estimates: List[EstimateResponse]
    count: int
    limit: int
    offset: int


class EstimateStatusUpdateRequest(BaseModel):
    status: EstimateStatus
