"""Pydantic schemas for vendor endpoints."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

VendorStatus = Literal["active", "inactive"]


class VendorCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Vendor (contact) name")
    display_name: Optional[str] = Field(None, max_length=200, description="Defaults to company or name")
    company_name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=40)
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="Defaults to USD")
    payment_terms: Optional[str] = Field(None, max_length=80, description="Defaults to 'Due on Receipt'")
    status: Optional[VendorStatus] = Field(None, description="Defaults to 'active'")
    notes: Optional[str] = Field(None, max_length=2000)


class VendorUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    display_name: Optional[str] = Field(None, max_length=200)
    company_name: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=40)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    payment_terms: Optional[str] = Field(None, max_length=80)
    status: Optional[VendorStatus] = None
    notes: Optional[str] = Field(None, max_length=2000)


class VendorResponse(BaseModel):
    id: str
    user_id: str
    name: str
    display_name: str
    company_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    currency: str = "USD"
    payment_terms: Optional[str] = None
    status: VendorStatus = "active"
    notes: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class VendorListResponse(BaseModel):
    vendors: List[VendorResponse]
    count: int
    limit: int
    offset: int
