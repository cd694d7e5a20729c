"""Pydantic schemas for project endpoints."""

from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ProjectStatus = Literal["active", "completed", "on_hold"]


class ProjectCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    customer_name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[ProjectStatus] = Field(None, description="Defaults to 'active'")
    budget: Optional[Decimal] = Field(None, ge=0)
    revenue: Optional[Decimal] = Field(None, ge=0)


class ProjectUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    customer_name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    status: Optional[ProjectStatus] = None
    budget: Optional[Decimal] = Field(None, ge=0)
    revenue: Optional[Decimal] = Field(None, ge=0)


class ProjectResponse(BaseModel):
    id: str
    user_id: str
    name: str
    customer_name: Optional[str] = None
    description: Optional[str] = None
    status: ProjectStatus = "active"
    budget: Decimal = Decimal("0")
    revenue: Decimal = Decimal("0")
    created_at: str
    updated_at: Optional[str] = None


class ProjectListResponse(BaseModel):
    projects: List[ProjectResponse]
    count: int
    limit: int
    offset: int


class ProjectStatsResponse(BaseModel):
    """Response for GET /projects/{id}/stats."""
    project_id: str
    total_hours: Decimal = Field(..., description="Hours logged on the project's timesheets")
    billable_hours: Decimal
    time_entries: int
    total_expenses: Decimal
    total_invoiced: Decimal = Field(..., description="Sum of non-void invoice totals")
    paid_invoiced: Decimal
    budget_remaining: Decimal
    net_profit: Decimal = Field(..., description="revenue - expenses")
    profit_margin: Decimal = Field(..., description="net_profit / revenue, in percent")
