"""Pydantic schemas for timesheet endpoints."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

TimesheetStatus = Literal["pending", "active", "completed"]


class TimesheetCreateRequest(BaseModel):
    project_id: Optional[str] = Field(None, description="Project the time is logged against")
    user_name: str = Field(..., min_length=1, max_length=120, description="Who did the work")
    task: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    entry_date: date = Field(..., description="Day the work was done")
    hours: Optional[Decimal] = Field(None, ge=0, description="Hours worked (timers add to this)")
    billable: Optional[bool] = Field(None, description="Defaults to true")
    status: Optional[TimesheetStatus] = Field(None, description="Defaults to 'pending'")


class TimesheetUpdateRequest(BaseModel):
    project_id: Optional[str] = None
    user_name: Optional[str] = Field(None, min_length=1, max_length=120)
    task: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    entry_date: Optional[date] = None
    hours: Optional[Decimal] = Field(None, ge=0)
    billable: Optional[bool] = None
    status: Optional[TimesheetStatus] = None


class TimesheetResponse(BaseModel):
    id: str
    user_id: str
    project_id: Optional[str] = None
    user_name: str
    task: str
    description: Optional[str] = None
    entry_date: date
    hours: Decimal = Decimal("0")
    billable: bool = True
    status: TimesheetStatus = "pending"
    timer_started_at: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None


class TimesheetListResponse(BaseModel):
    timesheets: List[TimesheetResponse]
    count: int
    limit: int
    offset: int


class TimesheetStatsResponse(BaseModel):
    total_entries: int
    total_hours: Decimal
    billable_hours: Decimal
    non_billable_hours: Decimal
    by_status: Dict[str, int]
