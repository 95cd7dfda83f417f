"""
Manager Dashboard Schemas

Response models for POST /manager-dashboard.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CollegeInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    college_code: str
    college_name: str
    place: str | None = None
    max_quota: int


class DashboardStats(BaseModel):
    """Registration counts for the college."""

    total_students: int
    students_with_applications: int
    approved_students: int
    rejected_students: int
    accompanists_count: int
    quota_used: int
    quota_remaining: int
    events_with_participants: int


class AccommodationInfo(BaseModel):
    total_boys: int
    total_girls: int
    status: str = "PENDING"
    applied_at: datetime | None = None


class PaymentInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str | None = None
    uploaded_at: datetime | None = None
    admin_remarks: str | None = None


class DashboardData(BaseModel):
    """Everything the principal / manager home screen shows."""

    college: CollegeInfo
    stats: DashboardStats
    accommodation: AccommodationInfo | None = None
    payment_status: PaymentInfo | None = None
    is_final_approved: bool
    final_approved_at: datetime | None = None
    # Only computed for principals; always False for managers
    has_team_manager: bool = False
