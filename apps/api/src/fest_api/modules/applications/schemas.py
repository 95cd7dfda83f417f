"""
Student Applications Schemas

Pydantic schemas for the review-applications actions.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator


class ReviewAction(str, Enum):
    """Actions accepted by POST /review-applications."""

    GET_PENDING_APPLICATIONS = "get_pending_applications"
    APPROVE_STUDENT = "approve_student"
    REJECT_STUDENT = "reject_student"
    EDIT_STUDENT_DETAILS = "edit_student_details"


class ApproveStudentRequest(BaseModel):
    """Body of the approve_student action."""

    application_id: int = Field(..., gt=0)
    participating_events: list[int]
    accompanying_events: list[int] = Field(default_factory=list)


class RejectStudentRequest(BaseModel):
    """Body of the reject_student action."""

    application_id: int = Field(..., gt=0)
    rejection_reason: str = Field(..., min_length=1, max_length=500)


class EditStudentDetailsRequest(BaseModel):
    """
    Body of the edit_student_details action.

    Omitted fields are left unchanged.
    """

    application_id: int = Field(..., gt=0)

    # Student
    full_name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    gender: str | None = Field(None, max_length=10)

    # Application
    blood_group: str | None = Field(None, max_length=5)
    address: str | None = Field(None, max_length=500)
    department: str | None = Field(None, max_length=100)
    year_of_study: int | None = Field(None, ge=1, le=6)
    semester: int | None = Field(None, ge=1, le=12)

    @field_validator("full_name")
    @classmethod
    def full_name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("full_name cannot be null")
        return value

    def updates(self) -> dict[str, Any]:
        """The fields the client actually sent, without the application id."""
        return self.model_dump(exclude_unset=True, exclude={"application_id"})
