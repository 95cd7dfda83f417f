"""
Event Assignment Schemas

Pydantic schemas for the approved-students actions.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ApprovedStudentsAction(str, Enum):
    """Actions accepted by POST /approved-students."""

    GET_APPROVED_STUDENTS = "get_approved_students"
    EDIT_STUDENT_EVENTS = "edit_student_events"
    MOVE_TO_REJECTED = "move_to_rejected"


class EditStudentEventsRequest(BaseModel):
    """Body of the edit_student_events action. Missing lists mean no events."""

    student_id: int = Field(..., gt=0)
    participating_events: list[int] = Field(default_factory=list)
    accompanying_events: list[int] = Field(default_factory=list)


class MoveToRejectedRequest(BaseModel):
    """Body of the move_to_rejected action."""

    student_id: int = Field(..., gt=0)
    rejection_reason: str = Field(..., min_length=1, max_length=500)
