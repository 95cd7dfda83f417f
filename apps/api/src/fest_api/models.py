"""
Model Registry

Imports every ORM model so ``Base.metadata`` is complete. Used by Alembic,
the application entry point and the test suite.
"""

from fest_api.core.database import Base
from fest_api.modules.accompanists.models import Accompanist
from fest_api.modules.applications.models import ApplicationDocument, Student, StudentApplication
from fest_api.modules.colleges.models import AccommodationRequest, College, PaymentReceipt
from fest_api.modules.events.models import (
    PER_EVENT_TABLES,
    AccompanistEventParticipation,
    Event,
    StudentEventParticipation,
)
from fest_api.modules.final_approval.models import FinalMasterRecord
from fest_api.modules.users.models import User

__all__ = [
    "Base",
    "PER_EVENT_TABLES",
    "AccommodationRequest",
    "Accompanist",
    "AccompanistEventParticipation",
    "ApplicationDocument",
    "College",
    "Event",
    "FinalMasterRecord",
    "PaymentReceipt",
    "Student",
    "StudentApplication",
    "StudentEventParticipation",
    "User",
]
