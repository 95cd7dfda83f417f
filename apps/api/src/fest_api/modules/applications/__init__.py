"""
Student Applications Module

Review workflow for student applications:
1. Pending list with uploaded documents
2. Approval with quota and per-event capacity checks
3. Rejection (reapply counter incremented)
4. Detail corrections

API Endpoints:
- POST /review-applications - action based, see router.py
"""

from .models import ApplicationDocument, ApplicationStatus, DocumentType, Student, StudentApplication

__all__ = [
    "ApplicationDocument",
    "ApplicationStatus",
    "DocumentType",
    "Student",
    "StudentApplication",
]
