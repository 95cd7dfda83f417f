"""
Final Approval Module

Locks a college's registrations and writes the final participant snapshot.

API Endpoints:
- POST /final-approval
"""

from .models import FinalMasterRecord

__all__ = ["FinalMasterRecord"]
