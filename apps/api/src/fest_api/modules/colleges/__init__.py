"""Colleges module - tenant records and the final approval lock."""

from .models import AccommodationRequest, College, PaymentReceipt

__all__ = ["AccommodationRequest", "College", "PaymentReceipt"]
