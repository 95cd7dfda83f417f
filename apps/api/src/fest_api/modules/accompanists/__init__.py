"""Accompanists module."""

from .models import Accompanist, AccompanistType

__all__ = ["Accompanist", "AccompanistType"]
