"""
Manager Dashboard Module

API Endpoints:
- POST /manager-dashboard
"""
