"""
Domain enums shared by schemas and services.
"""

from app.models.enums import OrderStatus, SessionKind, VerificationState

__all__ = [
    "OrderStatus",
    "SessionKind",
    "VerificationState",
]
