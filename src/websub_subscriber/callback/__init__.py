"""
Callback endpoint for hub verification and notification delivery.
"""

from .handlers import CallbackHandler, VerificationQuery, create_app

__all__ = ["CallbackHandler", "VerificationQuery", "create_app"]
