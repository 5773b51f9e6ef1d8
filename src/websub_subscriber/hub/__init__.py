"""
Hub subscription client and renewal loop.
"""

from .client import HubClient, HubSubscribeError, SubscriptionRequest
from .renewer import SubscriptionRenewer

__all__ = [
    "HubClient",
    "HubSubscribeError",
    "SubscriptionRequest",
    "SubscriptionRenewer",
]
