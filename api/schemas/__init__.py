"""
API request and response schemas.
"""

from .common import BatchResult, Envelope, UserBrief

__all__ = [
    "BatchResult",
    "Envelope",
    "UserBrief",
]
