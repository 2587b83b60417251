"""
Not-found reconciliation and SUT/oracle comparison.
"""

from .comparator import Comparator
from .notfound import NotFoundDecision, Resolution, describe, reconcile_notfound

__all__ = [
    "Comparator",
    "NotFoundDecision",
    "Resolution",
    "describe",
    "reconcile_notfound",
]
