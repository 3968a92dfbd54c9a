"""API routers for RequestFlow."""

from . import actions
from . import health

__all__ = [
    "actions",
    "health",
]
