"""API routes."""

from .documents import router as documents_router
from .folders import router as folders_router
from .groups import router as groups_router
from .sharing import router as sharing_router

__all__ = [
    "documents_router",
    "folders_router",
    "groups_router",
    "sharing_router",
]
