"""Shared FastAPI dependencies for the route modules."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.deadline import Deadline
from ..database import get_db
from ..relationships import RelationshipStore, get_relationship_store
from ..services import AuthorizationCoordinator


def get_coordinator(
    db: Session = Depends(get_db),
    store: RelationshipStore = Depends(get_relationship_store),
) -> AuthorizationCoordinator:
    return AuthorizationCoordinator(db, store)


def get_deadline() -> Optional[Deadline]:
    """Per-request deadline from REQUEST_TIMEOUT_SECONDS (0 disables it)."""
    if settings.request_timeout_seconds <= 0:
        return None
    return Deadline.after(settings.request_timeout_seconds)
