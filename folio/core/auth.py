"""Caller identity — the subject every coordinator call is made on behalf of.

Public interface:
    ``Caller``          — immutable identity passed explicitly to the coordinator.
    ``optional_caller`` — FastAPI dependency; returns a Caller for a valid
                          bearer token and ``None`` otherwise. Never raises.

Whether a missing identity is an error is decided by the coordinator, not
here: group creation and sharing work without one.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .token_factory import decode_token

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Caller:
    """Authenticated subject for the current operation."""

    subject: str


def optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Optional[Caller]:
    """Resolve the bearer token into a Caller, or ``None`` if absent or invalid."""
    if credentials is None:
        return None

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        logger.info("Rejected bearer token")
        return None

    return Caller(subject=payload.sub)
