"""Share policies — who may grant a relation on an object.

Every ShareObject passes through exactly one policy before the fact is
written. ``OpenSharePolicy`` is the historical behavior: anyone, even an
unauthenticated caller, may grant any relation on any object. It stays the
default until a deployment opts into ``OwnerSharePolicy`` via
``SHARE_POLICY=owner``.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from ..core.auth import Caller
from ..exceptions import AuthenticationError, DependencyError, PermissionDeniedError
from ..relationships.protocols import RelationshipStore, RelationshipStoreError
from ..relationships.tuples import (
    DOCUMENT,
    FOLDER,
    GROUP,
    MEMBER,
    OWNER,
    RelationshipTuple,
    split_object,
    subject_ref,
)

logger = logging.getLogger(__name__)

# Relation the caller must hold on an object to share it under the owner policy.
_GRANTING_RELATION = {
    FOLDER: OWNER,
    DOCUMENT: OWNER,
    GROUP: MEMBER,
}


class SharePolicy(Protocol):
    """Decides whether *caller* may write *fact*. Raises to refuse."""

    name: str

    def authorize(
        self,
        fact: RelationshipTuple,
        caller: Optional[Caller],
        store: RelationshipStore,
    ) -> None:
        ...


class OpenSharePolicy:
    """No identity and no permission check. Every grant is logged."""

    name = "open"

    def authorize(self, fact, caller, store) -> None:
        logger.warning(
            "Unchecked share granted",
            extra={
                "object": fact.object,
                "relation": fact.relation,
                "subject": fact.subject,
                "caller": caller.subject if caller else None,
            },
        )


class OwnerSharePolicy:
    """Caller must be authenticated and own the object (be a member, for groups)."""

    name = "owner"

    def authorize(self, fact, caller, store) -> None:
        if caller is None or not caller.subject:
            raise AuthenticationError("Sharing requires an authenticated caller")

        object_type, _ = split_object(fact.object)
        required = _GRANTING_RELATION.get(object_type, OWNER)
        probe = RelationshipTuple(fact.object, required, subject_ref(caller.subject))
        try:
            allowed = store.check(probe)
        except RelationshipStoreError as e:
            logger.error("Share authorization check failed: %s", e)
            raise DependencyError("relationship_store", "Share authorization check failed", e) from e

        if not allowed:
            logger.info(
                "Share refused",
                extra={"object": fact.object, "relation": fact.relation, "caller": caller.subject},
            )
            raise PermissionDeniedError(required)


def get_share_policy(name: str) -> SharePolicy:
    """Return the policy registered under *name* (``open`` or ``owner``)."""
    if name == OpenSharePolicy.name:
        return OpenSharePolicy()
    if name == OwnerSharePolicy.name:
        return OwnerSharePolicy()
    raise ValueError(f"Unknown share policy: {name}")
