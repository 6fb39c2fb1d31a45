"""In-process relationship store for tests and local development.

Evaluates the same authorization model the OpenFGA store is configured
with::

    type group     member: [user]
    type folder    owner:  [user]
                   viewer: [user, group#member] or owner
    type document  owner:  [user]
                   parent: [folder]
                   viewer: [user, group#member] or owner or viewer from parent

Writes are held to the subject types each relation accepts, as OpenFGA
does. Facts are kept in a set, so writing the same fact twice is a no-op.
Everything is lost when the process exits.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Sequence

from .protocols import RelationshipStoreError
from .tuples import (
    ALLOWED_SUBJECTS,
    DEFINED_RELATIONS,
    DOCUMENT,
    FOLDER,
    OWNER,
    PARENT,
    VIEWER,
    RelationshipTuple,
    split_object,
    split_userset,
    subject_type,
)

logger = logging.getLogger(__name__)

# Per type and relation: which other relation on the same object also grants
# it, and which (tupleset relation, relation on the related object) pairs do.
_IMPLIED_BY: dict[tuple[str, str], tuple[str, ...]] = {
    (FOLDER, VIEWER): (OWNER,),
    (DOCUMENT, VIEWER): (OWNER,),
}
_FROM_RELATED: dict[tuple[str, str], tuple[tuple[str, str], ...]] = {
    (DOCUMENT, VIEWER): ((PARENT, VIEWER),),
}
# Guards against cycles such as a group that is a member of itself.
_MAX_DEPTH = 25


class InMemoryRelationshipStore:
    """RelationshipStore backed by a set of facts."""

    def __init__(self, tuples: Iterable[RelationshipTuple] = ()):
        self._lock = threading.Lock()
        self._tuples: set[RelationshipTuple] = set(tuples)

    @property
    def tuples(self) -> frozenset[RelationshipTuple]:
        """Snapshot of every stored fact."""
        with self._lock:
            return frozenset(self._tuples)

    def write(self, tuples: Sequence[RelationshipTuple]) -> None:
        for t in tuples:
            self._validate(t)
            self._validate_subject(t)
        with self._lock:
            self._tuples.update(tuples)
        logger.debug("Wrote %d relationship tuple(s)", len(tuples))

    def check(self, tuple_key: RelationshipTuple) -> bool:
        self._validate(tuple_key)
        with self._lock:
            snapshot = frozenset(self._tuples)
        return _Evaluator(snapshot).check(
            tuple_key.object, tuple_key.relation, tuple_key.subject, 0
        )

    def list_objects(self, object_type: str, relation: str, subject: str) -> list[str]:
        if (object_type, relation) not in DEFINED_RELATIONS:
            raise RelationshipStoreError(
                "list_objects", f"relation '{relation}' is not defined on type '{object_type}'"
            )
        with self._lock:
            snapshot = frozenset(self._tuples)
        candidates = sorted({
            t.object for t in snapshot if t.object.startswith(f"{object_type}:")
        })
        evaluator = _Evaluator(snapshot)
        return [obj for obj in candidates if evaluator.check(obj, relation, subject, 0)]

    def close(self) -> None:
        pass

    @staticmethod
    def _validate(t: RelationshipTuple) -> None:
        try:
            object_type, _ = split_object(t.object)
        except ValueError as e:
            raise RelationshipStoreError("validate", str(e)) from e
        if (object_type, t.relation) not in DEFINED_RELATIONS:
            raise RelationshipStoreError(
                "validate", f"relation '{t.relation}' is not defined on type '{object_type}'"
            )
        if not t.subject:
            raise RelationshipStoreError("validate", "subject must not be empty")

    @staticmethod
    def _validate_subject(t: RelationshipTuple) -> None:
        object_type = t.object.partition(":")[0]
        allowed = ALLOWED_SUBJECTS[(object_type, t.relation)]
        if subject_type(t.subject) not in allowed:
            raise RelationshipStoreError(
                "validate",
                f"subject '{t.subject}' is not allowed for {object_type}#{t.relation}; "
                f"expected one of {sorted(allowed)}",
            )


class _Evaluator:
    """Answers one check or list query against a fixed snapshot."""

    def __init__(self, tuples: frozenset[RelationshipTuple]):
        self._by_key: dict[tuple[str, str], list[str]] = {}
        for t in tuples:
            self._by_key.setdefault((t.object, t.relation), []).append(t.subject)

    def check(self, obj: str, relation: str, subject: str, depth: int) -> bool:
        if depth > _MAX_DEPTH:
            return False

        # Direct grants, including usersets such as group:g1#member.
        for granted in self._by_key.get((obj, relation), ()):
            if granted == subject:
                return True
            base, userset_relation = split_userset(granted)
            if userset_relation and self.check(base, userset_relation, subject, depth + 1):
                return True

        object_type = obj.partition(":")[0]

        for implied in _IMPLIED_BY.get((object_type, relation), ()):
            if self.check(obj, implied, subject, depth + 1):
                return True

        for tupleset, related_relation in _FROM_RELATED.get((object_type, relation), ()):
            for related in self._by_key.get((obj, tupleset), ()):
                if self.check(related, related_relation, subject, depth + 1):
                    return True

        return False
