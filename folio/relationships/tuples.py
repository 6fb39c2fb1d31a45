"""Relationship facts and the string forms of objects and subjects."""

from __future__ import annotations

from dataclasses import dataclass

# Relations the authorization model defines.
OWNER = "owner"
VIEWER = "viewer"
MEMBER = "member"
PARENT = "parent"
RELATIONS = frozenset({OWNER, VIEWER, MEMBER, PARENT})

# Object types that can carry relations.
FOLDER = "folder"
DOCUMENT = "document"
GROUP = "group"
OBJECT_TYPES = frozenset({FOLDER, DOCUMENT, GROUP})

USER = "user"

# Directly assignable subject types per (type, relation), as in the
# authorization model. A userset is written "<type>#<relation>".
ALLOWED_SUBJECTS: dict[tuple[str, str], frozenset[str]] = {
    (GROUP, MEMBER): frozenset({USER}),
    (FOLDER, OWNER): frozenset({USER}),
    (FOLDER, VIEWER): frozenset({USER, f"{GROUP}#{MEMBER}"}),
    (DOCUMENT, OWNER): frozenset({USER}),
    (DOCUMENT, PARENT): frozenset({FOLDER}),
    (DOCUMENT, VIEWER): frozenset({USER, f"{GROUP}#{MEMBER}"}),
}
DEFINED_RELATIONS = frozenset(ALLOWED_SUBJECTS)


@dataclass(frozen=True)
class RelationshipTuple:
    """One authorization grant: *subject* has *relation* on *object*.

    Attributes:
        object: ``"<type>:<id>"`` (e.g. ``"document:1f0c..."``)
        relation: One of ``RELATIONS``
        subject: ``"user:alice"``, ``"folder:<id>"`` or ``"group:<id>#member"``
    """

    object: str
    relation: str
    subject: str


def object_ref(object_type: str, object_id: str) -> str:
    return f"{object_type}:{object_id}"


def subject_ref(identifier: str) -> str:
    """Normalize a subject identifier.

    Bare identifiers name users (``"bob"`` -> ``"user:bob"``); anything that
    already carries a type prefix is kept as-is. Callers, group members and
    share targets all go through here so grants and checks agree.
    """
    if ":" in identifier:
        return identifier
    return f"{USER}:{identifier}"


def split_object(ref: str) -> tuple[str, str]:
    """Split ``"<type>:<id>"``. Raises ValueError for anything else."""
    object_type, sep, object_id = ref.partition(":")
    if not sep or not object_type or not object_id:
        raise ValueError(f"Malformed object reference: {ref!r}")
    return object_type, object_id


def split_userset(ref: str) -> tuple[str, str | None]:
    """Split ``"group:g1#member"`` into ``("group:g1", "member")``.

    A plain subject returns ``(ref, None)``.
    """
    base, sep, relation = ref.partition("#")
    return base, (relation if sep else None)


def subject_type(ref: str) -> str:
    """Type of a subject as the model names it.

    ``"user:bob"`` -> ``"user"``, ``"group:g1#member"`` -> ``"group#member"``.
    """
    base, relation = split_userset(ref)
    base_type = base.partition(":")[0]
    return f"{base_type}#{relation}" if relation else base_type
