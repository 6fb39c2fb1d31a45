"""Relationship store protocol.

The coordinator only needs to write facts, ask yes/no questions about
them, and list the objects a subject can reach. How indirect grants are
evaluated (ownership implies viewing, group membership, folder parents) is
the store's business.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from .tuples import RelationshipTuple


class RelationshipStoreError(Exception):
    """A relationship store call failed (network, validation, server error)."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"Relationship store {operation} failed: {message}")
        self.operation = operation


class RelationshipStore(Protocol):
    """Protocol for relationship stores.

    Implementations: ``OpenFgaRelationshipStore`` for production and
    ``InMemoryRelationshipStore`` for tests and local development.
    """

    def write(self, tuples: Sequence[RelationshipTuple]) -> None:
        """Write all *tuples* as one batch.

        Raises:
            RelationshipStoreError: If the write fails
        """
        ...

    def check(self, tuple_key: RelationshipTuple) -> bool:
        """Return True if ``tuple_key.subject`` has ``tuple_key.relation`` on
        ``tuple_key.object``, directly or through the model's indirections.

        Raises:
            RelationshipStoreError: If the check fails
        """
        ...

    def list_objects(self, object_type: str, relation: str, subject: str) -> list[str]:
        """Return ``"<type>:<id>"`` for every object of *object_type* on which
        *subject* has *relation*.

        Raises:
            RelationshipStoreError: If the query fails
        """
        ...

    def close(self) -> None:
        """Release client resources."""
        ...
