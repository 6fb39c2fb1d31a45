"""Repository for group membership rows."""

from typing import List, Sequence

from sqlalchemy import insert
from sqlalchemy.orm import Session

from ..models.group import GroupMember


class GroupRepository:
    """Data access layer for groups (one row per member)."""

    def __init__(self, db: Session):
        self.db = db

    def add_members(self, rows: Sequence[dict]) -> int:
        """Insert ``{"id", "name", "member"}`` rows with one executemany.

        An empty sequence inserts nothing. Returns the number of rows sent.
        """
        if not rows:
            return 0
        self.db.execute(insert(GroupMember), list(rows))
        return len(rows)

    def list_members(self, group_id: str) -> List[GroupMember]:
        return (
            self.db.query(GroupMember)
            .filter(GroupMember.id == group_id)
            .order_by(GroupMember.member)
            .all()
        )

    def exists(self, group_id: str) -> bool:
        return self.db.query(GroupMember.id).filter(GroupMember.id == group_id).first() is not None
