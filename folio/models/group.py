"""Group membership rows — one row per (group, member)."""

from sqlalchemy import Column, String, Text
from ..database import Base


class GroupMember(Base):
    """Relational half of a group's membership.

    The other half is the set of ``member`` facts on ``group:<id>`` in the
    relationship store; both are written from the same member list.
    """

    __tablename__ = "groups"

    id = Column(String(64), primary_key=True)
    member = Column(String(255), primary_key=True)
    name = Column(Text, nullable=False)
