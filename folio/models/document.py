"""Document model."""

from sqlalchemy import Column, Index, String, Text, DateTime
from sqlalchemy.sql import func
from ..database import Base


class Document(Base):
    """Document row. ``parent`` is a folder id, or '' for none.

    No foreign key on ``parent``: whether the folder must exist is a policy
    switch, and documents may be created before their folder's row lands.
    """

    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_parent", "parent"),
    )

    id = Column(String(64), primary_key=True)
    name = Column(Text, nullable=False)
    parent = Column(String(64), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
