"""Write-ahead intent for a create operation spanning both stores."""

from datetime import datetime, timezone

from sqlalchemy import Column, Index, String, Text, DateTime
from ..database import Base

INTENT_PENDING = "pending"
INTENT_COMPLETED = "completed"
INTENT_ABANDONED = "abandoned"


class WriteIntent(Base):
    """Journal entry committed before the relationship write.

    ``payload`` holds the JSON needed to redo the metadata insert:
    ``{"name": ...}`` plus ``"parent"`` for documents or ``"members"`` for
    groups. A row still ``pending`` after its request is gone marks a crash
    between the two writes.
    """

    __tablename__ = "write_intents"
    __table_args__ = (
        Index("ix_write_intents_status_created", "status", "created_at"),
    )

    id = Column(String(64), primary_key=True)  # id of the entity being created
    kind = Column(String(20), nullable=False)  # folder, document, group
    subject = Column(String(255), nullable=True)  # owner for folders/documents
    payload = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=INTENT_PENDING)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    resolved_at = Column(DateTime(timezone=True), nullable=True)
