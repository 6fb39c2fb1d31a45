"""Repository for write intents."""

import json
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.write_intent import (
    INTENT_ABANDONED,
    INTENT_COMPLETED,
    INTENT_PENDING,
    WriteIntent,
)


class WriteIntentRepository:
    """Data access layer for the write-ahead intent journal."""

    def __init__(self, db: Session):
        self.db = db

    def record(self, entity_id: str, kind: str, subject: Optional[str], payload: dict) -> WriteIntent:
        intent = WriteIntent(
            id=entity_id,
            kind=kind,
            subject=subject,
            payload=json.dumps(payload),
            status=INTENT_PENDING,
        )
        self.db.add(intent)
        return intent

    def get(self, entity_id: str) -> Optional[WriteIntent]:
        return self.db.query(WriteIntent).filter(WriteIntent.id == entity_id).first()

    def list_pending(self) -> List[WriteIntent]:
        return (
            self.db.query(WriteIntent)
            .filter(WriteIntent.status == INTENT_PENDING)
            .order_by(WriteIntent.created_at)
            .all()
        )

    def mark_completed(self, entity_id: str) -> None:
        self._resolve(entity_id, INTENT_COMPLETED)

    def mark_abandoned(self, entity_id: str) -> None:
        self._resolve(entity_id, INTENT_ABANDONED)

    def _resolve(self, entity_id: str, status: str) -> None:
        intent = self.get(entity_id)
        if intent is None:
            return
        intent.status = status
        intent.resolved_at = datetime.now(timezone.utc)
