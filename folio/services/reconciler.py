"""Reconciliation of half-finished creates.

A ``pending`` write intent older than its request means the process died
(or a store call failed) somewhere between journaling the create and
committing its metadata rows. Whether the relationship facts made it is
decided by asking the relationship store for the first fact of the batch:
batches are written atomically, so one fact stands for all of them.

- fact present  -> insert the missing rows, intent becomes ``completed``
- fact absent   -> nothing was granted, intent becomes ``abandoned``

Store failures abort the pass; untouched intents stay pending for the next.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..exceptions import DependencyError
from ..models.write_intent import WriteIntent
from ..relationships.protocols import RelationshipStore, RelationshipStoreError
from ..relationships.tuples import (
    DOCUMENT,
    FOLDER,
    GROUP,
    MEMBER,
    OWNER,
    RelationshipTuple,
    object_ref,
)
from ..repositories import DocumentRepository, FolderRepository, GroupRepository, WriteIntentRepository

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    completed: int = 0
    abandoned: int = 0
    skipped: int = 0  # pending but too young to judge


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC.
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class Reconciler:
    """Resolves stale pending write intents."""

    def __init__(
        self,
        db: Session,
        store: RelationshipStore,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.store = store
        self.clock = clock
        self.intents = WriteIntentRepository(db)
        self.folders = FolderRepository(db)
        self.documents = DocumentRepository(db)
        self.groups = GroupRepository(db)

    def reconcile(self, older_than_seconds: float) -> ReconcileReport:
        """Resolve every pending intent created more than *older_than_seconds* ago."""
        report = ReconcileReport()
        now = self.clock()

        for intent in self.intents.list_pending():
            age = (now - _as_utc(intent.created_at)).total_seconds()
            if age < older_than_seconds:
                report.skipped += 1
                continue

            if self._facts_written(intent):
                self._complete(intent)
                report.completed += 1
            else:
                self.intents.mark_abandoned(intent.id)
                self._commit(intent)
                report.abandoned += 1

        logger.info(
            "Reconciliation finished",
            extra={
                "completed": report.completed,
                "abandoned": report.abandoned,
                "skipped": report.skipped,
            },
        )
        return report

    def _probe(self, intent: WriteIntent, payload: dict) -> Optional[RelationshipTuple]:
        """First fact of the intent's batch, or None if the batch was empty."""
        if intent.kind in (FOLDER, DOCUMENT):
            return RelationshipTuple(object_ref(intent.kind, intent.id), OWNER, intent.subject)
        if intent.kind == GROUP:
            members = payload.get("members") or []
            if not members:
                return None
            return RelationshipTuple(object_ref(GROUP, intent.id), MEMBER, members[0])
        raise ValueError(f"Unknown intent kind: {intent.kind}")

    def _facts_written(self, intent: WriteIntent) -> bool:
        probe = self._probe(intent, json.loads(intent.payload))
        if probe is None:
            return True
        try:
            return self.store.check(probe)
        except RelationshipStoreError as e:
            logger.error("Reconciliation check failed: %s", e, extra={"intent_id": intent.id})
            raise DependencyError("relationship_store", "Reconciliation check failed", e) from e

    def _complete(self, intent: WriteIntent) -> None:
        payload = json.loads(intent.payload)
        try:
            if intent.kind == FOLDER:
                if not self.folders.exists(intent.id):
                    self.folders.create(intent.id, payload["name"])
            elif intent.kind == DOCUMENT:
                if self.documents.get_by_id_optional(intent.id) is None:
                    self.documents.create(intent.id, payload["name"], payload.get("parent", ""))
            elif not self.groups.exists(intent.id):
                self.groups.add_members([
                    {"id": intent.id, "name": payload["name"], "member": member}
                    for member in payload.get("members") or []
                ])
        except sqlalchemy.exc.SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyError("metadata_store", "Reconciliation insert failed", e) from e

        self.intents.mark_completed(intent.id)
        self._commit(intent)
        logger.info("Completed pending create", extra={"intent_id": intent.id, "kind": intent.kind})

    def _commit(self, intent: WriteIntent) -> None:
        try:
            self.db.commit()
        except sqlalchemy.exc.SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Reconciliation commit failed: %s", e, extra={"intent_id": intent.id})
            raise DependencyError("metadata_store", "Reconciliation commit failed", e) from e
