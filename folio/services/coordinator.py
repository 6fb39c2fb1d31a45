"""Authorization coordinator: creates and reads across both stores.

Every folder, document and group lives in two stores: its relationship
facts (owner, parent, member) in the relationship store, and its name and
parent link in the metadata database. There is no transaction spanning
both, so every create follows the same order:

    1. relationship facts, as one batch
    2. metadata rows, in one database transaction

A crash between the two leaves a grant with no row (reads then fail with
NotFound for authorized callers), never a row nobody is authorized for.
Nothing is retried or compensated; the optional write-intent journal lets
``Reconciler`` finish or abandon such half-done creates later.

Reads check ``viewer`` before touching the database, so a denied caller
learns nothing about whether the object exists.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, List, Optional, Sequence

import sqlalchemy.exc
from sqlalchemy.orm import Session

from ..core.auth import Caller
from ..core.config import settings
from ..core.deadline import Deadline, check_deadline
from ..exceptions import (
    AuthenticationError,
    DependencyError,
    FolderNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ..relationships.protocols import RelationshipStore, RelationshipStoreError
from ..relationships.tuples import (
    ALLOWED_SUBJECTS,
    DEFINED_RELATIONS,
    DOCUMENT,
    FOLDER,
    GROUP,
    MEMBER,
    OWNER,
    PARENT,
    VIEWER,
    RelationshipTuple,
    object_ref,
    split_object,
    subject_ref,
    subject_type,
)
from ..repositories import DocumentRepository, FolderRepository, GroupRepository, WriteIntentRepository
from ..schemas import (
    CreateDocumentRequest,
    CreateDocumentResponse,
    CreateFolderRequest,
    CreateFolderResponse,
    CreateGroupRequest,
    CreateGroupResponse,
    DocumentResponse,
    FolderResponse,
    ShareObjectRequest,
    ShareObjectResponse,
)
from .share_policy import SharePolicy, get_share_policy

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class AuthorizationCoordinator:
    """Creates and reads folders, documents and groups across both stores.

    Holds no state beyond its collaborators; one instance per request.
    """

    def __init__(
        self,
        db: Session,
        store: RelationshipStore,
        share_policy: Optional[SharePolicy] = None,
        id_factory: Callable[[], str] = _new_id,
        validate_document_parent: Optional[bool] = None,
        write_intents_enabled: Optional[bool] = None,
    ):
        self.db = db
        self.store = store
        self.share_policy = share_policy or get_share_policy(settings.share_policy)
        self.id_factory = id_factory
        self.validate_document_parent = (
            settings.validate_document_parent if validate_document_parent is None
            else validate_document_parent
        )
        self.write_intents_enabled = (
            settings.write_intents_enabled if write_intents_enabled is None
            else write_intents_enabled
        )
        self.folders = FolderRepository(db)
        self.documents = DocumentRepository(db)
        self.groups = GroupRepository(db)
        self.intents = WriteIntentRepository(db)

    # -- Creates ------------------------------------------------------------

    def create_folder(
        self,
        request: CreateFolderRequest,
        caller: Optional[Caller],
        deadline: Optional[Deadline] = None,
    ) -> CreateFolderResponse:
        """Create a folder owned by *caller*."""
        subject = self._require_caller(caller)
        folder_id = self.id_factory()

        self._record_intent(folder_id, FOLDER, subject, {"name": request.name}, deadline)
        self._write_relationships(
            [RelationshipTuple(object_ref(FOLDER, folder_id), OWNER, subject)],
            deadline,
        )

        check_deadline(deadline, "folder insert")
        self.folders.create(folder_id, request.name)
        self._complete_intent(folder_id)
        self._commit("folder insert")

        logger.info("Folder created", extra={"folder_id": folder_id, "owner": subject})
        return CreateFolderResponse(id=folder_id)

    def create_document(
        self,
        request: CreateDocumentRequest,
        caller: Optional[Caller],
        deadline: Optional[Deadline] = None,
    ) -> CreateDocumentResponse:
        """Create a document owned by *caller*, optionally under a folder.

        The owner fact and the parent fact (if any) go out in one batch.
        """
        subject = self._require_caller(caller)

        if request.parent and self.validate_document_parent:
            if not self._folder_exists(request.parent):
                raise FolderNotFoundError(request.parent)

        document_id = self.id_factory()
        document_object = object_ref(DOCUMENT, document_id)

        tuples = [RelationshipTuple(document_object, OWNER, subject)]
        if request.parent:
            tuples.append(
                RelationshipTuple(document_object, PARENT, object_ref(FOLDER, request.parent))
            )

        self._record_intent(
            document_id, DOCUMENT, subject,
            {"name": request.name, "parent": request.parent},
            deadline,
        )
        self._write_relationships(tuples, deadline)

        check_deadline(deadline, "document insert")
        self.documents.create(document_id, request.name, request.parent)
        self._complete_intent(document_id)
        self._commit("document insert")

        logger.info(
            "Document created",
            extra={"document_id": document_id, "owner": subject, "parent": request.parent},
        )
        return CreateDocumentResponse(id=document_id)

    def create_group(
        self,
        request: CreateGroupRequest,
        deadline: Optional[Deadline] = None,
    ) -> CreateGroupResponse:
        """Create a group with *request.members*.

        Facts and rows are built from the same loop so position i of each
        list describes the same member. A group without members writes
        nothing to either store but still gets an id.
        """
        group_id = self.id_factory()
        group_object = object_ref(GROUP, group_id)

        tuples: list[RelationshipTuple] = []
        rows: list[dict] = []
        for member in request.members:
            member_ref = subject_ref(member)
            tuples.append(RelationshipTuple(group_object, MEMBER, member_ref))
            rows.append({"id": group_id, "name": request.name, "member": member_ref})

        self._record_intent(
            group_id, GROUP, None,
            {"name": request.name, "members": [row["member"] for row in rows]},
            deadline,
        )
        if tuples:
            self._write_relationships(tuples, deadline)

        check_deadline(deadline, "group insert")
        try:
            self.groups.add_members(rows)
        except sqlalchemy.exc.SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Group insert failed: %s", e, extra={"group_id": group_id})
            raise DependencyError("metadata_store", "Group insert failed", e) from e
        self._complete_intent(group_id)
        self._commit("group insert")

        logger.info("Group created", extra={"group_id": group_id, "member_count": len(rows)})
        return CreateGroupResponse(id=group_id)

    # -- Reads --------------------------------------------------------------

    def get_folder(
        self,
        folder_id: str,
        caller: Optional[Caller],
        deadline: Optional[Deadline] = None,
    ) -> FolderResponse:
        subject = self._require_caller(caller)
        self._require_relation(object_ref(FOLDER, folder_id), VIEWER, subject, deadline)

        check_deadline(deadline, "folder read")
        folder = self._read(lambda: self.folders.get_by_id(folder_id), "folder read")
        return FolderResponse.model_validate(folder)

    def get_document(
        self,
        document_id: str,
        caller: Optional[Caller],
        deadline: Optional[Deadline] = None,
    ) -> DocumentResponse:
        subject = self._require_caller(caller)
        self._require_relation(object_ref(DOCUMENT, document_id), VIEWER, subject, deadline)

        check_deadline(deadline, "document read")
        document = self._read(lambda: self.documents.get_by_id(document_id), "document read")
        return DocumentResponse.model_validate(document)

    def list_folders(
        self,
        caller: Optional[Caller],
        deadline: Optional[Deadline] = None,
    ) -> List[FolderResponse]:
        """Every folder *caller* can view, ordered by name."""
        subject = self._require_caller(caller)
        ids = self._visible_ids(FOLDER, subject, deadline)
        rows = self._read(lambda: self.folders.get_many(ids), "folder list")
        self._warn_missing(FOLDER, ids, rows)
        return [FolderResponse.model_validate(row) for row in rows]

    def list_documents(
        self,
        caller: Optional[Caller],
        deadline: Optional[Deadline] = None,
    ) -> List[DocumentResponse]:
        """Every document *caller* can view, ordered by name."""
        subject = self._require_caller(caller)
        ids = self._visible_ids(DOCUMENT, subject, deadline)
        rows = self._read(lambda: self.documents.get_many(ids), "document list")
        self._warn_missing(DOCUMENT, ids, rows)
        return [DocumentResponse.model_validate(row) for row in rows]

    # -- Sharing ------------------------------------------------------------

    def share_object(
        self,
        request: ShareObjectRequest,
        caller: Optional[Caller] = None,
        deadline: Optional[Deadline] = None,
    ) -> ShareObjectResponse:
        """Grant ``request.relation`` on ``request.object`` to ``request.user_id``.

        What is checked first is up to the configured share policy; under the
        default open policy nothing is.
        """
        fact = RelationshipTuple(request.object, request.relation, subject_ref(request.user_id))
        object_type, _ = split_object(fact.object)
        if (object_type, fact.relation) not in DEFINED_RELATIONS:
            raise ValidationError(
                f"Relation '{fact.relation}' is not defined on type '{object_type}'",
                field="relation",
            )
        if subject_type(fact.subject) not in ALLOWED_SUBJECTS[(object_type, fact.relation)]:
            raise ValidationError(
                f"'{fact.subject}' cannot hold '{fact.relation}' on type '{object_type}'",
                field="user",
            )
        check_deadline(deadline, "share authorization")
        self.share_policy.authorize(fact, caller, self.store)
        self._write_relationships([fact], deadline)

        logger.info(
            "Object shared",
            extra={"object": fact.object, "relation": fact.relation, "subject": fact.subject},
        )
        return ShareObjectResponse()

    # -- Internals ----------------------------------------------------------

    @staticmethod
    def _require_caller(caller: Optional[Caller]) -> str:
        if caller is None or not caller.subject:
            raise AuthenticationError()
        return subject_ref(caller.subject)

    def _require_relation(
        self, obj: str, relation: str, subject: str, deadline: Optional[Deadline]
    ) -> None:
        check_deadline(deadline, "permission check")
        try:
            allowed = self.store.check(RelationshipTuple(obj, relation, subject))
        except RelationshipStoreError as e:
            logger.error("Permission check failed: %s", e)
            raise DependencyError("relationship_store", "Permission check failed", e) from e

        if not allowed:
            logger.info("Permission denied", extra={"relation": relation, "subject": subject})
            raise PermissionDeniedError(relation)

    def _visible_ids(self, object_type: str, subject: str, deadline: Optional[Deadline]) -> list[str]:
        check_deadline(deadline, f"{object_type} listing")
        try:
            objects = self.store.list_objects(object_type, VIEWER, subject)
        except RelationshipStoreError as e:
            logger.error("Object listing failed: %s", e)
            raise DependencyError("relationship_store", "Object listing failed", e) from e
        return [split_object(obj)[1] for obj in objects]

    @staticmethod
    def _warn_missing(object_type: str, ids: Sequence[str], rows: Sequence) -> None:
        missing = set(ids) - {row.id for row in rows}
        if missing:
            logger.warning(
                "Relationship facts without metadata rows",
                extra={"object_type": object_type, "missing_ids": sorted(missing)},
            )

    def _write_relationships(
        self, tuples: Sequence[RelationshipTuple], deadline: Optional[Deadline]
    ) -> None:
        check_deadline(deadline, "relationship write")
        try:
            self.store.write(tuples)
        except RelationshipStoreError as e:
            logger.error(
                "Relationship write failed: %s", e,
                extra={"objects": sorted({t.object for t in tuples})},
            )
            raise DependencyError("relationship_store", "Relationship write failed", e) from e

    def _folder_exists(self, folder_id: str) -> bool:
        return self._read(lambda: self.folders.exists(folder_id), "parent lookup")

    def _read(self, fn, step: str):
        try:
            return fn()
        except sqlalchemy.exc.SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Metadata %s failed: %s", step, e)
            raise DependencyError("metadata_store", f"Metadata {step} failed", e) from e

    def _commit(self, step: str) -> None:
        try:
            self.db.commit()
        except sqlalchemy.exc.SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Metadata %s failed: %s", step, e)
            raise DependencyError("metadata_store", f"Metadata {step} failed", e) from e

    def _record_intent(
        self,
        entity_id: str,
        kind: str,
        subject: Optional[str],
        payload: dict,
        deadline: Optional[Deadline],
    ) -> None:
        """Durably journal the create before any relationship fact is written."""
        if not self.write_intents_enabled:
            return
        check_deadline(deadline, "intent record")
        self.intents.record(entity_id, kind, subject, payload)
        self._commit("intent record")

    def _complete_intent(self, entity_id: str) -> None:
        # Staged on the same transaction as the metadata rows.
        if self.write_intents_enabled:
            self.intents.mark_completed(entity_id)
