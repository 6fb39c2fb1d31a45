"""Unit tests for AuthorizationCoordinator and the dual write between stores.

Drives the coordinator directly with an in-memory SQLite session and an
InMemoryRelationshipStore, bypassing HTTP.
"""

import pytest

from folio.core.deadline import Deadline
from folio.exceptions import (
    AuthenticationError,
    DeadlineExceededError,
    DependencyError,
    DocumentNotFoundError,
    FolderNotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from folio.models import Document, Folder, GroupMember
from folio.relationships import InMemoryRelationshipStore, RelationshipStoreError, RelationshipTuple
from folio.schemas import (
    CreateDocumentRequest,
    CreateFolderRequest,
    CreateGroupRequest,
    ShareObjectRequest,
)
from folio.services import AuthorizationCoordinator, OpenSharePolicy
from tests.conftest import ALICE, BOB, CAROL


class _FailingStore(InMemoryRelationshipStore):
    """Relationship store whose selected operations always fail."""

    def __init__(self, fail_write=False, fail_check=False, fail_list=False):
        super().__init__()
        self.fail_write = fail_write
        self.fail_check = fail_check
        self.fail_list = fail_list

    def write(self, tuples):
        if self.fail_write:
            raise RelationshipStoreError("write", "connection refused")
        super().write(tuples)

    def check(self, tuple_key):
        if self.fail_check:
            raise RelationshipStoreError("check", "connection refused")
        return super().check(tuple_key)

    def list_objects(self, object_type, relation, subject):
        if self.fail_list:
            raise RelationshipStoreError("list_objects", "connection refused")
        return super().list_objects(object_type, relation, subject)


def _share(coordinator, obj, relation, user):
    return coordinator.share_object(ShareObjectRequest(object=obj, relation=relation, user=user))


def _fixed_ids(*ids):
    it = iter(ids)
    return lambda: next(it)


class TestCreateFolder:

    def test_returns_id_and_creator_can_read(self, coordinator):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Projects"), ALICE).id
        assert folder_id

        folder = coordinator.get_folder(folder_id, ALICE)
        assert folder.id == folder_id
        assert folder.name == "Projects"

    def test_writes_exactly_one_owner_fact(self, coordinator, store):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Projects"), ALICE).id
        assert store.tuples == {
            RelationshipTuple(f"folder:{folder_id}", "owner", "user:alice"),
        }

    def test_requires_caller_before_any_write(self, coordinator, store, db):
        with pytest.raises(AuthenticationError):
            coordinator.create_folder(CreateFolderRequest(name="Projects"), None)
        assert store.tuples == frozenset()
        assert db.query(Folder).count() == 0

    def test_same_name_twice_gives_two_folders(self, coordinator):
        first = coordinator.create_folder(CreateFolderRequest(name="Same"), ALICE).id
        second = coordinator.create_folder(CreateFolderRequest(name="Same"), ALICE).id

        assert first != second
        assert coordinator.get_folder(first, ALICE).name == "Same"
        assert coordinator.get_folder(second, ALICE).name == "Same"

    def test_ids_are_unique_across_many_creates(self, coordinator):
        ids = {
            coordinator.create_folder(CreateFolderRequest(name=f"f{i}"), ALICE).id
            for i in range(20)
        }
        assert len(ids) == 20


class TestCreateDocument:

    def test_without_parent(self, coordinator, store):
        doc_id = coordinator.create_document(CreateDocumentRequest(name="report"), ALICE).id

        doc = coordinator.get_document(doc_id, ALICE)
        assert (doc.id, doc.name, doc.parent) == (doc_id, "report", "")
        assert store.tuples == {
            RelationshipTuple(f"document:{doc_id}", "owner", "user:alice"),
        }

    def test_with_parent_writes_parent_fact(self, coordinator, store):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Reports"), ALICE).id
        doc_id = coordinator.create_document(
            CreateDocumentRequest(name="q3", parent=folder_id), ALICE
        ).id

        assert RelationshipTuple(f"document:{doc_id}", "parent", f"folder:{folder_id}") in store.tuples
        assert coordinator.get_document(doc_id, ALICE).parent == folder_id

    def test_parent_accepts_folder_prefix(self, coordinator, db):
        doc_id = coordinator.create_document(
            CreateDocumentRequest(name="q3", parent="folder:abc"), ALICE
        ).id
        assert db.query(Document).filter(Document.id == doc_id).one().parent == "abc"

    def test_folder_viewer_can_read_child_document(self, coordinator):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Shared"), ALICE).id
        doc_id = coordinator.create_document(
            CreateDocumentRequest(name="plan", parent=folder_id), ALICE
        ).id

        with pytest.raises(PermissionDeniedError):
            coordinator.get_document(doc_id, BOB)

        _share(coordinator, f"folder:{folder_id}", "viewer", "bob")
        assert coordinator.get_document(doc_id, BOB).name == "plan"

    def test_missing_parent_is_not_checked_by_default(self, coordinator):
        doc_id = coordinator.create_document(
            CreateDocumentRequest(name="orphan", parent="no-such-folder"), ALICE
        ).id
        assert coordinator.get_document(doc_id, ALICE).parent == "no-such-folder"

    def test_parent_validation_rejects_missing_folder(self, db, store):
        coordinator = AuthorizationCoordinator(
            db, store, share_policy=OpenSharePolicy(), validate_document_parent=True,
            write_intents_enabled=False,
        )
        with pytest.raises(FolderNotFoundError):
            coordinator.create_document(
                CreateDocumentRequest(name="orphan", parent="no-such-folder"), ALICE
            )
        assert store.tuples == frozenset()
        assert db.query(Document).count() == 0

    def test_parent_validation_accepts_existing_folder(self, db, store):
        coordinator = AuthorizationCoordinator(
            db, store, share_policy=OpenSharePolicy(), validate_document_parent=True,
            write_intents_enabled=False,
        )
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Home"), ALICE).id
        doc_id = coordinator.create_document(
            CreateDocumentRequest(name="notes", parent=folder_id), ALICE
        ).id
        assert coordinator.get_document(doc_id, ALICE).parent == folder_id

    def test_requires_caller(self, coordinator, store):
        with pytest.raises(AuthenticationError):
            coordinator.create_document(CreateDocumentRequest(name="x"), None)
        assert store.tuples == frozenset()


class TestCreateGroup:

    def test_members_are_dual_recorded(self, coordinator, store, db):
        group_id = coordinator.create_group(
            CreateGroupRequest(name="eng", members=["alice", "bob", "user:carol"])
        ).id

        facts = sorted(t.subject for t in store.tuples if t.object == f"group:{group_id}")
        rows = db.query(GroupMember).filter(GroupMember.id == group_id).all()

        assert facts == ["user:alice", "user:bob", "user:carol"]
        assert sorted(r.member for r in rows) == facts
        assert {r.name for r in rows} == {"eng"}
        assert all(t.relation == "member" for t in store.tuples)

    def test_zero_members_still_returns_id(self, coordinator, store, db):
        group_id = coordinator.create_group(CreateGroupRequest(name="empty", members=[])).id
        assert group_id
        assert store.tuples == frozenset()
        assert db.query(GroupMember).count() == 0

    def test_duplicate_members_collapse(self, coordinator, store, db):
        group_id = coordinator.create_group(
            CreateGroupRequest(name="eng", members=["alice", "alice"])
        ).id
        assert len(store.tuples) == 1
        assert db.query(GroupMember).filter(GroupMember.id == group_id).count() == 1

    def test_normalized_duplicates_collapse(self, coordinator, store, db):
        group_id = coordinator.create_group(
            CreateGroupRequest(name="eng", members=["bob", "user:bob"])
        ).id
        assert store.tuples == frozenset({RelationshipTuple(f"group:{group_id}", "member", "user:bob")})
        rows = db.query(GroupMember).filter(GroupMember.id == group_id).all()
        assert [r.member for r in rows] == ["user:bob"]

    def test_group_share_grants_members(self, coordinator):
        doc_id = coordinator.create_document(CreateDocumentRequest(name="roadmap"), ALICE).id
        group_id = coordinator.create_group(CreateGroupRequest(name="eng", members=["bob"])).id

        _share(coordinator, f"document:{doc_id}", "viewer", f"group:{group_id}#member")

        assert coordinator.get_document(doc_id, BOB).name == "roadmap"
        with pytest.raises(PermissionDeniedError):
            coordinator.get_document(doc_id, CAROL)

    def test_relationship_failure_inserts_no_rows(self, db):
        coordinator = AuthorizationCoordinator(
            db, _FailingStore(fail_write=True), share_policy=OpenSharePolicy(),
            write_intents_enabled=False,
        )
        with pytest.raises(DependencyError) as exc_info:
            coordinator.create_group(CreateGroupRequest(name="eng", members=["alice"]))
        assert exc_info.value.details["dependency"] == "relationship_store"
        assert db.query(GroupMember).count() == 0


class TestReads:

    def test_unshared_caller_is_denied(self, coordinator):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Private"), ALICE).id
        with pytest.raises(PermissionDeniedError):
            coordinator.get_folder(folder_id, BOB)

    def test_denial_comes_before_not_found(self, coordinator):
        with pytest.raises(PermissionDeniedError):
            coordinator.get_folder("does-not-exist", BOB)
        with pytest.raises(PermissionDeniedError):
            coordinator.get_document("does-not-exist", BOB)

    def test_denial_does_not_leak_object_id(self, coordinator):
        with pytest.raises(PermissionDeniedError) as exc_info:
            coordinator.get_document("secret-id", BOB)
        assert "secret-id" not in exc_info.value.message
        assert "secret-id" not in str(exc_info.value.details)

    def test_requires_caller(self, coordinator):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Projects"), ALICE).id
        with pytest.raises(AuthenticationError):
            coordinator.get_folder(folder_id, None)

    def test_fact_without_row_is_not_found(self, coordinator, store):
        store.write([
            RelationshipTuple("folder:ghost", "owner", "user:alice"),
            RelationshipTuple("document:ghost", "owner", "user:alice"),
        ])
        with pytest.raises(FolderNotFoundError):
            coordinator.get_folder("ghost", ALICE)
        with pytest.raises(DocumentNotFoundError):
            coordinator.get_document("ghost", ALICE)

    def test_check_failure_is_dependency_error(self, db):
        coordinator = AuthorizationCoordinator(
            db, _FailingStore(fail_check=True), share_policy=OpenSharePolicy(),
            write_intents_enabled=False,
        )
        with pytest.raises(DependencyError):
            coordinator.get_folder("any", ALICE)


class TestListing:

    def test_lists_only_visible_folders_sorted_by_name(self, coordinator):
        b = coordinator.create_folder(CreateFolderRequest(name="beta"), ALICE).id
        a = coordinator.create_folder(CreateFolderRequest(name="alpha"), ALICE).id
        coordinator.create_folder(CreateFolderRequest(name="bobs"), BOB)

        assert [f.id for f in coordinator.list_folders(ALICE)] == [a, b]

    def test_lists_documents_reached_through_folder(self, coordinator):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="Shared"), ALICE).id
        doc_id = coordinator.create_document(
            CreateDocumentRequest(name="inside", parent=folder_id), ALICE
        ).id
        coordinator.create_document(CreateDocumentRequest(name="outside"), ALICE)

        assert coordinator.list_documents(BOB) == []
        _share(coordinator, f"folder:{folder_id}", "viewer", "bob")
        assert [d.id for d in coordinator.list_documents(BOB)] == [doc_id]

    def test_skips_facts_without_rows(self, coordinator, store):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="real"), ALICE).id
        store.write([RelationshipTuple("folder:ghost", "owner", "user:alice")])

        assert [f.id for f in coordinator.list_folders(ALICE)] == [folder_id]

    def test_requires_caller(self, coordinator):
        with pytest.raises(AuthenticationError):
            coordinator.list_documents(None)

    def test_list_failure_is_dependency_error(self, db):
        coordinator = AuthorizationCoordinator(
            db, _FailingStore(fail_list=True), share_policy=OpenSharePolicy(),
            write_intents_enabled=False,
        )
        with pytest.raises(DependencyError):
            coordinator.list_folders(ALICE)


class TestShareObject:

    def test_share_then_read_scenario(self, coordinator):
        doc_id = coordinator.create_document(CreateDocumentRequest(name="report", parent=""), ALICE).id

        doc = coordinator.get_document(doc_id, ALICE)
        assert (doc.id, doc.name, doc.parent) == (doc_id, "report", "")

        with pytest.raises(PermissionDeniedError):
            coordinator.get_document(doc_id, BOB)

        _share(coordinator, f"document:{doc_id}", "viewer", "bob")
        assert coordinator.get_document(doc_id, BOB).name == "report"

    def test_open_policy_needs_no_caller(self, coordinator, store):
        _share(coordinator, "document:anything", "owner", "mallory")
        assert RelationshipTuple("document:anything", "owner", "user:mallory") in store.tuples

    def test_undefined_relation_rejected_before_write(self, coordinator, store):
        with pytest.raises(ValidationError) as exc_info:
            _share(coordinator, "group:g1", "owner", "bob")
        assert exc_info.value.details == {"field": "relation"}
        assert store.tuples == frozenset()

    def test_userset_owner_rejected(self, coordinator, store):
        doc_id = coordinator.create_document(CreateDocumentRequest(name="report"), ALICE).id
        group_id = coordinator.create_group(CreateGroupRequest(name="eng", members=["bob"])).id

        with pytest.raises(ValidationError) as exc_info:
            _share(coordinator, f"document:{doc_id}", "owner", f"group:{group_id}#member")
        assert exc_info.value.details == {"field": "user"}

        with pytest.raises(PermissionDeniedError):
            coordinator.get_document(doc_id, BOB)

    def test_parent_must_be_folder(self, coordinator, store):
        with pytest.raises(ValidationError):
            _share(coordinator, "document:d1", "parent", "bob")
        assert store.tuples == frozenset()

    def test_write_failure_is_dependency_error(self, db):
        coordinator = AuthorizationCoordinator(
            db, _FailingStore(fail_write=True), share_policy=OpenSharePolicy(),
            write_intents_enabled=False,
        )
        with pytest.raises(DependencyError):
            _share(coordinator, "document:d1", "viewer", "bob")


class TestPartialFailures:
    """No cross-store transaction: failures leave earlier writes in place."""

    def test_relationship_failure_leaves_no_row(self, db):
        coordinator = AuthorizationCoordinator(
            db, _FailingStore(fail_write=True), share_policy=OpenSharePolicy(),
            write_intents_enabled=False,
        )
        with pytest.raises(DependencyError) as exc_info:
            coordinator.create_folder(CreateFolderRequest(name="Projects"), ALICE)
        assert exc_info.value.details["dependency"] == "relationship_store"
        assert db.query(Folder).count() == 0

    def test_metadata_failure_keeps_relationship_fact(self, db, store):
        db.add(Folder(id="taken", name="existing"))
        db.commit()

        coordinator = AuthorizationCoordinator(
            db, store, share_policy=OpenSharePolicy(), id_factory=_fixed_ids("taken"),
            write_intents_enabled=False,
        )
        with pytest.raises(DependencyError) as exc_info:
            coordinator.create_folder(CreateFolderRequest(name="Projects"), BOB)

        assert exc_info.value.details["dependency"] == "metadata_store"
        assert RelationshipTuple("folder:taken", "owner", "user:bob") in store.tuples
        assert db.query(Folder).filter(Folder.id == "taken").one().name == "existing"

    def test_session_usable_after_metadata_failure(self, db, store):
        db.add(Folder(id="taken", name="existing"))
        db.commit()

        coordinator = AuthorizationCoordinator(
            db, store, share_policy=OpenSharePolicy(),
            id_factory=_fixed_ids("taken", "fresh"), write_intents_enabled=False,
        )
        with pytest.raises(DependencyError):
            coordinator.create_folder(CreateFolderRequest(name="Projects"), ALICE)

        assert coordinator.create_folder(CreateFolderRequest(name="Again"), ALICE).id == "fresh"


class TestDeadline:

    def test_expired_deadline_aborts_before_any_write(self, coordinator, store, db):
        expired = Deadline(expires_at=0.0, clock=lambda: 1.0)
        with pytest.raises(DeadlineExceededError):
            coordinator.create_folder(CreateFolderRequest(name="late"), ALICE, expired)
        assert store.tuples == frozenset()
        assert db.query(Folder).count() == 0

    def test_expiry_between_steps_keeps_committed_fact(self, coordinator, store, db):
        ticks = iter([0.0, 10.0])
        deadline = Deadline(expires_at=5.0, clock=lambda: next(ticks))

        with pytest.raises(DeadlineExceededError) as exc_info:
            coordinator.create_folder(CreateFolderRequest(name="late"), ALICE, deadline)

        assert exc_info.value.details["step"] == "folder insert"
        assert len(store.tuples) == 1
        assert db.query(Folder).count() == 0

    def test_expired_deadline_aborts_read(self, coordinator):
        folder_id = coordinator.create_folder(CreateFolderRequest(name="ok"), ALICE).id
        with pytest.raises(DeadlineExceededError):
            coordinator.get_folder(folder_id, ALICE, Deadline(expires_at=0.0, clock=lambda: 1.0))
