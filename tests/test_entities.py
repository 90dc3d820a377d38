"""Unit tests for doceditor.domains.documents.entities: change detection & access rules."""

import uuid

from doceditor.domains.documents.entities import (
    AccessLevel,
    Document,
    DocumentAccess,
    DocumentStatus,
    DocumentVersion,
)


def make_document(**overrides):
    fields = dict(title="T1", user_id="alice", content="body", type="text")
    fields.update(overrides)
    return Document.create_document(**fields)


class TestDocument:

    def test_create_document_defaults(self):
        doc = make_document()
        assert isinstance(doc.uuid, uuid.UUID)
        assert doc.current_version == 0
        assert doc.status == DocumentStatus.DRAFT.value
        assert doc.access == AccessLevel.PRIVATE.value

    def test_changed_content_fields_only_differences(self):
        doc = make_document()
        changes = {"title": "T2", "content": "body", "type": "markdown"}
        assert doc.changed_content_fields(changes) == {"title", "type"}

    def test_changed_content_fields_ignores_missing_keys(self):
        doc = make_document()
        assert doc.changed_content_fields({}) == set()
        assert doc.changed_content_fields({"status": "published"}) == set()

    def test_content_set_to_none_is_a_change(self):
        doc = make_document(content="body")
        assert doc.changed_content_fields({"content": None}) == {"content"}

    def test_attribute_fields_are_separate(self):
        doc = make_document()
        changes = {"status": "published", "access": "private", "title": "T2"}
        assert doc.changed_attribute_fields(changes) == {"status"}

    def test_apply_changes_only_touches_given_fields(self):
        doc = make_document()
        doc.apply_changes({"title": "T2", "content": "ignored"}, {"title"})
        assert doc.title == "T2"
        assert doc.content == "body"

    def test_restore_from_keeps_version_counter(self):
        doc = make_document()
        doc.current_version = 7
        version = DocumentVersion.snapshot_of(make_document(title="Old", content="old", type="md"), 2, "alice")
        doc.restore_from(version)
        assert (doc.title, doc.content, doc.type) == ("Old", "old", "md")
        assert doc.current_version == 7


class TestDocumentVersion:

    def test_snapshot_of_copies_content_fields(self):
        doc = make_document(title="Snap", content="c", type="md")
        version = DocumentVersion.snapshot_of(doc, 3, "bob", "note")
        assert version.document_id == doc.uuid
        assert version.version_number == 3
        assert (version.title, version.content, version.type) == ("Snap", "c", "md")
        assert version.modified_by == "bob"
        assert version.change_description == "note"


class TestDocumentAccess:

    def test_owner_can_read_and_edit(self):
        access = DocumentAccess("alice", "private")
        assert access.is_owner("alice")
        assert access.can_read("alice")
        assert access.can_edit("alice")

    def test_private_document_hidden_from_others(self):
        access = DocumentAccess("alice", "private")
        assert not access.can_read("bob")

    def test_shared_document_is_not_public(self):
        assert not DocumentAccess("alice", "shared").can_read("bob")

    def test_public_grants_read_only(self):
        access = DocumentAccess("alice", "public")
        assert access.can_read("bob")
        assert not access.can_edit("bob")
