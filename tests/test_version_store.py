"""Tests for VersionStore: snapshot numbering, compare-and-swap and retention trimming."""

import pytest

from doceditor.db.repositories import DocumentRepository, DocumentVersionRepository
from doceditor.domains.documents.exceptions import StaleVersionError
from doceditor.domains.documents.schemas import DocumentCreate
from doceditor.domains.documents.services import DocumentService, VersionStore

OWNER = "user-owner"


async def create_document(session, title="T1"):
    return await DocumentService(session).create_document(DocumentCreate(title=title), OWNER)


async def version_numbers(session, document_id):
    versions = await DocumentVersionRepository(session).get_by_document(document_id, limit=1000)
    return sorted(v.version_number for v in versions)


class TestSnapshot:

    async def test_snapshot_appends_next_number(self, session):
        doc = await create_document(session)
        store = VersionStore(session)

        version = await store.snapshot(doc, "editor", "manual")
        await session.commit()

        assert version.version_number == 2
        assert version.title == "T1"
        assert version.modified_by == "editor"
        assert doc.current_version == 2

        stored = await DocumentRepository(session).get_by_uuid(doc.uuid)
        assert stored.current_version == 2
        assert await version_numbers(session, doc.uuid) == [1, 2]

    async def test_stale_document_raises(self, session):
        doc = await create_document(session)
        store = VersionStore(session)

        await store.snapshot(doc, OWNER)
        await session.commit()

        # Копия документа с устаревшим номером версии
        doc.current_version = 5
        with pytest.raises(StaleVersionError):
            await store.snapshot(doc, OWNER)
        await session.rollback()

        assert await version_numbers(session, doc.uuid) == [1, 2]


class TestTrim:

    async def test_trim_under_limit_is_noop(self, session):
        doc = await create_document(session)
        assert await VersionStore(session, retention_limit=5).trim(doc.uuid) == 0
        assert not session.in_transaction()
        assert await version_numbers(session, doc.uuid) == [1]

    async def test_zero_limit_is_not_replaced_by_default(self, session):
        doc = await create_document(session)
        store = VersionStore(session, retention_limit=0)

        assert store.retention_limit == 0
        assert await store.trim(doc.uuid) == 1
        assert await version_numbers(session, doc.uuid) == []

    async def test_trim_removes_oldest_numbers(self, session):
        doc = await create_document(session)
        store = VersionStore(session, retention_limit=3)
        for _ in range(5):
            await store.snapshot(doc, OWNER)
        await session.commit()

        deleted = await store.trim(doc.uuid)

        assert deleted == 3
        assert await version_numbers(session, doc.uuid) == [4, 5, 6]
        # Максимальный номер по-прежнему равен current_version
        stored = await DocumentRepository(session).get_by_uuid(doc.uuid)
        assert stored.current_version == 6

    async def test_pruned_numbers_are_not_reused(self, session):
        doc = await create_document(session)
        store = VersionStore(session, retention_limit=2)
        for _ in range(3):
            await store.snapshot(doc, OWNER)
        await session.commit()
        await store.trim(doc.uuid)

        version = await store.snapshot(doc, OWNER)
        await session.commit()

        assert version.version_number == 5
