"""Tests for VersionQueryService: paginated, filterable history reads."""

import uuid

import pytest

from doceditor.domains.documents.exceptions import (
    DocumentValidationError,
    ForbiddenError,
    NotFoundError,
    VersionNotFoundError,
)
from doceditor.domains.documents.schemas import DocumentCreate, DocumentUpdate
from doceditor.domains.documents.services import DocumentService, VersionQueryService

OWNER = "user-owner"
OTHER = "user-other"


async def document_with_history(session, edits=11, access="private"):
    service = DocumentService(session)
    doc = await service.create_document(DocumentCreate(title="T0", access=access), OWNER)
    for i in range(1, edits + 1):
        doc = await service.update_document(doc.uuid, DocumentUpdate(title=f"T{i}"), OWNER)
    return doc


class TestListVersions:

    async def test_newest_first_with_default_page_size(self, session):
        doc = await document_with_history(session)

        result = await VersionQueryService(session).get_document_versions(doc.uuid, OWNER)

        assert result["total"] == 12
        assert [v.version_number for v in result["data"]] == list(range(12, 2, -1))

    async def test_second_page(self, session):
        doc = await document_with_history(session)

        result = await VersionQueryService(session).get_document_versions(doc.uuid, OWNER, page=2, page_size=5)

        assert [v.version_number for v in result["data"]] == [7, 6, 5, 4, 3]
        assert result["total"] == 12

    async def test_page_past_end_is_empty(self, session):
        doc = await document_with_history(session, edits=2)

        result = await VersionQueryService(session).get_document_versions(doc.uuid, OWNER, page=5)

        assert result == {"data": [], "total": 3}

    async def test_modified_by_filter_affects_total(self, session):
        doc = await document_with_history(session, edits=2)
        query = VersionQueryService(session)

        assert (await query.get_document_versions(doc.uuid, OWNER, modified_by=OWNER))["total"] == 3

        result = await query.get_document_versions(doc.uuid, OWNER, modified_by="nobody")
        assert result == {"data": [], "total": 0}

    async def test_invalid_page(self, session):
        doc = await document_with_history(session, edits=0)

        with pytest.raises(DocumentValidationError):
            await VersionQueryService(session).get_document_versions(doc.uuid, OWNER, page=0)

    async def test_private_history_forbidden_for_others(self, session):
        doc = await document_with_history(session, edits=1)

        with pytest.raises(ForbiddenError):
            await VersionQueryService(session).get_document_versions(doc.uuid, OTHER)

    async def test_public_history_readable_by_others(self, session):
        doc = await document_with_history(session, edits=1, access="public")

        result = await VersionQueryService(session).get_document_versions(doc.uuid, OTHER)

        assert result["total"] == 2

    async def test_missing_document(self, session):
        with pytest.raises(NotFoundError):
            await VersionQueryService(session).get_document_versions(uuid.uuid4(), OWNER)


class TestGetVersion:

    async def test_returns_full_snapshot(self, session):
        service = DocumentService(session)
        doc = await service.create_document(DocumentCreate(title="T1", content="body", type="md"), OWNER)

        version = await VersionQueryService(session).get_document_version(doc.uuid, 1, OWNER)

        assert (version.title, version.content, version.type) == ("T1", "body", "md")

    async def test_missing_version(self, session):
        doc = await document_with_history(session, edits=0)

        with pytest.raises(VersionNotFoundError):
            await VersionQueryService(session).get_document_version(doc.uuid, 2, OWNER)

    async def test_private_version_forbidden_for_others(self, session):
        doc = await document_with_history(session, edits=0)

        with pytest.raises(ForbiddenError):
            await VersionQueryService(session).get_document_version(doc.uuid, 1, OTHER)
