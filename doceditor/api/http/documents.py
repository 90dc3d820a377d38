from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import uuid

from doceditor.core.auth import get_current_user_id
from doceditor.core.db import get_db
from doceditor.domains.documents.exceptions import (
    DocumentError, NotFoundError, ForbiddenError, DocumentValidationError, ConflictError
)
from doceditor.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, DocumentVersionSummary,
    DocumentVersionResponse, DocumentVersionListResponse, RestoreDocumentRequest,
    DocumentDeleteResponse
)
from doceditor.domains.documents.services import DocumentService, VersionQueryService, RestoreService

router = APIRouter(prefix="/documents", tags=["documents"])


def _http_error(error: DocumentError) -> HTTPException:
    """Перевод доменной ошибки в HTTP-ответ"""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, ForbiddenError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(error, DocumentValidationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=error.message)


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Создание нового документа"""
    document_service = DocumentService(db)

    try:
        document = await document_service.create_document(document_data, user_id)
    except DocumentError as e:
        raise _http_error(e)

    return DocumentResponse.from_entity(document)


@router.get("", response_model=List[DocumentResponse])
async def get_user_documents(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Получение списка документов текущего пользователя"""
    document_service = DocumentService(db)

    documents = await document_service.get_user_documents(user_id)

    return [DocumentResponse.from_entity(doc) for doc in documents]


@router.get("/{document_uuid}", response_model=DocumentResponse)
async def get_document(
    document_uuid: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Получение документа по UUID"""
    document_service = DocumentService(db)

    try:
        document = await document_service.get_document(document_uuid, user_id)
    except DocumentError as e:
        raise _http_error(e)

    return DocumentResponse.from_entity(document)


@router.put("/{document_uuid}", response_model=DocumentResponse)
async def update_document(
    document_uuid: uuid.UUID,
    update_data: DocumentUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Обновление документа (changeDescription передается в теле)"""
    document_service = DocumentService(db)

    try:
        document = await document_service.update_document(
            document_uuid,
            update_data,
            user_id
        )
    except DocumentError as e:
        raise _http_error(e)

    return DocumentResponse.from_entity(document)


@router.delete("/{document_uuid}", response_model=DocumentDeleteResponse)
async def delete_document(
    document_uuid: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Удаление документа вместе с историей версий"""
    document_service = DocumentService(db)

    try:
        result = await document_service.delete_document(document_uuid, user_id)
    except DocumentError as e:
        raise _http_error(e)

    return DocumentDeleteResponse(**result)


# Версии документов
@router.get("/{document_uuid}/versions", response_model=DocumentVersionListResponse)
async def get_document_versions(
    document_uuid: uuid.UUID,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100, alias="pageSize"),
    modified_by: Optional[str] = Query(None, alias="modifiedBy"),
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Получение версий документа (новые первыми)"""
    version_service = VersionQueryService(db)

    try:
        result = await version_service.get_document_versions(
            document_uuid,
            user_id,
            page=page,
            page_size=page_size,
            modified_by=modified_by
        )
    except DocumentError as e:
        raise _http_error(e)

    return DocumentVersionListResponse(
        data=[DocumentVersionSummary.from_entity(version) for version in result["data"]],
        total=result["total"]
    )


@router.get("/{document_uuid}/versions/{version_number}", response_model=DocumentVersionResponse)
async def get_document_version(
    document_uuid: uuid.UUID,
    version_number: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Получение полного снимка версии"""
    version_service = VersionQueryService(db)

    try:
        version = await version_service.get_document_version(document_uuid, version_number, user_id)
    except DocumentError as e:
        raise _http_error(e)

    return DocumentVersionResponse.from_entity(version)


@router.put("/{document_uuid}/restore", response_model=DocumentResponse)
async def restore_document_version(
    document_uuid: uuid.UUID,
    restore_data: RestoreDocumentRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Восстановление документа из версии"""
    restore_service = RestoreService(db)

    try:
        document = await restore_service.restore_to_version(
            document_uuid,
            restore_data.version_number,
            user_id,
            restore_data.change_description
        )
    except DocumentError as e:
        raise _http_error(e)

    return DocumentResponse.from_entity(document)
