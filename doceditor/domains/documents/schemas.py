from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List
import uuid
from datetime import datetime

from doceditor.domains.documents.entities import (
    Document, DocumentVersion, DocumentStatus, AccessLevel
)


class CamelModel(BaseModel):
    """JSON в camelCase, при этом принимаются и имена полей"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentCreate(CamelModel):
    """Схема для создания документа"""
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, max_length=1000000)  # 1MB max content
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    status: Optional[DocumentStatus] = None
    access: Optional[AccessLevel] = None

    @field_validator('title')
    @classmethod
    def strip_title(cls, v):
        return v.strip() if v is not None else v


class DocumentUpdate(DocumentCreate):
    """Схема для обновления документа; передаются только изменяемые поля"""
    change_description: Optional[str] = Field(None, max_length=1000)


class DocumentResponse(CamelModel):
    """Схема для ответа с данными документа"""
    id: uuid.UUID
    title: str
    content: Optional[str] = None
    type: str
    user_id: str
    status: str
    access: str
    current_version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.uuid,
            title=document.title,
            content=document.content,
            type=document.type,
            user_id=document.user_id,
            status=document.status,
            access=document.access,
            current_version=document.current_version,
            created_at=document.created_at,
            updated_at=document.updated_at
        )


class DocumentVersionSummary(CamelModel):
    """Версия документа в списке (без содержимого)"""
    id: uuid.UUID
    document_id: uuid.UUID
    version_number: int
    title: Optional[str] = None
    type: Optional[str] = None
    modified_by: Optional[str] = None
    change_description: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, version: DocumentVersion) -> "DocumentVersionSummary":
        return cls(
            id=version.uuid,
            document_id=version.document_id,
            version_number=version.version_number,
            title=version.title,
            type=version.type,
            modified_by=version.modified_by,
            change_description=version.change_description,
            created_at=version.created_at
        )


class DocumentVersionResponse(DocumentVersionSummary):
    """Полный снимок версии документа"""
    content: Optional[str] = None

    @classmethod
    def from_entity(cls, version: DocumentVersion) -> "DocumentVersionResponse":
        summary = DocumentVersionSummary.from_entity(version)
        return cls(**summary.model_dump(), content=version.content)


class DocumentVersionListResponse(BaseModel):
    """Страница истории версий"""
    data: List[DocumentVersionSummary]
    total: int


class RestoreDocumentRequest(CamelModel):
    """Схема для восстановления документа из версии"""
    version_number: int = Field(..., ge=1)
    change_description: Optional[str] = Field(None, max_length=1000)


class DocumentDeleteResponse(BaseModel):
    deleted: bool
