from typing import Optional, List, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_
import uuid

from doceditor.db.models.document import Document as DocumentModel, DocumentVersion as DocumentVersionModel

if TYPE_CHECKING:
    from doceditor.domains.documents.entities import Document, DocumentVersion


class DocumentRepository:
    """Репозиторий для работы с документами.

    Методы не фиксируют транзакцию: commit/rollback делает сервис,
    чтобы снимок и изменение документа попадали в одну транзакцию.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: "Document") -> "Document":
        """Создание нового документа"""
        db_document = DocumentModel(
            uuid=document.uuid,
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

        self.session.add(db_document)
        await self.session.flush()
        return self._to_domain(db_document)

    async def get_by_uuid(self, document_uuid: uuid.UUID, for_update: bool = False) -> Optional["Document"]:
        """Получение документа по UUID; for_update берет блокировку строки"""
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.uuid == document_uuid)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def get_by_owner(self, user_id: str) -> List["Document"]:
        """Получение документов по владельцу"""
        result = await self.session.execute(
            select(DocumentModel)
            .where(DocumentModel.user_id == user_id)
            .order_by(DocumentModel.updated_at.desc())
            .execution_options(populate_existing=True)
        )
        db_documents = result.scalars().all()
        return [self._to_domain(doc) for doc in db_documents]

    async def update(self, document: "Document") -> None:
        """Обновление полей документа (кроме номера версии)"""
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document.uuid)
            .values(
                title=document.title,
                content=document.content,
                type=document.type,
                status=document.status,
                access=document.access,
                updated_at=document.updated_at
            )
        )
        await self.session.execute(stmt)

    async def advance_version(self, document_uuid: uuid.UUID, expected: int, new: int) -> bool:
        """Compare-and-swap номера версии: True, если строка обновлена"""
        stmt = (
            update(DocumentModel)
            .where(
                and_(
                    DocumentModel.uuid == document_uuid,
                    DocumentModel.current_version == expected
                )
            )
            .values(current_version=new)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, document_uuid: uuid.UUID) -> bool:
        """Удаление документа"""
        stmt = delete(DocumentModel).where(DocumentModel.uuid == document_uuid)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from doceditor.domains.documents.entities import Document

        return Document(
            uuid=db_document.uuid,
            title=db_document.title,
            content=db_document.content,
            type=db_document.type,
            user_id=db_document.user_id,
            status=db_document.status,
            access=db_document.access,
            current_version=db_document.current_version,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )


class DocumentVersionRepository:
    """Репозиторий для работы с версиями документов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, version: "DocumentVersion") -> "DocumentVersion":
        """Вставка новой версии документа"""
        db_version = DocumentVersionModel(
            uuid=version.uuid,
            document_id=version.document_id,
            version_number=version.version_number,
            title=version.title,
            content=version.content,
            type=version.type,
            modified_by=version.modified_by,
            change_description=version.change_description,
            created_at=version.created_at
        )

        self.session.add(db_version)
        await self.session.flush()
        return self._to_domain(db_version)

    async def get_by_document(
        self,
        document_id: uuid.UUID,
        limit: int = 10,
        offset: int = 0,
        modified_by: Optional[str] = None
    ) -> List["DocumentVersion"]:
        """Получение версий документа, новые первыми"""
        stmt = select(DocumentVersionModel).where(DocumentVersionModel.document_id == document_id)
        if modified_by:
            stmt = stmt.where(DocumentVersionModel.modified_by == modified_by)

        result = await self.session.execute(
            stmt
            .order_by(DocumentVersionModel.version_number.desc())
            .offset(offset)
            .limit(limit)
        )
        db_versions = result.scalars().all()
        return [self._to_domain(version) for version in db_versions]

    async def get_version_by_number(
        self,
        document_id: uuid.UUID,
        version_number: int
    ) -> Optional["DocumentVersion"]:
        """Получение версии по номеру"""
        result = await self.session.execute(
            select(DocumentVersionModel)
            .where(
                and_(
                    DocumentVersionModel.document_id == document_id,
                    DocumentVersionModel.version_number == version_number
                )
            )
        )
        db_version = result.scalar_one_or_none()
        return self._to_domain(db_version) if db_version else None

    async def count_by_document(self, document_id: uuid.UUID, modified_by: Optional[str] = None) -> int:
        """Подсчет количества версий документа"""
        stmt = (
            select(func.count(DocumentVersionModel.uuid))
            .where(DocumentVersionModel.document_id == document_id)
        )
        if modified_by:
            stmt = stmt.where(DocumentVersionModel.modified_by == modified_by)

        result = await self.session.execute(stmt)
        return result.scalar()

    async def delete_oldest(self, document_id: uuid.UUID, count: int) -> int:
        """Удаление count самых старых (по номеру) версий документа"""
        if count <= 0:
            return 0

        oldest = await self.session.execute(
            select(DocumentVersionModel.uuid)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.version_number.asc())
            .limit(count)
        )
        version_ids = list(oldest.scalars().all())
        if not version_ids:
            return 0

        result = await self.session.execute(
            delete(DocumentVersionModel).where(DocumentVersionModel.uuid.in_(version_ids))
        )
        return result.rowcount

    async def delete_by_document(self, document_id: uuid.UUID) -> int:
        """Удаление всех версий документа"""
        result = await self.session.execute(
            delete(DocumentVersionModel).where(DocumentVersionModel.document_id == document_id)
        )
        return result.rowcount

    def _to_domain(self, db_version: DocumentVersionModel) -> "DocumentVersion":
        """Преобразование модели БД в доменную сущность"""
        from doceditor.domains.documents.entities import DocumentVersion

        return DocumentVersion(
            uuid=db_version.uuid,
            document_id=db_version.document_id,
            version_number=db_version.version_number,
            title=db_version.title,
            content=db_version.content,
            type=db_version.type,
            modified_by=db_version.modified_by,
            change_description=db_version.change_description,
            created_at=db_version.created_at
        )
