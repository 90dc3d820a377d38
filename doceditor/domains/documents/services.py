import logging
import uuid
from typing import Optional, List, Dict, Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from doceditor.core.config import settings
from doceditor.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository
from doceditor.domains.documents.entities import Document, DocumentVersion, DocumentAccess
from doceditor.domains.documents.exceptions import (
    NotFoundError, VersionNotFoundError, ForbiddenError,
    DocumentValidationError, ConflictError, StaleVersionError
)
from doceditor.domains.documents.schemas import DocumentCreate, DocumentUpdate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class VersionStore:
    """Журнал снимков документа: монотонные номера и ограничение хранения"""

    def __init__(self, session: AsyncSession, retention_limit: Optional[int] = None):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.version_repository = DocumentVersionRepository(session)
        if retention_limit is None:
            retention_limit = settings.version_retention_limit
        self.retention_limit = retention_limit

    async def snapshot(
        self,
        document: Document,
        modified_by: str,
        change_description: Optional[str] = None
    ) -> DocumentVersion:
        """Снимок текущих title/content/type документа как версии current_version + 1.

        Вызывается внутри транзакции, в которой строка документа уже
        заблокирована. Номер версии продвигается через compare-and-swap:
        если его успели изменить, поднимается StaleVersionError и
        транзакция должна быть откатана целиком.
        """
        expected = document.current_version
        next_number = expected + 1

        version = DocumentVersion.snapshot_of(
            document,
            version_number=next_number,
            modified_by=modified_by,
            change_description=change_description
        )
        created = await self.version_repository.create(version)

        if not await self.document_repository.advance_version(document.uuid, expected, next_number):
            raise StaleVersionError(document.uuid, expected)

        document.current_version = next_number
        logger.info(f"Snapshot v{next_number} of document {document.uuid} by {modified_by}")
        return created

    async def trim(self, document_id: uuid.UUID) -> int:
        """Удаление самых старых версий сверх лимита; возвращает число удаленных"""
        total = await self.version_repository.count_by_document(document_id)
        excess = total - self.retention_limit
        if excess <= 0:
            await self.session.commit()
            return 0

        deleted = await self.version_repository.delete_oldest(document_id, excess)
        await self.session.commit()
        logger.info(f"Trimmed {deleted} old versions of document {document_id}")
        return deleted


class _DocumentServiceBase:
    """Общие зависимости и транзакционная обвязка сервисов документа"""

    def __init__(self, session: AsyncSession, retention_limit: Optional[int] = None):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.version_repository = DocumentVersionRepository(session)
        self.version_store = VersionStore(session, retention_limit)

    async def _get_existing(self, document_uuid: uuid.UUID, for_update: bool = False) -> Document:
        document = await self.document_repository.get_by_uuid(document_uuid, for_update=for_update)
        if not document:
            raise NotFoundError(document_uuid)
        return document

    async def _get_readable(self, document_uuid: uuid.UUID, user_id: str) -> Document:
        document = await self._get_existing(document_uuid)
        if not DocumentAccess.of(document).can_read(user_id):
            raise ForbiddenError("You don't have permission to access this document")
        return document

    async def _get_editable(self, document_uuid: uuid.UUID, user_id: str, action: str = "edit") -> Document:
        document = await self._get_existing(document_uuid, for_update=True)
        if not DocumentAccess.of(document).can_edit(user_id):
            raise ForbiddenError(f"You don't have permission to {action} this document")
        return document

    async def _run_in_transaction(
        self,
        operation: Callable[[], Awaitable[T]],
        trim_document_id: Optional[uuid.UUID] = None
    ) -> T:
        """Выполнение операции одной транзакцией с повтором при гонке за номер версии.

        После успешного commit запускается очистка старых версий; ее ошибка
        только логируется и не отменяет уже записанное изменение.
        """
        attempts = settings.version_write_retries + 1
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                result = await operation()
                await self.session.commit()
            except (StaleVersionError, IntegrityError) as e:
                await self.session.rollback()
                last_error = e
                logger.warning(f"Concurrent version write, attempt {attempt}/{attempts}: {e}")
                continue
            except Exception:
                await self.session.rollback()
                raise

            if trim_document_id is not None:
                await self._trim_quietly(trim_document_id)
            return result

        raise ConflictError("Document was modified concurrently, please retry") from last_error

    async def _trim_quietly(self, document_id: uuid.UUID) -> None:
        try:
            await self.version_store.trim(document_id)
        except SQLAlchemyError:
            await self.session.rollback()
            logger.exception(f"Failed to trim versions of document {document_id}")


class DocumentService(_DocumentServiceBase):
    """Сервис для работы с документами"""

    async def create_document(self, document_data: DocumentCreate, owner_id: str) -> Document:
        """Создание нового документа вместе с версией 1"""
        fields = document_data.model_dump(mode="json", exclude_unset=True)
        self._validate_fields(fields, creating=True)

        async def operation() -> Document:
            document = Document.create_document(
                title=fields["title"],
                user_id=owner_id,
                content=fields.get("content"),
                type=fields.get("type") or "text",
                status=fields.get("status") or "draft",
                access=fields.get("access") or "private"
            )
            await self.document_repository.create(document)
            await self.version_store.snapshot(document, owner_id, "created")
            return document

        document = await self._run_in_transaction(operation)
        logger.info(f"Document {document.uuid} created by {owner_id}")
        return document

    async def get_document(self, document_uuid: uuid.UUID, user_id: str) -> Document:
        """Получение документа: владелец или любой для public"""
        return await self._get_readable(document_uuid, user_id)

    async def get_user_documents(self, user_id: str) -> List[Document]:
        """Получение документов пользователя, последние измененные первыми"""
        return await self.document_repository.get_by_owner(user_id)

    async def update_document(
        self,
        document_uuid: uuid.UUID,
        update_data: DocumentUpdate,
        user_id: str,
        change_description: Optional[str] = None
    ) -> Document:
        """Обновление документа.

        Если изменилось хотя бы одно поле содержимого (title, content, type),
        сначала сохраняется снимок состояния до изменения. status и access
        применяются без снимка. Повторная отправка тех же значений версию
        не создает.
        """
        changes = update_data.model_dump(mode="json", exclude_unset=True, exclude={"change_description"})
        description = change_description or update_data.change_description or "updated"

        async def operation() -> Document:
            document = await self._get_editable(document_uuid, user_id, "edit")
            self._validate_fields(changes)

            content_fields = document.changed_content_fields(changes)
            attribute_fields = document.changed_attribute_fields(changes)

            if content_fields:
                await self.version_store.snapshot(document, user_id, description)

            if content_fields or attribute_fields:
                document.apply_changes(changes, content_fields | attribute_fields)
                await self.document_repository.update(document)

            return document

        return await self._run_in_transaction(operation, trim_document_id=document_uuid)

    async def delete_document(self, document_uuid: uuid.UUID, user_id: str) -> Dict[str, bool]:
        """Удаление документа вместе со всеми версиями"""

        async def operation() -> Dict[str, bool]:
            await self._get_editable(document_uuid, user_id, "delete")
            versions_deleted = await self.version_repository.delete_by_document(document_uuid)
            await self.document_repository.delete(document_uuid)
            logger.info(f"Document {document_uuid} deleted with {versions_deleted} versions")
            return {"deleted": True}

        return await self._run_in_transaction(operation)

    @staticmethod
    def _validate_fields(fields: Dict[str, Any], creating: bool = False) -> None:
        if creating and "title" not in fields:
            raise DocumentValidationError("Title is required", field="title")

        if "title" in fields and (fields["title"] is None or not fields["title"].strip()):
            raise DocumentValidationError("Title cannot be empty", field="title")

        for field in ("type", "status", "access"):
            if field in fields and fields[field] is None and not creating:
                raise DocumentValidationError(f"{field} cannot be null", field=field)


class VersionQueryService(_DocumentServiceBase):
    """Чтение истории версий"""

    async def get_document_versions(
        self,
        document_uuid: uuid.UUID,
        user_id: str,
        page: int = 1,
        page_size: int = 10,
        modified_by: Optional[str] = None
    ) -> Dict[str, Any]:
        """Страница версий документа, новые первыми; total учитывает фильтр"""
        if page < 1 or page_size < 1:
            raise DocumentValidationError("page and pageSize must be positive")

        await self._get_readable(document_uuid, user_id)

        offset = (page - 1) * page_size
        versions = await self.version_repository.get_by_document(
            document_uuid, limit=page_size, offset=offset, modified_by=modified_by
        )
        total = await self.version_repository.count_by_document(document_uuid, modified_by=modified_by)

        return {"data": versions, "total": total}

    async def get_document_version(
        self,
        document_uuid: uuid.UUID,
        version_number: int,
        user_id: str
    ) -> DocumentVersion:
        """Полный снимок конкретной версии"""
        await self._get_readable(document_uuid, user_id)

        version = await self.version_repository.get_version_by_number(document_uuid, version_number)
        if not version:
            raise VersionNotFoundError(document_uuid, version_number)
        return version


class RestoreService(_DocumentServiceBase):
    """Восстановление документа из версии без потери истории"""

    def __init__(self, session: AsyncSession, retention_limit: Optional[int] = None):
        super().__init__(session, retention_limit)
        self.version_query = VersionQueryService(session, retention_limit)

    async def restore_to_version(
        self,
        document_uuid: uuid.UUID,
        version_number: int,
        user_id: str,
        change_description: Optional[str] = None
    ) -> Document:
        """Восстановление документа из версии.

        Текущее состояние сначала сохраняется новой версией, затем
        title/content/type берутся из целевого снимка. Номер целевой
        версии на документ не переносится: счетчик продолжает расти.
        """
        description = change_description or f"restored to version {version_number}"

        async def operation() -> Document:
            document = await self._get_editable(document_uuid, user_id, "restore")
            target = await self.version_query.get_document_version(document_uuid, version_number, user_id)

            await self.version_store.snapshot(document, user_id, description)

            document.restore_from(target)
            await self.document_repository.update(document)
            return document

        document = await self._run_in_transaction(operation, trim_document_id=document_uuid)
        logger.info(f"Document {document_uuid} restored to version {version_number} by {user_id}")
        return document
