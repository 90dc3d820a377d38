import enum
import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Set


class DocumentStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class AccessLevel(str, enum.Enum):
    PRIVATE = "private"
    PUBLIC = "public"
    SHARED = "shared"


# Поля, изменение которых порождает новую версию
CONTENT_FIELDS = ("title", "content", "type")
# Поля, которые меняются без снимка
ATTRIBUTE_FIELDS = ("status", "access")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document:
    """Сущность документа домена Documents"""

    def __init__(
        self,
        uuid: uuid.UUID,
        title: str,
        user_id: str,
        content: Optional[str] = None,
        type: str = "text",
        status: str = DocumentStatus.DRAFT.value,
        access: str = AccessLevel.PRIVATE.value,
        current_version: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.title = title
        self.user_id = user_id
        self.content = content
        self.type = type
        self.status = status
        self.access = access
        self.current_version = current_version
        self.created_at = created_at or _utcnow()
        self.updated_at = updated_at or _utcnow()

    def changed_content_fields(self, changes: Dict[str, Any]) -> Set[str]:
        """Набор полей содержимого, значения которых отличаются от текущих.

        Учитываются только переданные поля: отсутствие ключа значит
        "не менять", а не "сбросить".
        """
        return {
            field for field in CONTENT_FIELDS
            if field in changes and changes[field] != getattr(self, field)
        }

    def changed_attribute_fields(self, changes: Dict[str, Any]) -> Set[str]:
        """Набор изменившихся полей, не влияющих на содержимое (status, access)"""
        return {
            field for field in ATTRIBUTE_FIELDS
            if field in changes and changes[field] != getattr(self, field)
        }

    def apply_changes(self, changes: Dict[str, Any], fields: Set[str]) -> None:
        """Применение значений только для указанных полей"""
        for field in fields:
            setattr(self, field, changes[field])
        if fields:
            self.updated_at = _utcnow()

    def restore_from(self, version: "DocumentVersion") -> None:
        """Перенос содержимого из снимка в текущее состояние.

        Номер версии документа не трогаем: счетчик только растет.
        """
        self.title = version.title
        self.content = version.content
        self.type = version.type
        self.updated_at = _utcnow()

    @classmethod
    def create_document(
        cls,
        title: str,
        user_id: str,
        content: Optional[str] = None,
        type: str = "text",
        status: str = DocumentStatus.DRAFT.value,
        access: str = AccessLevel.PRIVATE.value
    ) -> "Document":
        """Создание нового документа (версия появится при первом снимке)"""
        return cls(
            uuid=uuid.uuid4(),
            title=title,
            user_id=user_id,
            content=content,
            type=type,
            status=status,
            access=access,
            current_version=0
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Document(uuid={self.uuid}, title={self.title}, version={self.current_version})"


class DocumentVersion:
    """Неизменяемый снимок документа"""

    def __init__(
        self,
        uuid: uuid.UUID,
        document_id: uuid.UUID,
        version_number: int,
        title: Optional[str],
        content: Optional[str],
        type: Optional[str],
        modified_by: Optional[str],
        change_description: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.uuid = uuid
        self.document_id = document_id
        self.version_number = version_number
        self.title = title
        self.content = content
        self.type = type
        self.modified_by = modified_by
        self.change_description = change_description
        self.created_at = created_at or _utcnow()

    @classmethod
    def snapshot_of(
        cls,
        document: Document,
        version_number: int,
        modified_by: str,
        change_description: Optional[str] = None
    ) -> "DocumentVersion":
        """Снимок текущих title/content/type документа"""
        return cls(
            uuid=uuid.uuid4(),
            document_id=document.uuid,
            version_number=version_number,
            title=document.title,
            content=document.content,
            type=document.type,
            modified_by=modified_by,
            change_description=change_description
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, DocumentVersion):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"DocumentVersion(uuid={self.uuid}, document_id={self.document_id}, version={self.version_number})"


class DocumentAccess:
    """Правила доступа к документу"""

    def __init__(self, owner_id: str, access: str):
        self.owner_id = owner_id
        self.access = access

    @classmethod
    def of(cls, document: Document) -> "DocumentAccess":
        return cls(document.user_id, document.access)

    def is_owner(self, user_id: str) -> bool:
        """Проверка является ли пользователь владельцем"""
        return user_id == self.owner_id

    def can_read(self, user_id: str) -> bool:
        """Читать может владелец или любой, если документ публичный"""
        return self.is_owner(user_id) or self.access == AccessLevel.PUBLIC.value

    def can_edit(self, user_id: str) -> bool:
        """Изменять может только владелец, независимо от access"""
        return self.is_owner(user_id)
