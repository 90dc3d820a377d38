"""Ошибки домена Documents.

Сервисы поднимают эти исключения, HTTP-слой переводит их в коды ответа.
``ForbiddenError`` и ``DocumentValidationError`` наследуют встроенные
``PermissionError`` и ``ValueError``, поэтому старый код, ловящий
встроенные исключения, продолжает работать.
"""
import uuid
from typing import Optional


class DocumentError(Exception):
    """Базовая ошибка домена Documents"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DocumentError):
    """Документ не найден"""

    def __init__(self, document_id: uuid.UUID, message: str = "Document not found"):
        super().__init__(message)
        self.document_id = document_id


class VersionNotFoundError(NotFoundError):
    """Версия документа не найдена"""

    def __init__(self, document_id: uuid.UUID, version_number: int):
        super().__init__(document_id, f"Version {version_number} not found")
        self.version_number = version_number


class ForbiddenError(DocumentError, PermissionError):
    """Вызывающий не владелец документа (или документ не публичный при чтении)"""


class DocumentValidationError(DocumentError, ValueError):
    """Отсутствуют или некорректны обязательные поля"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConflictError(DocumentError):
    """Не удалось записать версию из-за параллельных изменений"""


class StaleVersionError(ConflictError):
    """Номер версии документа изменился между чтением и записью"""

    def __init__(self, document_id: uuid.UUID, expected_version: int):
        super().__init__(f"Document {document_id} is no longer at version {expected_version}")
        self.document_id = document_id
        self.expected_version = expected_version
