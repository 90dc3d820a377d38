from doceditor.domains.documents.entities import (
    Document, DocumentVersion, DocumentAccess, DocumentStatus, AccessLevel
)
from doceditor.domains.documents.exceptions import (
    DocumentError, NotFoundError, VersionNotFoundError, ForbiddenError,
    DocumentValidationError, ConflictError, StaleVersionError
)
from doceditor.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, DocumentVersionSummary,
    DocumentVersionResponse, DocumentVersionListResponse, RestoreDocumentRequest,
    DocumentDeleteResponse
)
from doceditor.domains.documents.services import (
    VersionStore, DocumentService, VersionQueryService, RestoreService
)

__all__ = [
    "Document", "DocumentVersion", "DocumentAccess", "DocumentStatus", "AccessLevel",
    "DocumentError", "NotFoundError", "VersionNotFoundError", "ForbiddenError",
    "DocumentValidationError", "ConflictError", "StaleVersionError",
    "DocumentCreate", "DocumentUpdate", "DocumentResponse", "DocumentVersionSummary",
    "DocumentVersionResponse", "DocumentVersionListResponse", "RestoreDocumentRequest",
    "DocumentDeleteResponse",
    "VersionStore", "DocumentService", "VersionQueryService", "RestoreService"
]
