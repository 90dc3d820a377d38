from doceditor.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository

__all__ = [
    "DocumentRepository",
    "DocumentVersionRepository",
]
