from sqlalchemy import Column, String, Text, Integer, ForeignKey, DateTime, Uuid, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from doceditor.db.base import BaseModel, utcnow


class Document(BaseModel):
    __tablename__ = "documents"

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    type = Column(String(50), nullable=False, default="text")
    # Непрозрачный идентификатор владельца от провайдера идентификации
    user_id = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="draft")
    access = Column(String(20), nullable=False, default="private")
    current_version = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    versions = relationship(
        "DocumentVersion",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DocumentVersion(BaseModel):
    __tablename__ = "document_versions"
    __table_args__ = (
        UniqueConstraint("document_id", "version_number", name="uq_document_versions_document_number"),
        Index("ix_document_versions_document_modified_by", "document_id", "modified_by"),
    )

    document_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("documents.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    version_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)
    content = Column(Text, nullable=True)
    type = Column(String(50), nullable=True)
    modified_by = Column(String(255), nullable=True)
    change_description = Column(Text, nullable=True)

    # Relationships
    document = relationship("Document", back_populates="versions")
