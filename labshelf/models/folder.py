"""Folder and folder-file models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_folder_id() -> str:
    return f"folder-{uuid.uuid4().hex}"


def generate_file_id() -> str:
    return f"file-{uuid.uuid4().hex}"


class Folder(Base):
    """A named group of files inside one project."""

    __tablename__ = "folders"
    __table_args__ = (
        Index("ix_folders_project_id", "project_id"),
    )

    id = Column(String(50), primary_key=True, default=generate_folder_id)
    project_id = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)

    # Sum of file sizes in bytes, recomputed from the file list on every change.
    size = Column(BigInteger, nullable=False, default=0)

    created_by = Column(String(100), nullable=True)

    # Python-side timestamps keep sub-second ordering on SQLite.
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    files = relationship(
        "FolderFile",
        back_populates="folder",
        order_by="FolderFile.uploaded_at",
        passive_deletes="all",
    )


class FolderFile(Base):
    """Metadata record of one uploaded binary."""

    __tablename__ = "folder_files"
    __table_args__ = (
        Index("ix_folder_files_folder_id", "folder_id"),
    )

    id = Column(String(50), primary_key=True, default=generate_file_id)
    folder_id = Column(String(50), ForeignKey("folders.id"), nullable=False)
    project_id = Column(String(100), nullable=False)

    # User-facing name, independent from the blob key.
    display_name = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=True)
    # Generated blob key segment: projects/{project}/folders/{folder}/{storage_file_name}
    storage_file_name = Column(String(255), nullable=False)

    size = Column(BigInteger, nullable=False, default=0)
    content_type = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    download_url = Column(Text, nullable=True)

    uploaded_by = Column(String(100), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=_utcnow)
    last_modified = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    folder = relationship("Folder", back_populates="files")
