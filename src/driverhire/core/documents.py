from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from driverhire.core.session import SessionContext
from driverhire.core.storage import DocumentStorage
from driverhire.db.models import Document
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, StorageError, ValidationFailed

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024
ALLOWED_FILE_TYPES: tuple[str, ...] = ("application/pdf", "image/jpeg", "image/png", "image/jpg")
DOCUMENT_TYPES: tuple[str, ...] = ("resume", "cdl_license", "certification", "other")
UPLOAD_SLOTS: tuple[tuple[str, str], ...] = (
    ("resume", "Resume"),
    ("cdl_license", "CDL License"),
    ("certification", "Certifications"),
)


def validate_file(*, size: int, mime_type: str | None, max_size: int = MAX_FILE_SIZE) -> str | None:
    if size > max_size:
        return f"File size must be less than {max_size // 1024 // 1024}MB"
    if mime_type not in ALLOWED_FILE_TYPES:
        return "File type not supported. Please upload PDF or image files."
    return None


def build_storage_key(user_id: int, file_name: str, *, now: datetime | None = None) -> str:
    moment = now or datetime.now(UTC)
    extension = file_name.rsplit(".", 1)[-1] if file_name else "bin"
    return f"{user_id}/{int(moment.timestamp() * 1000)}.{extension}"


def format_file_size(size: int | None) -> str:
    if not size:
        return "Unknown size"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1024 / 1024:.1f} MB"


class DocumentService:
    def __init__(self, repo: Repository, storage: DocumentStorage | None = None):
        self.repo = repo
        self.storage = storage or DocumentStorage()

    def upload(
        self,
        user_id: int,
        *,
        file_name: str,
        content: bytes,
        mime_type: str | None,
        document_type: str,
    ) -> Document:
        if document_type not in DOCUMENT_TYPES:
            raise ValidationFailed(f"unknown document type '{document_type}'", field="document_type")
        error = validate_file(size=len(content), mime_type=mime_type, max_size=self.storage.settings.max_upload_bytes)
        if error:
            raise ValidationFailed(error, field="file")

        key = build_storage_key(user_id, file_name)
        self.storage.upload(key, content)
        try:
            return self.repo.create_document(
                user_id=user_id,
                document_type=document_type,
                file_name=file_name,
                file_path=key,
                file_size=len(content),
                mime_type=mime_type,
            )
        except SQLAlchemyError:
            logger.exception("Document record insert failed user_id=%s key=%s", user_id, key)
            self.repo.session.rollback()
            self.storage.remove([key])
            raise

    def delete(self, document_id: int, *, user_id: int | None = None) -> bool:
        document = self.repo.get_document(document_id)
        if not document or (user_id is not None and document.user_id != user_id):
            raise NotFoundError(f"document {document_id} not found")

        try:
            self.storage.remove([document.file_path])
        except StorageError as exc:
            logger.warning("Storage delete failed document_id=%s key=%s error=%s", document_id, document.file_path, exc)

        return self.repo.delete_document(document_id)

    def open_for(self, document_id: int, session: SessionContext) -> tuple[Document, Path]:
        """Return the row and blob path when ``session`` owns the document or is a manager."""
        document = self.repo.get_document(document_id)
        if not document or (document.user_id != session.user_id and not session.is_manager):
            raise NotFoundError(f"document {document_id} not found")
        return document, self.storage.local_path(document.file_path)

    def url(self, document: Document) -> str:
        return f"/profile/documents/{document.id}/file"
