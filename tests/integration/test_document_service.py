from pathlib import Path

import pytest
from sqlalchemy.exc import SQLAlchemyError

from driverhire.core.auth import register_user
from driverhire.core.documents import DocumentService
from driverhire.core.storage import DocumentStorage
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, StorageError, ValidationFailed

PDF_BYTES = b"%PDF-1.4 driver resume"


class _FailingInsertRepository(Repository):
    def create_document(self, **kwargs):
        raise SQLAlchemyError("insert failed")


def _stored_files(root: Path) -> list[Path]:
    return [path for path in root.rglob("*") if path.is_file()]


def test_upload_stores_blob_then_record(repo: Repository, tmp_path: Path) -> None:
    user_id = register_user(repo, email="cand@example.com", password="secret123").id
    service = DocumentService(repo, DocumentStorage(root=tmp_path))

    document = service.upload(
        user_id,
        file_name="resume.pdf",
        content=PDF_BYTES,
        mime_type="application/pdf",
        document_type="resume",
    )

    assert document.file_path.startswith(f"{user_id}/")
    assert document.file_path.endswith(".pdf")
    assert document.file_size == len(PDF_BYTES)
    assert service.storage.read(document.file_path) == PDF_BYTES
    assert service.url(document) == f"/profile/documents/{document.id}/file"
    assert service.storage.local_path(document.file_path).read_bytes() == PDF_BYTES


def test_failed_record_insert_removes_uploaded_blob(db, tmp_path: Path) -> None:
    repo = _FailingInsertRepository(db)
    user_id = register_user(repo, email="cand@example.com", password="secret123").id
    service = DocumentService(repo, DocumentStorage(root=tmp_path))

    with pytest.raises(SQLAlchemyError):
        service.upload(
            user_id,
            file_name="license.png",
            content=b"\x89PNG",
            mime_type="image/png",
            document_type="cdl_license",
        )

    assert _stored_files(tmp_path) == []


def test_rejected_file_never_reaches_storage(repo: Repository, tmp_path: Path) -> None:
    user_id = register_user(repo, email="cand@example.com", password="secret123").id
    service = DocumentService(repo, DocumentStorage(root=tmp_path))

    with pytest.raises(ValidationFailed) as exc:
        service.upload(user_id, file_name="notes.txt", content=b"hi", mime_type="text/plain", document_type="other")
    assert exc.value.field == "file"
    assert _stored_files(tmp_path) == []


def test_delete_removes_blob_and_row_for_owner_only(repo: Repository, tmp_path: Path) -> None:
    owner = register_user(repo, email="owner@example.com", password="secret123").id
    other = register_user(repo, email="other@example.com", password="secret123").id
    service = DocumentService(repo, DocumentStorage(root=tmp_path))
    document = service.upload(
        owner, file_name="cert.pdf", content=PDF_BYTES, mime_type="application/pdf", document_type="certification"
    )

    with pytest.raises(NotFoundError):
        service.delete(document.id, user_id=other)

    key = document.file_path
    assert service.delete(document.id, user_id=owner) is True
    assert not service.storage.exists(key)
    assert repo.get_documents(owner) == []


def test_storage_rejects_keys_outside_bucket(tmp_path: Path) -> None:
    storage = DocumentStorage(root=tmp_path)
    with pytest.raises(StorageError):
        storage.upload("../escape.pdf", b"x")
