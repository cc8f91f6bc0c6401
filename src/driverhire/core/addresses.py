from __future__ import annotations

from typing import Any

from driverhire.db.models import AddressHistory
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, ValidationFailed
from driverhire.types import AddressHistoryInput


def _values(data: AddressHistoryInput) -> dict[str, Any]:
    if data.end_date and data.end_date < data.start_date:
        raise ValidationFailed("End date cannot be before start date.", field="end_date")
    return data.model_dump()


def _owned(repo: Repository, user_id: int, address_id: int) -> AddressHistory:
    row = repo.get_address(address_id)
    if not row or row.user_id != user_id:
        raise NotFoundError(f"address record {address_id} not found")
    return row


def add_address(repo: Repository, user_id: int, data: AddressHistoryInput) -> AddressHistory:
    return repo.add_address_history(user_id, _values(data))


def update_address(repo: Repository, user_id: int, address_id: int, data: AddressHistoryInput) -> AddressHistory:
    _owned(repo, user_id, address_id)
    return repo.update_address_history(address_id, _values(data))


def delete_address(repo: Repository, user_id: int, address_id: int) -> bool:
    _owned(repo, user_id, address_id)
    return repo.delete_address_history(address_id)
