from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from driverhire.db.models import EmploymentHistory
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, ValidationFailed
from driverhire.types import EmploymentInput


def partition_history(
    rows: Iterable[EmploymentHistory],
) -> tuple[list[EmploymentHistory], list[EmploymentHistory]]:
    """Split one fetched list into (all jobs, CDL jobs) by the stored flag only."""
    recent: list[EmploymentHistory] = []
    cdl: list[EmploymentHistory] = []
    for row in rows:
        (cdl if row.is_cdl_employment else recent).append(row)
    return recent, cdl


def _values(data: EmploymentInput, *, is_cdl: bool) -> dict[str, Any]:
    if data.end_date and data.end_date < data.start_date:
        raise ValidationFailed("End date cannot be before start date.", field="end_date")
    values = data.model_dump()
    values["cdl_required"] = is_cdl or data.cdl_required
    return values


def add_employment(repo: Repository, user_id: int, data: EmploymentInput, *, is_cdl: bool) -> EmploymentHistory:
    values = _values(data, is_cdl=is_cdl)
    values["is_cdl_employment"] = is_cdl
    return repo.add_employment_history(user_id, values)


def update_employment(
    repo: Repository, user_id: int, employment_id: int, data: EmploymentInput
) -> EmploymentHistory:
    row = repo.get_employment(employment_id)
    if not row or row.user_id != user_id:
        raise NotFoundError(f"employment record {employment_id} not found")
    # the bucket a record was created in never changes
    return repo.update_employment_history(employment_id, _values(data, is_cdl=row.is_cdl_employment))


def delete_employment(repo: Repository, user_id: int, employment_id: int) -> bool:
    row = repo.get_employment(employment_id)
    if not row or row.user_id != user_id:
        raise NotFoundError(f"employment record {employment_id} not found")
    return repo.delete_employment_history(employment_id)
