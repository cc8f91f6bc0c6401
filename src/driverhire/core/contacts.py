from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from driverhire.db.models import EmergencyContact
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, ValidationFailed
from driverhire.types import EmergencyContactInput

logger = logging.getLogger(__name__)

MAX_EMERGENCY_CONTACTS = 3


def can_add(contacts: Sequence[EmergencyContact]) -> bool:
    return len(contacts) < MAX_EMERGENCY_CONTACTS


def next_order(contacts: Sequence[EmergencyContact]) -> int:
    # deletions leave gaps; ordering only needs to be monotonic per add
    return len(contacts)


def add_contact(repo: Repository, user_id: int, data: EmergencyContactInput) -> EmergencyContact:
    contacts = repo.get_emergency_contacts(user_id)
    if not can_add(contacts):
        raise ValidationFailed(f"You can add up to {MAX_EMERGENCY_CONTACTS} emergency contacts.")
    values: dict[str, Any] = data.model_dump()
    values["order"] = next_order(contacts)
    return repo.add_emergency_contact(user_id, values)


def update_contact(
    repo: Repository, user_id: int, contact_id: int, data: EmergencyContactInput
) -> EmergencyContact:
    contact = repo.get_emergency_contact(contact_id)
    if not contact or contact.user_id != user_id:
        raise NotFoundError(f"emergency contact {contact_id} not found")
    return repo.update_emergency_contact(contact_id, data.model_dump())


def delete_contact(repo: Repository, user_id: int, contact_id: int) -> bool:
    contact = repo.get_emergency_contact(contact_id)
    if not contact or contact.user_id != user_id:
        raise NotFoundError(f"emergency contact {contact_id} not found")
    logger.info("Deleting emergency contact contact_id=%s user_id=%s", contact_id, user_id)
    return repo.delete_emergency_contact(contact_id)
