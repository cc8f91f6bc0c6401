from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from driverhire.config import Settings, get_settings
from driverhire.core.auth import register_user
from driverhire.db.repositories import Repository

logger = logging.getLogger(__name__)


def seed_bootstrap_manager(session: Session, settings: Settings | None = None) -> int:
    settings = settings or get_settings()
    if not settings.bootstrap_manager_email or not settings.bootstrap_manager_password:
        return 0

    repo = Repository(session)
    user = repo.get_user_by_email(settings.bootstrap_manager_email)
    if user is None:
        user = register_user(
            repo,
            email=settings.bootstrap_manager_email,
            password=settings.bootstrap_manager_password,
            full_name=settings.bootstrap_manager_name,
        )
        repo.add_user_role(user.id, "manager")
        logger.info("Seeded bootstrap manager user_id=%s", user.id)
        return 1

    if not any(role.role == "manager" for role in repo.get_user_roles(user.id)):
        repo.add_user_role(user.id, "manager")
    return 0
