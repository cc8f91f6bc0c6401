from __future__ import annotations

import logging

from driverhire.core.security import hash_password, verify_password
from driverhire.core.session import SessionContext, resolve_account
from driverhire.db.models import User
from driverhire.db.repositories import Repository
from driverhire.errors import DuplicateError, ValidationFailed

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def register_user(
    repo: Repository,
    *,
    email: str,
    password: str,
    full_name: str = "",
    role: str = "candidate",
) -> User:
    email = email.strip().lower()
    if "@" not in email:
        raise ValidationFailed("Please enter a valid email address.", field="email")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.", field="password"
        )
    if repo.get_user_by_email(email):
        raise DuplicateError("An account with this email already exists.")

    user = repo.create_user(email=email, password_hash=hash_password(password), full_name=full_name.strip())
    repo.create_profile(user.id, email=user.email, full_name=user.full_name)
    repo.add_user_role(user.id, role)
    logger.info("Registered user user_id=%s role=%s", user.id, role)
    return user


def authenticate(repo: Repository, *, email: str, password: str) -> User | None:
    user = repo.get_user_by_email(email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def build_session_context(repo: Repository, user_id: int) -> SessionContext | None:
    user = repo.get_user(user_id)
    if not user or not user.is_active:
        return None
    roles = [row.role for row in repo.get_user_roles(user.id)]
    return SessionContext(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        account=resolve_account(roles),
    )
