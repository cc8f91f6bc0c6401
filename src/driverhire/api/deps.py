from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from driverhire.config import get_settings
from driverhire.core.auth import build_session_context
from driverhire.core.security import decode_access_token
from driverhire.core.session import SessionContext
from driverhire.db.repositories import Repository
from driverhire.db.session import SessionLocal

security = HTTPBearer(auto_error=False)


class LoginRequired(Exception):
    """Raised by page dependencies; the app turns it into a redirect to /login."""

    def __init__(self, return_to: str):
        self.return_to = return_to


class ManagerRequired(Exception):
    def __init__(self, session: SessionContext):
        self.session = session


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _token_from_request(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(get_settings().session_cookie_name)


def get_optional_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> SessionContext | None:
    token = _token_from_request(request, credentials)
    if not token:
        return None
    user_id = decode_access_token(token)
    if user_id is None:
        return None
    return build_session_context(Repository(db), user_id)


def require_session(session: SessionContext | None = Depends(get_optional_session)) -> SessionContext:
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session


def require_manager(session: SessionContext = Depends(require_session)) -> SessionContext:
    if not session.is_manager:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Manager access required")
    return session


def require_page_session(
    request: Request,
    session: SessionContext | None = Depends(get_optional_session),
) -> SessionContext:
    if session is None:
        raise LoginRequired(request.url.path)
    return session


def require_page_manager(session: SessionContext = Depends(require_page_session)) -> SessionContext:
    if not session.is_manager:
        raise ManagerRequired(session)
    return session
