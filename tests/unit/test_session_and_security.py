from datetime import timedelta

from driverhire.core.security import create_access_token, decode_access_token, hash_password, verify_password
from driverhire.core.session import CandidateAccount, ManagerAccount, SessionContext, resolve_account


def test_manager_role_row_wins() -> None:
    assert isinstance(resolve_account(["candidate", "manager"]), ManagerAccount)
    assert isinstance(resolve_account(["candidate"]), CandidateAccount)
    assert isinstance(resolve_account([]), CandidateAccount)


def test_session_context_capabilities() -> None:
    session = SessionContext(user_id=1, email="m@example.com", full_name="", account=ManagerAccount())
    assert session.is_manager
    assert session.display_name == "m@example.com"
    assert session.account.kind == "manager"


def test_password_hash_round_trip() -> None:
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_access_token_carries_user_id() -> None:
    assert decode_access_token(create_access_token(17)) == 17


def test_expired_or_garbage_tokens_are_rejected() -> None:
    expired = create_access_token(17, expires_delta=timedelta(minutes=-5))
    assert decode_access_token(expired) is None
    assert decode_access_token("not-a-token") is None
