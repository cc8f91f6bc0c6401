from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class CandidateAccount:
    kind: Literal["candidate"] = "candidate"


@dataclass(frozen=True, slots=True)
class ManagerAccount:
    kind: Literal["manager"] = "manager"


Account = CandidateAccount | ManagerAccount


def resolve_account(roles: Iterable[str]) -> Account:
    """Collapse role rows into one capability set; a manager row wins."""
    if any(role == "manager" for role in roles):
        return ManagerAccount()
    return CandidateAccount()


@dataclass(frozen=True, slots=True)
class SessionContext:
    user_id: int
    email: str
    full_name: str
    account: Account

    @property
    def is_manager(self) -> bool:
        return isinstance(self.account, ManagerAccount)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
