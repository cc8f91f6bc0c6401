from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from driverhire.db.models import Authorization
from driverhire.db.repositories import Repository
from driverhire.errors import ValidationFailed


@dataclass(frozen=True, slots=True)
class AuthorizationSpec:
    type: str
    title: str
    description: str
    content: str


AUTHORIZATION_TYPES: tuple[AuthorizationSpec, ...] = (
    AuthorizationSpec(
        type="applicant_certification",
        title="Applicant Certification",
        description="I certify that the information provided is true and complete.",
        content=(
            "I certify that all information provided in this application is true and complete to the "
            "best of my knowledge. I understand that any false statements or omissions may result in "
            "rejection of my application or termination of employment if discovered later."
        ),
    ),
    AuthorizationSpec(
        type="fmcsa_clearinghouse",
        title="FMCSA Drug and Alcohol Clearinghouse Authorization",
        description="Authorization for FMCSA Drug and Alcohol Clearinghouse queries (49 CFR 382.701).",
        content=(
            "I hereby authorize the release of information from the Federal Motor Carrier Safety "
            "Administration (FMCSA) Drug and Alcohol Clearinghouse to the prospective employer. This "
            "authorization is in accordance with 49 CFR 382.701.\n\n"
            "I understand that:\n"
            "- The employer will query the Clearinghouse for information about my drug and alcohol violations\n"
            "- This authorization is required for employment consideration\n"
            "- I may review my own Clearinghouse record at any time"
        ),
    ),
    AuthorizationSpec(
        type="hireright_background",
        title="HireRight Background Check Authorization",
        description="Authorization for HireRight to conduct a background check.",
        content=(
            "I hereby authorize HireRight and its agents to conduct a comprehensive background check, "
            "which may include:\n\n"
            "- Criminal record searches\n"
            "- Employment history verification\n"
            "- Education verification\n"
            "- Motor vehicle record checks\n"
            "- Credit history (where permitted by law)\n"
            "- Other relevant background information\n\n"
            "I understand that this authorization is valid for the duration of the employment process "
            "and may be used for future employment decisions."
        ),
    ),
    AuthorizationSpec(
        type="psp_authorization",
        title="PSP Authorization",
        description="Authorization for Pre-Employment Screening Program (PSP) records.",
        content=(
            "I hereby authorize the release of my Pre-Employment Screening Program (PSP) records to the "
            "prospective employer.\n\n"
            "I understand that:\n"
            "- PSP records contain my commercial driver's license (CDL) violation history\n"
            "- This information will be used to evaluate my application for employment\n"
            "- I may request a copy of my PSP record at any time\n"
            "- This authorization is required for employment consideration"
        ),
    ),
)
AUTHORIZATION_KEYS = frozenset(spec.type for spec in AUTHORIZATION_TYPES)


def is_signed(rows: Iterable[Authorization], authorization_type: str) -> bool:
    return any(row.authorization_type == authorization_type and row.signed for row in rows)


def signed_at(rows: Iterable[Authorization], authorization_type: str) -> datetime | None:
    for row in rows:
        if row.authorization_type == authorization_type and row.signed:
            return row.signed_at
    return None


def all_signed(rows: Iterable[Authorization]) -> bool:
    rows = list(rows)
    return all(is_signed(rows, key) for key in AUTHORIZATION_KEYS)


def sign(
    repo: Repository,
    user_id: int,
    authorization_type: str,
    *,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> Authorization:
    if authorization_type not in AUTHORIZATION_KEYS:
        raise ValidationFailed(f"unknown authorization type '{authorization_type}'", field="authorization_type")
    return repo.sign_authorization(user_id, authorization_type, user_agent=user_agent, ip_address=ip_address)


def complete_profile(repo: Repository, user_id: int) -> None:
    """Stamp profile completion once every authorization is signed."""
    if not all_signed(repo.get_authorizations(user_id)):
        raise ValidationFailed("Please sign all required authorizations before continuing.")
    repo.mark_profile_completed(user_id)
