from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from driverhire.core import authorizations, background
from driverhire.core.contacts import MAX_EMERGENCY_CONTACTS
from driverhire.core.documents import DocumentService
from driverhire.core.employment import partition_history
from driverhire.db.models import (
    Application,
    Authorization,
    BackgroundQuestion,
    Document,
    EmergencyContact,
    EmploymentHistory,
    Job,
    Profile,
)
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError

NO_APPLICATIONS = "no_applications"


@dataclass(slots=True)
class CandidateRow:
    profile: Profile
    status: str


@dataclass(slots=True)
class ApplicationRow:
    application: Application
    job: Job | None
    candidate: Profile | None


@dataclass(slots=True)
class OnboardingSection:
    key: str
    title: str
    url: str
    complete: bool


@dataclass(slots=True)
class CandidateDetail:
    profile: Profile
    recent_employment: list[EmploymentHistory]
    cdl_employment: list[EmploymentHistory]
    background_questions: list[BackgroundQuestion]
    emergency_contacts: list[EmergencyContact]
    documents: list[tuple[Document, str]]
    authorizations: list[Authorization]
    applications: list[ApplicationRow] = field(default_factory=list)


def _matches(term: str, *values: str | None) -> bool:
    needle = term.strip().lower()
    if not needle:
        return True
    return any(needle in value.lower() for value in values if value)


def latest_status(applications: Iterable[Application], candidate_id: int) -> str:
    own = [app for app in applications if app.candidate_id == candidate_id]
    if not own:
        return NO_APPLICATIONS
    latest = max(own, key=lambda app: (app.submitted_at, app.id))
    return latest.status


def candidate_rows(repo: Repository) -> list[CandidateRow]:
    candidates = repo.get_all_candidates()
    applications = repo.get_all_applications()
    return [CandidateRow(profile, latest_status(applications, profile.user_id)) for profile in candidates]


def filter_candidates(rows: Sequence[CandidateRow], *, search: str = "", status: str = "all") -> list[CandidateRow]:
    result = []
    for row in rows:
        if not _matches(search, row.profile.full_name, row.profile.email, row.profile.phone):
            continue
        if status != "all" and row.status != status:
            continue
        result.append(row)
    return result


def application_rows(repo: Repository, applications: Sequence[Application] | None = None) -> list[ApplicationRow]:
    """Attach job and candidate to each application with one lookup per row."""
    if applications is None:
        applications = repo.get_all_applications()
    return [
        ApplicationRow(app, repo.get_job(app.job_id), repo.get_candidate(app.candidate_id))
        for app in applications
    ]


def filter_applications(
    rows: Sequence[ApplicationRow],
    *,
    search: str = "",
    status: str = "all",
    job_id: str = "all",
) -> list[ApplicationRow]:
    result = []
    for row in rows:
        candidate = row.candidate
        if not _matches(
            search,
            candidate.full_name if candidate else None,
            candidate.email if candidate else None,
            row.job.title if row.job else None,
        ):
            continue
        if status != "all" and row.application.status != status:
            continue
        if job_id != "all" and str(row.application.job_id) != job_id:
            continue
        result.append(row)
    return result


def job_choices(rows: Iterable[ApplicationRow]) -> list[Job]:
    seen: dict[int, Job] = {}
    for row in rows:
        if row.job and row.job.id not in seen:
            seen[row.job.id] = row.job
    return list(seen.values())


def onboarding_sections(repo: Repository, user_id: int) -> list[OnboardingSection]:
    profile = repo.get_profile(user_id)
    history = repo.get_employment_history(user_id)
    contacts = repo.get_emergency_contacts(user_id)
    documents = repo.get_documents(user_id)
    return [
        OnboardingSection(
            "profile",
            "Profile Information",
            "/profile/create",
            bool(profile and profile.cdl_number and profile.driving_experience_years is not None),
        ),
        OnboardingSection("employment", "Employment History", "/profile/employment-history", bool(history)),
        OnboardingSection(
            "background",
            "Background Questions",
            "/profile/background-questions",
            background.is_complete(repo.get_background_questions(user_id)),
        ),
        OnboardingSection(
            "contacts",
            f"Emergency Contacts (up to {MAX_EMERGENCY_CONTACTS})",
            "/profile/emergency-contacts",
            bool(contacts),
        ),
        OnboardingSection("documents", "Documents", "/profile/documents", bool(documents)),
        OnboardingSection(
            "authorizations",
            "Authorizations",
            "/profile/authorizations",
            authorizations.all_signed(repo.get_authorizations(user_id)),
        ),
    ]


def candidate_detail(repo: Repository, candidate_id: int, documents: DocumentService) -> CandidateDetail:
    profile = repo.get_candidate(candidate_id)
    if not profile:
        raise NotFoundError(f"candidate {candidate_id} not found")
    recent, cdl = partition_history(repo.get_employment_history(candidate_id))
    return CandidateDetail(
        profile=profile,
        recent_employment=recent,
        cdl_employment=cdl,
        background_questions=repo.get_background_questions(candidate_id),
        emergency_contacts=repo.get_emergency_contacts(candidate_id),
        documents=[(doc, documents.url(doc)) for doc in repo.get_documents(candidate_id)],
        authorizations=repo.get_authorizations(candidate_id),
        applications=application_rows(repo, repo.get_applications(candidate_id)),
    )
