"""Manager review of applications.

Statuses start at ``submitted``; a manager may move an application to any
review status from any other status, including back out of ``approved`` or
``rejected``. An action is only unavailable when it targets the current status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from driverhire.core.session import SessionContext
from driverhire.db.models import Application
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, PermissionDenied, ValidationFailed

logger = logging.getLogger(__name__)

APPLICATION_STATUSES: tuple[str, ...] = (
    "submitted",
    "under_review",
    "approved",
    "rejected",
    "more_info_requested",
)
REVIEW_TARGETS: tuple[tuple[str, str], ...] = (
    ("under_review", "Mark Under Review"),
    ("approved", "Approve"),
    ("rejected", "Reject"),
    ("more_info_requested", "Request More Info"),
)


@dataclass(frozen=True, slots=True)
class ReviewAction:
    status: str
    label: str
    disabled: bool


def status_label(status: str) -> str:
    if status == "no_applications":
        return "No Applications"
    return status.replace("_", " ").title()


def available_actions(current_status: str) -> list[ReviewAction]:
    return [ReviewAction(status, label, status == current_status) for status, label in REVIEW_TARGETS]


def review_application(
    repo: Repository,
    session: SessionContext,
    application_id: int,
    *,
    target: str,
    notes: str | None = None,
) -> Application:
    if not session.is_manager:
        raise PermissionDenied("Only managers can review applications.")
    if target not in {status for status, _ in REVIEW_TARGETS}:
        raise ValidationFailed(f"unsupported review status '{target}'", field="status")
    if not repo.get_application(application_id):
        raise NotFoundError(f"application {application_id} not found")

    application = repo.update_application_review(
        application_id,
        status=target,
        reviewed_by=session.user_id,
        notes=(notes or "").strip() or None,
    )
    logger.info(
        "Application reviewed application_id=%s status=%s reviewer_id=%s",
        application_id,
        target,
        session.user_id,
    )
    return application
