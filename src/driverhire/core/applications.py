from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from driverhire.core.session import SessionContext
from driverhire.db.models import Application, JobQuestion
from driverhire.db.repositories import Repository
from driverhire.errors import DuplicateError, NotFoundError, PermissionDenied, ValidationFailed

logger = logging.getLogger(__name__)


def missing_required_answers(questions: Sequence[JobQuestion], answers: Mapping[int, str]) -> list[JobQuestion]:
    return [q for q in questions if q.required and not (answers.get(q.id) or "").strip()]


def answers_from_form(questions: Sequence[JobQuestion], form: Mapping[str, object]) -> dict[int, str]:
    """Collect ``answer-<question id>`` inputs; checkbox groups post several values."""
    answers: dict[int, str] = {}
    for question in questions:
        raw = form.get(f"answer-{question.id}")
        if isinstance(raw, (list, tuple)):
            value = ", ".join(str(item) for item in raw if str(item).strip())
        else:
            value = "" if raw is None else str(raw)
        answers[question.id] = value
    return answers


def submit_application(
    repo: Repository,
    session: SessionContext,
    job_id: int,
    answers: Mapping[int, str],
) -> Application:
    """Create one application, then upsert each non-empty answer in question order.

    There is no surrounding transaction: if an answer write fails the
    application and the answers written before it stay saved.
    """
    if session.is_manager:
        raise PermissionDenied("Managers cannot apply to jobs.")

    job = repo.get_job(job_id)
    if not job or not job.is_active:
        raise NotFoundError(f"job {job_id} not found")

    questions = repo.get_job_questions(job_id)
    missing = missing_required_answers(questions, answers)
    if missing:
        raise ValidationFailed(
            "Please answer all required questions before submitting.",
            field=f"answer-{missing[0].id}",
        )

    if repo.find_application(session.user_id, job_id):
        raise DuplicateError("You have already applied to this job.")

    application = repo.create_application(session.user_id, job_id)
    for question in questions:
        value = answers.get(question.id) or ""
        if value.strip():
            repo.upsert_application_answer(application.id, question.id, value)

    logger.info(
        "Application submitted application_id=%s job_id=%s candidate_id=%s",
        application.id,
        job_id,
        session.user_id,
    )
    return application
