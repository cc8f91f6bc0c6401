from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from driverhire.db.models import Job, JobQuestion
from driverhire.db.repositories import Repository
from driverhire.errors import NotFoundError, ValidationFailed
from driverhire.types import JobInput

logger = logging.getLogger(__name__)

QUESTION_TYPES: tuple[str, ...] = ("text", "textarea", "select", "checkbox")
OPTION_QUESTION_TYPES = frozenset({"select", "checkbox"})
NEW_QUESTION_PREFIX = "new-"


def parse_option_text(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(slots=True)
class QuestionDraft:
    id: str
    question: str = ""
    question_type: str = "text"
    required: bool = False
    order: int = 0
    options: list[str] | None = None

    @property
    def is_new(self) -> bool:
        return self.id.startswith(NEW_QUESTION_PREFIX)

    @property
    def persisted_id(self) -> int | None:
        return None if self.is_new else int(self.id)

    @property
    def options_text(self) -> str:
        return ", ".join(self.options or [])

    @classmethod
    def from_row(cls, row: JobQuestion) -> "QuestionDraft":
        return cls(
            id=str(row.id),
            question=row.question,
            question_type=row.question_type,
            required=row.required,
            order=row.order,
            options=row.option_list or None,
        )

    def values(self) -> dict[str, object]:
        options = self.options if self.question_type in OPTION_QUESTION_TYPES else None
        return {
            "question": self.question,
            "question_type": self.question_type,
            "required": self.required,
            "order": self.order,
            "options": options,
        }


def _form_index(value: object, *, field_name: str) -> int:
    try:
        index = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationFailed("Invalid question form data.", field=field_name) from exc
    if index < 0:
        raise ValidationFailed("Invalid question form data.", field=field_name)
    return index


def parse_editor_action(action: str) -> tuple[str, int | None, str | None]:
    """Split a posted editor button value into ``(kind, index, direction)``.

    Values are ``add_question``, ``move-<index>-up``, ``move-<index>-down`` and
    ``delete-<index>``; anything else saves.
    """
    if action == "add_question":
        return "add_question", None, None
    if action.startswith("move-"):
        index, _, direction = action[len("move-") :].partition("-")
        if direction not in {"up", "down"}:
            raise ValidationFailed("Invalid question form data.", field="action")
        return "move", _form_index(index, field_name="action"), direction
    if action.startswith("delete-"):
        return "delete", _form_index(action[len("delete-") :], field_name="action"), None
    return "save", None, None


@dataclass(slots=True)
class JobEditor:
    """In-progress job form: the job fields plus an ordered list of question drafts."""

    job_id: int | None = None
    title: str = ""
    description: str = ""
    requirements: str = ""
    is_active: bool = True
    questions: list[QuestionDraft] = field(default_factory=list)

    @classmethod
    def from_job(cls, job: Job, questions: Sequence[JobQuestion]) -> "JobEditor":
        return cls(
            job_id=job.id,
            title=job.title,
            description=job.description,
            requirements=job.requirements or "",
            is_active=job.is_active,
            questions=[QuestionDraft.from_row(row) for row in questions],
        )

    @classmethod
    def from_header(cls, form: Mapping[str, str], *, job_id: int | None = None) -> "JobEditor":
        """Job fields only; used when the posted question rows cannot be read."""
        return cls(
            job_id=job_id,
            title=form.get("title", ""),
            description=form.get("description", ""),
            requirements=form.get("requirements", ""),
            is_active=form.get("is_active") in {"on", "true", "1"},
        )

    @classmethod
    def from_form(cls, form: Mapping[str, str], *, job_id: int | None = None) -> "JobEditor":
        """Rebuild the editor from posted ``q-<index>-<field>`` inputs."""
        editor = cls.from_header(form, job_id=job_id)
        count = _form_index(form.get("question_count") or 0, field_name="question_count")
        for index in range(count):
            prefix = f"q-{index}-"
            question_id = form.get(f"{prefix}id")
            if not question_id:
                continue
            if not question_id.startswith(NEW_QUESTION_PREFIX) and not question_id.isdigit():
                raise ValidationFailed("Invalid question form data.", field=f"{prefix}id")
            question_type = form.get(f"{prefix}question_type", "text")
            editor.questions.append(
                QuestionDraft(
                    id=question_id,
                    question=form.get(f"{prefix}question", ""),
                    question_type=question_type if question_type in QUESTION_TYPES else "text",
                    required=form.get(f"{prefix}required") in {"on", "true", "1"},
                    order=index,
                    options=parse_option_text(form.get(f"{prefix}options")) or None,
                )
            )
        return editor

    def add_question(self, *, now: datetime | None = None) -> QuestionDraft:
        moment = now or datetime.now(UTC)
        draft = QuestionDraft(
            id=f"{NEW_QUESTION_PREFIX}{int(moment.timestamp() * 1000)}",
            order=len(self.questions),
        )
        while any(existing.id == draft.id for existing in self.questions):
            draft.id = f"{draft.id}-{len(self.questions)}"
        self.questions.append(draft)
        return draft

    def move_question(self, index: int, direction: str) -> None:
        new_index = index - 1 if direction == "up" else index + 1
        if index < 0 or new_index < 0 or new_index >= len(self.questions) or index >= len(self.questions):
            return
        self.questions[index], self.questions[new_index] = self.questions[new_index], self.questions[index]
        self.questions[index].order = index
        self.questions[new_index].order = new_index

    def remove_question(self, index: int) -> QuestionDraft | None:
        if index < 0 or index >= len(self.questions):
            return None
        return self.questions.pop(index)

    def job_input(self) -> JobInput:
        if not self.title.strip():
            raise ValidationFailed("Please fill out this field.", field="title")
        if not self.description.strip():
            raise ValidationFailed("Please fill out this field.", field="description")
        return JobInput(
            title=self.title.strip(),
            description=self.description,
            requirements=self.requirements or None,
            is_active=self.is_active,
        )


def save_job(repo: Repository, editor: JobEditor, *, user_id: int) -> Job:
    """Persist the job row first, then insert new questions and update existing ones.

    Each write commits on its own; a failure part-way leaves earlier writes in place.
    """
    job_values = editor.job_input().model_dump()
    for index, draft in enumerate(editor.questions):
        if not draft.question.strip():
            raise ValidationFailed("Please fill out this field.", field=f"q-{index}-question")

    if editor.job_id is None:
        job = repo.create_job(user_id, job_values)
        editor.job_id = job.id
    else:
        job = repo.update_job(editor.job_id, job_values)

    for draft in editor.questions:
        if draft.is_new:
            row = repo.create_job_question(job.id, draft.values())
            draft.id = str(row.id)
        else:
            repo.update_job_question(draft.persisted_id, draft.values())

    logger.info("Saved job job_id=%s questions=%d", job.id, len(editor.questions))
    return job


def delete_question(repo: Repository, editor: JobEditor, index: int) -> None:
    """Drop a question from the editor; persisted questions are deleted right away."""
    draft = editor.remove_question(index)
    if draft is None or draft.is_new:
        return
    if not repo.delete_job_question(draft.persisted_id):
        raise NotFoundError(f"job question {draft.id} not found")


def toggle_active(repo: Repository, job_id: int) -> Job:
    job = repo.get_job(job_id)
    if not job:
        raise NotFoundError(f"job {job_id} not found")
    return repo.update_job(job_id, {"is_active": not job.is_active})


def search_jobs(jobs: Sequence[Job], term: str) -> list[Job]:
    needle = term.strip().lower()
    if not needle:
        return list(jobs)
    return [
        job
        for job in jobs
        if needle in job.title.lower()
        or needle in job.description.lower()
        or (job.requirements and needle in job.requirements.lower())
    ]
