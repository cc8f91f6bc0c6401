from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from driverhire.db.models import BackgroundQuestion
from driverhire.db.repositories import Repository
from driverhire.errors import ValidationFailed

BACKGROUND_QUESTIONS: tuple[str, ...] = (
    "Have you ever been convicted of a felony or misdemeanor?",
    "Have you ever been denied a license, permit, or privilege to operate a motor vehicle?",
    "Has any license, permit, or privilege to operate a motor vehicle ever been suspended or revoked?",
    "Have you been convicted of DWI/DUI in the last 10 years?",
    "Have you tested positive for alcohol or drugs in the last 3 years?",
    "Have you refused to take an alcohol or drug test in the last 3 years?",
    "Have you been denied a job due to a failed alcohol or drug test in the last 3 years?",
    "Have you ever been discharged or asked to resign from a job?",
    "Are you able to perform the essential functions of the job for which you are applying?",
)
QUESTION_NUMBERS = frozenset(range(1, len(BACKGROUND_QUESTIONS) + 1))


@dataclass(frozen=True, slots=True)
class BackgroundAnswer:
    question_number: int
    answer: bool
    explanation: str | None = None


def is_complete(rows: Iterable[BackgroundQuestion | BackgroundAnswer]) -> bool:
    return {row.question_number for row in rows} == QUESTION_NUMBERS


def parse_answers(form: Mapping[str, str]) -> list[BackgroundAnswer]:
    """Read ``q<n>`` yes/no radios and ``q<n>_explanation`` fields from a posted form.

    A "yes" needs a non-empty explanation, mirroring the required textarea
    that appears next to it.
    """
    answers: list[BackgroundAnswer] = []
    for number in sorted(QUESTION_NUMBERS):
        raw = (form.get(f"q{number}") or "").strip().lower()
        if raw not in {"yes", "no"}:
            continue
        explanation = (form.get(f"q{number}_explanation") or "").strip() or None
        answer = raw == "yes"
        if answer and not explanation:
            raise ValidationFailed("Please fill out this field.", field=f"q{number}_explanation")
        answers.append(BackgroundAnswer(number, answer, explanation))
    return answers


def save_answers(repo: Repository, user_id: int, answers: Iterable[BackgroundAnswer]) -> list[BackgroundQuestion]:
    saved = []
    for item in answers:
        if item.question_number not in QUESTION_NUMBERS:
            raise ValidationFailed(f"unknown background question {item.question_number}")
        saved.append(repo.upsert_background_question(user_id, item.question_number, item.answer, item.explanation))
    return saved
