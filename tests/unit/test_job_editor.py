from datetime import UTC, datetime
from types import SimpleNamespace

from driverhire.core.jobs import JobEditor, QuestionDraft, parse_option_text, search_jobs


def _editor() -> JobEditor:
    return JobEditor(
        title="Regional Driver",
        description="Home weekly",
        questions=[
            QuestionDraft(id="11", question="A", order=0),
            QuestionDraft(id="12", question="B", order=1),
            QuestionDraft(id="13", question="C", order=2),
        ],
    )


def test_parse_option_text_trims_and_drops_blanks() -> None:
    assert parse_option_text(" Day, Night ,, Weekend ") == ["Day", "Night", "Weekend"]
    assert parse_option_text("") == []


def test_add_question_uses_placeholder_id_and_next_order() -> None:
    editor = _editor()
    draft = editor.add_question(now=datetime(2026, 1, 1, tzinfo=UTC))
    assert draft.is_new
    assert draft.id == f"new-{int(datetime(2026, 1, 1, tzinfo=UTC).timestamp() * 1000)}"
    assert draft.order == 3


def test_move_question_swaps_and_reassigns_orders() -> None:
    editor = _editor()
    editor.move_question(2, "up")
    assert [q.question for q in editor.questions] == ["A", "C", "B"]
    assert [q.order for q in editor.questions] == [0, 1, 2]


def test_move_out_of_bounds_is_ignored() -> None:
    editor = _editor()
    editor.move_question(0, "up")
    editor.move_question(2, "down")
    assert [q.question for q in editor.questions] == ["A", "B", "C"]


def test_from_form_rebuilds_questions_in_posted_order() -> None:
    form = {
        "title": "Local Driver",
        "description": "Day routes",
        "is_active": "on",
        "question_count": "2",
        "q-0-id": "new-1",
        "q-0-question": "Preferred shift?",
        "q-0-question_type": "select",
        "q-0-options": "Day, Night",
        "q-0-required": "on",
        "q-1-id": "7",
        "q-1-question": "Anything else?",
        "q-1-question_type": "textarea",
    }
    editor = JobEditor.from_form(form, job_id=3)
    assert editor.job_id == 3
    assert editor.is_active is True
    first, second = editor.questions
    assert first.is_new and first.required and first.options == ["Day", "Night"]
    assert second.persisted_id == 7 and second.order == 1
    assert second.values()["options"] is None


def test_search_jobs_matches_title_description_and_requirements() -> None:
    jobs = [
        SimpleNamespace(title="Flatbed Driver", description="OTR", requirements=None),
        SimpleNamespace(title="Local", description="Tanker routes", requirements=None),
        SimpleNamespace(title="Yard", description="Shuttle", requirements="Hazmat endorsement"),
    ]
    assert [j.title for j in search_jobs(jobs, "tanker")] == ["Local"]
    assert [j.title for j in search_jobs(jobs, "HAZMAT")] == ["Yard"]
    assert len(search_jobs(jobs, " ")) == 3
