from fastapi.testclient import TestClient

from driverhire.db.repositories import Repository
from driverhire.db.session import SessionLocal


def _job_form(questions: list[tuple[str, str, str, str]], action: str = "save") -> dict[str, str]:
    form = {
        "title": "Flatbed Driver",
        "description": "Regional flatbed, home weekends",
        "requirements": "Class A CDL",
        "is_active": "on",
        "question_count": str(len(questions)),
        "action": action,
    }
    for index, (question_id, text, question_type, options) in enumerate(questions):
        form[f"q-{index}-id"] = question_id
        form[f"q-{index}-question"] = text
        form[f"q-{index}-question_type"] = question_type
        form[f"q-{index}-options"] = options
        form[f"q-{index}-required"] = "on"
    return form


def _stored_questions(job_id: int) -> list[tuple[int, str, str, int, list[str]]]:
    with SessionLocal() as db:
        return [
            (row.id, row.question, row.question_type, row.order, row.option_list)
            for row in Repository(db).get_job_questions(job_id)
        ]


def test_manager_creates_reorders_and_deletes_questions(client: TestClient, make_account, login) -> None:
    make_account("boss@example.com", manager=True)
    login(client, "boss@example.com")

    created = client.post(
        "/jobs/create",
        data=_job_form(
            [
                ("new-1", "Years with a CDL?", "text", ""),
                ("new-2", "Shift preference?", "select", "Day, Night"),
            ]
        ),
        follow_redirects=False,
    )
    assert created.status_code == 303
    assert created.headers["location"] == "/jobs"

    with SessionLocal() as db:
        (job,) = Repository(db).get_jobs(include_inactive=True)
    cdl_id, shift_id = (row[0] for row in _stored_questions(job.id))
    assert _stored_questions(job.id) == [
        (cdl_id, "Years with a CDL?", "text", 0, []),
        (shift_id, "Shift preference?", "select", 1, ["Day", "Night"]),
    ]

    moved = client.post(
        f"/jobs/{job.id}/edit",
        data=_job_form(
            [
                (str(cdl_id), "Years with a CDL?", "text", ""),
                (str(shift_id), "Shift preference?", "select", "Day, Night"),
            ],
            action="move-1-up",
        ),
    )
    assert moved.status_code == 200
    assert moved.text.index("Shift preference?") < moved.text.index("Years with a CDL?")

    deleted = client.post(
        f"/jobs/{job.id}/edit",
        data=_job_form(
            [
                (str(shift_id), "Shift preference?", "select", "Day, Night"),
                (str(cdl_id), "Years with a CDL?", "text", ""),
            ],
            action="delete-1",
        ),
    )
    assert deleted.status_code == 200
    assert "Years with a CDL?" not in deleted.text
    # persisted questions are removed before the job is saved
    assert [row[0] for row in _stored_questions(job.id)] == [shift_id]

    saved = client.post(
        f"/jobs/{job.id}/edit",
        data=_job_form([(str(shift_id), "Shift preference?", "select", "Day, Night, Weekend")]),
        follow_redirects=False,
    )
    assert saved.status_code == 303
    assert _stored_questions(job.id) == [(shift_id, "Shift preference?", "select", 0, ["Day", "Night", "Weekend"])]


def test_malformed_editor_posts_are_rejected(client: TestClient, make_account, login) -> None:
    make_account("boss@example.com", manager=True)
    login(client, "boss@example.com")

    bad_count = _job_form([])
    bad_count["question_count"] = "two"
    response = client.post("/jobs/create", data=bad_count)
    assert response.status_code == 400
    assert "Invalid question form data." in response.text

    for action in ("move-x-up", "move-0-sideways", "delete-", "delete-first"):
        response = client.post("/jobs/create", data=_job_form([("new-1", "Endorsements?", "text", "")], action=action))
        assert response.status_code == 400, action

    response = client.post("/jobs/create", data=_job_form([("abc", "Endorsements?", "text", "")]))
    assert response.status_code == 400

    with SessionLocal() as db:
        assert Repository(db).get_jobs(include_inactive=True) == []
