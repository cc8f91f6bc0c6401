from fastapi.testclient import TestClient

JOB_PAYLOAD = {
    "title": "Regional CDL-A Driver",
    "description": "Home every weekend",
    "requirements": "2 years experience",
    "questions": [
        {"question": "Preferred shift?", "question_type": "select", "required": True, "options": ["Day", "Night"]},
        {"question": "Anything else?", "question_type": "textarea"},
    ],
}


def _setup(client: TestClient, make_account, auth_headers) -> tuple[dict, dict]:
    make_account("boss@example.com", manager=True)
    make_account("driver@example.com", full_name="Dana Driver")
    return auth_headers(client, "boss@example.com"), auth_headers(client, "driver@example.com")


def test_manager_creates_job_with_ordered_questions(client: TestClient, make_account, auth_headers) -> None:
    manager, candidate = _setup(client, make_account, auth_headers)

    created = client.post("/api/jobs", json=JOB_PAYLOAD, headers=manager)
    assert created.status_code == 201
    body = created.json()
    assert [q["order"] for q in body["questions"]] == [0, 1]
    assert body["questions"][0]["options"] == ["Day", "Night"]
    assert body["questions"][1]["options"] is None

    detail = client.get(f"/api/jobs/{body['id']}", headers=candidate)
    assert detail.status_code == 200
    assert detail.json()["title"] == "Regional CDL-A Driver"


def test_inactive_job_hidden_from_candidates_only(client: TestClient, make_account, auth_headers) -> None:
    manager, candidate = _setup(client, make_account, auth_headers)
    job_id = client.post("/api/jobs", json=JOB_PAYLOAD, headers=manager).json()["id"]

    assert client.patch(f"/api/jobs/{job_id}", json={"is_active": False}, headers=manager).status_code == 200

    assert client.get("/api/jobs", headers=candidate).json() == []
    assert client.get("/api/jobs?include_inactive=true", headers=candidate).json() == []
    assert client.get(f"/api/jobs/{job_id}", headers=candidate).status_code == 404

    manager_view = client.get("/api/jobs?include_inactive=true", headers=manager).json()
    assert [job["id"] for job in manager_view] == [job_id]
    assert client.get(f"/api/jobs/{job_id}", headers=manager).status_code == 200


def test_application_requires_answers_and_is_unique(client: TestClient, make_account, auth_headers) -> None:
    manager, candidate = _setup(client, make_account, auth_headers)
    job = client.post("/api/jobs", json=JOB_PAYLOAD, headers=manager).json()
    shift_q, notes_q = (q["id"] for q in job["questions"])

    missing = client.post("/api/applications", json={"job_id": job["id"], "answers": {}}, headers=candidate)
    assert missing.status_code == 400

    payload = {"job_id": job["id"], "answers": {str(shift_q): "Night", str(notes_q): ""}}
    created = client.post("/api/applications", json=payload, headers=candidate)
    assert created.status_code == 201
    application = created.json()
    assert application["status"] == "submitted"
    # blank optional answers are not stored
    assert [(a["question_id"], a["answer"]) for a in application["answers"]] == [(shift_q, "Night")]

    again = client.post("/api/applications", json=payload, headers=candidate)
    assert again.status_code == 409

    mine = client.get("/api/applications", headers=candidate).json()
    assert [row["id"] for row in mine] == [application["id"]]


def test_manager_cannot_apply(client: TestClient, make_account, auth_headers) -> None:
    manager, _ = _setup(client, make_account, auth_headers)
    job = client.post("/api/jobs", json={"title": "Yard", "description": "Shuttle"}, headers=manager).json()

    response = client.post("/api/applications", json={"job_id": job["id"], "answers": {}}, headers=manager)
    assert response.status_code == 403


def test_manager_review_and_listing_filters(client: TestClient, make_account, auth_headers) -> None:
    manager, candidate = _setup(client, make_account, auth_headers)
    job = client.post("/api/jobs", json={"title": "Yard", "description": "Shuttle"}, headers=manager).json()
    application = client.post("/api/applications", json={"job_id": job["id"], "answers": {}}, headers=candidate).json()

    reviewed = client.post(
        f"/api/manager/applications/{application['id']}/review",
        json={"status": "approved", "notes": "Great record"},
        headers=manager,
    )
    assert reviewed.status_code == 200
    assert reviewed.json()["status"] == "approved"
    assert reviewed.json()["reviewed_at"] is not None

    approved = client.get("/api/manager/applications?status_filter=approved", headers=manager).json()
    assert [row["application"]["id"] for row in approved] == [application["id"]]
    assert approved[0]["candidate_name"] == "Dana Driver"
    assert client.get("/api/manager/applications?status_filter=rejected", headers=manager).json() == []

    candidates = client.get("/api/manager/candidates?search=dana", headers=manager).json()
    assert [row["status"] for row in candidates] == ["approved"]


def test_candidate_sees_job_question_edits(client: TestClient, make_account, auth_headers) -> None:
    manager, candidate = _setup(client, make_account, auth_headers)
    job = client.post("/api/jobs", json=JOB_PAYLOAD, headers=manager).json()
    question_id = job["questions"][1]["id"]

    patched = client.patch(
        f"/api/jobs/{job['id']}/questions/{question_id}",
        json={"question": "Any endorsements?", "question_type": "checkbox", "options": ["Hazmat", "Tanker"]},
        headers=manager,
    )
    assert patched.status_code == 200

    removed = client.delete(f"/api/jobs/{job['id']}/questions/{job['questions'][0]['id']}", headers=manager)
    assert removed.status_code == 204

    questions = client.get(f"/api/jobs/{job['id']}", headers=candidate).json()["questions"]
    assert [(q["question"], q["options"]) for q in questions] == [("Any endorsements?", ["Hazmat", "Tanker"])]
