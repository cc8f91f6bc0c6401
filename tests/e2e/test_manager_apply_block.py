from fastapi.testclient import TestClient


def test_manager_sees_blocking_screen_instead_of_application(
    client: TestClient, make_account, login, auth_headers
) -> None:
    make_account("boss@example.com", manager=True)
    job = client.post(
        "/api/jobs",
        json={"title": "Team Driver", "description": "Coast to coast"},
        headers=auth_headers(client, "boss@example.com"),
    ).json()

    login(client, "boss@example.com")
    for path in (f"/jobs/{job['id']}", f"/jobs/{job['id']}/apply"):
        response = client.get(path)
        assert response.status_code == 403
        assert "Hold up there, boss!" in response.text

    posted = client.post(f"/jobs/{job['id']}/apply")
    assert posted.status_code == 403
    assert client.get("/api/applications").json() == []


def test_candidate_cannot_open_manager_pages(client: TestClient, make_account, login) -> None:
    make_account("driver@example.com")
    login(client, "driver@example.com")

    for path in ("/jobs", "/jobs/create", "/manager/candidates", "/manager/applications"):
        assert client.get(path).status_code == 403
