from fastapi.testclient import TestClient


def _job(client: TestClient, headers: dict, title: str) -> int:
    response = client.post("/api/jobs", json={"title": title, "description": "CDL-A route"}, headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


def test_deactivated_job_disappears_for_candidates(client: TestClient, make_account, login, auth_headers) -> None:
    make_account("boss@example.com", manager=True)
    make_account("driver@example.com")
    manager = auth_headers(client, "boss@example.com")
    live_id = _job(client, manager, "Dedicated Lane Driver")
    paused_id = _job(client, manager, "Seasonal Tanker Driver")

    browse = client.get("/jobs/browse")
    assert "Dedicated Lane Driver" in browse.text
    assert "Seasonal Tanker Driver" in browse.text

    assert client.post(f"/jobs/{paused_id}/toggle", headers=manager, follow_redirects=False).status_code == 303

    login(client, "driver@example.com")
    browse = client.get("/jobs/browse")
    assert "Available Jobs" in browse.text
    assert "Dedicated Lane Driver" in browse.text
    assert "Seasonal Tanker Driver" not in browse.text

    assert client.get(f"/jobs/{paused_id}/public").status_code == 404
    assert client.get(f"/jobs/{paused_id}").status_code == 404
    assert client.post(f"/jobs/{paused_id}/apply").status_code == 404
    assert client.get(f"/jobs/{live_id}").status_code == 200

    manager_list = client.get("/jobs?show_inactive=1", headers=manager)
    assert "Seasonal Tanker Driver" in manager_list.text
    assert client.get(f"/jobs/{paused_id}/public", headers=manager).status_code == 200


def test_browse_search_and_empty_state(client: TestClient, make_account, auth_headers) -> None:
    assert "No job postings available at this time." in client.get("/jobs/browse").text

    make_account("boss@example.com", manager=True)
    manager = auth_headers(client, "boss@example.com")
    _job(client, manager, "Flatbed Driver")
    _job(client, manager, "Local Delivery")

    found = client.get("/jobs/browse?q=flatbed")
    assert "Flatbed Driver" in found.text
    assert "Local Delivery" not in found.text
    assert "No jobs found matching your search." in client.get("/jobs/browse?q=astronaut").text
