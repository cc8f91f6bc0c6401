from fastapi.testclient import TestClient


def test_signup_returns_token_and_candidate_account(client: TestClient) -> None:
    response = client.post(
        "/api/auth/signup",
        json={"email": "new@example.com", "password": "secret123", "full_name": "New Driver"},
    )
    assert response.status_code == 201
    token = response.json()["access_token"]

    me = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["account"] == "candidate"
    assert me.json()["full_name"] == "New Driver"


def test_signup_duplicate_and_short_password(client: TestClient, make_account) -> None:
    make_account("taken@example.com")

    duplicate = client.post("/api/auth/signup", json={"email": "taken@example.com", "password": "secret123"})
    assert duplicate.status_code == 409

    short = client.post("/api/auth/signup", json={"email": "short@example.com", "password": "abc"})
    assert short.status_code == 400


def test_login_with_bad_credentials_is_rejected(client: TestClient, make_account) -> None:
    make_account("driver@example.com")
    response = client.post("/api/auth/login", json={"email": "driver@example.com", "password": "wrong-pass"})
    assert response.status_code == 401


def test_manager_account_kind(client: TestClient, make_account, auth_headers) -> None:
    make_account("boss@example.com", manager=True)
    me = client.get("/api/me", headers=auth_headers(client, "boss@example.com"))
    assert me.json()["account"] == "manager"


def test_protected_endpoints_need_a_token(client: TestClient) -> None:
    assert client.get("/api/profile").status_code == 401
    assert client.get("/api/me", headers={"Authorization": "Bearer nonsense"}).status_code == 401


def test_candidate_cannot_reach_manager_endpoints(client: TestClient, make_account, auth_headers) -> None:
    make_account("driver@example.com")
    headers = auth_headers(client, "driver@example.com")

    assert client.get("/api/manager/candidates", headers=headers).status_code == 403
    assert client.post("/api/jobs", json={"title": "x", "description": "y"}, headers=headers).status_code == 403


def test_web_login_sets_cookie_and_honours_return_to(client: TestClient, make_account) -> None:
    make_account("driver@example.com")

    bad = client.post("/login", data={"email": "driver@example.com", "password": "nope"})
    assert bad.status_code == 400
    assert "Invalid login credentials" in bad.text

    response = client.post(
        "/login",
        data={"email": "driver@example.com", "password": "secret123", "return_to": "/profile/documents"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/profile/documents"
    assert client.get("/api/me").json()["email"] == "driver@example.com"


def test_protected_page_redirects_to_login_with_return_to(client: TestClient) -> None:
    response = client.get("/profile/documents", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/login?returnTo=/profile/documents"
