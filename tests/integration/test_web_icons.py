from fastapi.testclient import TestClient

from driverhire.api.app import create_app


def test_common_icon_routes_never_404() -> None:
    client = TestClient(create_app())

    for path in ("/favicon.ico", "/apple-touch-icon.png", "/apple-touch-icon-precomposed.png"):
        response = client.get(path)
        assert response.status_code in {200, 204}


def test_home_page_includes_icon_links() -> None:
    client = TestClient(create_app())

    response = client.get("/")
    assert response.status_code == 200
    assert 'rel="icon"' in response.text
    assert 'href="/favicon.ico"' in response.text
    assert 'rel="apple-touch-icon"' in response.text


def test_health_endpoint() -> None:
    client = TestClient(create_app())
    assert client.get("/health").json() == {"status": "ok"}
