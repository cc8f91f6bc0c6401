from fastapi.testclient import TestClient

from driverhire.api.app import create_app
from driverhire.config import get_settings

PDF_BYTES = b"%PDF-1.4 certification"


def _upload(client: TestClient, headers: dict[str, str]) -> dict:
    response = client.post(
        "/api/documents",
        data={"document_type": "certification"},
        files={"file": ("cert.pdf", PDF_BYTES, "application/pdf")},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


def test_uploaded_file_is_served_only_to_owner_and_managers(
    client: TestClient, make_account, login, auth_headers
) -> None:
    make_account("driver@example.com")
    make_account("other@example.com")
    make_account("boss@example.com", manager=True)
    document = _upload(client, auth_headers(client, "driver@example.com"))
    page_url = f"/profile/documents/{document['id']}/file"
    assert document["url"] == f"/api/documents/{document['id']}/file"

    anonymous = TestClient(create_app())
    response = anonymous.get(page_url, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"].startswith("/login")
    assert anonymous.get(document["url"]).status_code == 401

    login(client, "other@example.com")
    assert client.get(page_url).status_code == 404
    assert client.get(document["url"], headers=auth_headers(client, "other@example.com")).status_code == 404

    login(client, "driver@example.com")
    owned = client.get(page_url)
    assert owned.status_code == 200
    assert owned.content == PDF_BYTES
    assert owned.headers["content-type"] == "application/pdf"

    login(client, "boss@example.com")
    assert client.get(page_url).content == PDF_BYTES
    assert client.get(document["url"], headers=auth_headers(client, "boss@example.com")).status_code == 200


def test_bucket_directory_is_not_publicly_mounted(client: TestClient, make_account, auth_headers) -> None:
    make_account("driver@example.com")
    document = _upload(client, auth_headers(client, "driver@example.com"))
    key = document["file_path"]

    anonymous = TestClient(create_app())
    assert anonymous.get(f"/storage/{get_settings().storage_bucket}/{key}").status_code == 404
