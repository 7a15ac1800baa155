"""Tests for the FastAPI endpoints."""

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from src.application.api import app, create_controller, get_controller
from src.application.config import Settings, settings


def bearer(sub="user-api", **claims):
    token = jwt.encode({"sub": sub, **claims}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def api_controller():
    """Create a fresh in-memory controller for each test."""
    return create_controller(Settings(backend="local", translation_provider="mock", translation_interval_seconds=0))


@pytest.fixture
def client(api_controller):
    app.dependency_overrides[get_controller] = lambda: api_controller
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    return bearer(email="api@example.com", name="Api User")


def create_book(client, headers, title="Owl Moon"):
    response = client.post("/storybooks", json={"title": title}, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_languages_need_no_token(client):
    response = client.get("/languages")

    assert response.status_code == 200
    assert len(response.json()["data"]) == 12


@pytest.mark.parametrize(
    "authorization",
    [None, "Token abc", "Bearer not-a-jwt"],
)
def test_rejects_bad_credentials(client, authorization):
    request_headers = {"Authorization": authorization} if authorization else {}

    response = client.get("/library", headers=request_headers)

    assert response.status_code == 401


def test_rejects_wrong_signature(client):
    token = jwt.encode({"sub": "user-api"}, "another-secret", algorithm="HS256")

    response = client.get("/library", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_first_request_creates_user(client, api_controller, headers):
    create_book(client, headers)

    response = client.patch("/me", json={"display_name": "Renamed"}, headers=headers)

    assert response.status_code == 200
    body = response.json()["data"]
    assert body["email"] == "api@example.com"
    assert body["display_name"] == "Renamed"
    assert body["storybook_count"] == 1


def test_storybook_crud(client, headers):
    storybook_id = create_book(client, headers)

    patched = client.patch(f"/storybooks/{storybook_id}", json={"title": "Owl Night"}, headers=headers)
    assert patched.status_code == 200
    assert patched.json()["data"]["title"] == "Owl Night"

    assert client.post(f"/storybooks/{storybook_id}/reads", headers=headers).json()["data"] == 1

    deleted = client.delete(f"/storybooks/{storybook_id}", headers=headers)
    assert deleted.status_code == 200

    missing = client.get(f"/storybooks/{storybook_id}", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["error_code"] == "not_found"


def test_other_users_cannot_see_book(client, headers):
    storybook_id = create_book(client, headers)

    response = client.get(f"/storybooks/{storybook_id}", headers=bearer("someone-else"))

    assert response.status_code == 404


def test_invalid_title(client, headers):
    response = client.post("/storybooks", json={"title": ""}, headers=headers)

    assert response.status_code == 422
    assert response.json()["error_code"] == "invalid_input"


def test_null_title_patch_rejected(client, headers):
    storybook_id = create_book(client, headers)

    response = client.patch(f"/storybooks/{storybook_id}", json={"title": None}, headers=headers)

    assert response.status_code == 422
    assert response.json()["error_code"] == "invalid_input"
    library = client.get("/library", params={"sort_by": "title"}, headers=headers)
    assert library.status_code == 200
    assert [item["title"] for item in library.json()["data"]["items"]] == ["Owl Moon"]


def test_null_page_text_patch_rejected(client, headers):
    storybook_id = create_book(client, headers)
    page_id = client.post(f"/storybooks/{storybook_id}/pages", json={"text": "hi"}, headers=headers).json()["data"]

    response = client.patch(f"/storybooks/{storybook_id}/pages/{page_id}", json={"text": None}, headers=headers)

    assert response.status_code == 422
    translated = client.post(f"/storybooks/{storybook_id}/translations/es", headers=headers)
    assert translated.status_code == 200
    assert translated.json()["data"]["translated"] == [page_id]


def test_pages_and_translation(client, headers):
    storybook_id = create_book(client, headers)
    for text in ("One", "Two"):
        response = client.post(f"/storybooks/{storybook_id}/pages", json={"text": text}, headers=headers)
        assert response.status_code == 201

    reordered = client.post(
        f"/storybooks/{storybook_id}/pages/reorder", json={"from_index": 1, "to_index": 0}, headers=headers
    )
    assert reordered.status_code == 200

    pages = client.get(f"/storybooks/{storybook_id}/pages", headers=headers).json()["data"]
    assert [page["text"] for page in pages] == ["Two", "One"]

    translated = client.post(f"/storybooks/{storybook_id}/translations/es", headers=headers)
    assert translated.status_code == 200
    assert len(translated.json()["data"]["translated"]) == 2

    lookup = client.get(
        f"/storybooks/{storybook_id}/pages/{pages[0]['id']}/translations/es", headers=headers
    ).json()["data"]
    assert lookup["text"] == "[Spanish] Two"
    assert lookup["state"] == "cached"


def test_reorder_out_of_range(client, headers):
    storybook_id = create_book(client, headers)

    response = client.post(
        f"/storybooks/{storybook_id}/pages/reorder", json={"from_index": 0, "to_index": 1}, headers=headers
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "index_out_of_range"


def test_library_cursor_flow(client, api_controller, headers):
    api_controller.library_service.page_size = 1
    create_book(client, headers, "Alpha")
    create_book(client, headers, "Beta")

    first = client.get("/library", params={"sort_by": "title"}, headers=headers).json()["data"]
    assert [item["title"] for item in first["items"]] == ["Alpha"]
    assert first["has_more"] is True

    second = client.get("/library/more", params={"cursor": first["cursor"]}, headers=headers).json()["data"]
    assert [item["title"] for item in second["items"]] == ["Beta"]
    assert second["has_more"] is False


def test_garbage_cursor(client, headers):
    response = client.get("/library/more", params={"cursor": "not-a-cursor"}, headers=headers)

    assert response.status_code == 409
    assert response.json()["error_code"] == "invalid_cursor"


def test_cover_upload(client, headers):
    storybook_id = create_book(client, headers)

    response = client.post(
        f"/storybooks/{storybook_id}/cover",
        files={"image": ("cover.png", b"\x89PNG", "image/png")},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["data"]["url"].endswith(".png")
    book = client.get(f"/storybooks/{storybook_id}", headers=headers).json()["data"]
    assert book["cover_image"] == response.json()["data"]["url"]


def test_unsupported_image_type(client, headers):
    storybook_id = create_book(client, headers)

    response = client.post(
        f"/storybooks/{storybook_id}/images",
        files={"image": ("page.gif", b"GIF89a", "image/gif")},
        headers=headers,
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "invalid_asset"
