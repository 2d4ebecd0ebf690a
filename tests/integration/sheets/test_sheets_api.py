"""HTTP-level tests for the sheet catalog routes."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from partitura_api.main import create_app

PDF = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n%%EOF\n"


async def _register(client: AsyncClient, name: str) -> int:
    response = await client.post(
        "/api/users",
        json={
            "name": name,
            "email": f"{name.lower()}@example.com",
            "password": "Secret123",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def _upload(
    client: AsyncClient,
    *,
    owner_id: int,
    title: str = "Sonata",
    genre: str = "Classical",
    is_public: bool = True,
    content: bytes = PDF,
    filename: str = "sonata.pdf",
    content_type: str = "application/pdf",
) -> Any:
    return await client.post(
        "/api/sheets",
        data={
            "title": title,
            "artist": "Beethoven",
            "genre": genre,
            "instrument": "Piano",
            "owner_id": str(owner_id),
            "is_public": "true" if is_public else "false",
        },
        files={"file": (filename, content, content_type)},
    )


@pytest.mark.asyncio
async def test_create_and_fetch_sheet(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Clara")

    created = await _upload(async_client, owner_id=owner_id)
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["owner_id"] == owner_id
    assert body["pdf_size"] == len(PDF)
    assert body["pdf_download_url"] == f"/api/sheets/{body['id']}/pdf"

    fetched = await async_client.get(f"/api/sheets/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["title"] == "Sonata"
    assert fetched.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_create_sheet_with_unknown_owner_is_404(async_client: AsyncClient) -> None:
    response = await _upload(async_client, owner_id=77)

    assert response.status_code == 404
    assert response.json()["code"] == "user_not_found"


@pytest.mark.asyncio
async def test_rejected_upload_is_400(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Robert")

    wrong_type = await _upload(
        async_client, owner_id=owner_id, content=b"plain", filename="x.txt", content_type="text/plain"
    )
    wrong_extension = await _upload(async_client, owner_id=owner_id, filename="sonata.doc")

    assert wrong_type.status_code == 400
    assert wrong_type.json()["code"] == "invalid_file"
    assert "File type not allowed" in wrong_type.json()["detail"]
    assert wrong_extension.status_code == 400
    assert "extension" in wrong_extension.json()["detail"]


@pytest.mark.asyncio
async def test_missing_sheet_is_404(async_client: AsyncClient) -> None:
    response = await async_client.get("/api/sheets/999")

    assert response.status_code == 404
    assert response.json() == {"detail": "Sheet 999 not found.", "code": "sheet_not_found"}


@pytest.mark.asyncio
async def test_static_routes_are_not_captured_as_ids(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Johannes")
    await _upload(async_client, owner_id=owner_id, title="Lullaby")
    await _upload(async_client, owner_id=owner_id, title="Hidden", is_public=False)

    for path in ("/api/sheets/public", "/api/sheets/recent", "/api/sheets/trending"):
        response = await async_client.get(path)
        assert response.status_code == 200, path
        assert [sheet["title"] for sheet in response.json()] == ["Lullaby"]

    genres = await async_client.get("/api/sheets/filters/genres")
    assert genres.json() == ["Classical"]


@pytest.mark.asyncio
async def test_search_routes(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Frederic")
    for title, genre in (("B", "Classical"), ("A", "Classical"), ("C", "Classical"), ("D", "Jazz")):
        await _upload(async_client, owner_id=owner_id, title=title, genre=genre)

    advanced = await async_client.get(
        "/api/sheets/search/advanced", params={"genre": "classical", "sortBy": "title"}
    )
    simple = await async_client.get("/api/sheets/search", params={"q": "d"})
    by_genre = await async_client.get("/api/sheets/genre/Jazz")
    blank_genre = await async_client.get("/api/sheets/genre/%20")
    missing_q = await async_client.get("/api/sheets/search")

    assert [sheet["title"] for sheet in advanced.json()] == ["A", "B", "C"]
    assert [sheet["title"] for sheet in simple.json()] == ["D"]
    assert [sheet["title"] for sheet in by_genre.json()] == ["D"]
    assert blank_genre.status_code == 200
    assert blank_genre.json() == []
    assert missing_q.status_code == 422


@pytest.mark.asyncio
async def test_partial_update(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Fanny")
    sheet_id = (await _upload(async_client, owner_id=owner_id)).json()["id"]

    response = await async_client.put(f"/api/sheets/{sheet_id}", json={"title": "Trio"})

    assert response.status_code == 200
    assert response.json()["title"] == "Trio"
    assert response.json()["genre"] == "Classical"


@pytest.mark.asyncio
async def test_pdf_routes_stream_the_payload(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Ludwig")
    sheet_id = (await _upload(async_client, owner_id=owner_id)).json()["id"]

    inline = await async_client.get(f"/api/sheets/{sheet_id}/pdf")
    download = await async_client.get(f"/api/sheets/{sheet_id}/pdf/download")

    assert inline.status_code == 200
    assert inline.content == PDF
    assert inline.headers["content-type"] == "application/pdf"
    assert inline.headers["content-disposition"] == 'inline; filename="sonata.pdf"'
    assert download.headers["content-disposition"] == 'attachment; filename="sonata.pdf"'


@pytest.mark.asyncio
async def test_replace_file(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Amy")
    sheet_id = (await _upload(async_client, owner_id=owner_id)).json()["id"]
    revised = PDF + b"% revised\n"

    response = await async_client.put(
        f"/api/sheets/{sheet_id}/file",
        files={"file": ("revised.pdf", revised, "application/pdf")},
    )

    assert response.status_code == 200
    assert response.json()["pdf_filename"] == "revised.pdf"
    assert (await async_client.get(f"/api/sheets/{sheet_id}/pdf")).content == revised


@pytest.mark.asyncio
async def test_favorite_lifecycle(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Nadia")
    fan_id = await _register(async_client, "Lili")
    sheet_id = (await _upload(async_client, owner_id=owner_id)).json()["id"]
    favorites_url = f"/api/sheets/{sheet_id}/favorites"

    added = await async_client.post(favorites_url, params={"user_id": fan_id})
    again = await async_client.post(favorites_url, params={"user_id": fan_id})
    is_favorite = await async_client.get(
        f"/api/sheets/{sheet_id}/is-favorite", params={"user_id": fan_id}
    )
    listed = await async_client.get(f"/api/sheets/users/{fan_id}/favorites")
    owner_removal = await async_client.delete(favorites_url, params={"user_id": owner_id})
    removed = await async_client.delete(favorites_url, params={"user_id": fan_id})
    removed_twice = await async_client.delete(favorites_url, params={"user_id": fan_id})

    assert added.status_code == 204
    assert again.status_code == 204
    assert is_favorite.json() is True
    assert [sheet["id"] for sheet in listed.json()] == [sheet_id]
    assert owner_removal.status_code == 409
    assert owner_removal.json()["code"] == "owned_sheet_favorite"
    assert removed.status_code == 204
    assert removed_twice.status_code == 404
    assert removed_twice.json()["code"] == "relationship_not_found"


@pytest.mark.asyncio
async def test_delete_sheet_cascades(async_client: AsyncClient) -> None:
    owner_id = await _register(async_client, "Cecile")
    fan_id = await _register(async_client, "Germaine")
    sheet_id = (await _upload(async_client, owner_id=owner_id)).json()["id"]
    await async_client.post(f"/api/sheets/{sheet_id}/favorites", params={"user_id": fan_id})

    deleted = await async_client.delete(f"/api/sheets/{sheet_id}")

    assert deleted.status_code == 204
    assert (await async_client.get(f"/api/sheets/{sheet_id}")).status_code == 404
    assert (await async_client.get(f"/api/sheets/users/{fan_id}/favorites")).json() == []
    assert (await async_client.get(f"/api/sheets/users/{owner_id}/owned")).json() == []


@pytest.mark.asyncio
async def test_owner_policy_returns_403(settings, database) -> None:
    app: FastAPI = create_app(settings.model_copy(update={"sheet_authorization": "owner"}))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        owner_id = await _register(client, "Alma")
        other_id = await _register(client, "Gustav")
        sheet_id = (await _upload(client, owner_id=owner_id)).json()["id"]

        anonymous = await client.delete(f"/api/sheets/{sheet_id}")
        intruder = await client.put(
            f"/api/sheets/{sheet_id}",
            json={"title": "Stolen"},
            headers={"X-User-Id": str(other_id)},
        )
        owner = await client.delete(
            f"/api/sheets/{sheet_id}", headers={"X-User-Id": str(owner_id)}
        )

    assert anonymous.status_code == 403
    assert anonymous.json()["code"] == "sheet_modification_forbidden"
    assert intruder.status_code == 403
    assert owner.status_code == 204
