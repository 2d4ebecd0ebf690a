"""HTTP routes for the sheet catalog.

Static paths (``/public``, ``/search`` and friends) are registered before the
``/{sheet_id}`` routes so they are never captured as an identifier.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, File, Form, Path, Query, Response, UploadFile, status

from partitura_api.api.deps import ActorIdDep, get_sheets_service
from partitura_api.common.downloads import DispositionType, content_disposition

from .schemas import AdvancedSearchQuery, SheetMetadata, SheetOut, SheetUpdate
from .service import SheetContent, SheetsService
from .sorting import DEFAULT_SORT

router = APIRouter(prefix="/sheets", tags=["sheets"])

SHEET_ID_PARAM = Annotated[int, Path(description="Sheet identifier.", ge=1)]
USER_ID_PATH = Annotated[int, Path(description="User identifier.", ge=1)]
USER_ID_QUERY = Annotated[int, Query(description="User the favorite belongs to.", ge=1)]
SHEET_FILE = Annotated[UploadFile, File(description="PDF score to store.")]
SHEET_UPDATE_BODY = Body(..., description="Metadata fields to change.")

SheetsServiceDep = Annotated[SheetsService, Depends(get_sheets_service)]

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"description": "Sheet not found."}}
_FORBIDDEN = {status.HTTP_403_FORBIDDEN: {"description": "Caller may not modify this sheet."}}
_BAD_FILE = {status.HTTP_400_BAD_REQUEST: {"description": "Uploaded file was rejected."}}


def get_advanced_search_query(
    search_term: Annotated[str | None, Query(alias="searchTerm")] = None,
    artist: Annotated[str | None, Query()] = None,
    genre: Annotated[str | None, Query()] = None,
    instrument: Annotated[str | None, Query()] = None,
    sort_by: Annotated[
        str,
        Query(alias="sortBy", description="recent, title or artist; anything else means recent."),
    ] = DEFAULT_SORT,
) -> AdvancedSearchQuery:
    return AdvancedSearchQuery(
        search_term=search_term,
        artist=artist,
        genre=genre,
        instrument=instrument,
        sort_by=sort_by,
    )


def _pdf_response(content: SheetContent, disposition: DispositionType) -> Response:
    return Response(
        content=content.content,
        media_type=content.content_type,
        headers={
            "Content-Disposition": content_disposition(content.filename, disposition=disposition),
        },
    )


# ---- creation & listings ----------------------------------------------------


@router.post(
    "",
    response_model=SheetOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a new sheet",
    responses={**_BAD_FILE, status.HTTP_404_NOT_FOUND: {"description": "Owner not found."}},
)
async def create_sheet(
    service: SheetsServiceDep,
    file: SHEET_FILE,
    title: Annotated[str, Form(min_length=1, max_length=150)],
    artist: Annotated[str, Form(min_length=1, max_length=100)],
    genre: Annotated[str, Form(min_length=1, max_length=50)],
    instrument: Annotated[str, Form(min_length=1, max_length=50)],
    owner_id: Annotated[int, Form()],
    description: Annotated[str | None, Form()] = None,
    is_public: Annotated[bool, Form()] = False,
) -> SheetOut:
    metadata = SheetMetadata(
        title=title,
        description=description,
        artist=artist,
        genre=genre,
        instrument=instrument,
        is_public=is_public,
        owner_id=owner_id,
    )
    return await service.create_sheet(metadata=metadata, upload=file)


@router.get("/public", response_model=list[SheetOut], summary="All public sheets")
async def list_public_sheets(service: SheetsServiceDep) -> list[SheetOut]:
    return await service.list_public()


@router.get("/recent", response_model=list[SheetOut], summary="Most recent public sheets")
async def list_recent_sheets(service: SheetsServiceDep) -> list[SheetOut]:
    return await service.list_recent()


@router.get(
    "/trending",
    response_model=list[SheetOut],
    summary="Trending sheets (currently the most recent ones)",
)
async def list_trending_sheets(service: SheetsServiceDep) -> list[SheetOut]:
    return await service.list_recent()


@router.get("/search", response_model=list[SheetOut], summary="Free-text search")
async def search_sheets(
    service: SheetsServiceDep,
    q: Annotated[str, Query(description="Matched against title, artist and description.")],
) -> list[SheetOut]:
    return await service.search(term=q)


@router.get(
    "/search/advanced",
    response_model=list[SheetOut],
    summary="Combined filters with sorting",
)
async def advanced_search(
    service: SheetsServiceDep,
    query: Annotated[AdvancedSearchQuery, Depends(get_advanced_search_query)],
) -> list[SheetOut]:
    return await service.advanced_search(query=query)


@router.get("/genre/{genre}", response_model=list[SheetOut], summary="Public sheets by genre")
async def list_by_genre(genre: str, service: SheetsServiceDep) -> list[SheetOut]:
    return await service.list_by_genre(genre=genre)


@router.get(
    "/instrument/{instrument}",
    response_model=list[SheetOut],
    summary="Public sheets by instrument",
)
async def list_by_instrument(instrument: str, service: SheetsServiceDep) -> list[SheetOut]:
    return await service.list_by_instrument(instrument=instrument)


@router.get("/artist/{artist}", response_model=list[SheetOut], summary="Public sheets by artist")
async def list_by_artist(artist: str, service: SheetsServiceDep) -> list[SheetOut]:
    return await service.list_by_artist(artist=artist)


@router.get("/filters/genres", response_model=list[str], summary="Genres in use")
async def available_genres(service: SheetsServiceDep) -> list[str]:
    return await service.available_genres()


@router.get("/filters/instruments", response_model=list[str], summary="Instruments in use")
async def available_instruments(service: SheetsServiceDep) -> list[str]:
    return await service.available_instruments()


@router.get("/filters/artists", response_model=list[str], summary="Artists in use")
async def available_artists(service: SheetsServiceDep) -> list[str]:
    return await service.available_artists()


@router.get(
    "/users/{user_id}/owned",
    response_model=list[SheetOut],
    summary="Sheets owned by a user",
    responses={status.HTTP_404_NOT_FOUND: {"description": "User not found."}},
)
async def list_owned_sheets(user_id: USER_ID_PATH, service: SheetsServiceDep) -> list[SheetOut]:
    return await service.list_owned(user_id=user_id)


@router.get(
    "/users/{user_id}/favorites",
    response_model=list[SheetOut],
    summary="Sheets a user marked as favorite",
    responses={status.HTTP_404_NOT_FOUND: {"description": "User not found."}},
)
async def list_favorite_sheets(
    user_id: USER_ID_PATH,
    service: SheetsServiceDep,
) -> list[SheetOut]:
    return await service.list_favorites(user_id=user_id)


# ---- single sheet -----------------------------------------------------------


@router.get(
    "/{sheet_id}",
    response_model=SheetOut,
    summary="Retrieve a sheet",
    responses=_NOT_FOUND,
)
async def get_sheet(sheet_id: SHEET_ID_PARAM, service: SheetsServiceDep) -> SheetOut:
    return await service.get_sheet(sheet_id=sheet_id)


@router.put(
    "/{sheet_id}",
    response_model=SheetOut,
    summary="Update sheet metadata",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
async def update_sheet(
    sheet_id: SHEET_ID_PARAM,
    service: SheetsServiceDep,
    actor_id: ActorIdDep,
    payload: SheetUpdate = SHEET_UPDATE_BODY,
) -> SheetOut:
    return await service.update_sheet(sheet_id=sheet_id, payload=payload, actor_id=actor_id)


@router.put(
    "/{sheet_id}/file",
    response_model=SheetOut,
    summary="Replace the stored PDF",
    responses={**_NOT_FOUND, **_FORBIDDEN, **_BAD_FILE},
)
async def replace_sheet_file(
    sheet_id: SHEET_ID_PARAM,
    service: SheetsServiceDep,
    actor_id: ActorIdDep,
    file: SHEET_FILE,
) -> SheetOut:
    return await service.replace_sheet_file(sheet_id=sheet_id, upload=file, actor_id=actor_id)


@router.delete(
    "/{sheet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a sheet and its relationships",
    responses={**_NOT_FOUND, **_FORBIDDEN},
)
async def delete_sheet(
    sheet_id: SHEET_ID_PARAM,
    service: SheetsServiceDep,
    actor_id: ActorIdDep,
) -> Response:
    await service.delete_sheet(sheet_id=sheet_id, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{sheet_id}/pdf",
    response_class=Response,
    summary="View the PDF inline",
    responses=_NOT_FOUND,
)
async def view_sheet_pdf(sheet_id: SHEET_ID_PARAM, service: SheetsServiceDep) -> Response:
    return _pdf_response(await service.get_sheet_content(sheet_id=sheet_id), "inline")


@router.get(
    "/{sheet_id}/pdf/download",
    response_class=Response,
    summary="Download the PDF",
    responses=_NOT_FOUND,
)
async def download_sheet_pdf(sheet_id: SHEET_ID_PARAM, service: SheetsServiceDep) -> Response:
    return _pdf_response(await service.get_sheet_content(sheet_id=sheet_id), "attachment")


# ---- favorites --------------------------------------------------------------


@router.post(
    "/{sheet_id}/favorites",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Mark a sheet as favorite",
    responses=_NOT_FOUND,
)
async def add_favorite(
    sheet_id: SHEET_ID_PARAM,
    user_id: USER_ID_QUERY,
    service: SheetsServiceDep,
) -> Response:
    await service.add_favorite(user_id=user_id, sheet_id=sheet_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{sheet_id}/favorites",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Remove a sheet from favorites",
    responses={
        **_NOT_FOUND,
        status.HTTP_409_CONFLICT: {"description": "Owners cannot un-favorite their own sheet."},
    },
)
async def remove_favorite(
    sheet_id: SHEET_ID_PARAM,
    user_id: USER_ID_QUERY,
    service: SheetsServiceDep,
) -> Response:
    await service.remove_favorite(user_id=user_id, sheet_id=sheet_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{sheet_id}/is-favorite",
    response_model=bool,
    summary="Whether a user marked the sheet as favorite",
    responses=_NOT_FOUND,
)
async def is_favorite(
    sheet_id: SHEET_ID_PARAM,
    user_id: USER_ID_QUERY,
    service: SheetsServiceDep,
) -> bool:
    return await service.is_favorite(user_id=user_id, sheet_id=sheet_id)


__all__ = ["get_advanced_search_query", "router"]
