"""Routes for user accounts and profiles."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path, Response, status

from partitura_api.api.deps import get_sheets_service, get_users_service
from partitura_api.features.sheets.schemas import SheetOut
from partitura_api.features.sheets.service import SheetsService

from .schemas import ProfileUpdate, UserCreate, UserOut, UserProfile, UserUpdate
from .service import UsersService

router = APIRouter(prefix="/users", tags=["users"])

USER_ID_PARAM = Annotated[int, Path(description="User identifier.", ge=1)]
USER_CREATE_BODY = Body(..., description="Account details for the new user.")
USER_UPDATE_BODY = Body(..., description="Fields to update on the user record.")
PROFILE_UPDATE_BODY = Body(..., description="Profile fields to update.")

UsersServiceDep = Annotated[UsersService, Depends(get_users_service)]


@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Password does not meet the policy."},
        status.HTTP_409_CONFLICT: {"description": "Email already registered."},
    },
)
async def create_user(
    service: UsersServiceDep,
    payload: UserCreate = USER_CREATE_BODY,
) -> UserOut:
    return await service.create_user(payload=payload)


@router.get(
    "/{user_id}",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    summary="Retrieve a user",
    responses={status.HTTP_404_NOT_FOUND: {"description": "User not found."}},
)
async def get_user(user_id: USER_ID_PARAM, service: UsersServiceDep) -> UserOut:
    return await service.get_user(user_id=user_id)


@router.put(
    "/{user_id}",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    summary="Update a user",
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "User not found."},
        status.HTTP_409_CONFLICT: {"description": "Email already registered."},
    },
)
async def update_user(
    user_id: USER_ID_PARAM,
    service: UsersServiceDep,
    payload: UserUpdate = USER_UPDATE_BODY,
) -> UserOut:
    return await service.update_user(user_id=user_id, payload=payload)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    response_class=Response,
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "User not found."},
        status.HTTP_409_CONFLICT: {"description": "User still owns sheets."},
    },
)
async def delete_user(user_id: USER_ID_PARAM, service: UsersServiceDep) -> Response:
    await service.delete_user(user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/profile",
    response_model=UserProfile,
    status_code=status.HTTP_200_OK,
    summary="Public profile of a user",
)
async def get_profile(user_id: USER_ID_PARAM, service: UsersServiceDep) -> UserProfile:
    return await service.get_profile(user_id=user_id)


@router.put(
    "/{user_id}/profile",
    response_model=UserOut,
    status_code=status.HTTP_200_OK,
    summary="Update name and bio",
)
async def update_profile(
    user_id: USER_ID_PARAM,
    service: UsersServiceDep,
    payload: ProfileUpdate = PROFILE_UPDATE_BODY,
) -> UserOut:
    return await service.update_profile(user_id=user_id, payload=payload)


@router.get(
    "/{user_id}/sheets/public",
    response_model=list[SheetOut],
    status_code=status.HTTP_200_OK,
    summary="Public sheets owned by a user",
)
async def list_user_public_sheets(
    user_id: USER_ID_PARAM,
    sheets: Annotated[SheetsService, Depends(get_sheets_service)],
) -> list[SheetOut]:
    return await sheets.list_user_public(user_id=user_id)


__all__ = ["router"]
