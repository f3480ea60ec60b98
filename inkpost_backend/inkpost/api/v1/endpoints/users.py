from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile

from ....core.security import TokenUser, require_user
from ....core.store import BlogStore
from ....core.uploads import FileArea
from ....schemas.users import (
    EditUserRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    UserPublic,
)
from ....services import users as workflow
from ..deps import get_files, get_store


router = APIRouter()


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(payload: RegisterRequest, store: BlogStore = Depends(get_store)) -> MessageResponse:
    message = await workflow.register(store, payload.name, payload.email, payload.password, payload.password2)
    return MessageResponse(message=message)


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, store: BlogStore = Depends(get_store)) -> LoginResponse:
    result = await workflow.login(store, payload.email, payload.password)
    return LoginResponse(**result)


@router.get("/authors", response_model=list[UserPublic])
async def list_authors(store: BlogStore = Depends(get_store)) -> list[UserPublic]:
    return [UserPublic.from_record(u) for u in await workflow.list_authors(store)]


@router.post("/change-avatar", response_model=UserPublic)
async def change_avatar(
    avatar: UploadFile | None = File(default=None),
    user: TokenUser = Depends(require_user),
    store: BlogStore = Depends(get_store),
    files: FileArea = Depends(get_files),
) -> UserPublic:
    updated = await workflow.change_avatar(store, files, user.id, avatar)
    return UserPublic.from_record(updated)


@router.api_route("/edit-user", methods=["PATCH", "POST"], response_model=UserPublic)
async def edit_user(
    payload: EditUserRequest,
    user: TokenUser = Depends(require_user),
    store: BlogStore = Depends(get_store),
) -> UserPublic:
    updated = await workflow.edit_user(
        store,
        user.id,
        payload.name,
        payload.email,
        payload.currentPassword,
        payload.newPassword,
        payload.confirmNewPassword,
    )
    return UserPublic.from_record(updated)


@router.get("/{user_id}", response_model=UserPublic)
async def get_user(user_id: str, store: BlogStore = Depends(get_store)) -> UserPublic:
    return UserPublic.from_record(await workflow.get_user(store, user_id))
