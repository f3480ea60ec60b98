from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ....core.security import TokenUser, require_user
from ....core.store import BlogStore
from ....core.uploads import FileArea
from ....schemas.posts import PostPublic
from ....schemas.users import MessageResponse
from ....services import posts as workflow
from ..deps import get_files, get_store


router = APIRouter()


@router.post("", response_model=PostPublic, status_code=201)
async def create_post(
    title: str | None = Form(default=None),
    category: str | None = Form(default=None),
    description: str | None = Form(default=None),
    thumbnail: UploadFile | None = File(default=None),
    user: TokenUser = Depends(require_user),
    store: BlogStore = Depends(get_store),
    files: FileArea = Depends(get_files),
) -> PostPublic:
    post = await workflow.create_post(store, files, title, category, description, thumbnail, user.id)
    return PostPublic.from_record(post)


@router.get("", response_model=List[PostPublic])
async def list_posts(store: BlogStore = Depends(get_store)) -> List[PostPublic]:
    return [PostPublic.from_record(p) for p in await workflow.list_posts(store)]


@router.get("/categories/{category}", response_model=List[PostPublic])
async def posts_by_category(category: str, store: BlogStore = Depends(get_store)) -> List[PostPublic]:
    return [PostPublic.from_record(p) for p in await workflow.posts_by_category(store, category)]


@router.get("/users/{user_id}", response_model=List[PostPublic])
async def posts_by_creator(user_id: str, store: BlogStore = Depends(get_store)) -> List[PostPublic]:
    return [PostPublic.from_record(p) for p in await workflow.posts_by_creator(store, user_id)]


@router.get("/{post_id}", response_model=PostPublic)
async def get_post(post_id: str, store: BlogStore = Depends(get_store)) -> PostPublic:
    return PostPublic.from_record(await workflow.get_post(store, post_id))


@router.patch("/{post_id}", response_model=PostPublic)
async def edit_post(
    post_id: str,
    title: str | None = Form(default=None),
    category: str | None = Form(default=None),
    description: str | None = Form(default=None),
    thumbnail: UploadFile | None = File(default=None),
    user: TokenUser = Depends(require_user),
    store: BlogStore = Depends(get_store),
    files: FileArea = Depends(get_files),
) -> PostPublic:
    post = await workflow.edit_post(store, files, post_id, title, category, description, thumbnail, user.id)
    return PostPublic.from_record(post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    user: TokenUser = Depends(require_user),
    store: BlogStore = Depends(get_store),
    files: FileArea = Depends(get_files),
) -> MessageResponse:
    message = await workflow.delete_post(store, files, post_id, user.id)
    return MessageResponse(message=message)
