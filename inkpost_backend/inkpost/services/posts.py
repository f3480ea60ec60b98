"""Post mutations and reads.

Every function takes the store and file area explicitly. Mutations that
touch both disk and the store write the file first and remove it again
if the store write fails.
"""
from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import UploadFile

from ..core.config import get_thumbnail_max_bytes
from ..core.errors import Forbidden, Internal, NotFound, ValidationFailed
from ..core.store import BlogStore
from ..core.uploads import FileArea, generate_filename, read_limited


log = structlog.get_logger(__name__)

MIN_DESCRIPTION_LENGTH = 12


def _too_big_message() -> str:
    mb = get_thumbnail_max_bytes() / 1_000_000
    return f"Thumbnail too big. File should be less than {mb:g}mb"


async def _store_thumbnail(files: FileArea, upload: UploadFile) -> str:
    data = await read_limited(upload, get_thumbnail_max_bytes(), _too_big_message())
    filename = generate_filename(upload.filename or "")
    try:
        await files.write(filename, data)
    except OSError as e:
        log.error("thumbnail_write_failed", filename=filename, error=str(e))
        raise Internal("Thumbnail couldn't be saved")
    return filename


async def _discard(files: FileArea, filename: str, reason: str) -> None:
    try:
        await files.remove(filename)
    except OSError as e:
        log.warning("thumbnail_remove_failed", filename=filename, reason=reason, error=str(e))


async def _load_owned(store: BlogStore, post_id: str, requester_id: str, action: str) -> dict[str, Any]:
    post = await store.get_post(post_id)
    if post is None:
        raise NotFound("Post not found")
    if post.get("creator") != requester_id:
        log.warning("post_ownership_denied", post_id=post_id, requester=requester_id, action=action)
        raise Forbidden(f"Post couldn't be {action}")
    return post


async def create_post(
    store: BlogStore,
    files: FileArea,
    title: Optional[str],
    category: Optional[str],
    description: Optional[str],
    thumbnail: Optional[UploadFile],
    creator_id: str,
) -> dict[str, Any]:
    if not title or not category or not description or thumbnail is None or not thumbnail.filename:
        raise ValidationFailed("Fill in all fields and choose thumbnail")

    filename = await _store_thumbnail(files, thumbnail)
    try:
        post = await store.create_post(title, category, description, filename, creator_id)
    except Exception:
        await _discard(files, filename, "create_failed")
        raise
    log.info("post_created", post_id=post["id"], creator=creator_id, thumbnail=filename)
    return post


async def edit_post(
    store: BlogStore,
    files: FileArea,
    post_id: str,
    title: Optional[str],
    category: Optional[str],
    description: Optional[str],
    thumbnail: Optional[UploadFile],
    requester_id: str,
) -> dict[str, Any]:
    if not title or not category or len(description or "") < MIN_DESCRIPTION_LENGTH:
        raise ValidationFailed("Fill in all fields")

    post = await _load_owned(store, post_id, requester_id, "edited")
    fields: dict[str, Any] = {"title": title, "category": category, "description": description}

    if thumbnail is None or not thumbnail.filename:
        updated = await store.update_post(post, fields)
        log.info("post_updated", post_id=post_id)
        return updated

    old_thumbnail = post.get("thumbnail", "")
    new_thumbnail = await _store_thumbnail(files, thumbnail)
    try:
        updated = await store.update_post(post, dict(fields, thumbnail=new_thumbnail))
    except Exception:
        await _discard(files, new_thumbnail, "update_failed")
        raise
    if old_thumbnail:
        await _discard(files, old_thumbnail, "replaced")
    log.info("post_updated", post_id=post_id, thumbnail=new_thumbnail)
    return updated


async def delete_post(store: BlogStore, files: FileArea, post_id: str, requester_id: str) -> str:
    if not post_id:
        raise ValidationFailed("Post unavailable")

    post = await _load_owned(store, post_id, requester_id, "deleted")
    thumbnail = post.get("thumbnail", "")
    if thumbnail:
        try:
            await files.remove(thumbnail)
        except FileNotFoundError:
            log.warning("thumbnail_already_missing", post_id=post_id, filename=thumbnail)
        except OSError as e:
            log.error("thumbnail_remove_failed", post_id=post_id, filename=thumbnail, error=str(e))
            raise Internal("Post couldn't be deleted")
    await store.delete_post(post)
    log.info("post_deleted", post_id=post_id, creator=requester_id)
    return f"Post {post_id} deleted successfully"


async def get_post(store: BlogStore, post_id: str) -> dict[str, Any]:
    post = await store.get_post(post_id)
    if post is None:
        raise NotFound("Post not found")
    return post


async def list_posts(store: BlogStore) -> list[dict[str, Any]]:
    return await store.list_posts()


async def posts_by_category(store: BlogStore, category: str) -> list[dict[str, Any]]:
    return await store.posts_by_category(category)


async def posts_by_creator(store: BlogStore, user_id: str) -> list[dict[str, Any]]:
    return await store.posts_by_creator(user_id)
