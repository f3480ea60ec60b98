from __future__ import annotations

from typing import Any, Optional

import structlog
from fastapi import UploadFile

from ..core.config import get_avatar_max_bytes
from ..core.errors import Conflict, Internal, InvalidCredentials, NotFound, ValidationFailed
from ..core.security import create_access_token, hash_password, verify_password
from ..core.store import BlogStore
from ..core.uploads import FileArea, generate_filename, read_limited


log = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


async def _discard(files: FileArea, filename: str, user_id: str) -> None:
    try:
        await files.remove(filename)
    except OSError as e:
        log.warning("avatar_remove_failed", user_id=user_id, filename=filename, error=str(e))


async def register(
    store: BlogStore,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    password2: Optional[str],
) -> str:
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email or not password:
        raise ValidationFailed("Fill in all fields")
    if await store.find_user_by_email(email):
        raise ValidationFailed("Email already exists")
    if len(password.strip()) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
    if password != password2:
        raise ValidationFailed("Passwords do not match")

    user = await store.create_user(name, email, hash_password(password))
    if user is None:
        # lost a race with a concurrent registration
        raise ValidationFailed("Email already exists")
    return f"New user {email} registered"


async def login(store: BlogStore, email: Optional[str], password: Optional[str]) -> dict[str, str]:
    if not email or not password:
        raise ValidationFailed("Fill in all fields")
    user = await store.find_user_by_email(email.strip().lower())
    if user is None or not verify_password(password, user.get("password_hash", "")):
        log.info("login_rejected")
        raise InvalidCredentials("Invalid credentials")
    token = create_access_token(user["id"], user["name"])
    log.info("login_succeeded", user_id=user["id"])
    return {"token": token, "id": user["id"], "name": user["name"]}


async def get_user(store: BlogStore, user_id: str) -> dict[str, Any]:
    user = await store.get_user(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def list_authors(store: BlogStore) -> list[dict[str, Any]]:
    return await store.list_users()


async def change_avatar(
    store: BlogStore,
    files: FileArea,
    user_id: str,
    avatar: Optional[UploadFile],
) -> dict[str, Any]:
    if avatar is None or not avatar.filename:
        raise ValidationFailed("Please choose an image")
    user = await get_user(store, user_id)

    kb = get_avatar_max_bytes() // 1000
    data = await read_limited(avatar, get_avatar_max_bytes(), f"Profile picture too big. Should be less than {kb}kb")
    filename = generate_filename(avatar.filename, separator="_")
    try:
        await files.write(filename, data)
    except OSError as e:
        log.error("avatar_write_failed", user_id=user_id, error=str(e))
        raise Internal("Avatar couldn't be changed")

    try:
        updated = await store.update_user(user_id, {"avatar": filename})
    except Exception:
        await _discard(files, filename, user_id)
        raise
    if updated is None:
        await _discard(files, filename, user_id)
        raise NotFound("User not found")

    previous = user.get("avatar")
    if previous:
        await _discard(files, previous, user_id)
    log.info("avatar_changed", user_id=user_id, avatar=filename)
    return updated


async def edit_user(
    store: BlogStore,
    user_id: str,
    name: Optional[str],
    email: Optional[str],
    current_password: Optional[str],
    new_password: Optional[str],
    confirm_new_password: Optional[str],
) -> dict[str, Any]:
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email or not current_password or not new_password:
        raise ValidationFailed("Fill in all fields")
    user = await get_user(store, user_id)

    holder = await store.find_user_by_email(email)
    if holder is not None and holder["id"] != user_id:
        raise Conflict("Email already exists")

    if not verify_password(current_password, user.get("password_hash", "")):
        raise InvalidCredentials("Invalid current password")
    if new_password != confirm_new_password:
        raise ValidationFailed("New passwords do not match")
    if len(new_password.strip()) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")

    if not await store.move_email(user_id, user["email"], email):
        raise Conflict("Email already exists")
    updated = await store.update_user(
        user_id,
        {"name": name, "email": email, "password_hash": hash_password(new_password)},
    )
    if updated is None:
        raise NotFound("User not found")
    log.info("user_updated", user_id=user_id)
    return updated
