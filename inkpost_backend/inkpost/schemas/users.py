from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    # presence and length rules are checked by the user workflow
    name: str | None = None
    email: str | None = None
    password: str | None = None
    password2: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    token: str
    id: str
    name: str


class EditUserRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    currentPassword: str | None = None
    newPassword: str | None = None
    confirmNewPassword: str | None = None


class MessageResponse(BaseModel):
    message: str


class UserPublic(BaseModel):
    id: str
    name: str
    email: str
    avatar: str | None = None
    posts: int = Field(default=0, ge=0)
    createdAt: str | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "UserPublic":
        return cls(
            id=str(record["id"]),
            name=record.get("name", ""),
            email=record.get("email", ""),
            avatar=record.get("avatar") or None,
            posts=int(record.get("posts", 0)),
            createdAt=record.get("created_at"),
        )
