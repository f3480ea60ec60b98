from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class PostPublic(BaseModel):
    id: str
    title: str
    category: str
    description: str
    thumbnail: str
    creator: str
    createdAt: str
    updatedAt: str

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "PostPublic":
        return cls(
            id=str(record["id"]),
            title=record.get("title", ""),
            category=record.get("category", ""),
            description=record.get("description", ""),
            thumbnail=record.get("thumbnail", ""),
            creator=record.get("creator", ""),
            createdAt=record.get("created_at", ""),
            updatedAt=record.get("updated_at", record.get("created_at", "")),
        )
