from __future__ import annotations

from fastapi import Request

from ...core.errors import Internal
from ...core.store import BlogStore
from ...core.uploads import FileArea


def get_store(request: Request) -> BlogStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise Internal("Store not initialized")
    return store


def get_files(request: Request) -> FileArea:
    return request.app.state.files
