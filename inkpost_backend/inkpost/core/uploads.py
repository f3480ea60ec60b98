from __future__ import annotations

import os
import uuid

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from .errors import PayloadTooLarge


def generate_filename(original: str, separator: str = "") -> str:
    """Keep the client's stem and extension, add a random suffix between them."""
    base = os.path.basename(original.replace("\\", "/")) or "upload"
    stem, ext = os.path.splitext(base)
    return f"{stem}{separator}{uuid.uuid4().hex}{ext.lower()}"


async def read_limited(upload: UploadFile, limit: int, message: str) -> bytes:
    # one extra byte is enough to know the limit was crossed
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLarge(message)
    return data


class FileArea:
    """Flat directory of uploaded binaries addressed by filename."""

    def __init__(self, root: str) -> None:
        self.root = root

    def ensure(self) -> None:
        os.makedirs(self.root, exist_ok=True)

    def path(self, filename: str) -> str:
        return os.path.join(self.root, os.path.basename(filename))

    async def write(self, filename: str, data: bytes) -> str:
        path = self.path(filename)
        async with aiofiles.open(path, "wb") as fh:
            await fh.write(data)
        return path

    async def remove(self, filename: str) -> None:
        await aiofiles.os.remove(self.path(filename))
