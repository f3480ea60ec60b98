"""
Tests for password hashing, tokens and upload filename handling.
"""
import asyncio
import io

import pytest
from starlette.datastructures import UploadFile

from inkpost.core.errors import PayloadTooLarge, Unauthorized
from inkpost.core.security import create_access_token, decode_token, hash_password, verify_password
from inkpost.core.uploads import generate_filename, read_limited


class TestPasswords:

    def test_hash_is_salted(self):
        h1 = hash_password("secret1")
        h2 = hash_password("secret1")
        assert h1 != h2
        assert verify_password("secret1", h1)
        assert not verify_password("secret2", h1)

    def test_garbage_hash_never_verifies(self):
        assert not verify_password("secret1", "")
        assert not verify_password("secret1", "not-a-bcrypt-hash")


class TestTokens:

    def test_round_trip(self):
        user = decode_token(create_access_token("7", "Alice"))
        assert (user.id, user.name) == ("7", "Alice")

    def test_expired_token(self, monkeypatch):
        monkeypatch.setenv("TOKEN_TTL_SECONDS", "-60")
        token = create_access_token("7", "Alice")
        with pytest.raises(Unauthorized):
            decode_token(token)

    def test_foreign_signature(self, monkeypatch):
        token = create_access_token("7", "Alice")
        monkeypatch.setenv("JWT_SECRET", "another-secret")
        with pytest.raises(Unauthorized):
            decode_token(token)


class TestFilenames:

    def test_keeps_stem_and_extension(self):
        name = generate_filename("cat.PNG")
        assert name.startswith("cat")
        assert name.endswith(".png")
        assert len(name) == len("cat") + 32 + len(".png")

    def test_separator(self):
        assert generate_filename("me.jpg", separator="_").startswith("me_")

    def test_directories_are_dropped(self):
        assert "/" not in generate_filename("../../etc/passwd")
        assert generate_filename("C:\\Users\\me\\pic.gif").startswith("pic")

    def test_read_limited(self):
        upload = UploadFile(file=io.BytesIO(b"x" * 11), filename="a.png")
        with pytest.raises(PayloadTooLarge):
            asyncio.run(read_limited(upload, 10, "too big"))

        upload = UploadFile(file=io.BytesIO(b"x" * 10), filename="a.png")
        assert asyncio.run(read_limited(upload, 10, "too big")) == b"x" * 10
