from __future__ import annotations

import os
from typing import Iterable


DEV_JWT_SECRET = "inkpost-dev-secret-change-me"


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def get_cors_origins() -> list[str]:
    origins_env = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000")
    parts: Iterable[str] = (o.strip() for o in origins_env.split(","))
    return [o for o in parts if o]


def get_redis_url() -> str:
    return os.getenv("REDIS_URL", "redis://localhost:6379/0")


def use_memory_store() -> bool:
    url = get_redis_url()
    return os.getenv("USE_FAKE_REDIS", "0") == "1" or url.startswith(("memory://", "redis+fake://"))


def get_upload_dir() -> str:
    return os.path.abspath(os.getenv("UPLOAD_DIR", "uploads"))


def get_jwt_secret() -> str:
    return os.getenv("JWT_SECRET") or DEV_JWT_SECRET


def get_token_ttl_seconds() -> int:
    return _int_env("TOKEN_TTL_SECONDS", 86400)  # 24h


def get_bcrypt_rounds() -> int:
    # passlib accepts 4..31
    return min(max(_int_env("BCRYPT_ROUNDS", 10), 4), 31)


def get_thumbnail_max_bytes() -> int:
    return _int_env("THUMBNAIL_MAX_BYTES", 5_000_000)


def get_avatar_max_bytes() -> int:
    return _int_env("AVATAR_MAX_BYTES", 500_000)


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def log_as_json() -> bool:
    return os.getenv("LOG_JSON", "0") == "1"
