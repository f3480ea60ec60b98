from __future__ import annotations

import datetime as dt
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.hash import bcrypt
from pydantic import BaseModel

from .config import get_bcrypt_rounds, get_jwt_secret, get_token_ttl_seconds
from .errors import Unauthorized


bearer_scheme = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"


class TokenUser(BaseModel):
    id: str
    name: str


def hash_password(password: str) -> str:
    return bcrypt.using(rounds=get_bcrypt_rounds()).hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.verify(password, password_hash)
    except ValueError:
        # malformed stored hash
        return False


def create_access_token(user_id: str, name: str) -> str:
    now = dt.datetime.now(dt.timezone.utc)
    payload: dict[str, Any] = {
        "id": user_id,
        "name": name,
        "iat": int(now.timestamp()),
        "exp": int((now + dt.timedelta(seconds=get_token_ttl_seconds())).timestamp()),
    }
    return jwt.encode(payload, get_jwt_secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> TokenUser:
    try:
        payload = jwt.decode(token, get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError:
        raise Unauthorized("Unauthorized. Invalid token")
    if "id" not in payload or "name" not in payload:
        raise Unauthorized("Unauthorized. Invalid token")
    return TokenUser(id=str(payload["id"]), name=str(payload["name"]))


async def require_user(creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> TokenUser:
    if creds is None or not creds.scheme.lower().startswith("bearer"):
        raise Unauthorized("Unauthorized. No token")
    token = creds.credentials.strip()
    if not token:
        raise Unauthorized("Unauthorized. No token")
    return decode_token(token)
