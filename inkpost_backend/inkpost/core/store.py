from __future__ import annotations

import datetime as dt
from typing import Any, Iterable, Optional

import structlog


log = structlog.get_logger(__name__)


def _now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()


def _newest_first(records: Iterable[dict[str, Any]], field: str) -> list[dict[str, Any]]:
    return sorted(records, key=lambda r: (r.get(field, ""), int(r.get("id", 0))), reverse=True)


class BlogStore:
    """User and post records kept in Redis hashes.

    Keys:
      user:{id}                hash  id, name, email, password_hash, avatar, created_at
      user:byemail:{email}     str   user id, claimed with SET NX
      users:all                set   user ids
      post:{id}                hash  id, title, category, description, thumbnail,
                                     creator, created_at, updated_at
      posts:all                set   post ids
      posts:category:{name}    set   post ids
      posts:creator:{user id}  set   post ids; its size is the user's post count
    """

    def __init__(self, client: Any) -> None:
        self.client = client

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        close = getattr(self.client, "aclose", None) or self.client.close
        await close()

    # users

    async def create_user(self, name: str, email: str, password_hash: str) -> Optional[dict[str, Any]]:
        """Insert a user; returns None when the email is already claimed."""
        uid = str(await self.client.incr("users:seq"))
        if not await self.client.set(f"user:byemail:{email}", uid, nx=True):
            return None
        try:
            await self.client.hset(
                f"user:{uid}",
                mapping={
                    "id": uid,
                    "name": name,
                    "email": email,
                    "password_hash": password_hash,
                    "avatar": "",
                    "created_at": _now_iso(),
                },
            )
            await self.client.sadd("users:all", uid)
        except Exception:
            await self.client.delete(f"user:byemail:{email}", f"user:{uid}")
            raise
        log.info("user_created", user_id=uid)
        return await self.get_user(uid)

    async def get_user(self, user_id: str) -> Optional[dict[str, Any]]:
        data = await self.client.hgetall(f"user:{user_id}")
        if not data:
            return None
        data["posts"] = await self.post_count(user_id)
        return data

    async def find_user_by_email(self, email: str) -> Optional[dict[str, Any]]:
        uid = await self.client.get(f"user:byemail:{email}")
        if not uid:
            return None
        return await self.get_user(uid)

    async def update_user(self, user_id: str, fields: dict[str, Any]) -> Optional[dict[str, Any]]:
        await self.client.hset(f"user:{user_id}", mapping=fields)
        return await self.get_user(user_id)

    async def move_email(self, user_id: str, old_email: str, new_email: str) -> bool:
        """Point the email index at ``new_email``; False if another account holds it."""
        if old_email == new_email:
            return True
        if not await self.client.set(f"user:byemail:{new_email}", user_id, nx=True):
            return await self.client.get(f"user:byemail:{new_email}") == user_id
        await self.client.delete(f"user:byemail:{old_email}")
        return True

    async def list_users(self) -> list[dict[str, Any]]:
        ids = sorted(await self.client.smembers("users:all"), key=int)
        users = []
        for uid in ids:
            user = await self.get_user(uid)
            if user:
                users.append(user)
        return users

    async def post_count(self, user_id: str) -> int:
        return int(await self.client.scard(f"posts:creator:{user_id}"))

    # posts

    async def create_post(
        self,
        title: str,
        category: str,
        description: str,
        thumbnail: str,
        creator: str,
    ) -> dict[str, Any]:
        pid = str(await self.client.incr("posts:seq"))
        now = _now_iso()
        record = {
            "id": pid,
            "title": title,
            "category": category,
            "description": description,
            "thumbnail": thumbnail,
            "creator": creator,
            "created_at": now,
            "updated_at": now,
        }
        await self.client.hset(f"post:{pid}", mapping=record)
        try:
            await self.client.sadd("posts:all", pid)
            await self.client.sadd(f"posts:category:{category}", pid)
            await self.client.sadd(f"posts:creator:{creator}", pid)
        except Exception:
            await self._drop_post(record)
            raise
        return record

    async def get_post(self, post_id: str) -> Optional[dict[str, Any]]:
        data = await self.client.hgetall(f"post:{post_id}")
        return data or None

    async def update_post(self, post: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
        pid = post["id"]
        mapping = dict(fields, updated_at=_now_iso())
        await self.client.hset(f"post:{pid}", mapping=mapping)
        new_category = mapping.get("category")
        if new_category is not None and new_category != post["category"]:
            await self.client.srem(f"posts:category:{post['category']}", pid)
            await self.client.sadd(f"posts:category:{new_category}", pid)
        return dict(post, **{k: str(v) for k, v in mapping.items()})

    async def delete_post(self, post: dict[str, Any]) -> None:
        await self._drop_post(post)

    async def _drop_post(self, post: dict[str, Any]) -> None:
        pid = post["id"]
        await self.client.delete(f"post:{pid}")
        await self.client.srem("posts:all", pid)
        await self.client.srem(f"posts:category:{post['category']}", pid)
        await self.client.srem(f"posts:creator:{post['creator']}", pid)

    async def _posts_in(self, index_key: str) -> list[dict[str, Any]]:
        posts = []
        for pid in await self.client.smembers(index_key):
            data = await self.get_post(pid)
            if data:
                posts.append(data)
        return posts

    async def list_posts(self) -> list[dict[str, Any]]:
        return _newest_first(await self._posts_in("posts:all"), "updated_at")

    async def posts_by_category(self, category: str) -> list[dict[str, Any]]:
        return _newest_first(await self._posts_in(f"posts:category:{category}"), "created_at")

    async def posts_by_creator(self, user_id: str) -> list[dict[str, Any]]:
        return _newest_first(await self._posts_in(f"posts:creator:{user_id}"), "created_at")
