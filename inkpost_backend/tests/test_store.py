"""
Tests for BlogStore and the in-memory Redis it runs on in development.
"""
import asyncio

from inkpost.core.memory_redis import AsyncMemoryRedis


def run(coro):
    return asyncio.run(coro)


class TestAsyncMemoryRedis:
    """Tests for the Redis subset used by the store."""

    def test_set_nx(self):
        async def scenario():
            r = AsyncMemoryRedis()
            assert await r.set("k", 1, nx=True) is True
            assert await r.set("k", 2, nx=True) is None
            return await r.get("k")

        assert run(scenario()) == "1"

    def test_hash_values_are_strings(self):
        async def scenario():
            r = AsyncMemoryRedis()
            await r.hset("h", mapping={"a": 1, "b": "x"})
            await r.hset("h", "c", 3)
            return await r.hgetall("h")

        assert run(scenario()) == {"a": "1", "b": "x", "c": "3"}

    def test_delete_covers_every_type(self):
        async def scenario():
            r = AsyncMemoryRedis()
            await r.set("s", "v")
            await r.hset("h", mapping={"a": 1})
            await r.sadd("z", 1, 2)
            removed = await r.delete("s", "h", "z", "missing")
            return removed, await r.get("s"), await r.hgetall("h"), await r.scard("z")

        assert run(scenario()) == (3, None, {}, 0)

    def test_set_members(self):
        async def scenario():
            r = AsyncMemoryRedis()
            assert await r.sadd("z", 1, 2, 2) == 2
            assert await r.srem("z", 1, 5) == 1
            return await r.smembers("z"), await r.scard("z")

        assert run(scenario()) == ({"2"}, 1)


class TestBlogStoreUsers:
    """Tests for user records."""

    def test_duplicate_email_is_refused(self, store):
        async def scenario():
            first = await store.create_user("A", "a@x.com", "hash")
            second = await store.create_user("B", "a@x.com", "hash")
            return first, second, await store.list_users()

        first, second, users = run(scenario())
        assert first["email"] == "a@x.com"
        assert first["posts"] == 0
        assert second is None
        assert [u["id"] for u in users] == [first["id"]]

    def test_move_email(self, store):
        async def scenario():
            a = await store.create_user("A", "a@x.com", "h")
            b = await store.create_user("B", "b@x.com", "h")
            taken = await store.move_email(a["id"], "a@x.com", "b@x.com")
            moved = await store.move_email(a["id"], "a@x.com", "c@x.com")
            old = await store.find_user_by_email("a@x.com")
            new = await store.find_user_by_email("c@x.com")
            return a, b, taken, moved, old, new

        a, b, taken, moved, old, new = run(scenario())
        assert taken is False
        assert moved is True
        assert old is None
        assert new["id"] == a["id"]


class TestBlogStorePosts:
    """Tests for post records and their indexes."""

    def test_post_count_follows_index(self, store):
        async def scenario():
            user = await store.create_user("A", "a@x.com", "h")
            p1 = await store.create_post("t1", "Art", "d", "one.png", user["id"])
            await store.create_post("t2", "Art", "d", "two.png", user["id"])
            before = (await store.get_user(user["id"]))["posts"]
            await store.delete_post(p1)
            after = (await store.get_user(user["id"]))["posts"]
            return before, after

        assert run(scenario()) == (2, 1)

    def test_delete_clears_every_index(self, store):
        async def scenario():
            post = await store.create_post("t", "Art", "d", "one.png", "1")
            await store.delete_post(post)
            return (
                await store.get_post(post["id"]),
                await store.list_posts(),
                await store.posts_by_category("Art"),
                await store.posts_by_creator("1"),
            )

        assert run(scenario()) == (None, [], [], [])

    def test_update_moves_category(self, store):
        async def scenario():
            post = await store.create_post("t", "Art", "d", "one.png", "1")
            updated = await store.update_post(post, {"category": "Weather", "title": "t2"})
            return (
                updated,
                await store.posts_by_category("Art"),
                await store.posts_by_category("Weather"),
                await store.get_post(post["id"]),
            )

        updated, art, weather, stored = run(scenario())
        assert art == []
        assert [p["id"] for p in weather] == [updated["id"]]
        assert stored == updated
        assert stored["title"] == "t2"
