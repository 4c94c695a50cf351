"""HTTP tests for users, comments and likes."""

from __future__ import annotations

from httpx import ASGITransport, AsyncClient

from conftest import make_settings
from main import create_app
from storage import MemoryStorage


class StaleReadStorage(MemoryStorage):
    """Existence checks always miss, as when a concurrent request commits first."""

    async def get_user_by_username(self, username):
        return None

    async def get_like_by_user_and_video(self, *, user_id, video_id):
        return None


async def test_create_and_get_user(client):
    created = await client.post("/users", json={"username": "music_5", "bio": "Music producer & DJ"})

    assert created.status_code == 201
    body = created.json()
    assert body["followersCount"] == 0

    fetched = await client.get(f"/users/{body['id']}")
    assert fetched.json() == body


async def test_duplicate_username_is_rejected(client, author):
    resp = await client.post("/users", json={"username": author["username"]})

    assert resp.status_code == 400
    assert resp.json() == {"detail": "Username already taken"}


async def test_unknown_user_is_404(client):
    resp = await client.get("/users/missing")

    assert resp.status_code == 404


async def test_comments_round_trip(client, storage, author):
    video = await storage.create_video(user_id=author["id"], video_url="https://cdn.test/v.mp4")

    first = await client.post(
        "/comments",
        json={"videoId": video["id"], "userId": author["id"], "text": "This is amazing!"},
    )
    await client.post(
        "/comments",
        json={"videoId": video["id"], "userId": author["id"], "text": "Best one yet"},
    )

    assert first.status_code == 201
    assert first.json()["user"]["username"] == "dance_6"

    listing = await client.get(f"/comments/{video['id']}")
    assert [c["text"] for c in listing.json()] == ["Best one yet", "This is amazing!"]
    assert (await storage.get_video(video["id"]))["comments_count"] == 2


async def test_empty_comment_is_rejected(client, storage, author):
    video = await storage.create_video(user_id=author["id"], video_url="https://cdn.test/v.mp4")

    resp = await client.post("/comments", json={"videoId": video["id"], "userId": author["id"], "text": ""})

    assert resp.status_code == 422


async def test_like_twice_is_rejected(client, storage, author):
    video = await storage.create_video(user_id=author["id"], video_url="https://cdn.test/v.mp4")
    payload = {"videoId": video["id"], "userId": author["id"]}

    first = await client.post("/likes", json=payload)
    second = await client.post("/likes", json=payload)

    assert first.status_code == 201
    assert first.json()["videoId"] == video["id"]
    assert second.status_code == 400
    assert second.json() == {"detail": "Already liked"}
    assert (await storage.get_video(video["id"]))["likes_count"] == 1


async def test_unlike(client, storage, author):
    video = await storage.create_video(user_id=author["id"], video_url="https://cdn.test/v.mp4")
    like = (await client.post("/likes", json={"videoId": video["id"], "userId": author["id"]})).json()

    resp = await client.delete(f"/likes/{like['id']}")
    again = await client.delete(f"/likes/{like['id']}")

    assert resp.status_code == 204
    assert again.status_code == 204
    assert (await storage.get_video(video["id"]))["likes_count"] == 0


async def test_concurrent_duplicate_like_is_rejected_by_store(clock):
    storage = StaleReadStorage(clock=clock)
    author = await storage.create_user(username="dance_6")
    video = await storage.create_video(user_id=author["id"], video_url="https://cdn.test/v.mp4")
    payload = {"videoId": video["id"], "userId": author["id"]}

    app = create_app(make_settings(), storage)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        first = await client.post("/likes", json=payload)
        second = await client.post("/likes", json=payload)

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {"detail": "Already liked"}
    assert len(storage.likes) == 1


async def test_concurrent_duplicate_username_is_rejected_by_store(clock):
    storage = StaleReadStorage(clock=clock)

    app = create_app(make_settings(), storage)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        first = await client.post("/users", json={"username": "music_5"})
        second = await client.post("/users", json={"username": "music_5"})

    assert first.status_code == 201
    assert second.status_code == 400
    assert second.json() == {"detail": "Username already taken"}
    assert len(storage.users) == 1
