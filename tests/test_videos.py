import uuid

import pytest
from sqlalchemy import func, select

from app.models.comments import Comment
from tests.conftest import API


@pytest.mark.asyncio
async def test_publish_video(make_user, publish, storage):
    user, headers = await make_user("vera")

    video = await publish(headers, title="  First upload  ", duration=12.5)

    assert video["title"] == "First upload"
    assert video["ownerId"] == user["id"]
    assert video["isPublished"] is True
    assert video["views"] == 0
    assert video["duration"] == 12.5
    assert video["thumbnail"].startswith("https://cdn.example.com/media/thumbnails/")
    assert video["videoFile"].startswith("https://cdn.example.com/media/videos/")
    assert all(not path.exists() for path in storage.seen_paths)


@pytest.mark.asyncio
async def test_publish_requires_video_file(make_user, client):
    _, headers = await make_user("walt")

    resp = await client.post(
        f"{API}/videos/",
        data={"title": "t", "description": "d"},
        files={"thumbnail": ("thumb.jpg", b"thumb", "image/jpeg")},
        headers=headers,
    )

    assert resp.status_code == 422
    assert resp.json()["errorMessage"] == "Video file must be provided"


@pytest.mark.asyncio
async def test_publish_requires_title(make_user, client):
    _, headers = await make_user("wanda")

    resp = await client.post(
        f"{API}/videos/",
        data={"title": " ", "description": "d"},
        files={
            "thumbnail": ("thumb.jpg", b"thumb", "image/jpeg"),
            "videoFile": ("clip.mp4", b"clip", "video/mp4"),
        },
        headers=headers,
    )

    assert resp.status_code == 422
    assert resp.json()["errorMessage"] == "Video title is required"


@pytest.mark.asyncio
async def test_get_video_counts_view_and_records_history(make_user, publish, client):
    _, owner_headers = await make_user("xena")
    _, viewer_headers = await make_user("yuri")
    video = await publish(owner_headers)

    first = await client.get(f"{API}/videos/{video['id']}", headers=viewer_headers)
    second = await client.get(f"{API}/videos/{video['id']}", headers=viewer_headers)

    assert first.status_code == 200
    assert first.json()["data"]["views"] == 1
    assert second.json()["data"]["views"] == 2

    history = await client.get(f"{API}/users/watch-history", headers=viewer_headers)
    entries = history.json()["data"]["watchHistory"]
    assert [entry["id"] for entry in entries] == [video["id"]]


@pytest.mark.asyncio
async def test_get_missing_video_returns_not_found(make_user, client):
    _, headers = await make_user("zack")

    resp = await client.get(f"{API}/videos/{uuid.uuid4()}", headers=headers)

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "errorMessage": "Video with the given ID not found"}


@pytest.mark.asyncio
async def test_malformed_video_id_returns_error_envelope(make_user, client):
    _, headers = await make_user("abby")

    resp = await client.get(f"{API}/videos/not-a-uuid", headers=headers)

    assert resp.status_code == 422
    assert resp.json()["success"] is False
    assert "errorMessage" in resp.json()


@pytest.mark.asyncio
async def test_only_owner_can_modify_video(make_user, publish, client):
    _, owner_headers = await make_user("ben")
    _, other_headers = await make_user("cleo")
    video = await publish(owner_headers)
    url = f"{API}/videos/{video['id']}"

    update = await client.patch(url, json={"title": "hijacked"}, headers=other_headers)
    toggle = await client.patch(f"{url}/toggle-publish", headers=other_headers)
    delete = await client.delete(url, headers=other_headers)

    assert update.status_code == 403
    assert toggle.status_code == 403
    assert delete.status_code == 403

    fetched = await client.get(url, headers=owner_headers)
    assert fetched.json()["data"]["title"] == video["title"]


@pytest.mark.asyncio
async def test_update_video_details(make_user, publish, client):
    _, headers = await make_user("dora")
    video = await publish(headers)

    resp = await client.patch(
        f"{API}/videos/{video['id']}",
        json={"description": "A better description"},
        headers=headers,
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["title"] == video["title"]
    assert data["description"] == "A better description"


@pytest.mark.asyncio
async def test_update_video_thumbnail(make_user, publish, client):
    _, headers = await make_user("eddie")
    video = await publish(headers)

    resp = await client.patch(
        f"{API}/videos/{video['id']}/thumbnail",
        files={"thumbnail": ("new.jpg", b"new thumb", "image/jpeg")},
        headers=headers,
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["thumbnail"] != video["thumbnail"]


@pytest.mark.asyncio
async def test_toggle_publish_twice_restores_state(make_user, publish, client):
    _, headers = await make_user("fiona")
    video = await publish(headers)
    url = f"{API}/videos/{video['id']}/toggle-publish"

    first = await client.patch(url, headers=headers)
    second = await client.patch(url, headers=headers)

    assert first.json()["data"] == {"id": video["id"], "isPublished": False}
    assert second.json()["data"] == {"id": video["id"], "isPublished": True}


@pytest.mark.asyncio
async def test_unpublished_video_is_hidden_from_others(make_user, publish, client):
    _, owner_headers = await make_user("gus")
    _, other_headers = await make_user("hana")
    hidden = await publish(owner_headers, title="Draft")
    await publish(owner_headers, title="Public")
    await client.patch(f"{API}/videos/{hidden['id']}/toggle-publish", headers=owner_headers)

    as_other = await client.get(f"{API}/videos/{hidden['id']}", headers=other_headers)
    as_owner = await client.get(f"{API}/videos/{hidden['id']}", headers=owner_headers)
    listing = await client.get(f"{API}/videos/", headers=other_headers)

    assert as_other.status_code == 404
    assert as_owner.status_code == 200
    titles = [item["title"] for item in listing.json()["data"]["docs"]]
    assert titles == ["Public"]


@pytest.mark.asyncio
async def test_list_videos_filters_and_paginates(make_user, publish, client):
    owner, headers = await make_user("ivy")
    other, other_headers = await make_user("jack")
    await publish(headers, title="Cooking pasta", description="dinner")
    await publish(headers, title="Gardening", description="tomato cooking tips")
    await publish(other_headers, title="Woodwork", description="chairs")

    search = await client.get(f"{API}/videos/", params={"query": "cooking"}, headers=headers)
    by_owner = await client.get(f"{API}/videos/", params={"userId": other["id"]}, headers=headers)
    paged = await client.get(
        f"{API}/videos/",
        params={"page": 2, "limit": 2, "sortBy": "title", "sortType": "asc"},
        headers=headers,
    )

    search_page = search.json()["data"]
    assert search_page["totalDocs"] == 2
    assert {item["title"] for item in search_page["docs"]} == {"Cooking pasta", "Gardening"}

    owner_page = by_owner.json()["data"]
    assert [item["title"] for item in owner_page["docs"]] == ["Woodwork"]
    assert owner_page["docs"][0]["owner"] == {
        "id": other["id"],
        "username": "jack",
        "fullname": "Jack",
        "avatar": other["avatar"],
    }

    second_page = paged.json()["data"]
    assert second_page["totalDocs"] == 3
    assert second_page["totalPages"] == 2
    assert second_page["page"] == 2
    assert [item["title"] for item in second_page["docs"]] == ["Woodwork"]


@pytest.mark.asyncio
async def test_list_videos_rejects_bad_sort_field(make_user, client):
    _, headers = await make_user("kate")

    resp = await client.get(f"{API}/videos/", params={"sortBy": "password"}, headers=headers)

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_deleting_video_keeps_its_comments(make_user, publish, client, session_maker):
    _, headers = await make_user("liam")
    video = await publish(headers)
    comment = await client.post(f"{API}/comments/{video['id']}", json={"content": "nice"}, headers=headers)
    assert comment.status_code == 201

    resp = await client.delete(f"{API}/videos/{video['id']}", headers=headers)
    assert resp.status_code == 200

    gone = await client.get(f"{API}/videos/{video['id']}", headers=headers)
    assert gone.status_code == 404

    async with session_maker() as session:
        remaining = await session.scalar(
            select(func.count(Comment.id)).where(Comment.video_id == uuid.UUID(video["id"]))
        )
    assert remaining == 1


@pytest.mark.asyncio
async def test_unpublished_video_is_unreachable_through_other_routes(make_user, publish, client):
    _, owner_headers = await make_user("iggy")
    _, other_headers = await make_user("joan")
    draft = await publish(owner_headers, title="Secret")
    video_id = draft["id"]

    # reached by the other user while still public
    playlist = (await client.post(f"{API}/playlists/", json={"title": "Later"}, headers=other_headers)).json()["data"]
    await client.patch(f"{API}/playlists/{playlist['id']}/add/{video_id}", headers=other_headers)
    await client.post(f"{API}/likes/toggle/v/{video_id}", headers=other_headers)
    await client.get(f"{API}/videos/{video_id}", headers=other_headers)

    await client.patch(f"{API}/videos/{video_id}/toggle-publish", headers=owner_headers)

    assert (await client.get(f"{API}/videos/{video_id}", headers=other_headers)).status_code == 404
    assert (await client.post(f"{API}/comments/{video_id}", json={"content": "hi"}, headers=other_headers)).status_code == 404
    assert (await client.get(f"{API}/comments/{video_id}", headers=other_headers)).status_code == 404
    assert (await client.post(f"{API}/likes/toggle/v/{video_id}", headers=other_headers)).status_code == 404

    second = (await client.post(f"{API}/playlists/", json={"title": "Peek"}, headers=other_headers)).json()["data"]
    add = await client.patch(f"{API}/playlists/{second['id']}/add/{video_id}", headers=other_headers)
    assert add.status_code == 404

    contents = await client.get(f"{API}/playlists/{playlist['id']}", headers=other_headers)
    assert contents.json()["data"]["videos"] == []
    assert (await client.get(f"{API}/playlists/{playlist['id']}/videos", headers=other_headers)).json()["data"] == []
    assert (await client.get(f"{API}/likes/videos", headers=other_headers)).json()["data"] == []
    history = await client.get(f"{API}/users/watch-history", headers=other_headers)
    assert history.json()["data"]["watchHistory"] == []

    # the owner still reaches the draft everywhere
    owner_comment = await client.post(f"{API}/comments/{video_id}", json={"content": "note"}, headers=owner_headers)
    assert owner_comment.status_code == 201
    owner_view = await client.get(f"{API}/playlists/{playlist['id']}", headers=owner_headers)
    assert [video["title"] for video in owner_view.json()["data"]["videos"]] == ["Secret"]
