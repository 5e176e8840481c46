import uuid

import pytest
from sqlalchemy import delete, false, func, select

import app.services.like_service as like_module
import app.services.subscription_service as subscription_module
from app.models.likes import Like
from app.models.subscriptions import Subscription
from app.models.users import Users
from app.models.videos import Video
from app.services.like_service import LikeService
from app.services.subscription_service import SubscriptionService


def _delete_matching_nothing(model):
    # stands in for a concurrent toggle that inserted its row after our delete ran
    return delete(model).where(false())


async def _seed_users(session_maker, *usernames):
    async with session_maker() as session:
        users = [
            Users(
                username=name,
                email=f"{name}@example.com",
                fullname=name.title(),
                password_hash="not-a-real-hash",
                avatar=f"https://cdn.example.com/media/avatars/{name}.png",
            )
            for name in usernames
        ]
        session.add_all(users)
        await session.commit()
        return [user.id for user in users]


@pytest.mark.asyncio
async def test_video_like_insert_race_resolves_as_liked(session_maker, monkeypatch):
    owner_id, fan_id = await _seed_users(session_maker, "olga", "fred")
    async with session_maker() as session:
        video = Video(
            id=uuid.uuid4(),
            owner_id=owner_id,
            video_file="https://cdn.example.com/media/videos/clip.mp4",
            thumbnail="https://cdn.example.com/media/thumbnails/clip.jpg",
            title="Race",
            description="two toggles at once",
        )
        session.add(video)
        session.add(Like(liked_by_id=fan_id, video_id=video.id))
        await session.commit()
        video_id = video.id

    monkeypatch.setattr(like_module, "delete", _delete_matching_nothing)
    async with session_maker() as session:
        result = await LikeService(session).toggle_video_like(fan_id, video_id)

    assert result == (True, 1)
    async with session_maker() as session:
        rows = await session.scalar(select(func.count(Like.id)).where(Like.video_id == video_id))
    assert rows == 1


@pytest.mark.asyncio
async def test_subscription_insert_race_resolves_as_subscribed(session_maker, monkeypatch):
    channel_id, fan_id = await _seed_users(session_maker, "carl", "dina")
    async with session_maker() as session:
        session.add(Subscription(subscriber_id=fan_id, channel_id=channel_id))
        await session.commit()

    monkeypatch.setattr(subscription_module, "delete", _delete_matching_nothing)
    async with session_maker() as session:
        result = await SubscriptionService(session).toggle(fan_id, channel_id)

    assert result == (True, 1)
    async with session_maker() as session:
        rows = await session.scalar(
            select(func.count(Subscription.id)).where(Subscription.channel_id == channel_id)
        )
    assert rows == 1
