from typing import Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.models.subscriptions import Subscription
from app.services.user_service import UserService


class SubscriptionService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_subscribers(self, channel_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Subscription.id)).where(Subscription.channel_id == channel_id)
        )
        return int(result.scalar_one() or 0)

    async def toggle(self, subscriber_id: UUID, channel_id: UUID) -> Tuple[bool, int]:
        if subscriber_id == channel_id:
            raise ValidationError("You cannot subscribe to your own channel")
        await UserService(self.db).get_by_id(channel_id)

        result = await self.db.execute(
            delete(Subscription).where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.channel_id == channel_id,
            )
        )
        if result.rowcount:
            await self.db.commit()
            logger.info(f"User {subscriber_id} unsubscribed from {channel_id}")
            return False, await self.count_subscribers(channel_id)

        self.db.add(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info(f"Concurrent subscription already recorded for {subscriber_id} -> {channel_id}")
        else:
            logger.info(f"User {subscriber_id} subscribed to {channel_id}")
        return True, await self.count_subscribers(channel_id)
