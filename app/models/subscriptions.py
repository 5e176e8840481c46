import uuid

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid, func

from app.db.database import Base


class Subscription(Base):
    """One row per (subscriber, channel) pair; both columns are indexed so
    membership checks and counts never scan a per-user array."""

    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_pair"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    subscriber_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    channel_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
