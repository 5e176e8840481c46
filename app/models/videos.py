import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid, func

from app.db.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    video_file = Column(String, nullable=False)
    thumbnail = Column(String, nullable=False)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False)

    is_published = Column(Boolean, nullable=False, default=True)
    views = Column(Integer, nullable=False, default=0)
    duration = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
