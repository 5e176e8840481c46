from sqlalchemy import Column, DateTime, ForeignKey, Integer, Uuid, func

from app.db.database import Base


class WatchHistoryEntry(Base):
    __tablename__ = "watch_history"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    video_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    watched_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
