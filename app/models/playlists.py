import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid, func

from app.db.database import Base


class Playlist(Base):
    __tablename__ = "playlists"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    owner_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class PlaylistVideo(Base):
    __tablename__ = "playlist_videos"

    id = Column(Integer, primary_key=True, autoincrement=True)

    playlist_id = Column(Uuid(as_uuid=True), ForeignKey("playlists.id"), nullable=False, index=True)
    video_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    position = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
