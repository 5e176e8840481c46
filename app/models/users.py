import uuid

from sqlalchemy import Column, DateTime, String, Uuid, func

from app.db.database import Base


class Users(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    username = Column(String(64), unique=True, index=True, nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    fullname = Column(String(128), index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    avatar = Column(String, nullable=False)
    cover_image = Column(String, nullable=True)

    refresh_token = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
