from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import status
from loguru import logger
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from app.models.users import Users
from app.models.watch_history import WatchHistoryEntry
from app.services.storage_service import BlobStorage, StoredBlob
from app.services.token_service import TokenService
from app.utils.security import hash_password, verify_password
from app.utils.uploads import StagedFile
from app.utils.validation import any_blank, clean_text, normalize_email, require_text

AVATAR_FOLDER = "avatars"
COVER_FOLDER = "covers"


class UserService:
    def __init__(
        self,
        db: AsyncSession,
        token_service: Optional[TokenService] = None,
        storage: Optional[BlobStorage] = None,
    ):
        self.db = db
        self.token_service = token_service
        self.storage = storage

    async def get_by_id(self, user_id: UUID) -> Users:
        result = await self.db.execute(select(Users).where(Users.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError("User does not exist")
        return user

    async def _find_by_username_or_email(
        self, username: Optional[str], email: Optional[str]
    ) -> Optional[Users]:
        conditions = []
        if username:
            conditions.append(Users.username == username)
        if email:
            conditions.append(Users.email == email)
        if not conditions:
            return None
        result = await self.db.execute(select(Users).where(or_(*conditions)).limit(1))
        return result.scalar_one_or_none()

    async def _upload(self, staged: StagedFile, folder: str) -> StoredBlob:
        return await self.storage.upload(staged.path, folder, staged.content_type)

    async def _commit_with_uploads(self, user: Users, uploaded: List[StoredBlob]) -> None:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if uploaded:
                logger.warning(f"Orphaned uploads after failed user write: {[b.url for b in uploaded]}")
            logger.warning(f"Uniqueness violation on user write: {e.orig}")
            raise ConflictError("User with this email or username already exists")
        except Exception:
            await self.db.rollback()
            if uploaded:
                logger.warning(f"Orphaned uploads after failed user write: {[b.url for b in uploaded]}")
            raise
        await self.db.refresh(user)

    async def register(
        self,
        username: Optional[str],
        fullname: Optional[str],
        email: Optional[str],
        password: Optional[str],
        avatar: Optional[StagedFile],
        cover: Optional[StagedFile] = None,
    ) -> Users:
        if any_blank([username, fullname, email, password]):
            raise ValidationError("One or more fields are empty", status_code=status.HTTP_400_BAD_REQUEST)

        username = username.strip().lower()
        email = normalize_email(email)
        fullname = fullname.strip()

        existing = await self._find_by_username_or_email(username, email)
        if existing:
            raise ConflictError("User with this email or username already exists")

        if avatar is None:
            raise ValidationError("Avatar file is required", status_code=status.HTTP_400_BAD_REQUEST)

        uploaded: List[StoredBlob] = []
        avatar_blob = await self._upload(avatar, AVATAR_FOLDER)
        uploaded.append(avatar_blob)
        cover_blob = None
        if cover is not None:
            try:
                cover_blob = await self._upload(cover, COVER_FOLDER)
            except Exception:
                logger.warning(f"Orphaned upload after failed cover upload: {avatar_blob.url}")
                raise
            uploaded.append(cover_blob)

        user = Users(
            username=username,
            email=email,
            fullname=fullname,
            password_hash=hash_password(password),
            avatar=avatar_blob.url,
            cover_image=cover_blob.url if cover_blob else None,
        )
        self.db.add(user)
        await self._commit_with_uploads(user, uploaded)

        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    async def _store_refresh_token(self, user: Users) -> Tuple[str, str]:
        access_token, refresh_token = self.token_service.issue_pair(user)
        user.refresh_token = refresh_token
        await self.db.commit()
        await self.db.refresh(user)
        return access_token, refresh_token

    async def login(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Tuple[Users, str, str]:
        username = clean_text(username)
        email = clean_text(email)
        if not username and not email:
            raise ValidationError("Username or email is required")
        if not password:
            raise ValidationError("Password is required")

        user = await self._find_by_username_or_email(
            username.lower() if username else None,
            email.lower() if email else None,
        )
        if user is None:
            raise NotFoundError("User does not exist")

        if not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for user {user.id}")
            raise UnauthorizedError("Invalid user credentials")

        access_token, refresh_token = await self._store_refresh_token(user)
        logger.info(f"User {user.id} logged in")
        return user, access_token, refresh_token

    async def logout(self, user: Users) -> None:
        user.refresh_token = None
        await self.db.commit()
        logger.info(f"User {user.id} logged out")

    async def refresh_tokens(self, presented_token: Optional[str]) -> Tuple[Users, str, str]:
        if not presented_token:
            raise UnauthorizedError("Unauthorized request")

        payload = self.token_service.verify_refresh_token(presented_token)
        try:
            user_id = UUID(payload["id"])
        except (ValueError, TypeError):
            raise UnauthorizedError("Invalid refresh token")

        result = await self.db.execute(select(Users).where(Users.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise UnauthorizedError("Invalid refresh token")

        if user.refresh_token != presented_token:
            logger.warning(f"Stale refresh token presented for user {user.id}")
            raise UnauthorizedError("Refresh token is expired or used")

        access_token, refresh_token = await self._store_refresh_token(user)
        logger.info(f"Rotated tokens for user {user.id}")
        return user, access_token, refresh_token

    async def change_password(self, user: Users, old_password: str, new_password: str) -> None:
        new_password = require_text(new_password, "New password is required")
        if not verify_password(old_password, user.password_hash):
            raise UnauthorizedError("Invalid old password")
        if old_password == new_password:
            raise ValidationError("New password must be different from the old password")

        user.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info(f"Password changed for user {user.id}")

    async def update_account(
        self, user: Users, fullname: Optional[str], email: Optional[str]
    ) -> Users:
        fullname = clean_text(fullname)
        email = clean_text(email)
        if not fullname and not email:
            raise ValidationError("Fullname or email is required")

        if email:
            email = normalize_email(email)
            if email != user.email:
                result = await self.db.execute(
                    select(Users.id).where(Users.email == email, Users.id != user.id)
                )
                if result.first() is not None:
                    raise ConflictError("User with this email already exists")
                user.email = email
        if fullname:
            user.fullname = fullname

        await self._commit_with_uploads(user, [])
        logger.info(f"Updated account details for user {user.id}")
        return user

    async def update_images(
        self,
        user: Users,
        avatar: Optional[StagedFile],
        cover: Optional[StagedFile],
    ) -> Users:
        if avatar is None and cover is None:
            raise ValidationError("Avatar or cover image file is required")

        uploaded: List[StoredBlob] = []
        if avatar is not None:
            blob = await self._upload(avatar, AVATAR_FOLDER)
            uploaded.append(blob)
            user.avatar = blob.url
        if cover is not None:
            try:
                blob = await self._upload(cover, COVER_FOLDER)
            except Exception:
                if uploaded:
                    logger.warning(f"Orphaned upload after failed cover upload: {uploaded[0].url}")
                raise
            uploaded.append(blob)
            user.cover_image = blob.url

        await self._commit_with_uploads(user, uploaded)
        logger.info(f"Updated images for user {user.id}")
        return user

    async def record_watch(self, user_id: UUID, video_id: UUID) -> None:
        # a re-watched video moves to the front of the history
        await self.db.execute(
            delete(WatchHistoryEntry).where(
                WatchHistoryEntry.user_id == user_id,
                WatchHistoryEntry.video_id == video_id,
            )
        )
        self.db.add(WatchHistoryEntry(user_id=user_id, video_id=video_id))
        await self.db.commit()
        logger.debug(f"Recorded watch of video {video_id} by user {user_id}")

    async def clear_watch_history(self, user_id: UUID) -> int:
        result = await self.db.execute(
            delete(WatchHistoryEntry).where(WatchHistoryEntry.user_id == user_id)
        )
        await self.db.commit()
        logger.info(f"Cleared {result.rowcount} watch history entries for user {user_id}")
        return result.rowcount
