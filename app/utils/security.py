from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from loguru import logger
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.exceptions import UnauthorizedError
from app.db.database import get_db
from app.models.users import Users
from app.services.token_service import TokenService, get_token_service

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

auth_scheme = APIKeyHeader(name="Authorization", scheme_name="Bearer", auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def extract_access_token(request: Request, header_value: Optional[str]) -> Optional[str]:
    # an explicit header wins over the cookie
    if header_value:
        if header_value.startswith("Bearer "):
            return header_value[7:]
        return header_value
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(auth_scheme),
    db: AsyncSession = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
) -> Users:
    access_token = extract_access_token(request, token)
    if not access_token:
        raise UnauthorizedError("Unauthorized request")

    payload = token_service.verify_access_token(access_token)

    try:
        user_uuid = UUID(payload["id"])
    except (ValueError, TypeError):
        raise UnauthorizedError("Invalid access token")

    result = await db.execute(select(Users).where(Users.id == user_uuid))
    user = result.scalar_one_or_none()

    if user is None:
        logger.warning(f"Access token for unknown user {user_uuid}")
        raise UnauthorizedError("Invalid access token")

    return user
