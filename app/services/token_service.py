from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Tuple
from uuid import uuid4

import jwt
from loguru import logger

from app.core.config import JWTSettings, get_jwt_settings
from app.core.exceptions import UnauthorizedError
from app.models.users import Users

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenService:
    """Issues and verifies the access/refresh token pair.

    The refresh token carries only the user id plus a ``jti`` so that every
    issued value is distinct; the caller persists it on the user row and the
    renewal flow compares the presented value with the stored one.
    """

    def __init__(self, settings: JWTSettings):
        self.settings = settings

    def create_access_token(self, user: Users) -> str:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=self.settings.access_token_expire_minutes
        )
        payload = {
            "id": str(user.id),
            "email": user.email,
            "username": user.username,
            "fullname": user.fullname,
            "exp": expire,
            "type": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(payload, self.settings.secret_key, algorithm=self.settings.algorithm)

    def create_refresh_token(self, user: Users) -> str:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=self.settings.refresh_token_expire_minutes
        )
        payload = {
            "id": str(user.id),
            "jti": uuid4().hex,
            "exp": expire,
            "type": REFRESH_TOKEN_TYPE,
        }
        return jwt.encode(
            payload, self.settings.refresh_token_secret_key, algorithm=self.settings.algorithm
        )

    def issue_pair(self, user: Users) -> Tuple[str, str]:
        try:
            return self.create_access_token(user), self.create_refresh_token(user)
        except jwt.PyJWTError as e:
            logger.exception(f"Token generation failed for user {user.id}: {e}")
            raise

    def _verify(self, token: str, secret_key: str, expected_type: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, secret_key, algorithms=[self.settings.algorithm])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Could not validate credentials")

        if payload.get("type") != expected_type:
            raise UnauthorizedError("Invalid token type")
        if not payload.get("id"):
            raise UnauthorizedError("Invalid token payload")
        return payload

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        return self._verify(token, self.settings.secret_key, ACCESS_TOKEN_TYPE)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        return self._verify(token, self.settings.refresh_token_secret_key, REFRESH_TOKEN_TYPE)


@lru_cache
def _token_service() -> TokenService:
    return TokenService(get_jwt_settings())


def get_token_service() -> TokenService:
    return _token_service()
