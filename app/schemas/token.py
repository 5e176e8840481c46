from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class Token(CamelModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"


class RefreshTokenRequest(CamelModel):
    refresh_token: Optional[str] = Field(default=None)
