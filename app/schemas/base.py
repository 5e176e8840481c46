from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    status_code: int = 200
    message: str
    data: Optional[T] = None


class ErrorResponse(CamelModel):
    success: bool = False
    error_message: str


class Page(CamelModel, Generic[T]):
    docs: List[T] = Field(default_factory=list)
    total_docs: int
    page: int
    limit: int
    total_pages: int


def api_response(data, message: str, status_code: int = 200) -> dict:
    return {
        "success": status_code < 400,
        "status_code": status_code,
        "message": message,
        "data": data,
    }
