from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class ApiModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DataResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT


class MessageResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT
    message: str


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


class PageResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: list[DataT]
    pagination: Pagination
