# daycare/schemas/common.py
from typing import Any, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PageResponse(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    pages: int
    page_size: int


class ErrorResponse(BaseModel):
    success: bool = False
    reason: str
    message: str
    details: Optional[Dict[str, Any]] = None


class PageParams(BaseModel):
    """Paging carried on every list filter so a route takes one query model"""
    page: int = Field(1, ge=1)
    page_size: Optional[int] = Field(None, ge=1, description="Defaults to the entity's configured page size")
