# daycare/schemas/__init__.py
from .enums import UserRole
from .common import ApiResponse, ErrorResponse, ORMModel, PageParams, PageResponse

__all__ = ["UserRole", "ApiResponse", "ErrorResponse", "ORMModel", "PageParams", "PageResponse"]
