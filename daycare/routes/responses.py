# daycare/routes/responses.py
from typing import Any, Iterable, Optional, Type

from pydantic import BaseModel

from daycare.core.scoping import Page


def respond(data: Any = None, message: Optional[str] = None) -> dict:
    return {"success": True, "message": message, "data": data}


def serialize(schema: Type[BaseModel], records: Iterable[Any]) -> list:
    return [schema.model_validate(record) for record in records]


def page_of(schema: Type[BaseModel], page: Page) -> dict:
    return {
        "items": serialize(schema, page.items),
        "total": page.total,
        "page": page.page,
        "pages": page.pages,
        "page_size": page.page_size,
    }
