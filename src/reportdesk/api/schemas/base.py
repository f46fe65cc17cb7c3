from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """snake_case attributes, camelCase on the wire."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "from_attributes": True}


def as_list(value: Any) -> Any:
    """Scalar-or-list filter values: ``"a"`` -> ``["a"]``, lists pass through, null stays null."""
    if value is None or isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]


ScalarOrList = Annotated[list[T], BeforeValidator(as_list)]


class Pagination(CamelModel):
    page: int
    limit: int
    total_items: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total_items=total, total_pages=(total + limit - 1) // limit)
