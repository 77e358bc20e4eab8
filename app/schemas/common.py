# app/schemas/common.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from app.utils.periods import to_naive_utc

class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

class AmountSummary(CamelModel):
    total_amount: float = 0.0
    count: int = 0
    average_amount: float = 0.0

class MessageResponse(BaseModel):
    message: str

class UTCModel(CamelModel):
    """Converts every incoming aware datetime to naive UTC."""

    @field_validator("*", mode="after")
    @classmethod
    def _naive_utc(cls, value):
        if isinstance(value, datetime):
            return to_naive_utc(value)
        return value
