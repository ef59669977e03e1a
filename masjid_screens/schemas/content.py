from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ContentItemIn(BaseModel):
    type: str
    title: str = Field(..., min_length=1)
    content: Any = None
    duration: int = 30
    is_active: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None


class ContentItemUpdateIn(BaseModel):
    title: str | None = None
    content: Any = None
    duration: int | None = None
    is_active: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
