from pydantic import BaseModel, Field


class ScheduleCreateIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: str | None = None
    is_active: bool = True
    content_item_ids: list[str] = []


class ScheduleUpdateIn(BaseModel):
    name: str | None = None
    description: str | None = None
    is_active: bool | None = None
    content_item_ids: list[str] | None = None


class ToggleActiveIn(BaseModel):
    is_active: bool


class DuplicateScheduleIn(BaseModel):
    source_schedule_id: str
    name: str = Field(..., min_length=1)
