from pydantic import BaseModel, Field


class UnpairedScreenIn(BaseModel):
    device_type: str | None = Field(None, alias="deviceType")
    orientation: str | None = None

    class Config:
        populate_by_name = True


class PairingCodeIn(BaseModel):
    pairing_code: str | None = Field(None, alias="pairingCode")

    class Config:
        populate_by_name = True


class ClaimScreenIn(BaseModel):
    pairing_code: str | None = Field(None, alias="pairingCode")
    name: str | None = None
    location: str | None = None

    class Config:
        populate_by_name = True


class HeartbeatIn(BaseModel):
    status: str | None = None
    metrics: dict | None = None


class ScreenUpdateIn(BaseModel):
    name: str | None = None
    location: str | None = None
    orientation: str | None = None


class AssignScheduleIn(BaseModel):
    schedule_id: str | None = None
