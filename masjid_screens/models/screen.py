import uuid
from masjid_screens.services.clock import utcnow
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String
from masjid_screens.db import Base

STATUS_PAIRING = "PAIRING"
STATUS_ONLINE = "ONLINE"
STATUS_OFFLINE = "OFFLINE"
SCREEN_STATUSES = {STATUS_PAIRING, STATUS_ONLINE, STATUS_OFFLINE}

ORIENTATION_LANDSCAPE = "LANDSCAPE"
ORIENTATION_PORTRAIT = "PORTRAIT"
SCREEN_ORIENTATIONS = {ORIENTATION_LANDSCAPE, ORIENTATION_PORTRAIT}


class Screen(Base):
    __tablename__ = "screen"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    masjid_id = Column(String(36), ForeignKey("masjid.id"), nullable=True, index=True)
    name = Column(String, nullable=False)
    location = Column(String, nullable=True)
    device_type = Column(String, nullable=True)
    api_key = Column(String(64), nullable=True, unique=True)
    pairing_code = Column(String(6), nullable=True, unique=True)
    pairing_code_expiry = Column(DateTime, nullable=True)
    # Consumed pairing code kept until the device collects its API key once.
    handoff_code = Column(String(6), nullable=True, index=True)
    handoff_expiry = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default=STATUS_PAIRING)
    is_active = Column(Boolean, nullable=False, default=False)
    last_seen = Column(DateTime, nullable=True)
    orientation = Column(String, nullable=False, default=ORIENTATION_LANDSCAPE)
    schedule_id = Column(String(36), ForeignKey("content_schedule.id", ondelete="SET NULL"), nullable=True)
    content_config = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


class ScreenContentOverride(Base):
    __tablename__ = "screen_content_override"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    screen_id = Column(String(36), ForeignKey("screen.id", ondelete="CASCADE"), nullable=False, index=True)
    content_type = Column(String, nullable=False)
    payload = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow)
