import uuid
from masjid_screens.services.clock import utcnow
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
from masjid_screens.db import Base

CONTENT_TYPES = {
    "VERSE_HADITH",
    "ANNOUNCEMENT",
    "EVENT",
    "CUSTOM",
    "ASMA_AL_HUSNA",
}


class ContentItem(Base):
    __tablename__ = "content_item"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    masjid_id = Column(String(36), ForeignKey("masjid.id"), nullable=False, index=True)
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    # Renderer payload, passed through untouched.
    content = Column(JSON, nullable=True)
    duration = Column(Integer, nullable=False, default=30)
    is_active = Column(Boolean, nullable=False, default=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
