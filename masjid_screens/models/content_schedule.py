import uuid
from masjid_screens.services.clock import utcnow
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, text
from masjid_screens.db import Base


class ContentSchedule(Base):
    __tablename__ = "content_schedule"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    masjid_id = Column(String(36), ForeignKey("masjid.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        # At most one default schedule per masjid.
        Index(
            "ux_content_schedule_default",
            "masjid_id",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default"),
        ),
    )


class ContentScheduleItem(Base):
    __tablename__ = "content_schedule_item"
    # Integer key doubles as the insertion-order tie-break for equal `order`.
    id = Column(Integer, primary_key=True, autoincrement=True)
    schedule_id = Column(String(36), ForeignKey("content_schedule.id", ondelete="CASCADE"), nullable=False, index=True)
    content_item_id = Column(String(36), ForeignKey("content_item.id", ondelete="CASCADE"), nullable=False)
    order = Column(Integer, nullable=False)
