import uuid
from masjid_screens.services.clock import utcnow
from sqlalchemy import Column, DateTime, Float, String
from masjid_screens.db import Base


class Masjid(Base):
    __tablename__ = "masjid"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    timezone = Column(String, nullable=False, default="UTC")
    calculation_method = Column(String, nullable=True)
    madhab = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow)
