import uuid
from masjid_screens.services.clock import utcnow
from sqlalchemy import Column, DateTime, ForeignKey, String
from masjid_screens.db import Base

ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"


class User(Base):
    __tablename__ = "app_user"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default=ROLE_USER)
    masjid_id = Column(String(36), ForeignKey("masjid.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow)


class UserSession(Base):
    __tablename__ = "user_session"
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime, nullable=False)
    last_active = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
