import os

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

DATABASE_URL = os.getenv("MASJID_DATABASE_URL", "sqlite:///./masjid_screens.db")


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(DATABASE_URL, connect_args=_connect_args(DATABASE_URL), pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def init_db() -> None:
    # Register every mapped table before create_all.
    from masjid_screens.models import content, content_schedule, masjid, prayer_time, screen, user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def dispose_db() -> None:
    engine.dispose()


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
