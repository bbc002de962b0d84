"""
Shared fixtures for the unit tests: a fresh in-memory database per test and
builders for valid ad specs.
"""

from datetime import datetime

from sqlalchemy.orm import sessionmaker

from adserver.database import build_engine, init_db
from adserver.schemas.advertisement import AdvertisementCreate

NOW = datetime(2030, 1, 1, 12, 0, 0)


def make_session_factory():
    """In-memory SQLite with foreign keys on and all tables created"""
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


def text_ad(**overrides) -> AdvertisementCreate:
    data = {
        "ad_type": "text",
        "content": "Fresh vegetables delivered daily",
        "redirect_url": "https://example.com/veg",
        "tags": [],
    }
    data.update(overrides)
    return AdvertisementCreate(**data)


def image_ad(**overrides) -> AdvertisementCreate:
    data = {
        "ad_type": "image",
        "image_url": "/static/images/banner.png",
        "redirect_url": "https://example.com/banner",
        "tags": [],
    }
    data.update(overrides)
    return AdvertisementCreate(**data)
