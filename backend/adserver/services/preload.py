"""
Seed Data Loader
Reads JSON arrays of campaigns, ads and historical events and pushes every
record through AdStore / AttributionTracker, so seed data obeys the same
validation as API calls. Bad records are skipped and logged.
"""

import json
import logging
import os
from typing import List, Optional

from pydantic import ValidationError as SchemaError

from sqlalchemy.orm import Session

from ..errors import ValidationError, NotFoundError
from ..schemas.advertisement import AdvertisementCreate
from ..schemas.analytics import EventSeed, PreloadSummary
from ..schemas.campaign import CampaignCreate
from .ad_store import AdStore
from .attribution import AttributionTracker

logger = logging.getLogger(__name__)

# Per-record failures that mean "skip this record", not "abort the load".
# TypeError comes from records that are not JSON objects.
RECORD_ERRORS = (SchemaError, ValidationError, NotFoundError, TypeError)


def _read_json_array(path: str) -> Optional[List]:
    if not path or not os.path.exists(path):
        logger.info(f"No preload file at {path}, skipping")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Invalid preload file {path}: {e}")
        return None

    if not isinstance(data, list):
        logger.warning(f"Preload file {path} must contain a JSON array, skipping")
        return None
    return data


class SeedLoader:
    def __init__(self, db: Session):
        self.store = AdStore(db)
        self.tracker = AttributionTracker(db)

    def load_campaigns(self, path: str, summary: PreloadSummary):
        records = _read_json_array(path)
        if records is None:
            return
        for record in records:
            try:
                seed = CampaignCreate(**record)
                self.store.create_campaign(seed.name)
                summary.campaigns += 1
            except RECORD_ERRORS as e:
                summary.skipped += 1
                logger.warning(f"Skipping invalid campaign {record!r}: {e}")
        logger.info(f"Loaded {summary.campaigns} campaigns from {path}")

    def load_ads(self, path: str, summary: PreloadSummary):
        records = _read_json_array(path)
        if records is None:
            return
        for record in records:
            try:
                self.store.create_ad(AdvertisementCreate(**record))
                summary.ads += 1
            except RECORD_ERRORS as e:
                summary.skipped += 1
                logger.warning(f"Skipping invalid ad {record!r}: {e}")
        logger.info(f"Loaded {summary.ads} ads from {path}")

    def load_events(self, path: str, summary: PreloadSummary):
        records = _read_json_array(path)
        if records is None:
            return
        for record in records:
            try:
                seed = EventSeed(**record)
                self.tracker.record_event(
                    seed.ad_id,
                    seed.action_type,
                    seed.ip,
                    seed.user_agent,
                    occurred_at=seed.viewed_at
                )
                summary.events += 1
            except RECORD_ERRORS as e:
                summary.skipped += 1
                logger.warning(f"Skipping invalid event {record!r}: {e}")
        logger.info(f"Loaded {summary.events} events from {path}")

    def load_all(self, campaigns_file: str, ads_file: str, events_file: str) -> PreloadSummary:
        """Campaigns first so ads can reference them, events last"""
        summary = PreloadSummary()
        self.load_campaigns(campaigns_file, summary)
        self.load_ads(ads_file, summary)
        self.load_events(events_file, summary)
        return summary
