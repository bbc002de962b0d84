"""
Targeting Engine
Picks one ad per request. Requested tags are a preference: when nothing in the
active pool shares a tag with the request, selection falls back to the whole pool.
"""

import logging
import random
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, Sequence

from ..errors import NoAdsAvailableError
from ..models.advertisement import Advertisement
from ..utils.helpers import utcnow, to_storage_time, normalize_tags
from .ad_store import AdStore

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def choice(self, seq: Sequence): ...


def matching_ads(pool: Iterable[Advertisement], requested_tags: Iterable[str]) -> List[Advertisement]:
    """Ads sharing at least one tag with the request (case and whitespace insensitive)"""
    wanted = set(normalize_tags(requested_tags))
    if not wanted:
        return []
    return [ad for ad in pool if wanted.intersection(normalize_tags(ad.tags))]


class TargetingEngine:
    def __init__(self, store: AdStore, rng: Optional[RandomSource] = None):
        self.store = store
        self.rng = rng if rng is not None else random.SystemRandom()

    def select_ad(self, requested_tags: Optional[Iterable[str]] = None, now: Optional[datetime] = None) -> Advertisement:
        now = to_storage_time(now) or utcnow()

        pool = self.store.list_candidates(now)
        if not pool:
            raise NoAdsAvailableError("no ads available")

        wanted = normalize_tags(requested_tags)
        candidates = pool
        if wanted:
            matching = matching_ads(pool, wanted)
            if matching:
                candidates = matching
            else:
                logger.debug(f"No ad matches tags {wanted}, falling back to {len(pool)} active ads")

        return self.rng.choice(candidates)
