"""
Analytics Aggregator
Per-ad view/click counts and click-through rate, computed on demand from the
attribution log
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, case, func
from sqlalchemy.orm import Session

from ..database import guard_storage
from ..errors import NotFoundError
from ..models.ad_event import AdEvent
from ..models.advertisement import Advertisement
from ..schemas.analytics import AdStat
from ..utils.helpers import to_storage_time, format_ctr, is_row_id


class AnalyticsAggregator:
    def __init__(self, db: Session):
        self.db = db

    def _stats_query(self, since: Optional[datetime] = None):
        join_on = AdEvent.ad_id == Advertisement.id
        if since is not None:
            join_on = and_(join_on, AdEvent.occurred_at >= to_storage_time(since))

        views = func.coalesce(
            func.sum(case((AdEvent.event_type == "view", 1), else_=0)), 0
        ).label("views")
        clicks = func.coalesce(
            func.sum(case((AdEvent.event_type == "click", 1), else_=0)), 0
        ).label("clicks")

        # Outer join keeps ads that have no events yet
        return self.db.query(
            Advertisement.id,
            Advertisement.ad_type,
            Advertisement.content,
            Advertisement.image_url,
            Advertisement.campaign_id,
            views,
            clicks
        ).outerjoin(AdEvent, join_on).group_by(
            Advertisement.id,
            Advertisement.ad_type,
            Advertisement.content,
            Advertisement.image_url,
            Advertisement.campaign_id
        ).order_by(views.desc(), Advertisement.id.asc())

    @staticmethod
    def _to_stat(row) -> AdStat:
        views = int(row.views or 0)
        clicks = int(row.clicks or 0)
        return AdStat(
            ad_id=row.id,
            views=views,
            clicks=clicks,
            ctr=format_ctr(clicks, views),
            ad_type=row.ad_type,
            ad_content=row.content,
            image_url=row.image_url,
            campaign_id=row.campaign_id
        )

    def compute_stats(self, since: Optional[datetime] = None) -> List[AdStat]:
        """Stats for every ad, most viewed first (ties by ad id)"""
        with guard_storage(self.db):
            rows = self._stats_query(since).all()
        return [self._to_stat(row) for row in rows]

    def get_ad_stats(self, ad_id: int, since: Optional[datetime] = None) -> AdStat:
        """Stats for a single ad"""
        if not is_row_id(ad_id):
            raise NotFoundError(f"Ad {ad_id} not found")
        with guard_storage(self.db):
            row = self._stats_query(since).filter(Advertisement.id == ad_id).first()
        if row is None:
            raise NotFoundError(f"Ad {ad_id} not found")
        return self._to_stat(row)
