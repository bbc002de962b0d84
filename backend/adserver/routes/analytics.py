from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..schemas.analytics import AdStat, PreloadSummary
from ..services.analytics import AnalyticsAggregator
from ..services.preload import SeedLoader
from ..utils.security import require_api_token

router = APIRouter(tags=["Analytics"], dependencies=[Depends(require_api_token)])


@router.get("/analytics/stats", response_model=List[AdStat])
def get_stats(since: Optional[datetime] = None, db: Session = Depends(get_db)):
    """Views, clicks and CTR for every ad, most viewed first"""
    return AnalyticsAggregator(db).compute_stats(since=since)


@router.get("/analytics/stats/{ad_id}", response_model=AdStat)
def get_ad_stats(ad_id: int, since: Optional[datetime] = None, db: Session = Depends(get_db)):
    return AnalyticsAggregator(db).get_ad_stats(ad_id, since=since)


@router.post("/preload/reload", response_model=PreloadSummary)
def reload_seed_data(db: Session = Depends(get_db)):
    """Re-run the JSON seed files through the regular validation path"""
    return SeedLoader(db).load_all(
        settings.PRELOAD_CAMPAIGNS_FILE,
        settings.PRELOAD_ADS_FILE,
        settings.PRELOAD_EVENTS_FILE
    )
