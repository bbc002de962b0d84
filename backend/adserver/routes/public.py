"""
Public API
Ad selection, click-through redirect and impression ping for client pages
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..limiter import limiter
from ..schemas.advertisement import AdvertisementResponse
from ..services.ad_store import AdStore
from ..services.attribution import AttributionTracker
from ..services.targeting import TargetingEngine, RandomSource
from ..utils.helpers import parse_tag_param

router = APIRouter(tags=["Public"])


def get_random_source() -> Optional[RandomSource]:
    """Random source for ad selection; None selects with SystemRandom"""
    return None


def client_address(request: Request) -> str:
    return request.client.host if request.client else ""


@router.get("/ad/random", response_model=AdvertisementResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def get_random_ad(
    request: Request,
    tags: Optional[str] = None,
    db: Session = Depends(get_db),
    rng: Optional[RandomSource] = Depends(get_random_source)
):
    """Pick one active ad, preferring ads that share a tag with ?tags=a,b"""
    engine = TargetingEngine(AdStore(db), rng=rng)
    return engine.select_ad(parse_tag_param(tags))


@router.get("/redirect/{ad_id}")
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def redirect_to_ad(ad_id: int, request: Request, db: Session = Depends(get_db)):
    redirect_url = AttributionTracker(db).record_click(
        ad_id,
        client_address(request),
        request.headers.get("user-agent", "")
    )
    return RedirectResponse(url=redirect_url, status_code=302)


@router.post("/impression/{ad_id}")
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
def log_impression(ad_id: int, request: Request, db: Session = Depends(get_db)):
    event_id = AttributionTracker(db).record_event(
        ad_id,
        "view",
        client_address(request),
        request.headers.get("user-agent", "")
    )
    return {"status": "logged", "event_id": event_id}
