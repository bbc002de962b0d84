"""
Ad Store
Durable record of ads and campaigns, plus the candidate scan used by targeting
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import transaction, guard_storage
from ..errors import ValidationError, NotFoundError
from ..models.advertisement import Advertisement, AD_TYPES
from ..models.campaign import Campaign
from ..schemas.advertisement import AdvertisementBase
from ..utils.helpers import utcnow, to_storage_time, normalize_tags, is_row_id

logger = logging.getLogger(__name__)


def _active_at(now: datetime):
    return or_(Advertisement.expires_at.is_(None), Advertisement.expires_at > now)


class AdStore:
    def __init__(self, db: Session, candidate_limit: Optional[int] = None):
        self.db = db
        if candidate_limit is None:
            candidate_limit = settings.CANDIDATE_POOL_LIMIT
        if candidate_limit < 1:
            raise ValueError("candidate_limit must be at least 1")
        self.candidate_limit = candidate_limit

    # ========== VALIDATION ==========

    def _validate_ad(self, spec: AdvertisementBase):
        if spec.ad_type not in AD_TYPES:
            raise ValidationError(
                f"ad_type must be one of: {', '.join(AD_TYPES)}", field="ad_type"
            )
        if not (spec.redirect_url or "").strip():
            raise ValidationError("redirect_url is required", field="redirect_url")
        if spec.ad_type == "text" and not (spec.content or "").strip():
            raise ValidationError("content is required for text ads", field="content")
        if spec.ad_type == "image" and not (spec.image_url or "").strip():
            raise ValidationError("image_url is required for image ads", field="image_url")
        if spec.campaign_id is not None:
            if not is_row_id(spec.campaign_id) or self.db.get(Campaign, spec.campaign_id) is None:
                raise NotFoundError(f"Campaign {spec.campaign_id} not found")

    def _apply(self, ad: Advertisement, spec: AdvertisementBase):
        ad.content = spec.content
        ad.image_url = spec.image_url
        ad.redirect_url = spec.redirect_url.strip()
        ad.tags = normalize_tags(spec.tags)
        ad.campaign_id = spec.campaign_id
        ad.expires_at = to_storage_time(spec.expires_at)

    # ========== ADS ==========

    def create_ad(self, spec: AdvertisementBase) -> int:
        """Validate and persist a new ad, returning its id"""
        try:
            with transaction(self.db):
                self._validate_ad(spec)
                ad = Advertisement(ad_type=spec.ad_type)
                self._apply(ad, spec)
                self.db.add(ad)
                self.db.flush()
                ad_id = ad.id
        except IntegrityError as e:
            # campaign removed between the check and the insert
            raise NotFoundError(f"Campaign {spec.campaign_id} not found") from e

        logger.info(f"Ad {ad_id} created ({spec.ad_type}, tags={normalize_tags(spec.tags)})")
        return ad_id

    def update_ad(self, ad_id: int, spec: AdvertisementBase) -> None:
        """Replace the mutable fields of an ad; its kind is fixed at creation"""
        if not is_row_id(ad_id):
            raise NotFoundError(f"Ad {ad_id} not found")
        try:
            with transaction(self.db):
                ad = self.db.query(Advertisement).filter(
                    Advertisement.id == ad_id
                ).with_for_update().first()
                if ad is None:
                    raise NotFoundError(f"Ad {ad_id} not found")

                self._validate_ad(spec)
                if spec.ad_type != ad.ad_type:
                    raise ValidationError(
                        f"ad_type cannot change after creation (is '{ad.ad_type}')",
                        field="ad_type"
                    )
                self._apply(ad, spec)
        except IntegrityError as e:
            raise NotFoundError(f"Campaign {spec.campaign_id} not found") from e

        logger.info(f"Ad {ad_id} updated")

    def delete_ad(self, ad_id: int) -> None:
        """Remove an ad; its attribution events go with it"""
        if not is_row_id(ad_id):
            raise NotFoundError(f"Ad {ad_id} not found")
        with transaction(self.db):
            ad = self.db.get(Advertisement, ad_id)
            if ad is None:
                raise NotFoundError(f"Ad {ad_id} not found")
            self.db.delete(ad)

        logger.info(f"Ad {ad_id} deleted")

    def get_ad(self, ad_id: int) -> Advertisement:
        if not is_row_id(ad_id):
            raise NotFoundError(f"Ad {ad_id} not found")
        with guard_storage(self.db):
            ad = self.db.get(Advertisement, ad_id)
        if ad is None:
            raise NotFoundError(f"Ad {ad_id} not found")
        return ad

    def get_ad_redirect(self, ad_id: int) -> str:
        """Click-through destination of an ad"""
        if not is_row_id(ad_id):
            raise NotFoundError(f"Ad {ad_id} not found")
        with guard_storage(self.db):
            row = self.db.query(Advertisement.redirect_url).filter(
                Advertisement.id == ad_id
            ).first()
        if row is None:
            raise NotFoundError(f"Ad {ad_id} not found")
        return row.redirect_url

    def list_ads(self, active_only: bool = False, now: Optional[datetime] = None) -> List[Advertisement]:
        """All ads, most recently created first"""
        with guard_storage(self.db):
            query = self.db.query(Advertisement)
            if active_only:
                query = query.filter(_active_at(to_storage_time(now) or utcnow()))
            return query.order_by(
                Advertisement.created_at.desc(), Advertisement.id.desc()
            ).all()

    def list_candidates(self, now: datetime) -> List[Advertisement]:
        """Ads active at `now`, at most `candidate_limit` of them.

        Oversized pools are sampled in random order by the database so the cap
        does not favour old or new ads; the sample is returned ordered by id.
        """
        with guard_storage(self.db):
            ads = self.db.query(Advertisement).filter(
                _active_at(to_storage_time(now))
            ).order_by(func.random()).limit(self.candidate_limit).all()

        return sorted(ads, key=lambda ad: ad.id)

    # ========== CAMPAIGNS ==========

    def create_campaign(self, name: str) -> int:
        name = (name or "").strip()
        if not name:
            raise ValidationError("name is required", field="name")

        with transaction(self.db):
            campaign = Campaign(name=name)
            self.db.add(campaign)
            self.db.flush()
            campaign_id = campaign.id

        logger.info(f"Campaign {campaign_id} '{name}' created")
        return campaign_id

    def delete_campaign(self, campaign_id: int) -> None:
        """Remove a campaign; its ads stay, with the reference cleared"""
        if not is_row_id(campaign_id):
            raise NotFoundError(f"Campaign {campaign_id} not found")
        with transaction(self.db):
            campaign = self.db.get(Campaign, campaign_id)
            if campaign is None:
                raise NotFoundError(f"Campaign {campaign_id} not found")

            detached = self.db.query(Advertisement).filter(
                Advertisement.campaign_id == campaign_id
            ).update({Advertisement.campaign_id: None}, synchronize_session="fetch")
            self.db.delete(campaign)

        logger.info(f"Campaign {campaign_id} deleted, {detached} ads detached")

    def list_campaigns(self) -> List[Campaign]:
        with guard_storage(self.db):
            return self.db.query(Campaign).order_by(
                Campaign.created_at.desc(), Campaign.id.desc()
            ).all()
