"""
Attribution Tracker
Appends view/click events against existing ads. Every call writes exactly one
row; repeated identical calls are repeated events.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..database import transaction
from ..errors import AdServerError, ValidationError, NotFoundError
from ..models.ad_event import AdEvent, EVENT_TYPES
from ..models.advertisement import Advertisement
from ..utils.helpers import utcnow, to_storage_time, is_row_id
from .ad_store import AdStore

logger = logging.getLogger(__name__)

MAX_USER_AGENT_LENGTH = 512


class AttributionTracker:
    def __init__(self, db: Session):
        self.db = db

    def record_event(
        self,
        ad_id: int,
        kind: str,
        address: str = None,
        user_agent: str = None,
        occurred_at: Optional[datetime] = None
    ) -> int:
        """Record a view or click and return the new event id.

        The existence check and the insert share one transaction; the foreign
        key on ad_events.ad_id catches an ad deleted in between.
        """
        if kind not in EVENT_TYPES:
            raise ValidationError(
                f"event type must be one of: {', '.join(EVENT_TYPES)}", field="event_type"
            )
        if not is_row_id(ad_id):
            raise NotFoundError(f"Ad {ad_id} not found")

        try:
            with transaction(self.db):
                exists = self.db.query(Advertisement.id).filter(
                    Advertisement.id == ad_id
                ).first()
                if exists is None:
                    raise NotFoundError(f"Ad {ad_id} not found")

                event = AdEvent(
                    ad_id=ad_id,
                    event_type=kind,
                    ip_address=(address or "")[:45],
                    user_agent=(user_agent or "")[:MAX_USER_AGENT_LENGTH],
                    occurred_at=to_storage_time(occurred_at) or utcnow()
                )
                self.db.add(event)
                self.db.flush()
                event_id = event.id
        except IntegrityError as e:
            raise NotFoundError(f"Ad {ad_id} not found") from e

        return event_id

    def record_click(self, ad_id: int, address: str = None, user_agent: str = None) -> str:
        """Resolve the click-through URL and record the click.

        An unknown ad raises NotFoundError. A failed event write is logged and
        the URL is still returned, so the visitor is always redirected.
        """
        redirect_url = AdStore(self.db).get_ad_redirect(ad_id)

        try:
            self.record_event(ad_id, "click", address, user_agent)
        except (AdServerError, SQLAlchemyError) as e:
            logger.error(f"Failed to record click for ad {ad_id}: {e}")

        return redirect_url
