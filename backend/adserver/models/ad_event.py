from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.helpers import utcnow

EVENT_TYPES = ("view", "click")

class AdEvent(Base):
    """Append-only attribution record; rows only disappear with their ad"""
    __tablename__ = "ad_events"
    
    id = Column(Integer, primary_key=True, index=True)
    ad_id = Column(Integer, ForeignKey("ads.id", ondelete="CASCADE"), nullable=False)
    
    event_type = Column(String(20), nullable=False)  # view, click
    
    ip_address = Column(String(45), nullable=False, default="")
    user_agent = Column(Text, nullable=False, default="")
    
    occurred_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationships
    advertisement = relationship("Advertisement", back_populates="events")
    
    __table_args__ = (
        CheckConstraint(
            "event_type IN ('view', 'click')",
            name='check_event_type'
        ),
        Index("idx_ad_events_ad", "ad_id", "event_type"),
    )
