from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, CheckConstraint, Index, JSON
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.helpers import utcnow

AD_TYPES = ("text", "image")

class Advertisement(Base):
    __tablename__ = "ads"
    
    id = Column(Integer, primary_key=True, index=True)
    ad_type = Column(String(20), nullable=False)  # text, image
    
    # Creative
    content = Column(Text, nullable=True)  # required for text ads
    image_url = Column(String(1024), nullable=True)  # required for image ads
    redirect_url = Column(String(2048), nullable=False)
    
    # Targeting - normalized lower-case labels
    tags = Column(JSON, nullable=False, default=list)
    
    campaign_id = Column(Integer, ForeignKey("campaigns.id", ondelete="SET NULL"), nullable=True)
    
    # Scheduling - NULL never expires
    expires_at = Column(DateTime, nullable=True)
    
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationships
    campaign = relationship("Campaign", back_populates="ads")
    events = relationship("AdEvent", back_populates="advertisement", cascade="all, delete-orphan", passive_deletes=True)
    
    __table_args__ = (
        CheckConstraint(
            "ad_type IN ('text', 'image')",
            name='check_ad_type'
        ),
        Index("idx_ads_expires", "expires_at"),
    )