from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from ..database import Base
from ..utils.helpers import utcnow

class Campaign(Base):
    __tablename__ = "campaigns"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Deleting a campaign clears ads.campaign_id, it never deletes the ads
    ads = relationship("Advertisement", back_populates="campaign", passive_deletes=True)
