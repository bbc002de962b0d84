from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime

from ..utils.helpers import to_storage_time

class AdStat(BaseModel):
    ad_id: int
    views: int
    clicks: int
    ctr: str
    ad_type: str
    ad_content: Optional[str] = None
    image_url: Optional[str] = None
    campaign_id: Optional[int] = None

# Seed record for replaying historical attribution events
class EventSeed(BaseModel):
    ad_id: int
    action_type: str
    ip: str = ""
    user_agent: str = ""
    viewed_at: Optional[datetime] = None
    
    @validator('viewed_at')
    def validate_viewed_at(cls, v):
        return to_storage_time(v)

class PreloadSummary(BaseModel):
    campaigns: int = 0
    ads: int = 0
    events: int = 0
    skipped: int = 0
