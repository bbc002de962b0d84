from pydantic import BaseModel, validator
from typing import List, Optional
from datetime import datetime

from ..utils.helpers import normalize_tags, to_storage_time

# Advertisement Schemas
# Kind-dependent required fields are checked by AdStore, not here, so that a
# missing field surfaces as the same ValidationError for HTTP and seed data.
class AdvertisementBase(BaseModel):
    ad_type: str
    content: Optional[str] = None
    image_url: Optional[str] = None
    redirect_url: Optional[str] = None
    tags: List[str] = []
    campaign_id: Optional[int] = None
    expires_at: Optional[datetime] = None
    
    @validator('tags', pre=True)
    def validate_tags(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple, set)):
            raise ValueError("tags must be a list of strings or a comma-separated string")
        return normalize_tags(v)
    
    @validator('campaign_id')
    def validate_campaign_id(cls, v):
        if v is None:
            return v
        if v < 0:
            raise ValueError("campaign_id must not be negative")
        # seed files use 0 for "no campaign"
        return v or None
    
    @validator('expires_at')
    def validate_expires_at(cls, v):
        return to_storage_time(v)

class AdvertisementCreate(AdvertisementBase):
    pass

class AdvertisementUpdate(AdvertisementBase):
    """Full replacement of an ad's mutable fields"""
    pass

class AdvertisementResponse(BaseModel):
    id: int
    ad_type: str
    content: Optional[str]
    image_url: Optional[str]
    redirect_url: str
    tags: List[str]
    campaign_id: Optional[int]
    expires_at: Optional[datetime]
    created_at: datetime
    
    class Config:
        from_attributes = True
