from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List

from ..database import get_db
from ..schemas.advertisement import (
    AdvertisementCreate, AdvertisementUpdate, AdvertisementResponse
)
from ..schemas.campaign import CampaignCreate, CampaignResponse
from ..services.ad_store import AdStore
from ..utils.security import require_api_token

router = APIRouter(tags=["Advertisements"], dependencies=[Depends(require_api_token)])

# Get all advertisements
@router.get("/ads", response_model=List[AdvertisementResponse])
def get_advertisements(active: bool = False, db: Session = Depends(get_db)):
    return AdStore(db).list_ads(active_only=active)

# Get single advertisement
@router.get("/ad/{ad_id}", response_model=AdvertisementResponse)
def get_advertisement(ad_id: int, db: Session = Depends(get_db)):
    return AdStore(db).get_ad(ad_id)

# Create advertisement
@router.post("/ad/add", response_model=AdvertisementResponse, status_code=status.HTTP_201_CREATED)
def create_advertisement(ad: AdvertisementCreate, db: Session = Depends(get_db)):
    store = AdStore(db)
    ad_id = store.create_ad(ad)
    return store.get_ad(ad_id)

# Update advertisement
@router.put("/ad/update/{ad_id}", response_model=AdvertisementResponse)
def update_advertisement(ad_id: int, ad: AdvertisementUpdate, db: Session = Depends(get_db)):
    store = AdStore(db)
    store.update_ad(ad_id, ad)
    return store.get_ad(ad_id)

# Delete advertisement (and its events)
@router.delete("/ad/delete/{ad_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_advertisement(ad_id: int, db: Session = Depends(get_db)):
    AdStore(db).delete_ad(ad_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# ========== CAMPAIGNS ==========

@router.get("/campaigns", response_model=List[CampaignResponse])
def get_campaigns(db: Session = Depends(get_db)):
    return AdStore(db).list_campaigns()

@router.post("/campaign/add", status_code=status.HTTP_201_CREATED)
def create_campaign(campaign: CampaignCreate, db: Session = Depends(get_db)):
    campaign_id = AdStore(db).create_campaign(campaign.name)
    return {"status": "created", "id": campaign_id}

@router.delete("/campaign/delete/{campaign_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_campaign(campaign_id: int, db: Session = Depends(get_db)):
    AdStore(db).delete_campaign(campaign_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
