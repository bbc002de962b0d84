"""
Models package - Import all SQLAlchemy models here
"""

from .campaign import Campaign
from .advertisement import Advertisement, AD_TYPES
from .ad_event import AdEvent, EVENT_TYPES

__all__ = [
    "Campaign",
    "Advertisement",
    "AdEvent",
    "AD_TYPES",
    "EVENT_TYPES"
]
