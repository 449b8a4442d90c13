"""Stored record definitions."""

from src.models.business import Business, Contact, Deal, Event, Location, Proof, Report, Review
from src.models.invite import Invite, InviteStatus, InviteType, Referral, ReferralStatus
from src.models.user import UserProfile

__all__ = [
    "Business",
    "Contact",
    "Deal",
    "Event",
    "Invite",
    "InviteStatus",
    "InviteType",
    "Location",
    "Proof",
    "Referral",
    "ReferralStatus",
    "Report",
    "Review",
    "UserProfile",
]
