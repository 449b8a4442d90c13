"""Deals service."""

import logging
from datetime import date, datetime
from typing import Callable

from src.core.document_store import DocumentStore, get_document_store
from src.models.business import Deal
from src.services.invite_service import utcnow

logger = logging.getLogger(__name__)

DEALS = "deals"


class DealService:
    """Service for promotional deals posted by admins."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store or get_document_store()
        self.clock = clock or utcnow

    async def list_active(self) -> list[Deal]:
        """List deals that have not expired, newest first.

        A deal without an expiry date never expires; one expiring today is
        still active.
        """
        today = self.clock().date()
        rows = await self.store.query(DEALS, order_by="created_at")
        deals = [Deal.model_validate(row) for row in rows]
        return [d for d in deals if d.expiry_date is None or d.expiry_date >= today]

    async def create_deal(
        self,
        title: str,
        description: str,
        business_name: str,
        expiry_date: date | None = None,
    ) -> Deal:
        """Post a new deal."""
        row = await self.store.add(
            DEALS,
            {
                "title": title,
                "description": description,
                "business_name": business_name,
                "expiry_date": expiry_date,
                "created_at": self.clock(),
            },
        )
        deal = Deal.model_validate(row)
        logger.info("Deal %s posted for %s", deal.id, business_name)
        return deal
