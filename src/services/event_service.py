"""Events service."""

from datetime import datetime
from enum import Enum
from typing import Callable

from src.core.document_store import DocumentStore, QueryFilter, SortDirection, get_document_store
from src.models.business import Event
from src.services.invite_service import utcnow

EVENTS = "events"


class EventFilter(str, Enum):
    """Which events to list relative to today."""

    UPCOMING = "upcoming"
    PAST = "past"
    ALL = "all"


class EventService:
    """Service for community events."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store or get_document_store()
        self.clock = clock or utcnow

    async def list_events(self, event_filter: EventFilter = EventFilter.UPCOMING) -> list[Event]:
        """List events.

        Upcoming events (today onwards) come soonest first; past and all
        events come most recent first. Dates compare as YYYY-MM-DD strings.
        """
        today = self.clock().date().isoformat()

        if event_filter == EventFilter.UPCOMING:
            filters = [QueryFilter("event_date", ">=", today)]
            direction = SortDirection.ASC
        elif event_filter == EventFilter.PAST:
            filters = [QueryFilter("event_date", "<", today)]
            direction = SortDirection.DESC
        else:
            filters = []
            direction = SortDirection.DESC

        rows = await self.store.query(
            EVENTS,
            filters=filters,
            order_by="event_date",
            direction=direction,
        )
        return [Event.model_validate(row) for row in rows]
