"""Cursor pagination over document store collections."""

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, TypeVar

from src.api.middleware.error_handler import ValidationError
from src.core.config import get_settings
from src.core.document_store import (
    Cursor,
    DocumentStore,
    FilterOp,
    QueryFilter,
    SortDirection,
    get_document_store,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sorts after every other character, so term + suffix bounds all strings with prefix term.
PREFIX_SEARCH_SUFFIX = "\uf8ff"


@dataclass
class PageRequest:
    """Parameters for fetching one page of an ordered collection.

    ``start_after`` and ``end_before`` are opaque tokens produced by an
    earlier ``PageResult``; at most one of them may be given.
    """

    page_size: int = 10
    order_field: str = "created_at"
    direction: SortDirection = SortDirection.DESC
    start_after: str | None = None
    end_before: str | None = None
    filters: list[QueryFilter] = field(default_factory=list)


@dataclass
class PageResult(Generic[T]):
    """One page of rows plus the cursors to move away from it."""

    items: list[T]
    has_next: bool
    has_prev: bool
    next_cursor: str | None = None
    prev_cursor: str | None = None
    total_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "items": self.items,
            "next_cursor": self.next_cursor,
            "prev_cursor": self.prev_cursor,
            "has_next": self.has_next,
            "has_prev": self.has_prev,
            "total_count": self.total_count,
        }


def _decode_cursor(token: str | None, name: str) -> Cursor | None:
    if token is None:
        return None
    try:
        return Cursor.decode(token)
    except ValueError as e:
        raise ValidationError(f"Invalid {name} cursor", details=[{"field": name, "value": token}]) from e


class PaginationHelper:
    """Fetches N+1 ordered rows and turns them into a page.

    The extra row only signals that another page exists; it is never
    returned. ``has_prev`` reports whether the caller supplied a cursor, not
    whether earlier rows actually exist.
    """

    def __init__(self, store: DocumentStore | None = None, max_page_size: int | None = None) -> None:
        """Initialize the helper.

        Args:
            store: Optional document store override.
            max_page_size: Upper bound for page sizes (settings default if omitted).
        """
        self.store = store or get_document_store()
        self.max_page_size = max_page_size or get_settings().max_page_size

    def _page_size(self, requested: int) -> int:
        if requested <= 0:
            raise ValidationError(
                "page_size must be greater than zero",
                details=[{"field": "page_size", "value": requested}],
            )
        return min(requested, self.max_page_size)

    async def paginate(self, collection: str, request: PageRequest) -> PageResult[dict[str, Any]]:
        """Fetch one page of ``collection``.

        Args:
            collection: Table name.
            request: Page size, ordering, filters and optional cursor.

        Returns:
            PageResult: Up to ``page_size`` rows and navigation cursors.

        Raises:
            ValidationError: If the page size or a cursor is invalid, or both
                cursors are supplied.
        """
        page_size = self._page_size(request.page_size)

        if request.start_after is not None and request.end_before is not None:
            raise ValidationError("Supply either start_after or end_before, not both")

        start_after = _decode_cursor(request.start_after, "start_after")
        end_before = _decode_cursor(request.end_before, "end_before")

        rows = await self.store.query(
            collection,
            filters=request.filters,
            order_by=request.order_field,
            direction=request.direction,
            limit=page_size + 1,
            start_after=start_after,
            end_before=end_before,
        )

        has_next = len(rows) > page_size
        has_prev = start_after is not None or end_before is not None
        items = rows[:page_size]

        next_cursor = None
        if has_next:
            next_cursor = Cursor.from_row(items[-1], request.order_field).encode()

        prev_cursor = None
        if has_prev and items:
            prev_cursor = Cursor.from_row(items[0], request.order_field).encode()

        logger.debug(
            "Paginated %s: %d items, has_next=%s, has_prev=%s",
            collection,
            len(items),
            has_next,
            has_prev,
        )

        return PageResult(
            items=items,
            has_next=has_next,
            has_prev=has_prev,
            next_cursor=next_cursor,
            prev_cursor=prev_cursor,
        )

    async def get_total_count(self, collection: str, filters: Iterable[QueryFilter] = ()) -> int:
        """Count every row matching ``filters``."""
        return await self.store.count(collection, filters)

    async def search(
        self,
        collection: str,
        search_field: str,
        term: str,
        request: PageRequest | None = None,
    ) -> PageResult[dict[str, Any]]:
        """Prefix search on ``search_field``, paginated.

        Matches rows whose field starts with ``term``; substrings elsewhere
        in the value are not matched. Results are ordered by the searched
        field. Filters on ``request`` are kept and combined with the prefix
        range.

        Raises:
            ValidationError: If the search term is empty.
        """
        if not term:
            raise ValidationError("Search term must not be empty")

        request = request or PageRequest()
        search_request = PageRequest(
            page_size=request.page_size,
            order_field=search_field,
            direction=request.direction,
            start_after=request.start_after,
            end_before=request.end_before,
            filters=[
                *request.filters,
                QueryFilter(search_field, FilterOp.GTE, term),
                QueryFilter(search_field, FilterOp.LT, term + PREFIX_SEARCH_SUFFIX),
            ],
        )
        return await self.paginate(collection, search_request)
