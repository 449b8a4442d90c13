"""Collection-scoped document store on top of Supabase tables.

Every service talks to the database through this module. It exposes the
small set of operations the application needs (add, get, set, update,
delete, filtered/ordered queries with keyset cursors and counts) and turns
PostgREST failures into ``StoreError``.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

from supabase import Client

from src.core.supabase import get_supabase_client

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the hosted document store rejects or fails a request."""


class FilterOp(str, Enum):
    """Comparison operators supported in query filters."""

    EQ = "=="
    NE = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    IN = "in"
    ARRAY_CONTAINS = "array-contains"


class SortDirection(str, Enum):
    """Ordering direction for queries."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class QueryFilter:
    """A single ``field <op> value`` condition."""

    field: str
    op: FilterOp
    value: Any

    def __post_init__(self) -> None:
        # Accept plain operator strings such as ">=".
        object.__setattr__(self, "op", FilterOp(self.op))


@dataclass(frozen=True)
class Cursor:
    """Position of a boundary row in an ordered query.

    Rows are ordered by ``(order_field, id)`` so the pair identifies a single
    position even when several rows share the same order value.
    """

    value: Any
    id: str

    def encode(self) -> str:
        """Encode the cursor as an opaque URL-safe token."""
        raw = json.dumps({"v": self.value, "id": self.id}, separators=(",", ":"))
        return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")

    @classmethod
    def decode(cls, token: str) -> "Cursor":
        """Decode a token produced by ``encode``.

        Raises:
            ValueError: If the token is not a valid cursor.
        """
        padded = token + "=" * (-len(token) % 4)
        try:
            payload = json.loads(base64.urlsafe_b64decode(padded.encode()))
        except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ValueError(f"Malformed cursor: {token!r}") from e

        if not isinstance(payload, dict) or "id" not in payload or "v" not in payload:
            raise ValueError(f"Malformed cursor: {token!r}")

        return cls(value=payload["v"], id=str(payload["id"]))

    @classmethod
    def from_row(cls, row: dict[str, Any], order_field: str) -> "Cursor":
        """Build the cursor pointing at ``row``."""
        return cls(value=row.get(order_field), id=str(row["id"]))


def serialize_value(value: Any) -> Any:
    """Convert Python values into their stored JSON representation."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [serialize_value(v) for v in value]
    return value


def _literal(value: Any) -> str:
    """Render a value for use inside a PostgREST logic filter."""
    value = serialize_value(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return "null"
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _apply_filter(query: Any, query_filter: QueryFilter) -> Any:
    """Apply a single filter to a PostgREST query builder."""
    field = query_filter.field
    value = serialize_value(query_filter.value)
    op = query_filter.op

    if op is FilterOp.EQ:
        return query.eq(field, value)
    if op is FilterOp.NE:
        return query.neq(field, value)
    if op is FilterOp.LT:
        return query.lt(field, value)
    if op is FilterOp.LTE:
        return query.lte(field, value)
    if op is FilterOp.GT:
        return query.gt(field, value)
    if op is FilterOp.GTE:
        return query.gte(field, value)
    if op is FilterOp.IN:
        return query.in_(field, list(value))
    return query.contains(field, [value])


def _keyset_condition(order_field: str, cursor: Cursor, op: str) -> str:
    """Build the ``or`` filter selecting rows strictly past ``cursor``.

    ``op`` is ``lt`` or ``gt`` depending on the direction of travel.
    """
    value = _literal(cursor.value)
    row_id = _literal(cursor.id)
    return f"{order_field}.{op}.{value},and({order_field}.eq.{value},id.{op}.{row_id})"


class DocumentStore:
    """Thin collection-scoped wrapper over Supabase tables."""

    def __init__(self, client: Client | None = None) -> None:
        """Initialize the store with the shared Supabase client.

        Args:
            client: Optional client override (defaults to the singleton).
        """
        self.client = client or get_supabase_client()

    def _execute(self, collection: str, builder: Any) -> Any:
        try:
            return builder.execute()
        except Exception as e:
            logger.error("Document store request on %s failed: %s", collection, e)
            raise StoreError(f"Document store request on '{collection}' failed") from e

    async def add(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document and return it with its generated id."""
        response = self._execute(
            collection,
            self.client.table(collection).insert(serialize_value(data)),
        )
        return response.data[0]

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Get a document by id, or None if it does not exist."""
        response = self._execute(
            collection,
            self.client.table(collection).select("*").eq("id", str(doc_id)).limit(1),
        )
        return response.data[0] if response.data else None

    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create or replace the document with the given id."""
        payload = {**serialize_value(data), "id": str(doc_id)}
        response = self._execute(
            collection,
            self.client.table(collection).upsert(payload),
        )
        return response.data[0] if response.data else payload

    async def update(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Update fields on a document.

        Returns:
            dict | None: The updated document, or None if no document matched.
        """
        response = self._execute(
            collection,
            self.client.table(collection).update(serialize_value(data)).eq("id", str(doc_id)),
        )
        return response.data[0] if response.data else None

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns whether a document was removed."""
        response = self._execute(
            collection,
            self.client.table(collection).delete().eq("id", str(doc_id)),
        )
        return bool(response.data)

    async def query(
        self,
        collection: str,
        filters: Iterable[QueryFilter] = (),
        order_by: str | None = None,
        direction: SortDirection = SortDirection.DESC,
        limit: int | None = None,
        start_after: Cursor | None = None,
        end_before: Cursor | None = None,
    ) -> list[dict[str, Any]]:
        """Run a filtered, ordered query.

        Args:
            collection: Table name.
            filters: Conditions combined with AND.
            order_by: Field to order by (ties broken by id).
            direction: Ordering direction.
            limit: Maximum rows to return.
            start_after: Only rows after this position in the ordering.
            end_before: Only rows before this position in the ordering.

        Returns:
            list[dict]: Matching rows.
        """
        query = self.client.table(collection).select("*")

        for query_filter in filters:
            query = _apply_filter(query, query_filter)

        if order_by:
            descending = SortDirection(direction) is SortDirection.DESC
            forward_op = "lt" if descending else "gt"
            backward_op = "gt" if descending else "lt"

            if start_after is not None:
                query = query.or_(_keyset_condition(order_by, start_after, forward_op))
            if end_before is not None:
                query = query.or_(_keyset_condition(order_by, end_before, backward_op))

            query = query.order(order_by, desc=descending).order("id", desc=descending)

        if limit is not None:
            query = query.limit(limit)

        response = self._execute(collection, query)
        return response.data or []

    async def count(self, collection: str, filters: Iterable[QueryFilter] = ()) -> int:
        """Count matching rows by scanning their ids."""
        query = self.client.table(collection).select("id")
        for query_filter in filters:
            query = _apply_filter(query, query_filter)

        response = self._execute(collection, query)
        return len(response.data or [])


_document_store: DocumentStore | None = None


def get_document_store() -> DocumentStore:
    """Get or create the global document store instance."""
    global _document_store
    if _document_store is None:
        _document_store = DocumentStore()
    return _document_store
