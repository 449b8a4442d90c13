"""Unit tests for PaginationHelper."""

import pytest

from src.api.middleware.error_handler import ValidationError
from src.core.document_store import Cursor, QueryFilter, SortDirection
from src.services.pagination import PREFIX_SEARCH_SUFFIX, PageRequest, PaginationHelper
from tests.fakes import FakeDocumentStore


@pytest.fixture
def store() -> FakeDocumentStore:
    """Five items created one minute apart (item-5 is newest)."""
    store = FakeDocumentStore()
    for i in range(1, 6):
        store.seed(
            "items",
            f"item-{i}",
            {"name": f"name-{i}", "created_at": f"2024-01-01T00:0{i}:00+00:00", "kind": "a" if i % 2 else "b"},
        )
    return store


@pytest.fixture
def helper(store: FakeDocumentStore) -> PaginationHelper:
    return PaginationHelper(store=store, max_page_size=3)


def ids(items: list[dict]) -> list[str]:
    return [item["id"] for item in items]


class TestPaginate:
    """Tests for paginate."""

    @pytest.mark.asyncio
    async def test_first_page_has_next(self, helper: PaginationHelper) -> None:
        """Test that the first page trims the sentinel row and reports more."""
        page = await helper.paginate("items", PageRequest(page_size=2))

        assert ids(page.items) == ["item-5", "item-4"]
        assert page.has_next is True
        assert page.has_prev is False
        assert page.next_cursor is not None
        assert page.prev_cursor is None

    @pytest.mark.asyncio
    async def test_next_cursor_points_at_last_item(self, helper: PaginationHelper) -> None:
        """Test that next_cursor encodes the last returned row."""
        page = await helper.paginate("items", PageRequest(page_size=2))

        cursor = Cursor.decode(page.next_cursor)
        assert cursor.id == "item-4"
        assert cursor.value == "2024-01-01T00:04:00+00:00"

    @pytest.mark.asyncio
    async def test_following_next_cursor(self, helper: PaginationHelper) -> None:
        """Test that start_after continues after the previous page."""
        first = await helper.paginate("items", PageRequest(page_size=2))
        second = await helper.paginate("items", PageRequest(page_size=2, start_after=first.next_cursor))

        assert ids(second.items) == ["item-3", "item-2"]
        assert second.has_next is True
        assert second.has_prev is True
        assert Cursor.decode(second.prev_cursor).id == "item-3"

    @pytest.mark.asyncio
    async def test_last_page_has_no_next(self, helper: PaginationHelper) -> None:
        """Test that the final page reports no further rows."""
        cursor = Cursor(value="2024-01-01T00:02:00+00:00", id="item-2").encode()
        page = await helper.paginate("items", PageRequest(page_size=2, start_after=cursor))

        assert ids(page.items) == ["item-1"]
        assert page.has_next is False
        assert page.next_cursor is None
        assert page.has_prev is True

    @pytest.mark.asyncio
    async def test_exact_fit_has_no_next(self, store: FakeDocumentStore) -> None:
        """Test that exactly page_size rows means no next page."""
        helper = PaginationHelper(store=store, max_page_size=10)
        page = await helper.paginate("items", PageRequest(page_size=5))

        assert len(page.items) == 5
        assert page.has_next is False

    @pytest.mark.asyncio
    async def test_oversized_page_returns_everything(self, store: FakeDocumentStore) -> None:
        """Test that a page larger than the collection returns every row."""
        helper = PaginationHelper(store=store, max_page_size=50)
        page = await helper.paginate("items", PageRequest(page_size=10))

        assert ids(page.items) == ["item-5", "item-4", "item-3", "item-2", "item-1"]
        assert page.has_next is False
        assert page.next_cursor is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("direction", [SortDirection.DESC, SortDirection.ASC])
    async def test_walking_next_cursor_visits_every_row_once(self, direction: SortDirection) -> None:
        """Test that following next_cursor covers the collection without repeats."""
        store = FakeDocumentStore()
        for i in range(1, 8):
            store.seed("items", f"item-{i}", {"created_at": f"2024-01-01T00:{i:02d}:00+00:00"})
        helper = PaginationHelper(store=store, max_page_size=3)

        seen: list[str] = []
        cursor = None
        pages = 0
        while True:
            page = await helper.paginate("items", PageRequest(page_size=3, direction=direction, start_after=cursor))
            seen.extend(ids(page.items))
            pages += 1
            if not page.has_next:
                break
            cursor = page.next_cursor
            assert pages < 10

        expected = [f"item-{i}" for i in range(1, 8)]
        if direction is SortDirection.DESC:
            expected.reverse()
        assert seen == expected
        assert len(set(seen)) == 7
        assert pages == 3
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_end_before_reads_rows_before_cursor(self, helper: PaginationHelper) -> None:
        """Test that end_before returns rows ahead of the cursor in the ordering."""
        cursor = Cursor(value="2024-01-01T00:02:00+00:00", id="item-2").encode()
        page = await helper.paginate("items", PageRequest(page_size=3, end_before=cursor))

        assert ids(page.items) == ["item-5", "item-4", "item-3"]
        assert page.has_prev is True

    @pytest.mark.asyncio
    async def test_ascending_order(self, helper: PaginationHelper) -> None:
        """Test ordering oldest first."""
        page = await helper.paginate("items", PageRequest(page_size=2, direction=SortDirection.ASC))

        assert ids(page.items) == ["item-1", "item-2"]

    @pytest.mark.asyncio
    async def test_filters_are_applied(self, helper: PaginationHelper) -> None:
        """Test that request filters narrow the rows."""
        page = await helper.paginate(
            "items",
            PageRequest(page_size=3, filters=[QueryFilter("kind", "==", "b")]),
        )

        assert ids(page.items) == ["item-4", "item-2"]
        assert page.has_next is False

    @pytest.mark.asyncio
    async def test_ties_broken_by_id(self) -> None:
        """Test that rows sharing an order value are paged without loss."""
        store = FakeDocumentStore()
        for doc_id in ("a", "b", "c"):
            store.seed("items", doc_id, {"created_at": "2024-01-01T00:00:00+00:00"})
        helper = PaginationHelper(store=store, max_page_size=10)

        first = await helper.paginate("items", PageRequest(page_size=2))
        second = await helper.paginate("items", PageRequest(page_size=2, start_after=first.next_cursor))

        assert sorted(ids(first.items) + ids(second.items)) == ["a", "b", "c"]
        assert second.has_next is False

    @pytest.mark.asyncio
    async def test_page_size_is_clamped(self, helper: PaginationHelper) -> None:
        """Test that oversized page requests are capped at max_page_size."""
        page = await helper.paginate("items", PageRequest(page_size=50))

        assert len(page.items) == 3
        assert page.has_next is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_size", [0, -1])
    async def test_rejects_non_positive_page_size(self, helper: PaginationHelper, page_size: int) -> None:
        """Test that page_size must be positive."""
        with pytest.raises(ValidationError):
            await helper.paginate("items", PageRequest(page_size=page_size))

    @pytest.mark.asyncio
    async def test_rejects_malformed_cursor(self, helper: PaginationHelper) -> None:
        """Test that an undecodable cursor is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            await helper.paginate("items", PageRequest(start_after="bm90LWpzb24"))

        assert exc_info.value.details == [{"field": "start_after", "value": "bm90LWpzb24"}]

    @pytest.mark.asyncio
    async def test_rejects_both_cursors(self, helper: PaginationHelper) -> None:
        """Test that start_after and end_before cannot be combined."""
        token = Cursor(value="x", id="item-1").encode()
        with pytest.raises(ValidationError):
            await helper.paginate("items", PageRequest(start_after=token, end_before=token))

    @pytest.mark.asyncio
    async def test_empty_collection(self, helper: PaginationHelper) -> None:
        """Test an empty result has no cursors."""
        page = await helper.paginate("nothing", PageRequest())

        assert page.items == []
        assert page.has_next is False
        assert page.next_cursor is None


class TestTotalCount:
    """Tests for get_total_count."""

    @pytest.mark.asyncio
    async def test_counts_matching_rows(self, helper: PaginationHelper) -> None:
        """Test counting with and without filters."""
        assert await helper.get_total_count("items") == 5
        assert await helper.get_total_count("items", [QueryFilter("kind", "==", "a")]) == 3


class TestSearch:
    """Tests for prefix search."""

    @pytest.fixture
    def named_store(self) -> FakeDocumentStore:
        store = FakeDocumentStore()
        for doc_id, name in [("1", "Cafe Mocha"), ("2", "Cafeteria"), ("3", "Bakery"), ("4", "The Cafe")]:
            store.seed("shops", doc_id, {"name": name, "created_at": "2024-01-01T00:00:00+00:00", "open": doc_id != "2"})
        return store

    @pytest.mark.asyncio
    async def test_matches_prefix_only(self, named_store: FakeDocumentStore) -> None:
        """Test that only values starting with the term match, ordered by the field."""
        helper = PaginationHelper(store=named_store, max_page_size=10)

        page = await helper.search("shops", "name", "Cafe", PageRequest(direction=SortDirection.ASC))

        assert [item["name"] for item in page.items] == ["Cafe Mocha", "Cafeteria"]

    @pytest.mark.asyncio
    async def test_keeps_request_filters(self, named_store: FakeDocumentStore) -> None:
        """Test that filters on the request are combined with the prefix range."""
        helper = PaginationHelper(store=named_store, max_page_size=10)

        page = await helper.search(
            "shops",
            "name",
            "Cafe",
            PageRequest(filters=[QueryFilter("open", "==", True)]),
        )

        assert [item["name"] for item in page.items] == ["Cafe Mocha"]

    @pytest.mark.asyncio
    async def test_rejects_empty_term(self, named_store: FakeDocumentStore) -> None:
        """Test that an empty term is a validation error."""
        helper = PaginationHelper(store=named_store, max_page_size=10)

        with pytest.raises(ValidationError):
            await helper.search("shops", "name", "")

    def test_suffix_sorts_after_ascii(self) -> None:
        """Test that the range suffix bounds ordinary characters."""
        assert "Cafe" + "z" < "Cafe" + PREFIX_SEARCH_SUFFIX


class TestPageResult:
    """Tests for PageResult serialization."""

    @pytest.mark.asyncio
    async def test_to_dict(self, helper: PaginationHelper) -> None:
        """Test that to_dict exposes items and navigation fields."""
        page = await helper.paginate("items", PageRequest(page_size=1))
        data = page.to_dict()

        assert set(data) == {"items", "next_cursor", "prev_cursor", "has_next", "has_prev", "total_count"}
        assert data["has_next"] is True
