from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import httpx
import pytest

from study_tracker import library
from study_tracker.library import (
    PLACEHOLDER_COVER,
    BookSearchError,
    DuplicateBookError,
    add_book,
    remove_book,
    search_book,
    toggle_book_completed,
)


def _dt(y: int, m: int, d: int, h: int = 10, minute: int = 0) -> datetime:
    return datetime(y, m, d, h, minute, tzinfo=ZoneInfo("Europe/Lisbon"))


class FakeClient:
    def __init__(self, response: httpx.Response | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        self.calls.append((url, params or {}))
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response

    def __enter__(self) -> FakeClient:
        return self

    def __exit__(self, *exc: object) -> None:
        return None


DUNE = {"key": "/works/OL893415W", "title": "Dune", "author_name": ["Frank Herbert"], "cover_i": 11481354}


def test_search_builds_book_from_first_result() -> None:
    client = FakeClient(httpx.Response(200, json={"docs": [DUNE, {"key": "/works/other"}]}))
    book = search_book("  dune ", _dt(2026, 3, 1), base_url="https://books.test/search.json", client=client)

    url, params = client.calls[0]
    assert url == "https://books.test/search.json"
    assert params["q"] == "dune"
    assert params["limit"] == 1
    assert params["fields"] == "key,title,author_name,cover_i"

    assert book.id == "/works/OL893415W"
    assert book.title == "Dune"
    assert book.authors == ("Frank Herbert",)
    assert book.thumbnail == "https://covers.openlibrary.org/b/id/11481354-M.jpg"
    assert book.added_at == _dt(2026, 3, 1)
    assert book.completed is False


def test_missing_cover_and_authors_use_placeholders() -> None:
    client = FakeClient(httpx.Response(200, json={"docs": [{"key": "/works/X", "title": "Untitled notes"}]}))
    book = search_book("notes", _dt(2026, 3, 1), client=client)
    assert book.thumbnail == PLACEHOLDER_COVER
    assert book.authors == ("Unknown author",)


def test_search_failures_raise_book_search_error() -> None:
    now = _dt(2026, 3, 1)
    with pytest.raises(BookSearchError):
        search_book("   ", now, client=FakeClient())
    with pytest.raises(BookSearchError):
        search_book("dune", now, client=FakeClient(httpx.Response(200, json={"docs": []})))
    with pytest.raises(BookSearchError):
        search_book("dune", now, client=FakeClient(httpx.Response(503, text="down")))
    with pytest.raises(BookSearchError):
        search_book("dune", now, client=FakeClient(httpx.Response(200, text="<html>")))
    with pytest.raises(BookSearchError):
        search_book("dune", now, client=FakeClient(error=httpx.ConnectError("offline")))


def test_search_opens_own_client_when_none_given(monkeypatch) -> None:
    fake = FakeClient(httpx.Response(200, json={"docs": [DUNE]}))
    monkeypatch.setattr(library.httpx, "Client", lambda timeout: fake)
    book = search_book("dune", _dt(2026, 3, 1))
    assert book.title == "Dune"
    assert fake.calls[0][0] == "https://openlibrary.org/search.json"


def test_library_list_operations() -> None:
    client = FakeClient(httpx.Response(200, json={"docs": [DUNE]}))
    dune = search_book("dune", _dt(2026, 3, 1), client=client)
    other = dune.__class__(
        id="/works/OL2W",
        title="Emma",
        authors=("Jane Austen",),
        thumbnail=PLACEHOLDER_COVER,
        added_at=_dt(2026, 3, 2),
    )

    books = add_book([], dune)
    books = add_book(books, other)
    assert [b.title for b in books] == ["Emma", "Dune"]

    with pytest.raises(DuplicateBookError):
        add_book(books, dune)

    toggled = toggle_book_completed(books, dune.id)
    assert toggled[1].completed is True
    assert books[1].completed is False

    assert [b.title for b in remove_book(toggled, other.id)] == ["Dune"]
