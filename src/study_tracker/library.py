from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime
from typing import Any

import httpx

from study_tracker.config import DEFAULT_BOOK_SEARCH_URL
from study_tracker.models import Book

logger = logging.getLogger(__name__)

COVER_URL = "https://covers.openlibrary.org/b/id/{cover_id}-M.jpg"
PLACEHOLDER_COVER = "https://placehold.co/128x192/222/fff?text=No+Cover"
SEARCH_FIELDS = "key,title,author_name,cover_i"


class BookSearchError(RuntimeError):
    pass


class DuplicateBookError(ValueError):
    pass


def _book_from_doc(doc: dict[str, Any], now: datetime) -> Book:
    key = doc.get("key")
    if not key:
        raise BookSearchError("Catalog result has no id")
    cover_id = doc.get("cover_i")
    authors = doc.get("author_name") or ["Unknown author"]
    return Book(
        id=str(key),
        title=str(doc.get("title") or "Untitled"),
        authors=tuple(str(a) for a in authors),
        thumbnail=COVER_URL.format(cover_id=cover_id) if cover_id else PLACEHOLDER_COVER,
        added_at=now,
        completed=False,
    )


def search_book(
    query: str,
    now: datetime,
    base_url: str = DEFAULT_BOOK_SEARCH_URL,
    client: httpx.Client | None = None,
) -> Book:
    term = query.strip()
    if not term:
        raise BookSearchError("Search term is required")

    params = {"q": term, "limit": 1, "fields": SEARCH_FIELDS}
    try:
        if client is None:
            with httpx.Client(timeout=15) as own_client:
                resp = own_client.get(base_url, params=params)
        else:
            resp = client.get(base_url, params=params)
    except httpx.HTTPError as exc:
        logger.warning("book search failed for %r: %s", term, exc)
        raise BookSearchError("Search failed. Try again in a moment.") from exc

    if resp.status_code >= 400:
        logger.warning("book search returned %s for %r", resp.status_code, term)
        raise BookSearchError("Book service is unavailable right now")

    try:
        data = resp.json()
    except ValueError as exc:
        raise BookSearchError("Book service returned an invalid response") from exc

    docs = data.get("docs") if isinstance(data, dict) else None
    if not isinstance(docs, list) or not docs or not isinstance(docs[0], dict):
        raise BookSearchError("No book found for this term")
    return _book_from_doc(docs[0], now)


def add_book(books: Sequence[Book], book: Book) -> list[Book]:
    if any(b.id == book.id for b in books):
        raise DuplicateBookError(f"'{book.title}' is already in your library")
    return [book, *books]


def remove_book(books: Sequence[Book], book_id: str) -> list[Book]:
    return [b for b in books if b.id != book_id]


def toggle_book_completed(books: Sequence[Book], book_id: str) -> list[Book]:
    return [replace(b, completed=not b.completed) if b.id == book_id else b for b in books]
