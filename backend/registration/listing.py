"""Registrant list: search, pagination and the admin list manager.

Why:
    The admin panel loads the whole registrant list once per page load and
    derives everything else (filtered rows, current page, counters) from it.
    That derivation is a pure function over immutable inputs so it can be
    recomputed on every request and tested without a backend.
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from .domain import Registrant
from .export import CsvExport, render_export

PAGE_SIZE_OPTIONS: Tuple[int, ...] = (10, 25, 50, 100)
DEFAULT_PAGE_SIZE = 10


def normalize_page_size(value: object) -> int:
    """Return `value` as one of PAGE_SIZE_OPTIONS, else the default."""
    try:
        size = int(str(value))
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    return size if size in PAGE_SIZE_OPTIONS else DEFAULT_PAGE_SIZE


def normalize_page(value: object) -> int:
    try:
        return max(1, int(str(value)))
    except (TypeError, ValueError):
        return 1


@dataclass(frozen=True)
class ListState:
    """What the admin is looking at: query, page and page size.

    Changing the query or the page size always starts over at page 1.
    """

    query: str = ""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_params(cls, *, q: object = None, page: object = None, page_size: object = None) -> "ListState":
        return cls(query=str(q or ""), page=normalize_page(page), page_size=normalize_page_size(page_size))

    def with_query(self, query: str) -> "ListState":
        return replace(self, query=query or "", page=1)

    def with_page_size(self, page_size: object) -> "ListState":
        return replace(self, page_size=normalize_page_size(page_size), page=1)

    def with_page(self, page: int, total_pages: int) -> "ListState":
        return replace(self, page=clamp_page(page, total_pages))

    def next_page(self, total_pages: int) -> "ListState":
        return self.with_page(self.page + 1, total_pages)

    def previous_page(self, total_pages: int) -> "ListState":
        return self.with_page(self.page - 1, total_pages)


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(max(1, total_pages), page))


def filter_registrants(registrants: Sequence[Registrant], query: str | None) -> Tuple[Registrant, ...]:
    """Case-insensitive substring match on the name; blank query keeps all."""
    if not (query or "").strip():
        return tuple(registrants)
    needle = (query or "").lower()
    return tuple(r for r in registrants if needle in r.name.lower())


def total_pages_for(count: int, page_size: int) -> int:
    return max(1, math.ceil(count / page_size))


@dataclass(frozen=True)
class RegistrantPage:
    rows: Tuple[Registrant, ...]
    filtered: Tuple[Registrant, ...]
    total_count: int
    page: int
    page_size: int
    total_pages: int
    query: str

    @property
    def filtered_count(self) -> int:
        return len(self.filtered)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def is_filtered(self) -> bool:
        return self.filtered_count != self.total_count

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def state(self) -> ListState:
        """The (clamped) list state this page was projected for."""
        return ListState(query=self.query, page=self.page, page_size=self.page_size)


def project(registrants: Sequence[Registrant], state: ListState) -> RegistrantPage:
    """Derive the visible page from the loaded list and the list state."""
    filtered = filter_registrants(registrants, state.query)
    page_size = normalize_page_size(state.page_size)
    total_pages = total_pages_for(len(filtered), page_size)
    page = clamp_page(state.page, total_pages)
    start = (page - 1) * page_size
    return RegistrantPage(
        rows=filtered[start:start + page_size],
        filtered=filtered,
        total_count=len(registrants),
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        query=state.query,
    )


class RegistrantListManager:
    """Load (after the guard), project, export and log out.

    `guard` is an identity_access.guard.SessionGuard bound to the same backend.
    """

    def __init__(self, backend, guard) -> None:
        self._backend = backend
        self._guard = guard
        self._registrants: Optional[Tuple[Registrant, ...]] = None

    async def load(self) -> Tuple[Registrant, ...]:
        await self._guard.require_admin()
        rows = await asyncio.to_thread(self._backend.list_registrants)
        self._registrants = tuple(rows)
        return self._registrants

    @property
    def loaded(self) -> Tuple[Registrant, ...]:
        if self._registrants is None:
            raise RuntimeError("registrants_not_loaded")
        return self._registrants

    def view(self, state: ListState) -> RegistrantPage:
        return project(self.loaded, state)

    def export(self, state: ListState, *, tz=None) -> CsvExport:
        return render_export(filter_registrants(self.loaded, state.query), tz=tz)

    async def logout(self) -> None:
        await self._guard.sign_out()
        self._registrants = None


__all__ = [
    "PAGE_SIZE_OPTIONS",
    "DEFAULT_PAGE_SIZE",
    "ListState",
    "RegistrantPage",
    "RegistrantListManager",
    "filter_registrants",
    "project",
    "clamp_page",
    "total_pages_for",
    "normalize_page_size",
]
