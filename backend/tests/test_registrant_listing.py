"""
Registrant list: search, pagination projection and the list manager.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from identity_access.domain import AccessDenied
from identity_access.guard import SessionGuard
from registration.backend import InMemoryBackendStore, backend_session
from registration.domain import Registrant
from registration.listing import (
    DEFAULT_PAGE_SIZE,
    ListState,
    RegistrantListManager,
    filter_registrants,
    project,
)

pytestmark = pytest.mark.anyio("asyncio")

BASE = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _registrants(names):
    return tuple(
        Registrant(id=str(i), name=name, phone="(22) 98851-6911", created_at=BASE - timedelta(minutes=i))
        for i, name in enumerate(names)
    )


def _many(n):
    return _registrants([f"Pessoa {i:03d}" for i in range(n)])


def test_blank_query_keeps_everything():
    rows = _registrants(["Ana", "Bia"])
    assert filter_registrants(rows, "") == rows
    assert filter_registrants(rows, "   ") == rows
    assert filter_registrants(rows, None) == rows


def test_search_is_case_insensitive_substring_on_name_only():
    rows = _registrants(["Ana Souza", "Mariana Lima", "Bia", "JOANA"])
    names = [r.name for r in filter_registrants(rows, "ana")]
    assert names == ["Ana Souza", "Mariana Lima", "JOANA"]
    assert filter_registrants(rows, "9885") == ()


@pytest.mark.parametrize("size", [10, 25, 50, 100])
def test_rows_across_all_pages_equal_the_filtered_count(size):
    rows = _many(237)
    state = ListState(query="1", page_size=size)
    first = project(rows, state)
    seen = []
    for page in range(1, first.total_pages + 1):
        seen.extend(project(rows, ListState(query="1", page=page, page_size=size)).rows)
    assert len(seen) == len(filter_registrants(rows, "1"))
    assert len(set(r.id for r in seen)) == len(seen)


def test_page_count_has_minimum_of_one():
    page = project((), ListState())
    assert page.total_pages == 1
    assert page.page == 1
    assert page.rows == ()
    assert not page.has_previous and not page.has_next


def test_page_is_clamped_into_range():
    rows = _many(25)
    assert project(rows, ListState(page=99)).page == 3
    assert project(rows, ListState(page=0)).page == 1
    assert project(rows, ListState(page=-4)).page == 1


def test_navigation_never_leaves_first_or_last_page():
    state = ListState(page=1)
    assert state.previous_page(total_pages=3).page == 1
    last = ListState(page=3)
    assert last.next_page(total_pages=3).page == 3
    assert ListState(page=2).next_page(total_pages=3).page == 3


def test_changing_query_or_page_size_resets_to_first_page():
    state = ListState(query="", page=4, page_size=10)
    assert state.with_query("ana").page == 1
    assert state.with_page_size(25).page == 1
    assert state.with_page_size(25).page_size == 25


def test_unknown_page_size_falls_back_to_default():
    assert ListState.from_params(page_size="7").page_size == DEFAULT_PAGE_SIZE
    assert ListState.from_params(page_size="abc").page_size == DEFAULT_PAGE_SIZE
    assert ListState.from_params(page="x").page == 1


def test_projection_exposes_offset_and_counters():
    rows = _many(30)
    page = project(rows, ListState(page=2, page_size=10))
    assert page.offset == 10
    assert page.rows[0].name == "Pessoa 010"
    assert page.total_count == 30
    assert page.filtered_count == 30
    assert not page.is_filtered
    narrowed = project(rows, ListState(query="Pessoa 00"))
    assert narrowed.is_filtered
    assert narrowed.filtered_count == 10


def test_projection_does_not_mutate_input():
    rows = list(_many(12))
    snapshot = list(rows)
    project(rows, ListState(query="pessoa", page=2))
    assert rows == snapshot


async def test_manager_loads_newest_first_after_guard():
    store = InMemoryBackendStore()
    store.add_user(email="admin@example.com", password="pw", roles=("admin",))
    store.add_registrant(name="Old", phone="(22) 98851-6911", created_at=BASE - timedelta(days=1))
    store.add_registrant(name="New", phone="(22) 98851-6912", created_at=BASE)

    async with backend_session(store.factory()) as backend:
        guard = SessionGuard(backend)
        await guard.sign_in(email="admin@example.com", password="pw")
        manager = RegistrantListManager(backend, guard)
        loaded = await manager.load()
        assert [r.name for r in loaded] == ["New", "Old"]
        export = manager.export(ListState(query="new"))
        assert export.row_count == 1
        await manager.logout()
        assert backend.tokens() is None


async def test_manager_refuses_to_load_for_anonymous_visitor():
    store = InMemoryBackendStore()
    store.add_registrant(name="Ana", phone="(22) 98851-6911")
    async with backend_session(store.factory()) as backend:
        manager = RegistrantListManager(backend, SessionGuard(backend))
        with pytest.raises(AccessDenied):
            await manager.load()
        with pytest.raises(RuntimeError):
            manager.view(ListState())
