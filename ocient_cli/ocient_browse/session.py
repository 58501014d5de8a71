"""Transitions of a caller-held ``BrowsingSession``.

Every function takes the current session and returns the next one. When a
page request fails the exception propagates and the caller keeps its previous
session unchanged.
"""

from __future__ import annotations

from dataclasses import replace

from .browser import DistinctValueBrowser
from .types import DEFAULT_PAGE_SIZE, BrowsingSession


def open_session(
    browser: DistinctValueBrowser,
    schema: str,
    table: str,
    column: str,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> BrowsingSession:
    """Start browsing a column from its first, unfiltered page."""
    session = BrowsingSession(schema=schema, table=table, column=column, page_size=page_size)
    return _load(browser, session, page=0, search="")


def retarget(
    browser: DistinctValueBrowser, session: BrowsingSession, schema: str, table: str, column: str
) -> BrowsingSession:
    """Switch to another column; page, search and selection reset to defaults."""
    if session.targets(schema, table, column):
        return session
    return open_session(browser, schema, table, column, page_size=session.page_size)


def search(browser: DistinctValueBrowser, session: BrowsingSession, text: str) -> BrowsingSession:
    """Apply a new search filter and return to the first page.

    A non-empty filter that matches exactly one value selects it.
    """
    updated = _load(browser, session, page=0, search=text)
    if text and len(updated.values) == 1:
        updated = replace(updated, selected=updated.values[0])
    return updated


def next_page(browser: DistinctValueBrowser, session: BrowsingSession) -> BrowsingSession:
    if not session.can_go_next:
        return session
    return _load(browser, session, page=session.page + 1, search=session.search)


def previous_page(browser: DistinctValueBrowser, session: BrowsingSession) -> BrowsingSession:
    return _load(browser, session, page=max(0, session.page - 1), search=session.search)


def reload(browser: DistinctValueBrowser, session: BrowsingSession) -> BrowsingSession:
    return _load(browser, session, page=session.page, search=session.search)


def select_value(session: BrowsingSession, value: str) -> BrowsingSession:
    if value not in session.values:
        raise ValueError(f"'{value}' is not on the current page of {session.column}.")
    return replace(session, selected=value)


def clear_selection(session: BrowsingSession) -> BrowsingSession:
    return replace(session, selected=None)


def _load(browser: DistinctValueBrowser, session: BrowsingSession, *, page: int, search: str) -> BrowsingSession:
    result = browser.fetch_page(
        session.schema,
        session.table,
        session.column,
        limit=session.page_size,
        offset=page * session.page_size,
        search=search or None,
    )
    return replace(
        session,
        page=page,
        search=search,
        values=result.values,
        total_count=result.total_count,
        has_more=result.has_more,
    )
