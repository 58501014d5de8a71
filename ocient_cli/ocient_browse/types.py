"""Data structures for distinct-value browsing."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class DistinctValuePage:
    """One page of distinct values.

    ``total_count`` is the unfiltered distinct cardinality of the column, even
    when the page itself was narrowed by a search filter.
    """

    values: tuple[str, ...] = ()
    total_count: int = 0
    has_more: bool = False


@dataclass(frozen=True, slots=True)
class BrowsingSession:
    """Caller-held browsing state for one target column.

    Sessions are immutable; the functions in ``ocient_browse.session`` return
    a new session for every transition and the caller keeps the latest one.
    """

    schema: str
    table: str
    column: str
    page: int = 0
    page_size: int = DEFAULT_PAGE_SIZE
    search: str = ""
    selected: str | None = None
    values: tuple[str, ...] = ()
    total_count: int = 0
    has_more: bool = False

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    @property
    def can_go_next(self) -> bool:
        return self.has_more

    @property
    def can_go_previous(self) -> bool:
        return self.page > 0

    def targets(self, schema: str, table: str, column: str) -> bool:
        return (self.schema, self.table, self.column) == (schema, table, column)
