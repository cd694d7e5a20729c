"""
Backend-neutral read query.

Mirrors the subset of the PostgREST builder the services need
(eq / gte / lte / ilike-or / order / range) so the same query runs against
Supabase and against the in-memory store.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple


@dataclass
class Query:
    """A filtered, ordered, paginated select over one table."""

    table: str
    filters: List[Tuple[str, str, Any]] = field(default_factory=list)
    search_columns: Tuple[str, ...] = ()
    search_text: Optional[str] = None
    order_by: Optional[str] = None
    descending: bool = False
    then_by: Optional[str] = None
    offset: int = 0
    limit: Optional[int] = None

    def eq(self, column: str, value: Any) -> "Query":
        self.filters.append(("eq", column, value))
        return self

    def gte(self, column: str, value: Any) -> "Query":
        self.filters.append(("gte", column, value))
        return self

    def lte(self, column: str, value: Any) -> "Query":
        self.filters.append(("lte", column, value))
        return self

    def search(self, columns: Sequence[str], text: str) -> "Query":
        """Case-insensitive substring match against any of the columns."""
        self.search_columns = tuple(columns)
        self.search_text = text
        return self

    def order(self, column: str, desc: bool = False, then_by: Optional[str] = None) -> "Query":
        """Sort by `column`; ties are broken by `then_by` in the same direction."""
        self.order_by = column
        self.descending = desc
        self.then_by = then_by
        return self

    def page(self, offset: int, limit: int) -> "Query":
        self.offset = offset
        self.limit = limit
        return self

    def matches(self, row: dict) -> bool:
        """Evaluate the filters against a row (used by the in-memory store)."""
        for op, column, value in self.filters:
            current = row.get(column)
            if op == "eq":
                if current != value:
                    return False
            elif current is None:
                return False
            elif op == "gte" and current < value:
                return False
            elif op == "lte" and current > value:
                return False

        if self.search_text:
            needle = self.search_text.lower()
            if not any(
                needle in str(row.get(column) or "").lower()
                for column in self.search_columns
            ):
                return False

        return True
