"""Query package."""

from expense_ledger.queries.engine import (
    QueryEngine,
    ensure_aware,
    newest_first,
    week_window,
)

__all__ = ["QueryEngine", "ensure_aware", "newest_first", "week_window"]
