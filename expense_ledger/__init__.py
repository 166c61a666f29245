"""
Expense Ledger - Source Package

The transaction ledger and aggregation engine behind a personal
expense tracker. A UI collaborator records income and expense
transactions here and reads back weekly summaries, category
breakdowns and daily trend buckets.

DESIGN PRINCIPLES:
1. The store owns the canonical data, everyone else gets copies
2. Whole-document writes, serialized through one writer
3. Corrupt data fails loudly, missing data means first run
4. Aggregations are pure functions of their input
5. Storage substrate is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
