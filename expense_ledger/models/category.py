"""
Category Models

Categories carry a kind and display attributes. Color and icon are
for the UI only; aggregation groups by name alone.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from expense_ledger.models.transaction import TransactionKind


class CategoryDraft(BaseModel):
    """A category before the registry assigns an id."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ...,
        min_length=1,
        description="Display name, expected to be unique within its kind"
    )
    color: str = Field(
        ...,
        pattern=r"^#[0-9A-Fa-f]{6}$",
        description="Hex display color"
    )
    icon: str = Field(
        ...,
        min_length=1,
        description="Icon token understood by the UI"
    )
    kind: TransactionKind

    def with_id(self, category_id: str) -> "Category":
        return Category(id=category_id, **self.model_dump(exclude={"id"}))


class Category(CategoryDraft):
    """A category known to the registry."""

    id: str = Field(
        ...,
        min_length=1,
        description="Registry identifier"
    )


# Shown for a category name the registry does not know about.
FALLBACK_COLOR = "#999999"
FALLBACK_ICON = "help-circle"


def fallback_category(name: str, kind: TransactionKind) -> Category:
    """Display stand-in for an orphaned category reference."""
    return Category(
        id="fallback",
        name=name,
        color=FALLBACK_COLOR,
        icon=FALLBACK_ICON,
        kind=kind,
    )


def resolve_category(
    categories: list[Category],
    name: str,
    kind: Optional[TransactionKind] = None,
) -> Category:
    """
    Find the display category for a name.

    When kind is given only categories of that kind match. Duplicate
    names resolve to the first one. Unknown names get the fallback.
    """
    for category in categories:
        if category.name == name and (kind is None or category.kind == kind):
            return category
    return fallback_category(name, kind or TransactionKind.EXPENSE)


DEFAULT_EXPENSE_CATEGORIES: list[Category] = [
    Category(id="1", name="Food", color="#FF6B6B", icon="fast-food", kind=TransactionKind.EXPENSE),
    Category(id="2", name="Transportation", color="#4ECDC4", icon="car", kind=TransactionKind.EXPENSE),
    Category(id="3", name="Housing", color="#FFA5A5", icon="home", kind=TransactionKind.EXPENSE),
    Category(id="4", name="Entertainment", color="#C5A3FF", icon="film", kind=TransactionKind.EXPENSE),
    Category(id="5", name="Shopping", color="#FFD166", icon="cart", kind=TransactionKind.EXPENSE),
    Category(id="6", name="Utilities", color="#73D2DE", icon="flash", kind=TransactionKind.EXPENSE),
    Category(id="7", name="Health", color="#95D5B2", icon="medkit", kind=TransactionKind.EXPENSE),
    Category(id="8", name="Education", color="#C1B98F", icon="school", kind=TransactionKind.EXPENSE),
    Category(id="9", name="Other", color="#BDB2FF", icon="ellipsis-horizontal", kind=TransactionKind.EXPENSE),
]

DEFAULT_INCOME_CATEGORIES: list[Category] = [
    Category(id="10", name="Salary", color="#52B788", icon="cash", kind=TransactionKind.INCOME),
    Category(id="11", name="Freelance", color="#2D6A4F", icon="laptop", kind=TransactionKind.INCOME),
    Category(id="12", name="Gifts", color="#B5E48C", icon="gift", kind=TransactionKind.INCOME),
    Category(id="13", name="Investments", color="#76C893", icon="trending-up", kind=TransactionKind.INCOME),
    Category(id="14", name="Other", color="#99D98C", icon="ellipsis-horizontal", kind=TransactionKind.INCOME),
]


def default_categories() -> list[Category]:
    """The seed set written on first access."""
    return [*DEFAULT_EXPENSE_CATEGORIES, *DEFAULT_INCOME_CATEGORIES]
