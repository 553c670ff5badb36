"""
Expense categories.

A category is stored as an explicit field on the expense. The icon shown
next to an expense is looked up from the category, never read back out of
the title.
"""

import enum


class ExpenseCategory(str, enum.Enum):
    food = "food"
    lodging = "lodging"
    transport = "transport"
    activities = "activities"
    shopping = "shopping"
    other = "other"

    @property
    def icon(self) -> str:
        return CATEGORY_ICONS[self]

CATEGORY_ICONS = {
    ExpenseCategory.food: "🍽️",
    ExpenseCategory.lodging: "🏨",
    ExpenseCategory.transport: "🚕",
    ExpenseCategory.activities: "🎟️",
    ExpenseCategory.shopping: "🛍️",
    ExpenseCategory.other: "🧾",
}

DEFAULT_CATEGORY = ExpenseCategory.food
