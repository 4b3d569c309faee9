from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


class Category(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    BILLS = "bills"
    SHOPPING = "shopping"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag) -> "Category":
        """Map a loose tag (None, "Food", "unknown") onto the closed set."""
        if isinstance(tag, cls):
            return tag
        if isinstance(tag, str):
            try:
                return cls(tag.strip().lower())
            except ValueError:
                pass
        return cls.OTHER

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CategoryMeta:
    label: str
    icon: str
    color: str


CATEGORY_CONFIG: dict[Category, CategoryMeta] = {
    Category.FOOD: CategoryMeta("Alimentação", "🍔", "#FF6B6B"),
    Category.TRANSPORT: CategoryMeta("Transporte", "🚗", "#4ECDC4"),
    Category.ENTERTAINMENT: CategoryMeta("Lazer", "🎬", "#FFE66D"),
    Category.HEALTH: CategoryMeta("Saúde", "💊", "#95E1D3"),
    Category.EDUCATION: CategoryMeta("Educação", "📚", "#A8E6CF"),
    Category.BILLS: CategoryMeta("Contas", "💡", "#FF8B94"),
    Category.SHOPPING: CategoryMeta("Compras", "🛍️", "#C7CEEA"),
    Category.OTHER: CategoryMeta("Outros", "📦", "#B4A7D6"),
}


# Records owned by the storage collaborator

@dataclass(frozen=True)
class Expense:
    id: str
    user_id: str
    description: str
    amount: Optional[float]
    category: Optional[str] = "other"
    date: Optional[str] = None   # "2025-09-01" or "2025-09-01T10:00:00"
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class CategoryBudget:
    id: str
    user_id: str
    category: str
    limit_amount: float
    month_year: str  # e.g. "2025-09"
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class DismissedInsight:
    user_id: str
    insight_key: str
    dismissed_at: Union[datetime, str]
    expires_at: Union[datetime, str]
    id: Optional[str] = None


# Derived results

@dataclass(frozen=True)
class TimePeriod:
    start_of_month: date
    end_of_month: date
    days_in_month: int
    days_elapsed: int
    days_remaining: int
    month_key: str


@dataclass(frozen=True)
class MonthlyProjection:
    projected_balance: float
    average_daily_spending: float
    remaining_days: int
    confidence: str  # "low" | "medium" | "high"


@dataclass(frozen=True)
class CategoryComparison:
    category: Category
    current_amount: float
    previous_amount: float
    percentage_change: float


@dataclass(frozen=True)
class MonthComparison:
    current_total: float
    previous_total: float
    percentage_change: float
    is_increase: bool
    category_comparisons: tuple[CategoryComparison, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BudgetAlert:
    category: Category
    limit: float
    spent: float
    percentage: float
    level: str  # "warning" | "critical"


@dataclass(frozen=True)
class BudgetStatus:
    category: Category
    limit: float
    spent: float
    remaining: float
    percentage_used: float
    status: str  # "safe" | "warning" | "exceeded"


@dataclass(frozen=True)
class BehaviorInsight:
    type: str      # "recurring" | "dominant_category" | "spike" | "consistent"
    message: str
    priority: int  # 1 info, 2 warning, 3 critical


@dataclass(frozen=True)
class FinancialInsight:
    type: str  # "warning" | "info" | "success"
    title: str
    message: str
    icon: str


@dataclass(frozen=True)
class CategoryBreakdown:
    category: Category
    amount: float
    percentage: float
    label: str
    icon: str
    color: str


@dataclass(frozen=True)
class TopExpense:
    description: str
    amount: float
    category: Category
    date: Optional[str]
    percentage: float
