import calendar
import json
from dataclasses import fields
from datetime import date, timedelta
from functools import reduce
from typing import Any, Callable, Iterable, Sequence, Tuple

from finsights.domain import (
    CATEGORY_CONFIG,
    Category,
    CategoryBreakdown,
    CategoryBudget,
    DismissedInsight,
    Expense,
    TimePeriod,
    TopExpense,
)
from finsights.functional import field_of, safe_amount, safe_category, safe_date


def _from_dict(cls, data: dict):
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def load_snapshot(
    path: str,
) -> Tuple[
    Tuple[Expense, ...],
    Tuple[CategoryBudget, ...],
    Tuple[DismissedInsight, ...],
]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    expenses = tuple(_from_dict(Expense, e) for e in data.get("expenses", []))
    budgets = tuple(_from_dict(CategoryBudget, b) for b in data.get("budgets", []))
    dismissed = tuple(
        _from_dict(DismissedInsight, d) for d in data.get("dismissed_insights", [])
    )

    return expenses, budgets, dismissed


def is_collection(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def valid_amounts(expenses: Iterable) -> Tuple[float, ...]:
    if not is_collection(expenses):
        return ()
    return tuple(m.get_or_else(0.0) for m in map(safe_amount, expenses) if m.is_some())


def total_spent(expenses: Iterable) -> float:
    return reduce(lambda acc, amount: acc + amount, valid_amounts(expenses), 0.0)


def aggregate_by_category(expenses: Iterable) -> dict[Category, float]:
    totals: dict[Category, float] = {}
    if not is_collection(expenses):
        return totals

    for e in expenses:
        amount = safe_amount(e)
        if amount.is_none():
            continue
        category = safe_category(e)
        totals[category] = totals.get(category, 0.0) + amount.get_or_else(0.0)

    return totals


def get_time_period(reference_date: date) -> TimePeriod:
    days_in_month = calendar.monthrange(reference_date.year, reference_date.month)[1]
    days_elapsed = reference_date.day

    return TimePeriod(
        start_of_month=reference_date.replace(day=1),
        end_of_month=reference_date.replace(day=days_in_month),
        days_in_month=days_in_month,
        days_elapsed=days_elapsed,
        days_remaining=days_in_month - days_elapsed,
        month_key=month_key(reference_date),
    )


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def previous_month_key(d: date) -> str:
    return month_key(d.replace(day=1) - timedelta(days=1))


# --- Predicate factories

def by_category(tag) -> Callable[[Any], bool]:
    wanted = Category.from_tag(tag)

    def _filter(e) -> bool:
        return safe_category(e) == wanted

    return _filter


def by_date_range(start: date, end: date) -> Callable[[Any], bool]:
    def _filter(e) -> bool:
        d = safe_date(e)
        return d.is_some() and start <= d.get_or_else(start) <= end

    return _filter


def by_month(key: str) -> Callable[[Any], bool]:
    def _filter(e) -> bool:
        return safe_date(e).map(month_key).get_or_else(None) == key

    return _filter


def filter_expenses(expenses: Iterable, *predicates: Callable[[Any], bool]) -> tuple:
    return tuple(e for e in expenses if all(p(e) for p in predicates))


# --- Breakdown and top-N views

def category_breakdown(expenses: Sequence) -> list[CategoryBreakdown]:
    total = total_spent(expenses)
    if total == 0:
        return []

    rows = [
        CategoryBreakdown(
            category=category,
            amount=amount,
            percentage=amount / total * 100,
            label=CATEGORY_CONFIG[category].label,
            icon=CATEGORY_CONFIG[category].icon,
            color=CATEGORY_CONFIG[category].color,
        )
        for category, amount in aggregate_by_category(expenses).items()
    ]
    return sorted(rows, key=lambda row: row.amount, reverse=True)


def top_expenses(expenses: Sequence, limit: int = 3) -> list[TopExpense]:
    if not is_collection(expenses):
        return []

    total = total_spent(expenses)
    priced = [(e, safe_amount(e).get_or_else(0.0)) for e in expenses if safe_amount(e).is_some()]
    ordered = sorted(priced, key=lambda pair: pair[1], reverse=True)

    return [
        TopExpense(
            description=field_of(e, "description").get_or_else(""),
            amount=amount,
            category=safe_category(e),
            date=field_of(e, "date").get_or_else(None),
            percentage=amount / total * 100 if total > 0 else 0.0,
        )
        for e, amount in ordered[: max(0, limit)]
    ]
