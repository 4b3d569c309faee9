"""Spending projection, month-over-month comparison and budget checks.

All functions are pure: they read the records they are given, never mutate
them, and signal "not enough data" with ``None`` or an empty list instead of
raising. Time-sensitive functions take the reference date explicitly.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Any, Optional, Sequence

from finsights.config import DEFAULT_SETTINGS, InsightSettings
from finsights.domain import (
    BudgetAlert,
    BudgetStatus,
    CategoryComparison,
    MonthComparison,
    MonthlyProjection,
)
from finsights.functional import parse_date, to_finite, validate_budget
from finsights.transforms import (
    aggregate_by_category,
    by_date_range,
    filter_expenses,
    get_time_period,
    is_collection,
    total_spent,
)

logger = logging.getLogger(__name__)


def _coerce_reference_date(reference_date: Any) -> date:
    parsed = parse_date(reference_date)
    if parsed.is_none():
        logger.warning("Invalid reference date %r, falling back to today", reference_date)
        return date.today()
    return parsed.get_or_else(None)


def percentage_change(current: float, previous: float) -> float:
    """Relative change in percent; a zero baseline reads as 100% growth (or 0%)."""
    if previous == 0:
        change = 100.0 if current > 0 else 0.0
    else:
        change = (current - previous) / previous * 100
    return change if math.isfinite(change) else 0.0


def confidence_for(days_elapsed: int, settings: InsightSettings = DEFAULT_SETTINGS) -> str:
    if days_elapsed < settings.medium_confidence_days:
        return "low"
    if days_elapsed < settings.high_confidence_days:
        return "medium"
    return "high"


def calculate_monthly_projection(
    expenses: Sequence,
    current_balance: float,
    reference_date: date,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> Optional[MonthlyProjection]:
    """Project the end-of-month balance from the current spending velocity.

    projected = balance - average_daily_spending * days_remaining

    With a full trailing window of history the daily average leans towards
    recent spending (``trailing_weight`` on the last week, the rest on the
    whole month so far).
    """
    if not is_collection(expenses) or not expenses:
        return None

    balance = to_finite(current_balance).get_or_else(0.0)
    today = _coerce_reference_date(reference_date)
    period = get_time_period(today)

    if period.days_elapsed < settings.projection_min_days:
        return None

    # current month only, nothing dated after the reference day
    month_expenses = filter_expenses(expenses, by_date_range(period.start_of_month, today))
    total = total_spent(month_expenses)
    elapsed = period.days_elapsed

    if elapsed >= settings.trailing_window_days:
        window = settings.trailing_window_days
        recent = filter_expenses(month_expenses, by_date_range(today - timedelta(days=window), today))
        trailing_avg = total_spent(recent) / window
        overall_avg = total / elapsed
        weight = settings.trailing_weight
        average_daily = trailing_avg * weight + overall_avg * (1 - weight)
    else:
        average_daily = total / elapsed

    projected = balance - average_daily * period.days_remaining
    if not math.isfinite(projected):
        return None

    return MonthlyProjection(
        projected_balance=projected,
        average_daily_spending=average_daily,
        remaining_days=period.days_remaining,
        confidence=confidence_for(elapsed, settings),
    )


def calculate_month_comparison(
    current_expenses: Sequence,
    previous_expenses: Sequence,
) -> Optional[MonthComparison]:
    if not is_collection(current_expenses) or not is_collection(previous_expenses):
        return None

    # nothing to compare against
    if not previous_expenses:
        return None

    current_total = total_spent(current_expenses)
    previous_total = total_spent(previous_expenses)

    return MonthComparison(
        current_total=current_total,
        previous_total=previous_total,
        percentage_change=percentage_change(current_total, previous_total),
        is_increase=current_total > previous_total,
        category_comparisons=compare_categories(current_expenses, previous_expenses),
    )


def compare_categories(
    current_expenses: Sequence,
    previous_expenses: Sequence,
) -> tuple[CategoryComparison, ...]:
    current = aggregate_by_category(current_expenses)
    previous = aggregate_by_category(previous_expenses)

    categories = dict.fromkeys([*current, *previous])
    return tuple(
        CategoryComparison(
            category=category,
            current_amount=current.get(category, 0.0),
            previous_amount=previous.get(category, 0.0),
            percentage_change=percentage_change(
                current.get(category, 0.0), previous.get(category, 0.0)
            ),
        )
        for category in categories
    )


def detect_budget_alerts(
    expenses: Sequence,
    budget_limits: Sequence,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> list[BudgetAlert]:
    """Warning and critical alerts for categories approaching or over budget.

    The two bands are checked independently, so a category over budget yields
    a critical alert on its own.
    """
    alerts: list[BudgetAlert] = []

    if not is_collection(expenses) or not is_collection(budget_limits):
        return alerts
    if not expenses or not budget_limits:
        return alerts

    spending = aggregate_by_category(expenses)

    for budget in budget_limits:
        checked = validate_budget(budget)
        if checked.is_left():
            logger.debug("Skipping budget %r: %s", budget, checked.get_error()["message"])
            continue

        category, limit = checked.get_or_else(None)
        spent = spending.get(category, 0.0)
        percentage = spent / limit * 100
        if not math.isfinite(percentage):
            continue

        if settings.budget_warning_pct <= percentage < settings.budget_critical_pct:
            alerts.append(BudgetAlert(category, limit, spent, percentage, "warning"))

        if percentage >= settings.budget_critical_pct:
            alerts.append(BudgetAlert(category, limit, spent, percentage, "critical"))

    return alerts


def budget_status(
    expenses: Sequence,
    budget: Any,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> Optional[BudgetStatus]:
    checked = validate_budget(budget)
    if checked.is_left():
        return None

    category, limit = checked.get_or_else(None)
    spent = aggregate_by_category(expenses).get(category, 0.0)
    percentage = spent / limit * 100

    if percentage >= settings.budget_critical_pct:
        status = "exceeded"
    elif percentage >= settings.budget_warning_pct:
        status = "warning"
    else:
        status = "safe"

    return BudgetStatus(
        category=category,
        limit=limit,
        spent=spent,
        remaining=max(limit - spent, 0.0),
        percentage_used=min(percentage, 100.0),
        status=status,
    )
