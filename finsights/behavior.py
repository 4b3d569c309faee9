from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional, Sequence

import numpy as np

from finsights.config import DEFAULT_SETTINGS, InsightSettings
from finsights.domain import BehaviorInsight, Category
from finsights.formatting import category_label
from finsights.functional import safe_amount, safe_category, safe_date
from finsights.transforms import aggregate_by_category, is_collection, total_spent

RECURRING = "recurring"
DOMINANT_CATEGORY = "dominant_category"
SPIKE = "spike"
CONSISTENT = "consistent"


def _dated_amounts(expenses: Sequence) -> list[tuple[Category, date, float]]:
    rows = []
    for e in expenses:
        amount = safe_amount(e)
        when = safe_date(e)
        if amount.is_none() or when.is_none():
            continue
        rows.append((safe_category(e), when.get_or_else(None), amount.get_or_else(0.0)))
    return rows


def detect_recurring_expenses(
    expenses: Sequence,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> list[BehaviorInsight]:
    """One insight per category holding a run of similar, evenly spaced charges."""
    insights: list[BehaviorInsight] = []
    if not is_collection(expenses) or not expenses:
        return insights

    by_category: dict[Category, list[tuple[date, float]]] = defaultdict(list)
    for category, when, amount in _dated_amounts(expenses):
        by_category[category].append((when, amount))

    min_count = settings.recurring_min_occurrences
    for category, rows in by_category.items():
        if len(rows) < min_count:
            continue

        mean_amount = float(np.mean([amount for _, amount in rows]))
        if mean_amount == 0:
            continue

        similar = [
            amount for _, amount in rows
            if abs(amount - mean_amount) / abs(mean_amount) <= settings.recurring_amount_tolerance
        ]
        if len(similar) < min_count:
            continue

        # intervals span every dated charge in the category, not only the similar ones
        gaps = np.diff(sorted(when.toordinal() for when, _ in rows))
        if len(gaps) < 2:
            continue

        regular = np.abs(gaps - gaps.mean()) <= settings.recurring_interval_tolerance_days
        if int(regular.sum()) >= 2:
            insights.append(BehaviorInsight(
                type=RECURRING,
                message=f"Despesa recorrente detectada em {category_label(category)}",
                priority=2,
            ))

    return insights


def detect_dominant_category(
    expenses: Sequence,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> Optional[BehaviorInsight]:
    if not is_collection(expenses) or not expenses:
        return None

    total = total_spent(expenses)
    if total == 0:
        return None

    for category, amount in aggregate_by_category(expenses).items():
        share = amount / total * 100
        if share > settings.dominant_share_pct:
            return BehaviorInsight(
                type=DOMINANT_CATEGORY,
                message=f"{category_label(category)} representa {share:.0f}% dos gastos",
                priority=2,
            )

    return None


def detect_spending_consistency(
    expenses: Sequence,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> Optional[BehaviorInsight]:
    """Flag steady spending: daily totals whose coefficient of variation is small."""
    if not is_collection(expenses):
        return None

    daily: dict[date, float] = defaultdict(float)
    for _, when, amount in _dated_amounts(expenses):
        daily[when] += amount

    if len(daily) < settings.consistency_min_days:
        return None

    totals = np.fromiter(daily.values(), dtype=float)
    mean = float(totals.mean())
    if mean <= 0:
        return None

    # population standard deviation (ddof=0)
    stddev = float(totals.std())
    if not np.isfinite(stddev):
        return None

    if stddev / mean < settings.consistency_max_cv:
        return BehaviorInsight(
            type=CONSISTENT,
            message="Seus gastos estão consistentes",
            priority=1,
        )

    return None


def detect_spending_spikes(
    expenses: Sequence,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> list[BehaviorInsight]:
    insights: list[BehaviorInsight] = []
    if not is_collection(expenses) or not expenses:
        return insights

    positive = [
        (safe_category(e), amount.get_or_else(0.0))
        for e, amount in ((e, safe_amount(e)) for e in expenses)
        if amount.filter(lambda value: value > 0).is_some()
    ]
    if not positive:
        return insights

    mean_amount = float(np.mean([amount for _, amount in positive]))
    threshold = settings.spike_multiplier * mean_amount

    for category, amount in positive:
        if amount > threshold:
            insights.append(BehaviorInsight(
                type=SPIKE,
                message=f"Gasto alto em {category_label(category)}: R$ {amount:.2f}",
                priority=3,
            ))

    return insights


def generate_behavior_insights(
    expenses: Sequence,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> list[BehaviorInsight]:
    if not is_collection(expenses):
        return []

    insights = list(detect_recurring_expenses(expenses, settings))

    dominant = detect_dominant_category(expenses, settings)
    if dominant is not None:
        insights.append(dominant)

    consistent = detect_spending_consistency(expenses, settings)
    if consistent is not None:
        insights.append(consistent)

    insights.extend(detect_spending_spikes(expenses, settings))
    return insights
