import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from finsights.analytics import (
    calculate_month_comparison,
    calculate_monthly_projection,
    detect_budget_alerts,
)
from finsights.behavior import (
    detect_dominant_category,
    detect_recurring_expenses,
    detect_spending_consistency,
    detect_spending_spikes,
)
from finsights.config import DEFAULT_SETTINGS, InsightSettings
from finsights.domain import BehaviorInsight, DismissedInsight
from finsights.formatting import format_comparison_message, format_projection_message
from finsights.prioritize import dismiss_insight, prioritize_and_filter_insights
from finsights.transforms import month_key

logger = logging.getLogger(__name__)

DEFAULT_DETECTORS = (
    detect_recurring_expenses,
    detect_dominant_category,
    detect_spending_consistency,
    detect_spending_spikes,
)


class InsightsService:
    """Facade running every analyzer for one dashboard refresh.

    detectors: sequence of functions taking (expenses, settings) and returning
    a BehaviorInsight, a list of them, or None. They run in order and their
    outputs are concatenated before prioritization.
    """

    def __init__(
        self,
        settings: InsightSettings = DEFAULT_SETTINGS,
        detectors: Sequence[Callable[..., Any]] = DEFAULT_DETECTORS,
    ):
        self.settings = settings
        self.detectors = detectors

    def behavior_insights(self, expenses: Sequence, steps: Optional[list] = None) -> list:
        insights: list[BehaviorInsight] = []
        for detector in self.detectors:
            name = getattr(detector, "__name__", str(detector))
            try:
                out = detector(expenses, self.settings)
            except Exception as e:
                logger.exception("Insight detector %s failed", name)
                if steps is not None:
                    steps.append({"detector": name, "output": f"detector_error: {e}"})
                continue

            if out is None:
                found = []
            elif isinstance(out, BehaviorInsight):
                found = [out]
            else:
                found = list(out)
            if steps is not None:
                steps.append({"detector": name, "output": found})
            insights.extend(found)
        return insights

    def dashboard(
        self,
        expenses: Sequence,
        previous_expenses: Sequence,
        budgets: Sequence,
        dismissed: Iterable,
        current_balance: float,
        reference_date: date,
        now: datetime,
    ) -> Dict[str, Any]:
        """Compute every signal for the month containing ``reference_date``."""
        report = {
            "month": month_key(reference_date),
            "steps": [],
            "result": {},
        }

        projection = calculate_monthly_projection(
            expenses, current_balance, reference_date, self.settings
        )
        comparison = calculate_month_comparison(expenses, previous_expenses)
        alerts = detect_budget_alerts(expenses, budgets, self.settings)
        candidates = self.behavior_insights(expenses, report["steps"])
        insights = prioritize_and_filter_insights(candidates, dismissed, now, self.settings)

        report["result"] = {
            "projection": projection,
            "projection_message": format_projection_message(projection),
            "comparison": comparison,
            "comparison_message": format_comparison_message(comparison),
            "budget_alerts": alerts,
            "insights": insights,
        }
        return report

    def dismiss(self, user_id: str, insight: BehaviorInsight, now: datetime) -> DismissedInsight:
        return dismiss_insight(user_id, insight, now, self.settings)
