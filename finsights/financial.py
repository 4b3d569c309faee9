from __future__ import annotations

from typing import Optional, Sequence

from finsights.domain import FinancialInsight
from finsights.functional import field_of, safe_amount, to_finite
from finsights.transforms import category_breakdown, is_collection, total_spent

SIGNIFICANT_EXPENSE_SHARE = 0.15
HIGH_CATEGORY_PCT = 30.0
BUDGET_ATTENTION_PCT = 80.0
MODERATE_SPENDING_PCT = 60.0


def generate_financial_insights(
    income: float,
    expenses: Sequence,
    previous_expenses: Optional[Sequence] = None,
) -> list[FinancialInsight]:
    """Income-relative observations for the monthly summary card."""
    insights: list[FinancialInsight] = []
    if not is_collection(expenses):
        return insights

    monthly_income = to_finite(income).get_or_else(0.0)
    total = total_spent(expenses)
    spent_pct = total / monthly_income * 100 if monthly_income > 0 else 0.0

    if monthly_income > 0:
        for e in expenses:
            amount = safe_amount(e).get_or_else(0.0)
            if amount > monthly_income * SIGNIFICANT_EXPENSE_SHARE:
                description = field_of(e, "description").get_or_else("")
                insights.append(FinancialInsight(
                    type="warning",
                    title="Despesa Significativa",
                    message=f'"{description}" representa {amount / monthly_income * 100:.1f}% da sua renda mensal.',
                    icon="⚠️",
                ))

        for row in category_breakdown(expenses):
            category_pct = row.amount / monthly_income * 100
            if category_pct > HIGH_CATEGORY_PCT:
                insights.append(FinancialInsight(
                    type="warning",
                    title="Categoria Elevada",
                    message=(
                        f"Gastos com {row.label.lower()} ultrapassaram 30% da sua renda "
                        f"({category_pct:.1f}%)."
                    ),
                    icon="⚠️",
                ))

    if spent_pct > BUDGET_ATTENTION_PCT:
        insights.append(FinancialInsight(
            type="warning",
            title="Atenção com Orçamento",
            message=f"Seus gastos atingiram {spent_pct:.1f}% da sua renda. Considere reduzir despesas.",
            icon="⚠️",
        ))
    elif spent_pct > MODERATE_SPENDING_PCT:
        insights.append(FinancialInsight(
            type="info",
            title="Gastos Moderados",
            message=f"Você gastou {spent_pct:.1f}% da sua renda. Mantenha o bom trabalho!",
            icon="💡",
        ))
    elif total > 0:
        insights.append(FinancialInsight(
            type="success",
            title="Excelente Controle",
            message=f"Você gastou apenas {spent_pct:.1f}% da sua renda. Parabéns!",
            icon="✅",
        ))

    if is_collection(previous_expenses) and previous_expenses:
        previous_total = total_spent(previous_expenses)
        difference = total - previous_total
        difference_pct = difference / previous_total * 100 if previous_total > 0 else 0.0

        if abs(difference) > 0.01:
            if difference > 0:
                insights.append(FinancialInsight(
                    type="warning",
                    title="Gastos Aumentaram",
                    message=f"Você gastou {abs(difference_pct):.1f}% a mais que no mês anterior.",
                    icon="📈",
                ))
            else:
                insights.append(FinancialInsight(
                    type="success",
                    title="Gastos Diminuíram",
                    message=f"Você gastou {abs(difference_pct):.1f}% a menos que no mês anterior!",
                    icon="📉",
                ))

    return insights
