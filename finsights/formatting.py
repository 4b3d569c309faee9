"""Display strings for the insights engine (pt-BR)."""

from __future__ import annotations

from typing import Optional

from finsights.domain import CATEGORY_CONFIG, Category, MonthComparison, MonthlyProjection
from finsights.functional import to_finite

INSUFFICIENT_DATA_MESSAGE = "Dados insuficientes para projeção. Continue registrando suas despesas."
FIRST_MONTH_MESSAGE = "Primeiro mês com dados"

_PT_BR_SEPARATORS = str.maketrans({",": ".", ".": ","})


def format_currency(amount) -> str:
    """Format an amount as Brazilian reais.

    Example:
        >>> format_currency(1234.56)
        'R$ 1.234,56'
        >>> format_currency(-5)
        '-R$ 5,00'
        >>> format_currency(float("nan"))
        'R$ 0,00'
    """
    value = to_finite(amount).get_or_else(0.0)
    formatted = f"{abs(value):,.2f}".translate(_PT_BR_SEPARATORS)
    sign = "-" if value < 0 and formatted != "0,00" else ""
    return f"{sign}R$ {formatted}"


def category_label(tag) -> str:
    return CATEGORY_CONFIG[Category.from_tag(tag)].label


def category_icon(tag) -> str:
    return CATEGORY_CONFIG[Category.from_tag(tag)].icon


def category_color(tag) -> str:
    return CATEGORY_CONFIG[Category.from_tag(tag)].color


def format_projection_message(projection: Optional[MonthlyProjection]) -> str:
    if projection is None:
        return INSUFFICIENT_DATA_MESSAGE

    formatted_balance = format_currency(projection.projected_balance)
    return f"Mantendo esse ritmo, seu saldo final será de {formatted_balance}"


def format_comparison_message(comparison: Optional[MonthComparison]) -> Optional[str]:
    if comparison is None:
        return None

    if comparison.previous_total == 0:
        return FIRST_MONTH_MESSAGE

    change = f"{abs(comparison.percentage_change):.1f}"
    direction = "a mais" if comparison.is_increase else "a menos"
    return f"Você gastou {change}% {direction} que no mês passado"
