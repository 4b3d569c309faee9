from datetime import date, timedelta

from finsights.behavior import (
    detect_dominant_category,
    detect_recurring_expenses,
    detect_spending_consistency,
    detect_spending_spikes,
    generate_behavior_insights,
)
from finsights.config import InsightSettings
from finsights.domain import Expense


def make_exp(id, amount, d, category="food"):
    return Expense(id=id, user_id="u1", description=id, amount=amount, category=category, date=d)


def weekly(category, amount, start=date(2024, 1, 1), count=4):
    return [
        make_exp(f"{category}-{i}", amount, (start + timedelta(days=7 * i)).isoformat(), category)
        for i in range(count)
    ]


# --- recurring

def test_recurring_weekly_food():
    insights = detect_recurring_expenses(weekly("food", 50))

    assert len(insights) == 1
    assert insights[0].type == "recurring"
    assert insights[0].priority == 2
    assert "Alimentação" in insights[0].message


def test_recurring_needs_three_similar_amounts():
    expenses = [
        make_exp("a", 50, "2024-01-01"),
        make_exp("b", 500, "2024-01-08"),
        make_exp("c", 5, "2024-01-15"),
    ]
    assert detect_recurring_expenses(expenses) == []


def test_recurring_needs_regular_intervals():
    expenses = [
        make_exp("a", 50, "2024-01-01"),
        make_exp("b", 50, "2024-01-02"),
        make_exp("c", 50, "2024-01-30"),
    ]
    # gaps 1 and 28 are both far from their mean of 14.5
    assert detect_recurring_expenses(expenses) == []


def test_recurring_unsorted_input_and_other_categories():
    expenses = list(reversed(weekly("bills", 120))) + [make_exp("x", 10, "2024-01-03", "transport")]
    insights = detect_recurring_expenses(expenses)

    assert [i.message for i in insights] == ["Despesa recorrente detectada em Contas"]


def test_recurring_gaps_include_dissimilar_charges():
    expenses = weekly("food", 100) + [
        make_exp("odd-1", 50, "2024-02-29"),
        make_exp("odd-2", 150, "2024-03-01"),
    ]
    # the four 100s are weekly, but gaps 7, 7, 7, 38, 1 over all six dates are not
    assert detect_recurring_expenses(expenses) == []


def test_recurring_skips_invalid_records():
    expenses = weekly("food", 50, count=2) + [make_exp("bad", None, "2024-01-20")]
    assert detect_recurring_expenses(expenses) == []


# --- dominant category

def test_dominant_category_over_forty_percent():
    expenses = [
        make_exp("a", 60, "2024-01-01", "shopping"),
        make_exp("b", 20, "2024-01-02", "food"),
        make_exp("c", 20, "2024-01-03", "bills"),
    ]
    insight = detect_dominant_category(expenses)

    assert insight.type == "dominant_category"
    assert insight.priority == 2
    assert insight.message == "Compras representa 60% dos gastos"


def test_dominant_category_first_in_insertion_order_wins():
    expenses = [
        make_exp("a", 45, "2024-01-01", "food"),
        make_exp("b", 55, "2024-01-02", "bills"),
    ]
    assert detect_dominant_category(expenses).message.startswith("Alimentação")


def test_dominant_category_none():
    spread = [make_exp(str(i), 25, "2024-01-01", c) for i, c in
              enumerate(["food", "bills", "health", "transport"])]
    assert detect_dominant_category(spread) is None
    assert detect_dominant_category([make_exp("z", 0, "2024-01-01")]) is None
    assert detect_dominant_category([]) is None


# --- consistency

def test_consistent_daily_spending():
    expenses = [
        make_exp("a", 100, "2024-01-01"),
        make_exp("b", 105, "2024-01-02"),
        make_exp("c", 50, "2024-01-03"),
        make_exp("d", 45, "2024-01-03"),
    ]
    insight = detect_spending_consistency(expenses)

    assert insight.type == "consistent"
    assert insight.priority == 1


def test_inconsistent_or_sparse_spending():
    erratic = [
        make_exp("a", 10, "2024-01-01"),
        make_exp("b", 300, "2024-01-02"),
        make_exp("c", 40, "2024-01-03"),
    ]
    assert detect_spending_consistency(erratic) is None

    two_days = [make_exp("a", 10, "2024-01-01"), make_exp("b", 10, "2024-01-01"),
                make_exp("c", 10, "2024-01-02")]
    assert detect_spending_consistency(two_days) is None

    zeros = [make_exp(str(i), 0, f"2024-01-0{i + 1}") for i in range(3)]
    assert detect_spending_consistency(zeros) is None


# --- spikes

def test_spike_detected_for_large_expense():
    expenses = [make_exp(str(i), 100, "2024-01-05") for i in range(9)]
    expenses.append(make_exp("big", 1000, "2024-01-06", "entertainment"))

    insights = detect_spending_spikes(expenses)

    assert len(insights) == 1
    assert insights[0].type == "spike"
    assert insights[0].priority == 3
    assert insights[0].message == "Gasto alto em Lazer: R$ 1000.00"


def test_spikes_can_repeat_and_ignore_non_positive():
    expenses = [make_exp(str(i), 10, "2024-01-05") for i in range(8)]
    expenses += [make_exp("b1", 200, "2024-01-06"), make_exp("b2", 200, "2024-01-07"),
                 make_exp("neg", -500, "2024-01-07"), make_exp("bad", "??", "2024-01-07")]

    assert len(detect_spending_spikes(expenses)) == 2
    assert detect_spending_spikes([make_exp("n", -5, "2024-01-01")]) == []


def test_spike_multiplier_is_configurable():
    expenses = [make_exp("a", 100, "2024-01-01"), make_exp("b", 160, "2024-01-02")]
    assert detect_spending_spikes(expenses) == []
    assert len(detect_spending_spikes(expenses, InsightSettings(spike_multiplier=1.2))) == 1


# --- aggregate

def test_generate_behavior_insights_order():
    expenses = weekly("food", 50) + [make_exp("big", 1000, "2024-01-10", "entertainment")]
    insights = generate_behavior_insights(expenses)

    assert [i.type for i in insights] == ["recurring", "dominant_category", "spike"]


def test_generate_behavior_insights_is_idempotent():
    expenses = weekly("bills", 80)
    assert generate_behavior_insights(expenses) == generate_behavior_insights(expenses)
    assert generate_behavior_insights(None) == []
