from datetime import datetime, timedelta, timezone

import pytest

from finsights.domain import BehaviorInsight, DismissedInsight
from finsights.prioritize import (
    active_dismissals,
    dismiss_insight,
    insight_key,
    is_insight_dismissed,
    prioritize_and_filter_insights,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def marker(key, expires_at, user_id="u1"):
    return DismissedInsight(user_id=user_id, insight_key=key,
                            dismissed_at=NOW - timedelta(hours=1), expires_at=expires_at)


def test_insight_key_includes_message():
    insight = BehaviorInsight("spike", "Gasto alto em Lazer: R$ 1000.00", 3)
    assert insight_key(insight) == "spike_Gasto alto em Lazer: R$ 1000.00"


def test_dismiss_insight_expires_after_a_day():
    insight = BehaviorInsight("consistent", "Seus gastos estão consistentes", 1)
    m = dismiss_insight("u1", insight, NOW)

    assert m.user_id == "u1"
    assert m.insight_key == "consistent_Seus gastos estão consistentes"
    assert m.dismissed_at == NOW
    assert m.expires_at == NOW + timedelta(hours=24)


def test_active_dismissals_strictly_after_now():
    markers = [
        marker("a", NOW + timedelta(seconds=1)),
        marker("b", NOW),
        marker("c", NOW - timedelta(hours=2)),
        {"insight_key": "d", "expires_at": "2024-03-11T00:00:00Z"},
        {"insight_key": "e", "expires_at": "not a timestamp"},
        {"expires_at": "2024-03-11T00:00:00Z"},
    ]
    assert active_dismissals(markers, NOW) == frozenset({"a", "d"})
    assert is_insight_dismissed("a", markers, NOW)
    assert not is_insight_dismissed("b", markers, NOW)


def test_naive_now_is_treated_as_utc():
    markers = [marker("a", NOW + timedelta(minutes=5))]
    assert active_dismissals(markers, datetime(2024, 3, 10, 12, 0)) == frozenset({"a"})


def test_prioritize_filters_sorts_and_caps():
    insights = [
        BehaviorInsight("consistent", "Seus gastos estão consistentes", 1),
        BehaviorInsight("recurring", "Despesa recorrente detectada em Contas", 2),
        BehaviorInsight("spike", "Gasto alto em Lazer: R$ 900.00", 3),
        BehaviorInsight("dominant_category", "Lazer representa 55% dos gastos", 2),
        BehaviorInsight("spike", "Gasto alto em Compras: R$ 800.00", 3),
    ]
    dismissed = [marker("spike_Gasto alto em Lazer: R$ 900.00", NOW + timedelta(hours=3))]

    result = prioritize_and_filter_insights(insights, dismissed, NOW)

    assert [i.message for i in result] == [
        "Gasto alto em Compras: R$ 800.00",
        "Despesa recorrente detectada em Contas",
        "Lazer representa 55% dos gastos",
    ]


def test_expired_dismissal_no_longer_hides():
    insight = BehaviorInsight("consistent", "Seus gastos estão consistentes", 1)
    dismissed = [marker(insight_key(insight), NOW - timedelta(minutes=1))]

    assert prioritize_and_filter_insights([insight], dismissed, NOW) == [insight]


def test_long_messages_are_truncated():
    long = BehaviorInsight("spike", "x" * 150, 3)
    result = prioritize_and_filter_insights([long], [], NOW)

    assert len(result[0].message) == 100
    assert result[0].message.endswith("...")
    assert long.message == "x" * 150


def test_truncation_boundary():
    exact = BehaviorInsight("spike", "x" * 100, 3)
    over = BehaviorInsight("spike", "y" * 101, 3)

    result = prioritize_and_filter_insights([exact, over], [], NOW)

    assert result[0].message == "x" * 100
    assert result[1].message == "y" * 97 + "..."


def test_far_future_dismissal_still_hides():
    insight = BehaviorInsight("consistent", "Seus gastos estão consistentes", 1)
    dismissed = [marker(insight_key(insight), NOW + timedelta(days=3650))]

    assert prioritize_and_filter_insights([insight], dismissed, NOW) == []
    assert prioritize_and_filter_insights(None, dismissed, NOW) == []


def test_dismiss_insight_rejects_unreadable_now():
    with pytest.raises(ValueError):
        dismiss_insight("u1", "consistent_Seus gastos estão consistentes", None)
    with pytest.raises(ValueError):
        dismiss_insight("u1", "consistent_Seus gastos estão consistentes", "garbage")
