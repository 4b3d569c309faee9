from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Sequence, Union

from finsights.config import DEFAULT_SETTINGS, InsightSettings
from finsights.domain import BehaviorInsight, DismissedInsight
from finsights.functional import field_of, parse_timestamp
from finsights.transforms import is_collection

logger = logging.getLogger(__name__)


def insight_key(insight: BehaviorInsight) -> str:
    # The rendered message is part of the key, so a changed number in the
    # message no longer matches an earlier dismissal.
    return f"{insight.type}_{insight.message}"


def dismiss_insight(
    user_id: str,
    insight: Union[BehaviorInsight, str],
    now: datetime,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> DismissedInsight:
    """Build the marker the storage collaborator should persist."""
    key = insight if isinstance(insight, str) else insight_key(insight)
    parsed = parse_timestamp(now)
    if parsed.is_none():
        raise ValueError(f"Cannot dismiss an insight at an unreadable instant: {now!r}")

    dismissed_at = parsed.get_or_else(None)
    return DismissedInsight(
        user_id=user_id,
        insight_key=key,
        dismissed_at=dismissed_at,
        expires_at=dismissed_at + timedelta(hours=settings.dismissal_ttl_hours),
    )


def active_dismissals(dismissed: Iterable, now: datetime) -> frozenset[str]:
    """Keys of markers that expire strictly after ``now``."""
    current = parse_timestamp(now).get_or_else(None)
    if current is None or not is_collection(dismissed):
        return frozenset()

    keys = set()
    for marker in dismissed:
        key = field_of(marker, "insight_key").get_or_else(None)
        expires_at = field_of(marker, "expires_at").bind(parse_timestamp)
        if key is None or expires_at.is_none():
            logger.debug("Ignoring unreadable dismissal marker %r", marker)
            continue
        if expires_at.get_or_else(current) > current:
            keys.add(key)
    return frozenset(keys)


def is_insight_dismissed(key: str, dismissed: Iterable, now: datetime) -> bool:
    return key in active_dismissals(dismissed, now)


def truncate_message(message: str, max_length: int) -> str:
    if len(message) <= max_length:
        return message
    return message[: max_length - 3] + "..."


def prioritize_and_filter_insights(
    insights: Sequence[BehaviorInsight],
    dismissed: Sequence,
    now: datetime,
    settings: InsightSettings = DEFAULT_SETTINGS,
) -> list[BehaviorInsight]:
    """Drop dismissed insights, shorten long messages, keep the most severe few."""
    if not is_collection(insights):
        return []

    hidden = active_dismissals(dismissed, now)

    visible = [
        replace(insight, message=truncate_message(insight.message, settings.max_message_length))
        for insight in insights
        if insight_key(insight) not in hidden
    ]

    # sorted() is stable, ties keep their original order
    visible = sorted(visible, key=lambda insight: insight.priority, reverse=True)
    return visible[: settings.max_insights]
