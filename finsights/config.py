"""Tunable thresholds for the insights engine.

Every analyzer accepts an optional ``settings`` argument; when omitted the
module-level ``DEFAULT_SETTINGS`` is used. Overrides can be kept in a JSON
object whose keys are field names of :class:`InsightSettings`, either passed
explicitly to :func:`load_settings` or named by ``FINSIGHTS_SETTINGS``.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "FINSIGHTS_SETTINGS"


@dataclass(frozen=True)
class InsightSettings:
    # Projection
    projection_min_days: int = 3
    trailing_window_days: int = 7
    trailing_weight: float = 0.7
    medium_confidence_days: int = 7
    high_confidence_days: int = 14

    # Budgets (percent of limit)
    budget_warning_pct: float = 80.0
    budget_critical_pct: float = 100.0

    # Behavior detectors
    recurring_min_occurrences: int = 3
    recurring_amount_tolerance: float = 0.10
    recurring_interval_tolerance_days: float = 3.0
    dominant_share_pct: float = 40.0
    consistency_min_days: int = 3
    consistency_max_cv: float = 0.20
    spike_multiplier: float = 2.0

    # Prioritization and dismissal
    max_insights: int = 3
    max_message_length: int = 100
    dismissal_ttl_hours: float = 24.0


DEFAULT_SETTINGS = InsightSettings()


def load_settings(path: Optional[Union[str, Path]] = None) -> InsightSettings:
    """Build settings from a JSON file of overrides.

    With no ``path`` the ``FINSIGHTS_SETTINGS`` environment variable is
    consulted; with neither, the defaults are returned unchanged.
    """
    if path is None:
        path = os.getenv(SETTINGS_ENV_VAR)
    if not path:
        return DEFAULT_SETTINGS

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    known = {f.name for f in fields(InsightSettings)}
    overrides = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown insight setting %r in %s", key, path)
            continue
        overrides[key] = value

    return replace(DEFAULT_SETTINGS, **overrides)
