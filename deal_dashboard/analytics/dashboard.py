"""Composite views backing the dashboard pages and the deals table."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..config import Settings
from ..models import Deal
from .forecast import ForecastPoint, forecast_series
from .pipeline import conversion_rate, gross_pipeline, weighted_pipeline, won_deals
from .triage import cold_deals, quick_wins, unhandled_leads

ALL_STAGES = "all"


@dataclass(frozen=True)
class DashboardSummary:
    """Headline KPIs shown on the home page."""

    total_deals: int
    gross_pipeline: float
    weighted_pipeline: float
    won_count: int
    conversion_rate: float
    forecast: List[ForecastPoint]


@dataclass(frozen=True)
class PriorityActions:
    """Truncated triage lists plus the full count behind each one."""

    cold_deals: List[Deal]
    unhandled_leads: List[Deal]
    quick_wins: List[Deal]
    cold_count: int
    unhandled_count: int
    quick_win_count: int


def summarize(
    deals: Sequence[Deal],
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> DashboardSummary:
    settings = settings or Settings()
    now = now or datetime.now()
    return DashboardSummary(
        total_deals=len(deals),
        gross_pipeline=gross_pipeline(deals),
        weighted_pipeline=weighted_pipeline(deals),
        won_count=len(won_deals(deals)),
        conversion_rate=conversion_rate(deals),
        forecast=forecast_series(deals, settings.forecast_horizons, now=now),
    )


def priority_actions(
    deals: Sequence[Deal],
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
    limit: int = 3,
) -> PriorityActions:
    """First ``limit`` entries of each triage list, in upload order."""

    settings = settings or Settings()
    now = now or datetime.now()
    cold = cold_deals(deals, settings.cold_deal_days, now=now)
    unhandled = unhandled_leads(deals, settings.unhandled_lead_hours, now=now)
    wins = quick_wins(deals)
    return PriorityActions(
        cold_deals=cold[:limit],
        unhandled_leads=unhandled[:limit],
        quick_wins=wins[:limit],
        cold_count=len(cold),
        unhandled_count=len(unhandled),
        quick_win_count=len(wins),
    )


# ---------------------------------------------------------------------------
# Deals table
# ---------------------------------------------------------------------------

_SEARCH_FIELDS: Sequence[Callable[[Deal], str]] = (
    lambda deal: deal.full_name,
    lambda deal: deal.email,
    lambda deal: deal.company,
    lambda deal: deal.owner,
    lambda deal: deal.lead_source,
    lambda deal: deal.pipeline_stage,
)

_SORT_KEYS: Dict[str, Callable[[Deal], object]] = {
    "name": lambda deal: deal.full_name.lower(),
    "company": lambda deal: deal.company.lower(),
    "pipeline_stage": lambda deal: deal.pipeline_stage,
    "deal_value": lambda deal: deal.deal_value,
    "owner": lambda deal: deal.owner.lower(),
    "lead_source": lambda deal: deal.lead_source.lower(),
    "next_followup_date": lambda deal: deal.next_followup_date,
}

SORT_COLUMNS = tuple(_SORT_KEYS)


def filter_deals(deals: Iterable[Deal], stage: Optional[str] = None, query: str = "") -> List[Deal]:
    """Apply the table's stage selector and free-text search."""

    needle = (query or "").strip().lower()
    selected: List[Deal] = []
    for deal in deals:
        if stage and stage != ALL_STAGES and deal.pipeline_stage != stage:
            continue
        if needle and not any(needle in accessor(deal).lower() for accessor in _SEARCH_FIELDS):
            continue
        selected.append(deal)
    return selected


def sort_deals(deals: Iterable[Deal], key: str, descending: bool = False) -> List[Deal]:
    try:
        sort_key = _SORT_KEYS[key]
    except KeyError as exc:
        raise ValueError(f"Unknown sort column '{key}'. Expected one of: {', '.join(SORT_COLUMNS)}") from exc
    return sorted(deals, key=sort_key, reverse=descending)


__all__ = [
    "ALL_STAGES",
    "DashboardSummary",
    "PriorityActions",
    "SORT_COLUMNS",
    "filter_deals",
    "priority_actions",
    "sort_deals",
    "summarize",
]
