"""Priority triage: cold deals, unhandled leads, and quick wins."""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from ..models import TERMINAL_STAGES, Deal, PipelineStage

DEFAULT_COLD_DEAL_DAYS = 14
DEFAULT_UNHANDLED_LEAD_HOURS = 48

_TERMINAL_STAGE_VALUES = frozenset(stage.value for stage in TERMINAL_STAGES)
_QUICK_WIN_STAGE_VALUES = frozenset({PipelineStage.NEGOTIATION.value, PipelineStage.PROPOSAL_SENT.value})


def cold_deals(
    deals: Iterable[Deal],
    days: int = DEFAULT_COLD_DEAL_DAYS,
    now: Optional[datetime] = None,
) -> List[Deal]:
    """Non-terminal deals last contacted strictly before ``now - days``.

    Unknown stage strings are not terminal, so they can go cold too.
    """

    threshold = (now or datetime.now()) - timedelta(days=days)
    return [
        deal
        for deal in deals
        if deal.pipeline_stage not in _TERMINAL_STAGE_VALUES and deal.last_contact_date < threshold
    ]


def unhandled_leads(
    deals: Iterable[Deal],
    hours: int = DEFAULT_UNHANDLED_LEAD_HOURS,
    now: Optional[datetime] = None,
) -> List[Deal]:
    """Deals still at ``Lead`` that were created strictly before ``now - hours``."""

    threshold = (now or datetime.now()) - timedelta(hours=hours)
    return [
        deal
        for deal in deals
        if deal.pipeline_stage == PipelineStage.LEAD.value and deal.created_date < threshold
    ]


def positive_value_median(deals: Iterable[Deal]) -> float:
    """Upper median of the strictly positive deal values, ``0`` if there are none.

    The element at index ``n // 2`` of the sorted sample is used as-is; even
    sized samples are not averaged.
    """

    values = sorted(deal.deal_value for deal in deals if deal.deal_value > 0)
    if not values:
        return 0.0
    return values[len(values) // 2]


def quick_wins(deals: Sequence[Deal]) -> List[Deal]:
    """Late-stage deals worth at least the positive-value median."""

    median = positive_value_median(deals)
    return [
        deal
        for deal in deals
        if deal.pipeline_stage in _QUICK_WIN_STAGE_VALUES and deal.deal_value >= median
    ]


__all__ = [
    "DEFAULT_COLD_DEAL_DAYS",
    "DEFAULT_UNHANDLED_LEAD_HOURS",
    "cold_deals",
    "positive_value_median",
    "quick_wins",
    "unhandled_leads",
]
