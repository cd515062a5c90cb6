"""Stage filters and pipeline aggregates over a deal collection."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from ..models import OPEN_STAGES, Deal, PipelineStage, stage_probability

_OPEN_STAGE_VALUES = frozenset(stage.value for stage in OPEN_STAGES)


@dataclass(frozen=True)
class StageSummary:
    """Deal count and summed value for one open stage."""

    stage: PipelineStage
    count: int
    value: float


@dataclass(frozen=True)
class SourceCount:
    source: str
    count: int


def open_deals(deals: Iterable[Deal]) -> List[Deal]:
    return [deal for deal in deals if deal.pipeline_stage in _OPEN_STAGE_VALUES]


def won_deals(deals: Iterable[Deal]) -> List[Deal]:
    return [deal for deal in deals if deal.pipeline_stage == PipelineStage.CLOSED_WON.value]


def lost_deals(deals: Iterable[Deal]) -> List[Deal]:
    return [deal for deal in deals if deal.pipeline_stage == PipelineStage.CLOSED_LOST.value]


def gross_pipeline(deals: Iterable[Deal]) -> float:
    """Total value of every open deal."""
    return sum((deal.deal_value for deal in open_deals(deals)), 0.0)


def weighted_pipeline(deals: Iterable[Deal]) -> float:
    """Open deal value discounted by each stage's close probability."""
    return sum((deal.deal_value * stage_probability(deal.pipeline_stage) for deal in open_deals(deals)), 0.0)


def conversion_rate(deals: Sequence[Deal]) -> float:
    """Share of closed deals that were won; ``0.0`` when nothing has closed."""

    won = len(won_deals(deals))
    closed = won + len(lost_deals(deals))
    if closed == 0:
        return 0.0
    return won / closed


def pipeline_by_stage(deals: Sequence[Deal]) -> List[StageSummary]:
    """One summary per open stage in funnel order, including empty stages."""

    summaries: List[StageSummary] = []
    for stage in OPEN_STAGES:
        stage_deals = [deal for deal in deals if deal.pipeline_stage == stage.value]
        summaries.append(
            StageSummary(
                stage=stage,
                count=len(stage_deals),
                value=sum((deal.deal_value for deal in stage_deals), 0.0),
            )
        )
    return summaries


def leads_by_source(deals: Iterable[Deal]) -> List[SourceCount]:
    """Deal counts per lead source, most frequent first.

    Sources are grouped on the exact string; no case or whitespace folding.
    """

    counts = Counter(deal.lead_source for deal in deals)
    return [SourceCount(source=source, count=count) for source, count in counts.most_common()]


__all__ = [
    "SourceCount",
    "StageSummary",
    "conversion_rate",
    "gross_pipeline",
    "leads_by_source",
    "lost_deals",
    "open_deals",
    "pipeline_by_stage",
    "weighted_pipeline",
    "won_deals",
]
