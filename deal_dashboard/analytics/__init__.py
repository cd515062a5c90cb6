"""Pure metric functions over an ingested deal collection."""
from __future__ import annotations

from .dashboard import (
    ALL_STAGES,
    SORT_COLUMNS,
    DashboardSummary,
    PriorityActions,
    filter_deals,
    priority_actions,
    sort_deals,
    summarize,
)
from .forecast import ForecastPoint, forecast, forecast_series
from .pipeline import (
    SourceCount,
    StageSummary,
    conversion_rate,
    gross_pipeline,
    leads_by_source,
    lost_deals,
    open_deals,
    pipeline_by_stage,
    weighted_pipeline,
    won_deals,
)
from .triage import cold_deals, positive_value_median, quick_wins, unhandled_leads

__all__ = [
    "ALL_STAGES",
    "SORT_COLUMNS",
    "DashboardSummary",
    "ForecastPoint",
    "PriorityActions",
    "SourceCount",
    "StageSummary",
    "cold_deals",
    "conversion_rate",
    "filter_deals",
    "forecast",
    "forecast_series",
    "gross_pipeline",
    "leads_by_source",
    "lost_deals",
    "open_deals",
    "pipeline_by_stage",
    "positive_value_median",
    "priority_actions",
    "quick_wins",
    "sort_deals",
    "summarize",
    "unhandled_leads",
    "weighted_pipeline",
    "won_deals",
]
