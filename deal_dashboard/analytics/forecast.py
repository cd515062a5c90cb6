"""Time-horizon forecasting of the weighted open pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from ..config import Settings
from ..models import Deal, stage_probability
from .pipeline import open_deals


@dataclass(frozen=True)
class ForecastPoint:
    """Weighted value expected within ``days`` from now."""

    label: str
    days: int
    value: float


def forecast(deals: Iterable[Deal], days: int, now: Optional[datetime] = None) -> float:
    """Weighted value of open deals whose next follow-up falls before ``now + days``."""

    horizon = (now or datetime.now()) + timedelta(days=days)
    return sum(
        (
            deal.deal_value * stage_probability(deal.pipeline_stage)
            for deal in open_deals(deals)
            if deal.next_followup_date < horizon
        ),
        0.0,
    )


def forecast_series(
    deals: Sequence[Deal],
    horizons: Optional[Sequence[int]] = None,
    now: Optional[datetime] = None,
) -> List[ForecastPoint]:
    """Evaluate :func:`forecast` at each horizon, short to long.

    ``horizons`` defaults to the configured 30/60/90 day windows. All points
    share one reference time so the series is internally consistent.
    """

    if horizons is None:
        horizons = Settings().forecast_horizons
    now = now or datetime.now()
    return [ForecastPoint(label=f"{days}j", days=days, value=forecast(deals, days, now=now)) for days in horizons]


__all__ = ["ForecastPoint", "forecast", "forecast_series"]
