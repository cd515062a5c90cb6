"""Canonical data models for deals and pipeline stages."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


# --- Pipeline stages ---

class PipelineStage(str, enum.Enum):
    """The fixed, ordered sales funnel. The first five stages are open."""

    LEAD = "Lead"
    QUALIFICATION = "Qualification"
    DISCOVERY = "Discovery"
    PROPOSAL_SENT = "Proposal Sent"
    NEGOTIATION = "Negotiation"
    CLOSED_WON = "Closed Won"
    CLOSED_LOST = "Closed Lost"

    @property
    def probability(self) -> float:
        return _STAGE_PROBABILITIES[self]

    @property
    def is_open(self) -> bool:
        return self not in TERMINAL_STAGES

    @classmethod
    def lookup(cls, value: Optional[str]) -> Optional["PipelineStage"]:
        """Return the stage matching ``value`` exactly, or ``None`` if unknown."""

        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


_STAGE_PROBABILITIES = {
    PipelineStage.LEAD: 0.1,
    PipelineStage.QUALIFICATION: 0.2,
    PipelineStage.DISCOVERY: 0.4,
    PipelineStage.PROPOSAL_SENT: 0.6,
    PipelineStage.NEGOTIATION: 0.8,
    PipelineStage.CLOSED_WON: 1.0,
    PipelineStage.CLOSED_LOST: 0.0,
}

PIPELINE_STAGES: Tuple[PipelineStage, ...] = tuple(PipelineStage)
TERMINAL_STAGES: Tuple[PipelineStage, ...] = (PipelineStage.CLOSED_WON, PipelineStage.CLOSED_LOST)
OPEN_STAGES: Tuple[PipelineStage, ...] = tuple(stage for stage in PIPELINE_STAGES if stage not in TERMINAL_STAGES)


def stage_probability(value: Optional[str]) -> float:
    """Close probability for a raw stage string; unknown stages weigh nothing."""

    stage = PipelineStage.lookup(value)
    return stage.probability if stage is not None else 0.0


# --- Deal record ---

@dataclass(frozen=True, slots=True)
class Deal:
    """One sales lead or opportunity as produced by CSV ingestion."""

    id: str
    created_date: datetime
    last_contact_date: datetime
    next_followup_date: datetime
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    company: str = ""
    industry: str = ""
    company_size: str = ""
    country: str = ""
    lead_source: str = ""
    status: str = ""
    owner: str = ""
    deal_value: float = 0.0
    pipeline_stage: str = PipelineStage.LEAD.value
    tags: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Stage is stored as its plain string so set lookups hash consistently.
        if isinstance(self.pipeline_stage, PipelineStage):
            object.__setattr__(self, "pipeline_stage", self.pipeline_stage.value)
        if not isinstance(self.tags, tuple):
            object.__setattr__(self, "tags", tuple(self.tags))

    @property
    def stage(self) -> Optional[PipelineStage]:
        return PipelineStage.lookup(self.pipeline_stage)

    @property
    def probability(self) -> float:
        return stage_probability(self.pipeline_stage)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


__all__ = [
    "Deal",
    "PipelineStage",
    "PIPELINE_STAGES",
    "OPEN_STAGES",
    "TERMINAL_STAGES",
    "stage_probability",
]
