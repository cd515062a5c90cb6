"""Top-level package for the CRM deal analytics engine."""

from . import models  # noqa: F401
from .config import ConfigurationError, Settings, load_settings
from .ingestion import FormatRejected, IngestionError, load_deals, normalize
from .models import (
    OPEN_STAGES,
    PIPELINE_STAGES,
    TERMINAL_STAGES,
    Deal,
    PipelineStage,
    stage_probability,
)
from .state import DealSession, SessionSnapshot
from .upload import UploadResult, UploadService

__all__ = [
    "ConfigurationError",
    "Deal",
    "DealSession",
    "FormatRejected",
    "IngestionError",
    "OPEN_STAGES",
    "PIPELINE_STAGES",
    "PipelineStage",
    "SessionSnapshot",
    "Settings",
    "TERMINAL_STAGES",
    "UploadResult",
    "UploadService",
    "load_deals",
    "load_settings",
    "normalize",
    "stage_probability",
    "analytics",
    "formatting",
    "ingestion",
]
