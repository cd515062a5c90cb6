"""CSV ingestion: turning uploaded files into canonical deal records."""
from __future__ import annotations

from .loaders import (
    FormatRejected,
    IngestionError,
    decode_payload,
    ensure_csv_extension,
    load_deals,
    normalize,
    parse_date,
    parse_dates,
    parse_deal_value,
    parse_tags,
)

__all__ = [
    "FormatRejected",
    "IngestionError",
    "decode_payload",
    "ensure_csv_extension",
    "load_deals",
    "normalize",
    "parse_date",
    "parse_dates",
    "parse_deal_value",
    "parse_tags",
]
