"""Utilities for loading deal records from uploaded CSV files."""
from __future__ import annotations

import csv
import io
import logging
import math
import re
import warnings
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from ..models import Deal, PipelineStage

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, Path]
ColumnSpec = Union[str, Sequence[str]]

_FIELD_SYNONYMS: Mapping[str, Sequence[str]] = {
    "id": ("id", "ID", "Lead_ID", "lead_id"),
    "created_date": ("createdDate", "Created Date", "created_date", "Created_Date"),
    "first_name": ("firstName", "First Name", "first_name", "First_Name"),
    "last_name": ("lastName", "Last Name", "last_name", "Last_Name"),
    "email": ("email", "Email"),
    "company": ("company", "Company"),
    "industry": ("industry", "Industry"),
    "company_size": ("companySize", "Company Size", "company_size", "Company_Size"),
    "country": ("country", "Country"),
    "lead_source": ("leadSource", "Lead Source", "lead_source", "Lead_Source"),
    "status": ("status", "Status"),
    "owner": ("owner", "Owner"),
    "deal_value": ("dealValue", "Deal Value", "deal_value", "Deal_Value"),
    "pipeline_stage": ("pipelineStage", "Pipeline Stage", "pipeline_stage", "Pipeline_Stage"),
    "last_contact_date": ("lastContactDate", "Last Contact Date", "last_contact_date", "Last_Contact_Date"),
    "next_followup_date": ("nextFollowupDate", "Next Followup Date", "next_followup_date", "Next_Followup_Date"),
    "tags": ("tags", "Tags"),
}

_TEXT_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "company",
    "industry",
    "company_size",
    "country",
    "lead_source",
    "status",
    "owner",
)
_DATE_FIELDS = ("created_date", "last_contact_date", "next_followup_date")
_CLOCK_KEYWORDS = frozenset({"now", "today"})

_CSV_SUFFIXES = {".csv"}
_DELIMITER_CANDIDATES = (",", "\t", "|", ";")
_DELIMITER_SAMPLE_LINES = 10

_NUMBER_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_TAG_SPLIT_RE = re.compile(r"[,;|]")


class FormatRejected(ValueError):
    """Raised when an upload does not carry a ``.csv`` extension."""


class IngestionError(ValueError):
    """Raised when an upload cannot be decoded or tokenized as CSV."""


def load_deals(
    path: PathLike,
    *,
    column_mapping: Optional[Mapping[str, ColumnSpec]] = None,
    now: Optional[datetime] = None,
) -> List[Deal]:
    """Load deal records from a CSV file on disk.

    Parameters
    ----------
    path:
        Path to the uploaded file. Only the ``.csv`` extension is accepted.
    column_mapping:
        Optional mapping of :class:`Deal` field names to column names (or
        sequences of column names) that replaces the built-in header aliases
        for those fields.
    now:
        Timestamp used for dates that cannot be parsed. Defaults to the
        current time.
    """

    path_obj = Path(path)
    ensure_csv_extension(path_obj.name)

    try:
        payload = path_obj.read_bytes()
    except OSError as exc:
        raise IngestionError(f"Could not read '{path_obj.name}': {exc}") from exc

    return normalize(decode_payload(payload), column_mapping=column_mapping, now=now)


def ensure_csv_extension(filename: str) -> None:
    suffix = Path(filename).suffix.lower()
    if suffix not in _CSV_SUFFIXES:
        raise FormatRejected(f"Unsupported file extension: {suffix or '(none)'}")


def decode_payload(payload: bytes) -> str:
    """Decode raw upload bytes as UTF-8, tolerating a byte order mark."""

    try:
        return payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise IngestionError("File is not valid UTF-8 text") from exc


def normalize(
    raw_csv_text: str,
    *,
    column_mapping: Optional[Mapping[str, ColumnSpec]] = None,
    now: Optional[datetime] = None,
) -> List[Deal]:
    """Turn CSV text into deal records, degrading bad cells to defaults."""

    now = now or datetime.now()
    dataframe = _read_dataframe(raw_csv_text)
    mapping = dict(column_mapping or {})
    resolved_columns = {field: _resolve_columns(field, dataframe.columns, mapping) for field in _FIELD_SYNONYMS}

    rows = [row for row in dataframe.to_dict(orient="records") if not _row_is_empty(row)]
    dates = {
        field: parse_dates([_extract_scalar(row, resolved_columns[field]) for row in rows], now)
        for field in _DATE_FIELDS
    }
    deals = [
        _row_to_deal(row, resolved_columns, index, {field: dates[field][index] for field in _DATE_FIELDS})
        for index, row in enumerate(rows)
    ]

    LOGGER.debug("Normalized %s deals from %s columns", len(deals), len(dataframe.columns))
    return deals


def _read_dataframe(text: str) -> pd.DataFrame:
    if not text.strip():
        raise IngestionError("File is empty")

    delimiter = _detect_delimiter(text)
    lines = io.StringIO(text, newline=None).readlines()
    header, body = _split_header(lines, delimiter)
    columns = _unique_columns(header)
    if not body.strip():
        return pd.DataFrame(columns=columns, dtype=str)

    def _truncate(bad_line: List[str]) -> List[str]:
        LOGGER.warning("Truncating row with %s fields to header width %s", len(bad_line), len(columns))
        return bad_line[: len(columns)]

    try:
        dataframe = pd.read_csv(
            io.StringIO(body),
            sep=delimiter,
            header=None,
            names=columns,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            engine="python",
            on_bad_lines=_truncate,
        )
    except (ValueError, csv.Error) as exc:
        raise IngestionError(f"Could not parse CSV content: {exc}") from exc

    return dataframe.fillna("")


def _split_header(lines: Sequence[str], delimiter: str) -> Tuple[List[str], str]:
    """Return the first non-blank row and the text that follows it.

    The whole input is tokenized strictly so that an unterminated quote fails
    the upload instead of swallowing the remaining rows.
    """

    reader = csv.reader(lines, delimiter=delimiter, strict=True)
    header: Optional[List[str]] = None
    header_end = 0
    try:
        for row in reader:
            if header is None and any(cell.strip() for cell in row):
                header, header_end = row, reader.line_num
    except csv.Error as exc:
        raise IngestionError(f"Malformed quoting near line {reader.line_num}: {exc}") from exc

    if header is None:
        raise IngestionError("File has no header row")
    return header, "".join(lines[header_end:])


def _unique_columns(header: Sequence[str]) -> List[str]:
    # Stripped names that collide get a ".N" suffix, as pandas does.
    columns: List[str] = []
    for cell in header:
        name = candidate = cell.strip()
        suffix = 0
        while candidate in columns:
            suffix += 1
            candidate = f"{name}.{suffix}"
        columns.append(candidate)
    return columns


def _detect_delimiter(text: str) -> str:
    """Pick the candidate delimiter giving the most consistent field count."""

    lines = [line for line in text.splitlines() if line.strip()][:_DELIMITER_SAMPLE_LINES]
    best, best_score = ",", (0, 0)
    for candidate in _DELIMITER_CANDIDATES:
        try:
            widths = [len(row) for row in csv.reader(lines, delimiter=candidate)]
        except csv.Error:
            continue
        if not widths or widths[0] < 2:
            continue
        score = (sum(1 for width in widths if width == widths[0]), widths[0])
        if score > best_score:
            best, best_score = candidate, score
    return best


def _row_is_empty(row: Mapping[str, Any]) -> bool:
    return all(_clean_text(value) is None for value in row.values())


def _row_to_deal(
    row: Mapping[str, Any],
    resolved_columns: Mapping[str, Sequence[str]],
    index: int,
    dates: Mapping[str, datetime],
) -> Deal:
    def extract(field: str) -> Optional[str]:
        return _extract_scalar(row, resolved_columns[field])

    values: Dict[str, Any] = {field: extract(field) or "" for field in _TEXT_FIELDS}
    values.update(dates)

    return Deal(
        id=extract("id") or str(index),
        deal_value=parse_deal_value(extract("deal_value")),
        pipeline_stage=extract("pipeline_stage") or PipelineStage.LEAD.value,
        tags=parse_tags(extract("tags")),
        **values,
    )


def _resolve_columns(
    field: str,
    available_columns: Iterable[str],
    mapping: Mapping[str, ColumnSpec],
) -> List[str]:
    if field in mapping:
        synonyms = _normalize_column_spec(mapping[field])
    else:
        synonyms = list(_FIELD_SYNONYMS.get(field, (field,)))

    columns = list(available_columns)
    resolved: List[str] = []
    for synonym in synonyms:
        synonym_lc = synonym.lower()
        for column in columns:
            if column.lower() == synonym_lc and column not in resolved:
                resolved.append(column)
    return resolved


def _normalize_column_spec(value: ColumnSpec) -> List[str]:
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


def _extract_scalar(row: Mapping[str, Any], columns: Sequence[str]) -> Optional[str]:
    for column in columns:
        if column not in row:
            continue
        text = _clean_text(row[column])
        if text is not None:
            return text
    return None


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None


def parse_deal_value(text: Optional[str]) -> float:
    """Read the leading decimal number of ``text``; anything else is ``0``."""

    if not text:
        return 0.0
    match = _NUMBER_PREFIX_RE.match(text)
    if not match:
        return 0.0
    number = float(match.group(1))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number or 0.0


def parse_date(text: Optional[str], now: datetime) -> datetime:
    """Parse a calendar date/time, falling back to ``now``."""

    return parse_dates([text], now)[0]


def parse_dates(values: Sequence[Optional[str]], now: datetime) -> List[datetime]:
    """Parse a column of date cells at once; unparseable cells become ``now``.

    Naive values are kept as written and timezone-aware values are converted
    to UTC, both returned naive.
    """

    if not values:
        return []
    series = pd.Series([_date_candidate(value) for value in values], dtype=object)
    with warnings.catch_warnings():
        # Day-first and format inference warnings are noise for free-form cells.
        warnings.simplefilter("ignore", UserWarning)
        parsed = pd.to_datetime(series, errors="coerce", format="mixed", utc=True).dt.tz_localize(None)
        return [now if pd.isna(value) else value.to_pydatetime() for value in parsed]


def _date_candidate(value: Optional[str]) -> Optional[str]:
    # pandas resolves these keywords against the wall clock.
    if value is None or value.strip().lower() in _CLOCK_KEYWORDS:
        return None
    return value


def parse_tags(text: Optional[str]) -> Tuple[str, ...]:
    if not text:
        return ()
    return tuple(token.strip() for token in _TAG_SPLIT_RE.split(text) if token.strip())


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
