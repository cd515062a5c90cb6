"""Upload workflow: validate, ingest, and swap the session snapshot."""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Tuple

from ..ingestion.loaders import ColumnSpec, FormatRejected, IngestionError, ensure_csv_extension, load_deals, normalize
from ..models import Deal
from ..state import DealSession

LOGGER = logging.getLogger(__name__)

USER_MESSAGES: Mapping[type, str] = {
    FormatRejected: "Only .csv files are accepted.",
    IngestionError: "The file could not be read.",
}


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload."""

    deals: Tuple[Deal, ...]
    uploaded_at: datetime
    source: str


def user_message(error: BaseException) -> str:
    """Short inline message for an upload failure."""

    for error_type, message in USER_MESSAGES.items():
        if isinstance(error, error_type):
            return message
    return USER_MESSAGES[IngestionError]


class UploadTask:
    """Handle for an upload running on the service's worker thread."""

    def __init__(self, future: Future[UploadResult]) -> None:
        self._future = future

    def cancel(self) -> bool:
        """Attempt to cancel the upload; only succeeds before parsing starts."""

        return self._future.cancel()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> UploadResult:
        return self._future.result(timeout=timeout)

    def error(self, timeout: Optional[float] = None) -> Optional[BaseException]:
        return self._future.exception(timeout=timeout)


class UploadService:
    """Turns uploaded CSV files into the session's deal snapshot.

    A failed upload never touches the session: the previous collection stays
    in place and the error propagates to the caller.
    """

    def __init__(
        self,
        session: DealSession,
        *,
        max_workers: int = 1,
        clock: Optional[Callable[[], datetime]] = None,
        column_mapping: Optional[Mapping[str, ColumnSpec]] = None,
    ) -> None:
        self._session = session
        self._clock = clock or datetime.now
        self._column_mapping = dict(column_mapping or {})
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="deal-upload")

    @property
    def session(self) -> DealSession:
        return self._session

    def import_file(self, path: str | Path) -> UploadResult:
        """Load a CSV file from disk and replace the session contents."""

        file_path = Path(path)
        return self._run(
            file_path.name,
            lambda: load_deals(file_path, column_mapping=self._column_mapping, now=self._clock()),
        )

    def import_text(self, text: str, *, filename: str = "upload.csv") -> UploadResult:
        """Same as :meth:`import_file` for content already held in memory."""

        def _load() -> List[Deal]:
            ensure_csv_extension(filename)
            return normalize(text, column_mapping=self._column_mapping, now=self._clock())

        return self._run(filename, _load)

    def submit(self, path: str | Path) -> UploadTask:
        """Run :meth:`import_file` in the background."""

        return UploadTask(self._executor.submit(self.import_file, path))

    def clear(self) -> None:
        self._session.clear()

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "UploadService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _run(self, source: str, loader: Callable[[], List[Deal]]) -> UploadResult:
        try:
            deals = loader()
        except FormatRejected:
            LOGGER.warning("Rejected upload %s: not a CSV file", source)
            raise
        except IngestionError:
            LOGGER.exception("Failed to ingest upload %s", source)
            raise

        snapshot = self._session.replace_all(deals)
        LOGGER.info("Imported %s deals from %s", len(snapshot.deals), source)
        return UploadResult(deals=snapshot.deals, uploaded_at=snapshot.uploaded_at, source=source)


__all__ = ["USER_MESSAGES", "UploadResult", "UploadService", "UploadTask", "user_message"]
