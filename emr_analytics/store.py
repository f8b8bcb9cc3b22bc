"""
Session record store.

Owns the cluster records loaded during one session. Uploads are appended in
all-or-nothing fashion: a batch is fully converted before the store changes,
so a failed upload leaves previously loaded records untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from emr_analytics.analytics.bundle import compute_analytics_bundle
from emr_analytics.analytics.schema import AnalyticsBundle, SessionSummary
from emr_analytics.analytics.summary import compute_session_summary
from emr_analytics.core.diagnostics import Diagnostics
from emr_analytics.core.exceptions import EmrAnalyticsError
from emr_analytics.data.aggregation import aggregate_by_day
from emr_analytics.data.filters import filter_records, filtered_kpi_metrics, get_date_range
from emr_analytics.data.ingestion import Payload, decode_upload, read_upload
from emr_analytics.data.normalizers import normalize_records
from emr_analytics.data.schema import (
    ClusterRecord,
    DailyBucket,
    DateFilterOptions,
    FilterOptions,
    WeeklyBucket,
)

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """
    Outcome of a successful upload.

    imported: records added by this upload
    total: records in the store afterwards
    diagnostics: recoverable problems found while converting the batch
    """

    imported: int
    total: int
    diagnostics: Diagnostics = field(default_factory=Diagnostics)


class ClusterStore:
    """
    In-memory record set for one session.

    The store is iterable, so it can be passed directly to any aggregation
    or filter function.
    """

    def __init__(self, records: Optional[Iterable[ClusterRecord]] = None):
        self._records: List[ClusterRecord] = list(records or [])
        self.error: Optional[str] = None

    @property
    def records(self) -> Tuple[ClusterRecord, ...]:
        return tuple(self._records)

    def __iter__(self) -> Iterator[ClusterRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def append(self, records: Iterable[ClusterRecord]) -> int:
        """Add already-validated records. Returns the number added."""
        new_records = list(records)
        self._records.extend(new_records)
        return len(new_records)

    def clear(self) -> None:
        self._records = []
        self.error = None

    def import_payload(self, payload: Payload) -> ImportResult:
        """
        Convert and append a decoded upload.

        Raises:
            InvalidFormatError, DataValidationError: The batch is rejected
                and the store is left unchanged; the message is kept in
                self.error.
        """
        diagnostics = Diagnostics()
        self.error = None
        try:
            new_records = normalize_records(
                payload,
                diagnostics=diagnostics,
                ingested_at=datetime.now(timezone.utc),
            )
        except EmrAnalyticsError as e:
            self.error = str(e)
            logger.warning(f"Upload rejected: {e}")
            raise

        imported = self.append(new_records)
        logger.info(f"Imported {imported} cluster records ({len(self)} total)")
        return ImportResult(imported=imported, total=len(self), diagnostics=diagnostics)

    def import_text(self, text: Union[str, bytes]) -> ImportResult:
        """Decode uploaded text and import it."""
        try:
            payload = decode_upload(text)
        except EmrAnalyticsError as e:
            self.error = str(e)
            raise
        return self.import_payload(payload)

    def import_file(self, filepath: Union[str, Path]) -> ImportResult:
        """Read a JSON file and import it."""
        try:
            payload = read_upload(filepath)
        except EmrAnalyticsError as e:
            self.error = str(e)
            raise
        return self.import_payload(payload)

    def select(self, filters: Optional[FilterOptions] = None) -> List[ClusterRecord]:
        if filters is None:
            return list(self._records)
        return filter_records(self._records, filters)

    def daily_buckets(
        self,
        filters: Optional[FilterOptions] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> List[DailyBucket]:
        return aggregate_by_day(self.select(filters), diagnostics=diagnostics)

    def analytics_bundle(
        self,
        filters: Optional[FilterOptions] = None,
        diagnostics: Optional[Diagnostics] = None,
    ) -> AnalyticsBundle:
        return compute_analytics_bundle(
            self.daily_buckets(filters, diagnostics),
            diagnostics=diagnostics,
        )

    def summary(self, diagnostics: Optional[Diagnostics] = None) -> SessionSummary:
        return compute_session_summary(self._records, diagnostics=diagnostics)

    def date_range(self) -> Optional[Tuple[datetime, datetime]]:
        return get_date_range(self._records)

    def kpi_metrics(
        self,
        date_filter: DateFilterOptions,
        diagnostics: Optional[Diagnostics] = None,
    ) -> Union[List[DailyBucket], List[WeeklyBucket]]:
        return filtered_kpi_metrics(self._records, date_filter, diagnostics=diagnostics)
