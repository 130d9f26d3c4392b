from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date
import logging

from group_health.domain.errors import UnknownGroup
from group_health.domain.models import (
    AnalysisReport,
    BaseMetrics,
    ChatGroup,
    DailyRecord,
    SemanticScores,
)
from group_health.services.dimension_scoring import validate_metrics, validate_semantic_scores

LOGGER = logging.getLogger(__name__)


class MetricsRepository:
    """In-memory access to ingested daily metrics, keyed by (group, date)."""

    def __init__(self) -> None:
        self._groups: dict[str, ChatGroup] = {}
        self._records: dict[tuple[str, date], DailyRecord] = {}

    def add_group(self, group: ChatGroup) -> None:
        self._groups[group.group_id] = group

    def add_record(self, record: DailyRecord) -> None:
        validate_metrics(record.metrics)
        validate_semantic_scores(record.semantic)
        if record.group_id not in self._groups:
            self._groups[record.group_id] = ChatGroup(
                group_id=record.group_id,
                name=record.group_name or record.group_id,
                member_count=record.metrics.total_members,
            )
        self._records[(record.group_id, record.day)] = record

    def add_records(self, records: Iterable[DailyRecord]) -> int:
        count = 0
        for record in records:
            self.add_record(record)
            count += 1
        LOGGER.debug("Loaded %d daily records", count)
        return count

    def list_groups(self) -> list[ChatGroup]:
        return sorted(self._groups.values(), key=lambda group: group.name)

    def get_group(self, group_id: str) -> ChatGroup:
        group = self._groups.get(group_id)
        if group is None:
            raise UnknownGroup(group_id)
        return group

    def fetch_record(self, group_id: str, day: date) -> DailyRecord | None:
        return self._records.get((group_id, day))

    def fetch_daily_metrics(self, group_id: str, day: date) -> BaseMetrics | None:
        record = self.fetch_record(group_id, day)
        return record.metrics if record else None

    def fetch_semantic_scores(self, group_id: str, day: date) -> SemanticScores | None:
        record = self.fetch_record(group_id, day)
        return record.semantic if record else None

    def iter_records(
        self,
        group_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Iterator[DailyRecord]:
        for key in sorted(self._records):
            record = self._records[key]
            if group_id is not None and record.group_id != group_id:
                continue
            if date_from is not None and record.day < date_from:
                continue
            if date_to is not None and record.day > date_to:
                continue
            yield record

    def date_range(self) -> tuple[date, date] | None:
        if not self._records:
            return None
        days = [day for _, day in self._records]
        return min(days), max(days)


class ReportRepository:
    """Holds produced reports; a newer report for the same (group, date) supersedes the old one."""

    def __init__(self) -> None:
        self._reports: dict[str, AnalysisReport] = {}

    def save_many(self, reports: Iterable[AnalysisReport]) -> None:
        for report in reports:
            self._reports[report.report_id] = report

    def get(self, report_id: str) -> AnalysisReport | None:
        return self._reports.get(report_id)

    def get_for(self, group_id: str, day: date) -> AnalysisReport | None:
        return self._reports.get(f"{group_id}-{day.isoformat()}")

    def list_reports(self, group_id: str | None = None) -> list[AnalysisReport]:
        reports = [
            report
            for report in self._reports.values()
            if group_id in (None, "all") or report.group_id == group_id
        ]
        return sorted(reports, key=lambda report: (report.day, report.group_id))

    def __len__(self) -> int:
        return len(self._reports)
