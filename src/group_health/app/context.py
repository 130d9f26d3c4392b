from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging

from group_health.config import Settings
from group_health.data.repositories import MetricsRepository, ReportRepository
from group_health.data.seed import SAMPLE_GROUPS, generate_sample_records, load_records_csv
from group_health.domain.models import AnalysisReport
from group_health.services.participation import ScoringConfigStore
from group_health.services.pipeline import score_records
from group_health.services.thresholds import ThresholdStore

LOGGER = logging.getLogger(__name__)


@dataclass
class AppContext:
    metrics: MetricsRepository
    reports: ReportRepository
    thresholds: ThresholdStore
    scoring: ScoringConfigStore

    def analyze_pending(self) -> list[AnalysisReport]:
        """Score days that have no report yet. Existing reports are left untouched."""
        pending = [
            record
            for record in self.metrics.iter_records()
            if self.reports.get_for(record.group_id, record.day) is None
        ]
        produced = score_records(pending, self.thresholds, self.scoring)
        self.reports.save_many(produced)
        return produced

    def rerun_analysis(self) -> list[AnalysisReport]:
        """Operator-triggered full re-run; new reports supersede the stored ones."""
        produced = score_records(self.metrics.iter_records(), self.thresholds, self.scoring)
        self.reports.save_many(produced)
        LOGGER.info("Re-ran analysis for %d days", len(produced))
        return produced

    def data_end(self) -> date:
        bounds = self.metrics.date_range()
        return bounds[1] if bounds else date.today()


def build_context(settings: Settings, today: date | None = None) -> AppContext:
    metrics = MetricsRepository()
    if settings.metrics_csv is not None:
        metrics.add_records(load_records_csv(settings.metrics_csv))
    else:
        for group in SAMPLE_GROUPS:
            metrics.add_group(group)
        metrics.add_records(
            generate_sample_records(end=today, days=settings.sample_days, seed=settings.sample_seed)
        )

    ctx = AppContext(
        metrics=metrics,
        reports=ReportRepository(),
        thresholds=ThresholdStore(settings.thresholds),
        scoring=ScoringConfigStore(settings.scoring),
    )
    ctx.analyze_pending()
    return ctx
