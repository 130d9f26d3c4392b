from __future__ import annotations

from collections.abc import Iterable
import logging

from group_health.domain.models import (
    AnalysisReport,
    DailyRecord,
    GroupScoringConfig,
    ScoreThresholds,
)
from group_health.services.composite_scoring import compute_overall_score
from group_health.services.dimension_scoring import (
    score_dimensions,
    validate_metrics,
)
from group_health.services.participation import ScoringConfigStore, should_score
from group_health.services.risk import evaluate_risk
from group_health.services.thresholds import ThresholdStore

LOGGER = logging.getLogger(__name__)


def build_report(
    record: DailyRecord,
    thresholds: ScoreThresholds,
    config: GroupScoringConfig,
    thresholds_version: int = 0,
    member_count: int | None = None,
) -> AnalysisReport:
    common = {
        "group_id": record.group_id,
        "day": record.day,
        "base_metrics": record.metrics,
        "group_name": record.group_name or record.group_id,
        "thresholds_version": thresholds_version,
        "thresholds": thresholds,
        "summary": record.summary,
        "member_stats": record.member_stats,
        "hourly_activity": record.hourly_activity,
        "message_types": record.message_types,
        "insight": record.insight,
    }

    if not should_score(record.group_id, config):
        validate_metrics(record.metrics)
        return AnalysisReport(**common, is_excluded=True)

    breakdown = score_dimensions(record.metrics, record.semantic, thresholds)
    # risk is evaluated on the atmosphere value that lands in the report
    risk = evaluate_risk(
        record.metrics,
        breakdown.atmosphere_score,
        thresholds,
        member_count=member_count,
    )
    return AnalysisReport(
        **common,
        score_breakdown=breakdown,
        overall_score=compute_overall_score(breakdown),
        risk_status=risk,
    )


def score_records(
    records: Iterable[DailyRecord],
    threshold_store: ThresholdStore,
    config_store: ScoringConfigStore,
) -> list[AnalysisReport]:
    thresholds, version = threshold_store.snapshot()
    config = config_store.get()

    reports = [build_report(record, thresholds, config, version) for record in records]

    excluded = sum(1 for report in reports if report.is_excluded)
    LOGGER.info(
        "Scored %d daily reports (%d excluded) with thresholds v%d",
        len(reports) - excluded,
        excluded,
        version,
    )
    return reports
