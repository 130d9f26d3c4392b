from datetime import date, timedelta
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from group_health.domain.models import AnalysisReport, BaseMetrics, ChatGroup, RiskStatus
from group_health.services.overview import build_overview, latest_reports_by_group
from group_health.services.score_delta import compute_score_delta, compute_week_over_week


def _report(group_id: str, day: date, score: int | None, messages: int = 10, **extra) -> AnalysisReport:
    return AnalysisReport(
        group_id=group_id,
        day=day,
        base_metrics=BaseMetrics(total_messages=messages, total_members=10, active_speakers=4, active_hours=5),
        overall_score=score,
        **extra,
    )


class ScoreDeltaTests(unittest.TestCase):
    def test_delta_direction(self) -> None:
        self.assertEqual(compute_score_delta(70, 60)["direction"], "improvement")
        self.assertEqual(compute_score_delta(50, 60)["direction"], "worsening")
        self.assertEqual(compute_score_delta(60, 60)["direction"], "neutral")

    def test_missing_side_has_no_delta(self) -> None:
        payload = compute_score_delta(None, 60)
        self.assertIsNone(payload["delta"])
        self.assertEqual(payload["direction"], "neutral")
        self.assertIsNone(compute_score_delta("", "x")["baseline"])

    def test_delta_rounds_half_up(self) -> None:
        self.assertEqual(compute_score_delta(60.5, 60)["delta"], 1)

    def test_week_over_week_compares_adjacent_windows(self) -> None:
        end = date(2024, 3, 14)
        reports = [_report("g1", end - timedelta(days=offset), 80) for offset in range(7)]
        reports += [_report("g1", end - timedelta(days=offset), 60) for offset in range(7, 14)]
        reports.append(_report("g1", end - timedelta(days=2), None, is_excluded=True))

        payload = compute_week_over_week(reports, end)
        self.assertEqual(payload["current"], 80.0)
        self.assertEqual(payload["baseline"], 60.0)
        self.assertEqual(payload["delta"], 20)
        self.assertEqual(payload["current_from"], "2024-03-08")
        self.assertEqual(payload["baseline_from"], "2024-03-01")
        self.assertEqual(payload["scored_days"], 7)

    def test_week_over_week_without_history(self) -> None:
        payload = compute_week_over_week([_report("g1", date(2024, 3, 14), 70)], date(2024, 3, 14))
        self.assertIsNone(payload["delta"])
        self.assertEqual(payload["scored_days"], 1)


class OverviewTests(unittest.TestCase):
    def setUp(self) -> None:
        self.groups = [
            ChatGroup("g1", "Alpha", 10),
            ChatGroup("g2", "Beta", 20),
            ChatGroup("g3", "Gamma", 5),
            ChatGroup("g4", "Delta", 1),
        ]
        day = date(2024, 3, 1)
        self.reports = [
            _report("g1", day - timedelta(days=1), 20),
            _report("g1", day, 85, messages=30),
            _report("g2", day, 35, messages=5, risk_status=RiskStatus(has_conflict_risk=True, risk_message="Conflict")),
            _report("g3", day, None, messages=7, is_excluded=True),
        ]

    def test_latest_report_per_group(self) -> None:
        latest = latest_reports_by_group(self.reports)
        self.assertEqual(latest["g1"].overall_score, 85)
        self.assertNotIn("g4", latest)

    def test_overview_totals(self) -> None:
        overview = build_overview(self.groups, self.reports)
        self.assertEqual(overview["group_count"], 4)
        self.assertEqual(overview["member_count"], 36)
        self.assertEqual(overview["latest_messages"], 42)
        self.assertEqual(overview["avg_score"], 60)

    def test_ranking_puts_unscored_last(self) -> None:
        ranking = build_overview(self.groups, self.reports)["ranking"]
        self.assertEqual([row["group_id"] for row in ranking], ["g1", "g2", "g4", "g3"])
        self.assertEqual(ranking[0]["level"], "excellent")
        self.assertTrue(ranking[1]["downweighted"])
        self.assertEqual(ranking[1]["risk_message"], "Conflict")
        self.assertTrue(ranking[3]["excluded"])
        self.assertIsNone(ranking[2]["latest_date"])

    def test_attention_groups(self) -> None:
        attention = build_overview(self.groups, self.reports)["attention_groups"]
        self.assertEqual([(row["group_id"], row["status"]) for row in attention], [("g2", "critical")])

    def test_empty_overview(self) -> None:
        overview = build_overview([], [])
        self.assertEqual(overview["group_count"], 0)
        self.assertIsNone(overview["avg_score"])
        self.assertEqual(overview["ranking"], [])


if __name__ == "__main__":
    unittest.main()
