from datetime import date
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from group_health.data.repositories import MetricsRepository, ReportRepository
from group_health.data.seed import SAMPLE_GROUPS, generate_sample_records, load_records_csv
from group_health.domain.errors import InvalidMetric, UnknownGroup
from group_health.domain.models import AnalysisReport, BaseMetrics, DailyRecord, SemanticScores

CSV_TEXT = (
    "\ufeffGroup ID,Date,Total Messages,Total Members,Active Speakers,Active Hours,"
    "Topic Relevance Score,Atmosphere Score,Median Response Interval,Summary\n"
    "g1,2024-03-01,100,50,25,10,80,20,150,Busy day\n"
    "g1,2024-03-02,0,50,0,0,0,0,,\n"
    "g2,2024-03-01,12,8,4,3,70,90,60,Quiet\n"
)


def _record(group_id: str, day: date, members: int = 10) -> DailyRecord:
    return DailyRecord(
        group_id=group_id,
        day=day,
        metrics=BaseMetrics(total_messages=5, total_members=members, active_speakers=2, active_hours=3),
        semantic=SemanticScores(topic_relevance_score=50, atmosphere_score=50),
        group_name=f"Group {group_id}",
    )


class CsvLoadingTests(unittest.TestCase):
    def test_loads_records_with_normalized_headers(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "metrics.csv"
            path.write_text(CSV_TEXT, encoding="utf-8")
            records = load_records_csv(path)

        self.assertEqual(len(records), 3)
        first = records[0]
        self.assertEqual(first.group_id, "g1")
        self.assertEqual(first.day, date(2024, 3, 1))
        self.assertEqual(first.metrics.total_messages, 100)
        self.assertEqual(first.metrics.median_response_interval, 150.0)
        self.assertEqual(first.metrics.total_hours, 24.0)
        self.assertEqual(first.semantic.atmosphere_score, 20.0)
        self.assertEqual(first.summary, "Busy day")
        self.assertIsNone(records[1].metrics.median_response_interval)
        self.assertEqual(records[1].summary, "")

    def test_missing_columns_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "metrics.csv"
            path.write_text("group_id,date,total_messages\ng1,2024-03-01,4\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_records_csv(path)

    def _load(self, text: str) -> list:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "metrics.csv"
            path.write_text(text, encoding="utf-8")
            return load_records_csv(path)

    def test_blank_required_values_are_rejected(self) -> None:
        header = (
            "group_id,date,total_messages,total_members,active_speakers,active_hours,"
            "topic_relevance_score,atmosphere_score\n"
        )
        cases = {
            "atmosphere_score": "g1,2024-03-01,100,50,25,10,80,\n",
            "total_messages": "g1,2024-03-01,,50,25,10,80,20\n",
            "group_id": ",2024-03-01,100,50,25,10,80,20\n",
        }
        for field, line in cases.items():
            with self.subTest(field=field):
                with self.assertRaises(InvalidMetric) as ctx:
                    self._load(header + "g0,2024-03-01,1,1,1,1,1,1\n" + line)
                self.assertEqual(ctx.exception.field, field)
                self.assertIn("missing", str(ctx.exception))

    def test_fractional_counts_are_rejected(self) -> None:
        text = (
            "group_id,date,total_messages,total_members,active_speakers,active_hours,"
            "topic_relevance_score,atmosphere_score\n"
            "g1,2024-03-01,100,50,25.7,10,80,20\n"
        )
        with self.assertRaises(InvalidMetric) as ctx:
            self._load(text)
        self.assertEqual(ctx.exception.field, "active_speakers")

    def test_non_numeric_values_are_rejected(self) -> None:
        text = (
            "group_id,date,total_messages,total_members,active_speakers,active_hours,"
            "topic_relevance_score,atmosphere_score\n"
            "g1,2024-03-01,100,50,25,10,high,20\n"
        )
        with self.assertRaises(InvalidMetric) as ctx:
            self._load(text)
        self.assertEqual(ctx.exception.field, "topic_relevance_score")

    def test_explicit_zero_is_kept_for_optional_columns(self) -> None:
        text = (
            "group_id,date,total_messages,total_members,active_speakers,active_hours,"
            "topic_relevance_score,atmosphere_score,total_hours,top20_percentage,key_highlights\n"
            "g1,2024-03-01,100,50,25,0,80,20,0,0,Release on track; Two complaints open\n"
            "g1,2024-03-02,100,50,25,6,80,20,,,\n"
        )
        first, second = self._load(text)
        self.assertEqual(first.metrics.total_hours, 0.0)
        self.assertEqual(first.metrics.top20_percentage, 0.0)
        self.assertEqual(first.insight.key_highlights, ("Release on track", "Two complaints open"))
        self.assertEqual(second.metrics.total_hours, 24)
        self.assertTrue(second.insight.is_empty)

    def test_missing_or_empty_file_gives_no_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            empty = Path(tmp) / "empty.csv"
            empty.write_text("", encoding="utf-8")
            self.assertEqual(load_records_csv(empty), [])
            self.assertEqual(load_records_csv(Path(tmp) / "missing.csv"), [])


class SampleGeneratorTests(unittest.TestCase):
    def test_generator_is_deterministic(self) -> None:
        end = date(2024, 3, 31)
        first = generate_sample_records(end=end, days=10, seed=3)
        second = generate_sample_records(end=end, days=10, seed=3)
        self.assertEqual(first, second)
        self.assertNotEqual(first, generate_sample_records(end=end, days=10, seed=4))

    def test_generator_covers_every_group_and_day(self) -> None:
        end = date(2024, 3, 31)
        records = generate_sample_records(end=end, days=5)
        self.assertEqual(len(records), 5 * len(SAMPLE_GROUPS))
        self.assertEqual({record.group_id for record in records}, {group.group_id for group in SAMPLE_GROUPS})
        self.assertEqual(max(record.day for record in records), end)
        self.assertEqual(min(record.day for record in records), date(2024, 3, 27))

    def test_generated_records_carry_insight(self) -> None:
        for record in generate_sample_records(end=date(2024, 3, 31), days=10):
            insight = record.insight
            if record.metrics.total_messages == 0:
                self.assertTrue(insight.is_empty)
                continue
            self.assertEqual(sum(insight.sentiment.values()), 100)
            self.assertTrue(all(value >= 0 for value in insight.sentiment.values()))
            self.assertTrue(3 <= len(insight.topics) <= 5)
            self.assertTrue(all(topic["sentiment"] in insight.sentiment for topic in insight.topics))
            self.assertTrue(2 <= len(insight.key_highlights) <= 3)

    def test_generated_records_are_valid(self) -> None:
        repo = MetricsRepository()
        self.assertEqual(repo.add_records(generate_sample_records(end=date(2024, 3, 31), days=20)), 20 * 6)
        for record in repo.iter_records():
            self.assertLessEqual(record.metrics.active_speakers, record.metrics.total_members)
            if record.metrics.total_messages == 0:
                self.assertEqual(record.metrics.active_speakers, 0)


class MetricsRepositoryTests(unittest.TestCase):
    def test_groups_are_created_from_records(self) -> None:
        repo = MetricsRepository()
        repo.add_record(_record("g2", date(2024, 3, 1), members=7))
        group = repo.get_group("g2")
        self.assertEqual(group.name, "Group g2")
        self.assertEqual(group.member_count, 7)
        with self.assertRaises(UnknownGroup):
            repo.get_group("nope")

    def test_invalid_record_rejected(self) -> None:
        repo = MetricsRepository()
        record = DailyRecord(
            group_id="g1",
            day=date(2024, 3, 1),
            metrics=BaseMetrics(total_messages=-5, total_members=1, active_speakers=0, active_hours=0),
            semantic=SemanticScores(topic_relevance_score=0, atmosphere_score=0),
        )
        with self.assertRaises(InvalidMetric):
            repo.add_record(record)
        self.assertIsNone(repo.date_range())

    def test_lookups_and_iteration(self) -> None:
        repo = MetricsRepository()
        repo.add_records(
            [_record("g2", date(2024, 3, 2)), _record("g1", date(2024, 3, 3)), _record("g1", date(2024, 3, 1))]
        )
        self.assertEqual(repo.fetch_daily_metrics("g1", date(2024, 3, 1)).total_messages, 5)
        self.assertEqual(repo.fetch_semantic_scores("g1", date(2024, 3, 3)).atmosphere_score, 50)
        self.assertIsNone(repo.fetch_record("g1", date(2024, 3, 2)))
        self.assertEqual(
            [(record.group_id, record.day.day) for record in repo.iter_records()],
            [("g1", 1), ("g1", 3), ("g2", 2)],
        )
        self.assertEqual(len(list(repo.iter_records(group_id="g1", date_from=date(2024, 3, 2)))), 1)
        self.assertEqual(repo.date_range(), (date(2024, 3, 1), date(2024, 3, 3)))


class ReportRepositoryTests(unittest.TestCase):
    def _report(self, group_id: str, day: date, score: int) -> AnalysisReport:
        return AnalysisReport(
            group_id=group_id,
            day=day,
            base_metrics=BaseMetrics(total_messages=1, total_members=1, active_speakers=1, active_hours=1),
            overall_score=score,
        )

    def test_newer_report_supersedes_older(self) -> None:
        repo = ReportRepository()
        repo.save_many([self._report("g1", date(2024, 3, 1), 40)])
        repo.save_many([self._report("g1", date(2024, 3, 1), 60)])
        self.assertEqual(len(repo), 1)
        self.assertEqual(repo.get("g1-2024-03-01").overall_score, 60)
        self.assertEqual(repo.get_for("g1", date(2024, 3, 1)).overall_score, 60)

    def test_list_reports_filters_and_sorts(self) -> None:
        repo = ReportRepository()
        repo.save_many(
            [
                self._report("g2", date(2024, 3, 1), 10),
                self._report("g1", date(2024, 3, 2), 20),
                self._report("g1", date(2024, 3, 1), 30),
            ]
        )
        self.assertEqual([r.report_id for r in repo.list_reports()], ["g1-2024-03-01", "g2-2024-03-01", "g1-2024-03-02"])
        self.assertEqual(len(repo.list_reports("all")), 3)
        self.assertEqual(len(repo.list_reports("g1")), 2)
        self.assertIsNone(repo.get("missing"))


if __name__ == "__main__":
    unittest.main()
