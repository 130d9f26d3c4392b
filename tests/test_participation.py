import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from group_health.domain.errors import ConfigurationOutOfRange
from group_health.domain.models import GroupScoringConfig
from group_health.services.participation import ScoringConfigStore, make_scoring_config, should_score

GROUPS = ["g1", "g2", "g3"]


class ParticipationTests(unittest.TestCase):
    def test_all_mode_scores_everyone(self) -> None:
        config = GroupScoringConfig()
        self.assertEqual([g for g in GROUPS if should_score(g, config)], GROUPS)

    def test_include_mode_scores_only_listed(self) -> None:
        config = make_scoring_config("include", ["g1"])
        self.assertEqual([g for g in GROUPS if should_score(g, config)], ["g1"])

    def test_exclude_mode_skips_listed(self) -> None:
        config = make_scoring_config("exclude", ["g1"])
        self.assertEqual([g for g in GROUPS if should_score(g, config)], ["g2", "g3"])

    def test_unknown_mode_rejected(self) -> None:
        with self.assertRaises(ConfigurationOutOfRange):
            make_scoring_config("some", ["g1"])
        with self.assertRaises(ConfigurationOutOfRange):
            should_score("g1", GroupScoringConfig(mode="bogus"))

    def test_group_ids_are_normalized(self) -> None:
        config = make_scoring_config(" Include ", [" g1 ", "", "g1", "g2"])
        self.assertEqual(config.mode, "include")
        self.assertEqual(config.group_ids, frozenset({"g1", "g2"}))

    def test_store_keeps_previous_config_on_error(self) -> None:
        store = ScoringConfigStore()
        store.exclude(["g2"])
        with self.assertRaises(ConfigurationOutOfRange):
            store.set_mode("nope")
        self.assertEqual(store.get().mode, "exclude")
        self.assertEqual(store.excluded_groups(GROUPS), ["g2"])

    def test_store_normalizes_initial_config(self) -> None:
        store = ScoringConfigStore(GroupScoringConfig(mode="Exclude", group_ids=frozenset({" g1 ", ""})))
        self.assertEqual(store.get(), GroupScoringConfig(mode="exclude", group_ids=frozenset({"g1"})))
        self.assertFalse(should_score("g1", store.get()))
        self.assertTrue(should_score("g2", store.get()))
        with self.assertRaises(ConfigurationOutOfRange):
            ScoringConfigStore(GroupScoringConfig(mode="some"))

    def test_store_mode_switch_keeps_group_ids(self) -> None:
        store = ScoringConfigStore()
        store.set_group_ids(["g3"])
        store.set_mode("include")
        self.assertEqual(store.excluded_groups(GROUPS), ["g1", "g2"])


if __name__ == "__main__":
    unittest.main()
