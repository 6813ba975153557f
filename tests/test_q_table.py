"""Tests for the file-backed Q-table."""

import json

from agent_lightning.rl.actions import ACTIONS, OptimizationAction
from agent_lightning.rl.q_table import QTable


class TestQTableValues:
    """Lookup, update and max semantics."""

    def test_missing_entry_reads_as_zero(self, q_table):
        assert q_table.get("0:0:0:0", OptimizationAction.OPTIMIZE_META_TAGS) == 0.0
        assert q_table.size() == 0

    def test_set_and_get(self, q_table):
        q_table.set("1:2:3:4", "addStructuredData", 2.5)
        assert q_table.get("1:2:3:4", OptimizationAction.ADD_STRUCTURED_DATA) == 2.5
        assert q_table.as_dict() == {"1:2:3:4:addStructuredData": 2.5}

    def test_set_overwrites(self, q_table):
        q_table.set("0:0:0:0", "optimizeMetaTags", 1.0)
        q_table.set("0:0:0:0", "optimizeMetaTags", -4.0)
        assert q_table.get("0:0:0:0", "optimizeMetaTags") == -4.0
        assert len(q_table) == 1

    def test_max_value_of_unknown_state(self, q_table):
        assert q_table.max_value("5:5:5:5") == 0.0

    def test_max_value_treats_missing_entries_as_zero(self, q_table):
        q_table.set("2:0:0:0", "optimizeMetaTags", -3.0)
        q_table.set("2:0:0:0", "addStructuredData", -1.0)
        assert q_table.max_value("2:0:0:0") == 0.0

    def test_max_value_all_negative(self, q_table):
        for i, action in enumerate(ACTIONS):
            q_table.set("2:0:0:0", action, -1.0 - i)
        assert q_table.max_value("2:0:0:0") == -1.0

    def test_max_value_picks_highest(self, q_table):
        q_table.set("3:0:0:0", "optimizePerformance", 7.0)
        q_table.set("3:0:0:0", "enhanceAccessibility", 3.0)
        assert q_table.max_value("3:0:0:0") == 7.0

    def test_nudge_only_touches_matching_action(self, q_table):
        q_table.set("0:0:0:0", "addStructuredData", 1.0)
        q_table.set("1:0:0:0", "addStructuredData", 2.0)
        q_table.set("0:0:0:0", "optimizeMetaTags", 5.0)

        adjusted = q_table.nudge(OptimizationAction.ADD_STRUCTURED_DATA, 0.5)

        assert adjusted == 2
        assert q_table.get("0:0:0:0", "addStructuredData") == 1.5
        assert q_table.get("1:0:0:0", "addStructuredData") == 2.5
        assert q_table.get("0:0:0:0", "optimizeMetaTags") == 5.0


class TestQTablePersistence:
    """Load/save behaviour, including failure handling."""

    def test_directory_path_resolves_to_q_table_json(self, data_dir):
        assert QTable(data_dir).path == data_dir / "q-table.json"

    def test_round_trip(self, q_table):
        q_table.set("0:0:0:0", "optimizeMetaTags", 1.0)
        q_table.set("10:3:7:2", "enhanceAccessibility", -0.123456789)
        q_table.set("4:4:4:4", "improveContentStructure", 1e-9)
        assert q_table.save() is True

        reloaded = QTable(q_table.path)
        assert reloaded.load() is True
        assert reloaded.as_dict() == q_table.as_dict()

    def test_saved_document_is_flat_mapping(self, q_table):
        q_table.set("0:0:0:0", "optimizeMetaTags", 1.5)
        q_table.save()
        assert json.loads(q_table.path.read_text()) == {"0:0:0:0:optimizeMetaTags": 1.5}

    def test_save_leaves_no_temp_files(self, q_table, data_dir):
        q_table.set("0:0:0:0", "optimizeMetaTags", 1.5)
        q_table.save()
        q_table.save()
        assert [p.name for p in data_dir.iterdir()] == ["q-table.json"]

    def test_load_missing_file_starts_empty(self, q_table):
        q_table.set("0:0:0:0", "optimizeMetaTags", 1.0)
        assert q_table.load() is False
        assert q_table.size() == 0

    def test_load_corrupt_file_starts_empty(self, q_table):
        q_table.path.write_text("{not json")
        assert q_table.load() is False
        assert q_table.size() == 0

    def test_load_rejects_non_object(self, q_table):
        q_table.path.write_text("[1, 2, 3]")
        assert q_table.load() is False
        assert q_table.size() == 0

    def test_load_rejects_non_numeric_values(self, q_table):
        q_table.path.write_text(json.dumps({"0:0:0:0:optimizeMetaTags": "high"}))
        assert q_table.load() is False
        assert q_table.size() == 0

    def test_save_failure_is_reported_not_raised(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        table = QTable(blocker / "q-table.json")
        table.set("0:0:0:0", "optimizeMetaTags", 1.0)

        assert table.save() is False
        assert table.get("0:0:0:0", "optimizeMetaTags") == 1.0

    def test_load_rejects_out_of_range_number(self, q_table):
        q_table.path.write_text('{"0:0:0:0:optimizeMetaTags": 1' + "0" * 400 + "}")
        assert q_table.load() is False
        assert q_table.size() == 0

    def test_load_rejects_deeply_nested_document(self, q_table):
        q_table.path.write_text("[" * 100000 + "]" * 100000)
        assert q_table.load() is False
        assert q_table.size() == 0
