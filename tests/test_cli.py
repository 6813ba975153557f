"""Tests for the ``lightning`` command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from agent_lightning.cli import app
from agent_lightning.services.lightning import AgentLightning
from agent_lightning.services.storage import ConfigStore, SnapshotStore


class TestCli:
    """Each command runs against a throwaway data directory."""

    def setup_method(self):
        self.runner = CliRunner()

    def teardown_method(self):
        AgentLightning._instance = None

    @pytest.fixture(autouse=True)
    def _data_dir(self, data_dir):
        self.data_dir = data_dir

    def invoke(self, *args):
        return self.runner.invoke(app, ["--data-dir", str(self.data_dir), *args])

    def status_json(self):
        result = self.invoke("status", "--json")
        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if line.startswith("{")]
        return json.loads(lines[-1])

    def test_train(self):
        result = self.invoke("train", "-e", "3")

        assert result.exit_code == 0
        assert "Training complete" in result.output
        assert (self.data_dir / "q-table.json").exists()
        assert self.status_json()["qTableSize"] > 0

    def test_train_rejects_negative_episodes(self):
        result = self.invoke("train", "--episodes", "-1")
        assert result.exit_code != 0

    def test_status_json_defaults(self):
        assert self.status_json() == {
            "enabled": False,
            "onlineLearning": False,
            "qTableSize": 0,
            "schedule": "daily",
        }

    def test_status_table(self):
        result = self.invoke("status")
        assert result.exit_code == 0
        assert "Q-table size" in result.output

    def test_online_requires_one_flag(self):
        assert self.invoke("online").exit_code == 2
        assert self.invoke("online", "--enable", "--disable").exit_code == 2

    def test_online_disable(self):
        result = self.invoke("online", "--disable")

        assert result.exit_code == 0
        assert ConfigStore(self.data_dir).load().online_learning is False
        assert self.status_json()["onlineLearning"] is False

    def test_online_enable_once_runs_single_cycle(self):
        result = self.invoke("online", "--enable", "--once")

        assert result.exit_code == 0
        assert ConfigStore(self.data_dir).load().online_learning is True
        snapshots = SnapshotStore(self.data_dir).list_snapshots()
        assert len(snapshots) == 1
        stored = json.loads(snapshots[0].read_text())
        assert {i["type"] for i in stored["insights"]} == {"pattern", "trend"}
