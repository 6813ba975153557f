"""Shared fixtures for the Agent Lightning test suite."""

import random

import pytest

from agent_lightning.rl.q_table import QTable
from agent_lightning.services.lightning import AgentLightning
from agent_lightning.services.storage import ConfigStore, SnapshotStore


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "agent-lightning"
    path.mkdir()
    return path


@pytest.fixture
def q_table(data_dir):
    return QTable(data_dir)


@pytest.fixture
def config_store(data_dir):
    return ConfigStore(data_dir)


@pytest.fixture
def snapshot_store(data_dir):
    return SnapshotStore(data_dir)


@pytest.fixture
def lightning(data_dir):
    """A service instance installed as the process-wide singleton."""
    instance = AgentLightning(
        data_dir=data_dir,
        rng=random.Random(7),
        interval_seconds=3600,
    )
    AgentLightning._instance = instance
    yield instance
    AgentLightning._instance = None
