"""Agent Lightning document models.

Usage:
    from agent_lightning.models import LightningConfig, LearningSnapshot
"""

from agent_lightning.models.lightning import (
    Insight,
    LearningSnapshot,
    LightningConfig,
    SearchConfig,
    TrainingConfig,
    UpdateConfig,
)

__all__ = [
    "Insight",
    "LearningSnapshot",
    "LightningConfig",
    "SearchConfig",
    "TrainingConfig",
    "UpdateConfig",
]
