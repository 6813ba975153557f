"""Persisted document schemas for Agent Lightning.

The config document and the per-cycle learning snapshots are stored as
JSON with camelCase keys.  These pydantic models validate what is read
back from disk and serialise with ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_SOURCES: list[str] = [
    "google",
    "github",
    "stackoverflow",
    "medium",
    "dev.to",
]

DEFAULT_KEYWORDS: list[str] = [
    "SEO optimization",
    "AI SEO",
    "GEO optimization",
    "generative AI search",
    "structured data",
    "schema.org",
]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TrainingConfig(_CamelModel):
    episodes: int = Field(100, ge=0)
    batch_size: int = Field(10, ge=1)
    schedule: str = "daily"


class SearchConfig(_CamelModel):
    enabled: bool = True
    sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES))
    keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))


class UpdateConfig(_CamelModel):
    auto_update: bool = False
    frequency: str = "weekly"


class LightningConfig(_CamelModel):
    """The ``lightning-config.json`` document."""

    enabled: bool = False
    online_learning: bool = False
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    update: UpdateConfig = Field(default_factory=UpdateConfig)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class Insight(BaseModel):
    """A qualitative finding derived from one online-learning cycle."""

    type: str = Field(..., description="pattern or trend")
    description: str
    action: str = Field(..., description="Optimization action the insight favours")


class LearningSnapshot(BaseModel):
    """Inputs and outputs of one online-learning cycle."""

    timestamp: str
    sources: list[dict[str, Any]] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    insights: list[Insight] = Field(default_factory=list)
