"""
Agent Lightning API routes.

Training control, online-learning toggles and status for the Q-learning
optimizer.  Training runs synchronously, so it is pushed onto a worker
thread to keep the event loop responsive.
"""

import asyncio

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agent_lightning.services.lightning import AgentLightning
from agent_lightning.services.storage import StorageError

router = APIRouter()


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------


class TrainRequest(BaseModel):
    episodes: int | None = Field(None, ge=0, description="Defaults to training.episodes from config")


class TrainResponse(BaseModel):
    episodes: int
    total_steps: int
    avg_reward: float
    best_reward: float
    worst_reward: float
    terminal_episodes: int
    saves: int
    failed_saves: int
    checkpoint_stale: bool
    q_table_size: int
    started_at: str
    ended_at: str


class OnlineLearningResponse(BaseModel):
    enabled: bool
    online_learning: bool
    scheduler_running: bool


class StatusResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    enabled: bool
    online_learning: bool
    q_table_size: int
    schedule: str
    scheduler_running: bool


def get_lightning() -> AgentLightning:
    return AgentLightning.get_instance()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/train", response_model=TrainResponse)
async def train(request: TrainRequest | None = None):
    """Run a Q-learning training session."""
    lightning = get_lightning()
    episodes = request.episodes if request else None
    try:
        result = await asyncio.to_thread(lightning.train, episodes)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    return TrainResponse(
        episodes=result.episodes,
        total_steps=result.total_steps,
        avg_reward=round(result.avg_reward, 4),
        best_reward=result.best_reward,
        worst_reward=result.worst_reward,
        terminal_episodes=result.terminal_episodes,
        saves=result.saves,
        failed_saves=result.failed_saves,
        checkpoint_stale=result.checkpoint_stale,
        q_table_size=result.q_table_size,
        started_at=result.started_at.isoformat(),
        ended_at=result.ended_at.isoformat(),
    )


@router.post("/online/enable", response_model=OnlineLearningResponse)
async def enable_online_learning():
    """Enable online learning and start the background loop."""
    lightning = get_lightning()
    try:
        config = await lightning.enable_online_learning()
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return OnlineLearningResponse(
        enabled=config.enabled,
        online_learning=config.online_learning,
        scheduler_running=lightning.scheduler.is_running,
    )


@router.post("/online/disable", response_model=OnlineLearningResponse)
async def disable_online_learning():
    """Disable online learning; an in-flight cycle is allowed to finish."""
    lightning = get_lightning()
    try:
        config = await lightning.disable_online_learning()
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return OnlineLearningResponse(
        enabled=config.enabled,
        online_learning=config.online_learning,
        scheduler_running=lightning.scheduler.is_running,
    )


@router.get("/status", response_model=StatusResponse)
async def get_status():
    """Current config flags and Q-table size."""
    snapshot = get_lightning().status()
    return StatusResponse(
        enabled=snapshot.enabled,
        online_learning=snapshot.online_learning,
        q_table_size=snapshot.q_table_size,
        schedule=snapshot.schedule,
        scheduler_running=snapshot.scheduler_running,
    )
