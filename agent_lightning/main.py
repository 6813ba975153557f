from contextlib import asynccontextmanager

from fastapi import FastAPI

from agent_lightning.api.routes import lightning
from agent_lightning.config import settings
from agent_lightning.services.lightning import AgentLightning
from agent_lightning.utils.logging import configure_logging, get_logger, is_configured

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not is_configured():
        configure_logging(settings.log_level, settings.log_json)

    # Online learning is never resumed from the stored config alone;
    # POST /api/lightning/online/enable arms it.
    status = AgentLightning.get_instance().status()
    logger.info(
        "agent_lightning_ready",
        data_dir=settings.data_dir,
        q_table_size=status.q_table_size,
        online_learning_configured=status.online_learning,
    )
    yield

    await AgentLightning.get_instance().shutdown()


app = FastAPI(
    title="Agent Lightning",
    description="Q-learning optimizer for SEO / AI SEO / GEO / AIO content scores",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(lightning.router, prefix="/api/lightning", tags=["lightning"])


@app.get("/health")
async def health():
    return {"status": "ok"}
