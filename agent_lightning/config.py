from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage: config, Q-table and learning snapshots all live here
    data_dir: str = ".project-data/agent-lightning"

    # Q-learning
    epsilon: float = 0.1
    learning_rate: float = 0.1
    discount_factor: float = 0.9
    max_steps: int = 50
    checkpoint_every: int = 10

    # Online learning
    online_interval_seconds: float = 24 * 60 * 60
    lookup_timeout: float = 15.0
    search_endpoint: str = ""
    insight_nudge: float = 1.0

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("epsilon", "learning_rate", "discount_factor")
    @classmethod
    def _unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("must be within [0, 1]")
        return value

    model_config = {
        "env_prefix": "LIGHTNING_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
