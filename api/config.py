"""Environment-driven settings for the HTTP adapter."""

import os
from dataclasses import dataclass, field
from typing import Optional

ENV_LOG_LEVEL = "MAFIA_LOG_LEVEL"
ENV_CORS_ORIGINS = "MAFIA_CORS_ORIGINS"
ENV_GAME_SEED = "MAFIA_GAME_SEED"
ENV_STAND_IN_PROVIDER = "MAFIA_STAND_IN_PROVIDER"
ENV_STAND_IN_MODEL = "MAFIA_STAND_IN_MODEL"


@dataclass
class Settings:
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    game_seed: Optional[int] = None
    stand_in_provider: Optional[str] = None
    stand_in_model: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.environ.get(ENV_CORS_ORIGINS, "*")
        seed = os.environ.get(ENV_GAME_SEED)
        return cls(
            log_level=os.environ.get(ENV_LOG_LEVEL, "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            game_seed=int(seed) if seed else None,
            stand_in_provider=os.environ.get(ENV_STAND_IN_PROVIDER) or None,
            stand_in_model=os.environ.get(ENV_STAND_IN_MODEL) or None,
        )

    @property
    def stand_in_llm_config(self) -> Optional[dict]:
        """llm_config for stand-in agents, or None to use default choices."""
        if not self.stand_in_provider:
            return None
        return {"provider": self.stand_in_provider, "model": self.stand_in_model}


def get_settings() -> Settings:
    return Settings.from_env()
