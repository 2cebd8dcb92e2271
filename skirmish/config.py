"""Runtime settings for the skirmish service."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from skirmish.engine.model import EVENT_LIMIT, FEED_LIMIT, MAX_DELTA_SECONDS, BattleConfig


class Settings(BaseSettings):
    """Settings read from SKIRMISH_* environment variables or a .env file."""

    model_config = SettingsConfigDict(env_prefix="SKIRMISH_", env_file=".env", env_file_encoding="utf-8")

    frame_interval_ms: float = Field(
        default=1000.0 / 60.0,
        description="Wall-clock milliseconds between simulation frames",
        gt=0.0,
    )
    max_delta_seconds: float = Field(
        default=MAX_DELTA_SECONDS,
        description="Largest time step a single frame may advance the battle by",
        gt=0.0,
    )
    event_limit: int = Field(default=EVENT_LIMIT, description="Events retained in the feed", gt=0)
    feed_limit: int = Field(default=FEED_LIMIT, description="Events shown on screen", gt=0)
    damage_multiplier: float = Field(default=1.5, description="Initial ally damage multiplier", gt=0.0)
    speed_mode: str = Field(default="fast", description="Initial ally speed mode")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"],
        description="Origins allowed to call the HTTP API",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    def battle_config(self) -> BattleConfig:
        return BattleConfig(damage_multiplier=self.damage_multiplier, speed_mode=self.speed_mode)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
