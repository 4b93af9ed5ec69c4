"""
Configuration - Startup settings and the runtime game config.

Settings are read once from the environment (prefix ``TOMBOLA_``) or
a ``.env`` file. GameConfig holds the values the administrator may
change while the engine runs; games read it live on every call.
"""

from __future__ import annotations
from functools import lru_cache
import logging

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide startup settings."""
    administrator: str = "admin"
    entry_fee: int = 100
    join_window: int = 120
    turn_window: int = 30

    # Collaborators used by the default app
    entropy_seed: str = "tombola"
    starting_balance: int = 1000

    event_history: int = 1000
    log_level: str = "INFO"
    allowed_origins: str = "*"

    model_config = SettingsConfigDict(env_prefix="TOMBOLA_", env_file=".env")

    def game_config(self) -> GameConfig:
        return GameConfig(
            entry_fee=self.entry_fee,
            join_window=self.join_window,
            turn_window=self.turn_window,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


class GameConfig(BaseModel):
    """Administrator-mutable parameters shared by all games."""
    entry_fee: int = Field(default=100, ge=0, description="Fee escrowed per join")
    join_window: int = Field(default=120, ge=0, description="Seconds after creation joins are accepted")
    turn_window: int = Field(default=30, ge=0, description="Minimum seconds between draws")

    model_config = {"frozen": True}


def configure_logging(level: str = "INFO"):
    """Root logging setup for the CLI and the app."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
