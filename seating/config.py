"""Application settings loaded from ``SEATING_*`` environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Seat allocator configuration.

    Attributes:
        database_url: SQLAlchemy URL of the seating store.
        strategy: Default seat ordering strategy.
        adjacency: Neighbour rule used by the checkerboard strategy.
        export_dir: Directory where Excel and PDF exports are written.
        roster_path: Workbook read by the roster import when no path is given.
        log_level: Root log level.
        lock_timeout: Seconds a second allocation for the same exam waits.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEATING_",
        env_file=".env",
        extra="ignore",
    )

    database_url: str = "sqlite:///./seat_allocator.db"
    strategy: Literal["block", "checkerboard"] = "block"
    adjacency: Literal["row", "grid"] = "row"
    export_dir: str = "exports"
    roster_path: str = "students.xlsx"
    log_level: str = "INFO"
    lock_timeout: float = Field(default=0.0, ge=0)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    get_settings.cache_clear()
