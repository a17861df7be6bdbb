from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Data loading
    FETCH_TIMEOUT_SECONDS: float = 30.0
    FETCH_MAX_ATTEMPTS: int = 3

    # Frame cadence for the interactive viewer (~60 fps)
    FRAME_INTERVAL_MS: int = 16

    # Transform step (Neo4j query table export -> graph JSON)
    TRANSFORM_INPUT_PATH: str = "public/data/neo4j_query_table_data.json"
    TRANSFORM_OUTPUT_PATH: str = "public/data/graph_data.json"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="json", description="'json' for production, 'console' for dev")


def get_settings() -> Settings:
    return Settings()
