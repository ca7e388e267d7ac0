from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./scout.db")

    # API Keys
    openai_api_key: str = Field(default="")
    youtube_api_key: str = Field(default="")
    apify_api_token: str = Field(default="")

    # LLM Configuration
    llm_model: str = Field(default="gpt-4o-mini")
    transcription_model: str = Field(default="gpt-4o-mini-transcribe")

    # Storage
    image_dir: str = Field(default="./data/images")
    temp_dir: str = Field(default="")  # Empty means the system temp dir

    # Application
    debug: bool = Field(default=False)
    log_dir: str = Field(default="./logs")

    # Background work
    scheduler_enabled: bool = Field(default=True)
    worker_enabled: bool = Field(default=True)


class WorkerConfig:
    """Sync worker configuration from config.yml."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.poll_interval_seconds: float = data.get("poll_interval_seconds", 5)
        self.post_job_delay_seconds: float = data.get("post_job_delay_seconds", 1)
        self.tenants: list[str] = data.get("tenants", ["default"])
        self.max_items_per_sync: int = data.get("max_items_per_sync", 25)
        self.suggest_after_initial_scrape: bool = data.get("suggest_after_initial_scrape", True)


class EnrichmentConfig:
    """Enrichment pipeline configuration from config.yml."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.download_images: bool = data.get("download_images", True)
        self.transcribe: bool = data.get("transcribe", True)
        self.infer_topics: bool = data.get("infer_topics", True)
        self.max_topics: int = data.get("max_topics", 5)
        self.download_timeout_seconds: int = data.get("download_timeout_seconds", 300)


class GraphConfig:
    """Topic engagement graph parameters from config.yml."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.regularization_weight: float = data.get("regularization_weight", 10)
        self.minimum_sample_size: int = data.get("minimum_sample_size", 1)
        self.max_nodes: int | None = data.get("max_nodes")
        self.exemplar_count: int = data.get("exemplar_count", 3)
        self.max_connections: int = data.get("max_connections", 5)
        self.include_duration: bool = data.get("include_duration", True)
        self.include_likes_comments: bool = data.get("include_likes_comments", True)
        self.like_weight: float = data.get("like_weight", 150)
        self.comment_weight: float = data.get("comment_weight", 500)
        self.category_threshold: float = data.get("category_threshold", 0.5)
        self.category_min_incoming: int = data.get("category_min_incoming", 2)


class SuggestionConfig:
    """Channel suggestion loop configuration from config.yml."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.selector: str = data.get("selector", "item_count")
        self.max_topics: int = data.get("max_topics", 5)
        self.queries_per_topic: int = data.get("queries_per_topic", 3)
        self.results_per_query: int = data.get("results_per_query", 3)
        self.platform: str = data.get("platform", "instagram")
        self.profile_delay_seconds: float = data.get("profile_delay_seconds", 0.25)
        self.search_delay_seconds: float = data.get("search_delay_seconds", 1.0)


class ScheduleConfig:
    """Periodic schedule configuration from config.yml."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.resync_enabled: bool = data.get("resync_enabled", True)
        self.resync_time_utc: str = data.get("resync_time_utc", "04:00")
        self.resync_lookback_days: int = data.get("resync_lookback_days", 7)
        self.graph_rebuild_enabled: bool = data.get("graph_rebuild_enabled", True)
        self.graph_rebuild_minute: int = data.get("graph_rebuild_minute", 30)


class AppConfig:
    """Combined application configuration from .env and config.yml."""

    def __init__(self) -> None:
        self.settings = Settings()
        self._load_yaml()

    def _load_yaml(self) -> None:
        config_path = Path("config.yml")
        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        else:
            data = {}

        self.worker = WorkerConfig(data.get("worker", {}))
        self.enrichment = EnrichmentConfig(data.get("enrichment", {}))
        self.graph = GraphConfig(data.get("graph", {}))
        self.suggestions = SuggestionConfig(data.get("suggestions", {}))
        self.schedules = ScheduleConfig(data.get("schedules", {}))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_config() -> AppConfig:
    """Get cached full config instance."""
    return AppConfig()
