"""Configuration management using Pydantic settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "TopMarks"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Folder storage (one JSON file per key)
    storage_dir: Path = Path("~/.local/share/topmarks")
    storage_key: str = "topmarks-folders"

    # Reject marks outside +/-90 lat, +/-180 lng instead of passing them through
    parser_strict_range: bool = False

    # Map rendering defaults
    map_center_lat: float = -38.1
    map_center_lng: float = 144.8
    map_zoom: int = 10
    mark_color: str = "#1976d2"
    mark_radius_m: float = 120.0


settings = Settings()
