"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    assets_dir: Path = Field(default=Path("assets"), alias="ASSETS_DIR")
    fonts_dir_override: Optional[Path] = Field(default=None, alias="FONTS_DIR")
    output_path: Path = Field(default=Path("article-card.png"), alias="OUTPUT_PATH")

    # Fonts
    allow_builtin_fonts: bool = Field(default=False, alias="ALLOW_BUILTIN_FONTS")

    # Fetch Settings
    fetch_timeout_seconds: float = Field(default=15.0, alias="FETCH_TIMEOUT_SECONDS")
    fetch_max_attempts: int = Field(default=3, alias="FETCH_MAX_ATTEMPTS")
    image_timeout_seconds: float = Field(default=20.0, alias="IMAGE_TIMEOUT_SECONDS")

    # API Server
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        alias="CORS_ORIGINS",
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def fonts_dir(self) -> Path:
        """Path to the fonts directory."""
        return self.fonts_dir_override or self.assets_dir / "fonts"


# Global settings instance
settings = Settings()
