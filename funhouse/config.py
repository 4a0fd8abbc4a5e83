"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    funhouse_env: str = "development"
    funhouse_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Renderer
    render_workers: int = 4
    render_tile_rows: int = 64
    max_render_pixels: int = 1920 * 1080

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
