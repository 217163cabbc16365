import functools
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    source_extensions: List[str] = [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"]
    html_extensions: List[str] = [".html", ".htm"]
    ignore_dirs: List[str] = [
        "node_modules",
        "dist",
        "build",
        ".next",
        "coverage",
        ".git",
        "vendor",
        "__pycache__",
    ]

    # Display limit for condition annotations on call edges
    condition_max_length: int = 40

    host: str = "127.0.0.1"
    port: int = 42069
    log_level: str = "INFO"

    # List-valued settings are read from the environment as JSON arrays
    model_config = SettingsConfigDict(env_prefix="JSGRAPH_", extra="ignore", case_sensitive=False)


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
