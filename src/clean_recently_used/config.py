"""Application configuration using Pydantic Settings.

Environment variables are automatically mapped to Settings fields.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every field has a default, so the tool runs with an empty environment.
    """

    # --- Diagnostics ---
    cru_debug: bool = False

    # --- Manifest location ---
    cru_data_dir: Path | None = None
    cru_manifest_name: str = "recently-used.xbel"

    # --- Streaming ---
    cru_read_chunk_size: int = 64 * 1024

    # --- Filtering ---
    # Comma separated prefixes used when none are passed on the command line
    cru_paths_to_clean: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_chunk_size(self) -> "Settings":
        """Validate the streaming configuration.

        Raises:
            ValueError: If the read chunk size is not positive

        """
        if self.cru_read_chunk_size <= 0:
            msg = "CRU_READ_CHUNK_SIZE must be a positive integer"
            raise ValueError(msg)
        return self

    def data_dir(self) -> Path | None:
        """Resolve the user data directory.

        Follows the XDG base directory rules: ``$XDG_DATA_HOME`` when it is
        an absolute path, otherwise ``~/.local/share``.

        Returns:
            The data directory, or None if no home directory can be found.

        """
        if self.cru_data_dir is not None:
            return self.cru_data_dir

        xdg_data_home = os.environ.get("XDG_DATA_HOME", "")
        if xdg_data_home and Path(xdg_data_home).is_absolute():
            return Path(xdg_data_home)

        try:
            home = Path.home()
        except RuntimeError:
            return None
        return home / ".local" / "share"

    def default_prefixes(self) -> list[str]:
        """Parse the configured default prefixes.

        Returns:
            List of prefix strings in configured order.

        """
        return [p.strip() for p in self.cru_paths_to_clean.split(",") if p.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance.

    Uses lru_cache to ensure the .env file is only parsed once
    and all modules share the same settings instance.

    Returns:
        Settings instance with application configuration.

    Raises:
        ValidationError: If an environment variable holds an invalid value.

    """
    return Settings()


settings = get_settings()
