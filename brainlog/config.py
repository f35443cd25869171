"""Configuration settings for brainlog."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

from .utils import default_brainlog_home


class BrainlogSettings(BaseSettings):
    """Client settings loaded from the environment (``BRAINLOG_*``) or ``.env``."""

    # Supabase
    supabase_url: str | None = None
    supabase_key: str | None = None  # Publishable/anon key, never the service key

    # Local data
    data_dir: Path | None = None  # Defaults to ~/.brainlog
    log_level: str = "INFO"

    # Session
    login_url: str = "login.html"  # Unauthenticated entry surface
    require_backup_before_wipe: bool = False
    prefers_dark: bool = False  # Runtime dark-mode signal for headless use

    class Config:
        env_prefix = "BRAINLOG_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def resolved_data_dir(self) -> Path:
        """Data directory with the default applied."""
        return Path(self.data_dir).expanduser() if self.data_dir else default_brainlog_home()

    @property
    def db_path(self) -> Path:
        return self.resolved_data_dir() / "brainlog.db"


@lru_cache
def get_settings() -> BrainlogSettings:
    """Get cached settings instance."""
    return BrainlogSettings()
