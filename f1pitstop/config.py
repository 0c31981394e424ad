"""
Project-wide configuration using Pydantic Settings.
API endpoint, cache lifetimes, storage quota and paths live here.
"""
from pathlib import Path
from pydantic_settings import BaseSettings


ROOT_DIR = Path(__file__).resolve().parent.parent

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR


class APIConfig(BaseSettings):
    base_url: str = "https://api.openf1.org/v1"
    timeout: int = 30
    max_retries: int = 3
    backoff_factor: float = 1.5
    rate_limit_delay: float = 0.3  # seconds between requests

    model_config = {"env_prefix": "OPENF1_"}


class CacheConfig(BaseSettings):
    # Query lifetimes (seconds)
    stale_time: float = DAY
    gc_time: float = 7 * DAY
    max_age: float = 7 * DAY  # persisted entries older than this are dropped

    retry: int = 1
    retry_delay: float = 1.0

    query_namespace: str = "f1pitstop-query"

    model_config = {"env_prefix": "F1_CACHE_"}


class StorageConfig(BaseSettings):
    namespace: str = "f1pitstop"
    quota_bytes: int = 5 * 1024 * 1024

    model_config = {"env_prefix": "F1_STORAGE_"}


class PathConfig(BaseSettings):
    root: Path = ROOT_DIR
    storage: Path = ROOT_DIR / ".storage"
    logs: Path = ROOT_DIR / "logs"
    cache: Path = ROOT_DIR / ".cache"

    def setup(self) -> None:
        """Create all directories if they don't exist."""
        for field_name, path in self.model_dump().items():
            if field_name != "root" and isinstance(path, Path):
                path.mkdir(parents=True, exist_ok=True)

    model_config = {"env_prefix": "F1_PATH_"}


class AppConfig(BaseSettings):
    name: str = "F1 QuickStop"
    description: str = "A dashboard for F1 sports data"
    version: str = "1.0.1"
    default_year: str = "2025"
    results_positions: int = 20

    model_config = {"env_prefix": "F1_APP_"}


class Config:
    """Unified project configuration."""

    api: APIConfig = APIConfig()
    cache: CacheConfig = CacheConfig()
    storage: StorageConfig = StorageConfig()
    paths: PathConfig = PathConfig()
    app: AppConfig = AppConfig()


# Singleton instance
cfg = Config()
