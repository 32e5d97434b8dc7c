# backend/app/config.py

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/slotbook.db"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 2.0

    log_level: str = "INFO"

    # pessimistic: SELECT ... FOR UPDATE on the slot row
    # optimistic: plain read, conditional UPDATE decides
    booking_lock_strategy: Literal["pessimistic", "optimistic"] = "pessimistic"
    # 0 = no statement timeout (only applied on PostgreSQL)
    booking_statement_timeout_ms: int = 0

    default_page_size: int = 20
    max_page_size: int = 100

    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 120

    events_queue: str = "events:p2p"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # relative sqlite path → absolute, anchored at repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path}"
        return url


settings = Settings()
