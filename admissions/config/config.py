# admissions/config/config.py
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _PROJECT_ROOT / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",
    )

    # environment
    env: str = Field("dev", alias="ENV")
    data_dir: Path = Field(_DEFAULT_DATA_DIR, alias="DATA_DIR")

    timezone_name: str = Field("UTC", alias="TIMEZONE")

    # database
    db_url: str | None = Field(None, alias="DATABASE_URL")
    db_filename: str = Field("admissions.db", alias="DB_FILENAME")
    db_echo: bool = Field(False, alias="DB_ECHO")

    # ───────────────── Application IDs ────────────────────────────────
    # Year key = prefix + admission year, e.g. "UCAES2026".
    year_key_prefix: str = Field("UCAES", alias="YEAR_KEY_PREFIX")
    # Minimum number of digits of the sequence part; longer numbers are kept as-is.
    sequence_width: int = Field(4, alias="SEQUENCE_WIDTH")
    # Attempts at the transactional increment before the provisional fallback kicks in.
    counter_max_retries: int = Field(5, alias="COUNTER_MAX_RETRIES")
    counter_retry_backoff_ms: int = Field(50, alias="COUNTER_RETRY_BACKOFF_MS")

    # ───────────────── Student portal transfer ────────────────────────
    transfer_enabled: bool = Field(True, alias="TRANSFER_ENABLED")
    # How long acceptance waits for the transfer before reporting it as pending.
    transfer_timeout_seconds: float = Field(10.0, alias="TRANSFER_TIMEOUT_SECONDS")

    @model_validator(mode="before")
    def _preprocess(cls, values: dict[str, Any]) -> dict[str, Any]:
        key = "DATA_DIR" if "DATA_DIR" in values else "data_dir"
        raw = values.get(key, _DEFAULT_DATA_DIR)
        values[key] = Path(raw).expanduser().resolve()
        return values

    @property
    def timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    @property
    def database_url(self) -> str:
        return self.db_url or f"sqlite:///{self.data_dir / self.db_filename}"


settings = Settings()
