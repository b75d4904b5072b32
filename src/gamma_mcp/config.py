import tempfile
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_POLLS_PER_GENERATION = 3


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    gamma_api_key: str = Field(default="", alias="GAMMA_API_KEY")
    gamma_base_url: str = Field(default="https://public-api.gamma.app/v1.0", alias="GAMMA_BASE_URL")
    gamma_api_key_header: str = Field(default="X-API-KEY", alias="GAMMA_API_KEY_HEADER")
    http_timeout_seconds: float = Field(default=60.0, alias="GAMMA_HTTP_TIMEOUT_SECONDS")

    generation_timeout_seconds: float = Field(default=600.0, alias="GAMMA_GENERATION_TIMEOUT_SECONDS")
    poll_interval_seconds: float = Field(default=30.0, alias="GAMMA_POLL_INTERVAL_SECONDS")

    download_dir: str = Field(default_factory=tempfile.gettempdir, alias="GAMMA_DOWNLOAD_DIR")

    prompts_public_dir: str = Field(default="prompts/public", alias="GAMMA_PROMPTS_PUBLIC_DIR")
    prompts_private_dir: str = Field(default="prompts/private", alias="GAMMA_PROMPTS_PRIVATE_DIR")
    prompts_hot_reload: bool = Field(default=True, alias="GAMMA_PROMPTS_HOT_RELOAD")
    prompts_reload_debounce_ms: int = Field(default=500, alias="GAMMA_PROMPTS_RELOAD_DEBOUNCE_MS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        self.gamma_base_url = self.gamma_base_url.strip().rstrip("/")
        self.log_level = self.log_level.strip().upper() or "INFO"
        if self.poll_interval_seconds <= 0:
            raise ValueError("GAMMA_POLL_INTERVAL_SECONDS must be positive")
        if self.generation_timeout_seconds < MIN_POLLS_PER_GENERATION * self.poll_interval_seconds:
            raise ValueError(
                "GAMMA_GENERATION_TIMEOUT_SECONDS must allow at least "
                f"{MIN_POLLS_PER_GENERATION} polls of GAMMA_POLL_INTERVAL_SECONDS"
            )

    @property
    def generations_url(self) -> str:
        return f"{self.gamma_base_url}/generations"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
