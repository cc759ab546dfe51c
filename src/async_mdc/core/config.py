from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Tuple


class Settings(BaseSettings):
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = (
        "%(asctime)s %(levelname)s %(name)s request_id=%(request_id)s msg=%(message)s"
    )
    LOG_FIELDS: str = "request_id"  # comma list of keys present on every LogRecord

    # HTTP
    REQUEST_ID_HEADER: str = "X-Request-ID"

    model_config = SettingsConfigDict(
        env_prefix="MDC_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def log_fields(self) -> Tuple[str, ...]:
        return tuple(f.strip() for f in self.LOG_FIELDS.split(",") if f.strip())


settings = Settings()
