"""Application configuration via environment variables."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Failure simulation
    upload_failure_rate: float = Field(0.15, ge=0.0, le=1.0)
    timeout_rate: float = Field(0.1, ge=0.0, le=1.0)
    processing_failure_rate: float = Field(0.1, ge=0.0, le=1.0)

    # Processing duration range, drawn once per upload
    min_processing_time_ms: int = Field(5000, ge=0)
    max_processing_time_ms: int = Field(20000, ge=0)

    # Request-path latency
    slow_response_rate: float = Field(0.2, ge=0.0, le=1.0)
    slow_response_min_seconds: float = Field(1.0, ge=0.0)
    slow_response_max_seconds: float = Field(3.0, ge=0.0)
    timeout_delay_seconds: float = Field(35.0, ge=0.0)  # must outlast client timeouts

    # Lifecycle engine
    tick_seconds: float = Field(1.0, gt=0.0)
    transcript_min_sentences: int = Field(3, ge=1)
    transcript_max_sentences: int = Field(7, ge=1)

    # HTTP
    max_upload_bytes: int = 1024 * 1024 * 1024
    port: int = 3000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @model_validator(mode="after")
    def _check_ranges(self) -> "Settings":
        if self.max_processing_time_ms < self.min_processing_time_ms:
            raise ValueError("max_processing_time_ms must be >= min_processing_time_ms")
        if self.slow_response_max_seconds < self.slow_response_min_seconds:
            raise ValueError("slow_response_max_seconds must be >= slow_response_min_seconds")
        if self.transcript_max_sentences < self.transcript_min_sentences:
            raise ValueError("transcript_max_sentences must be >= transcript_min_sentences")
        return self


settings = Settings()
