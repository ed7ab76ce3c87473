"""Explicit configuration values handed to the prober and the AI assistant."""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from netvisio.retry import RetryPolicy

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"


class ProberConfig(BaseModel):
    range_start: int = Field(default=1, ge=0, le=255)
    range_end: int = Field(default=254, ge=0, le=255)  # inclusive
    concurrency: int = Field(default=12, ge=1)
    timeout: float = Field(default=1.5, gt=0)  # seconds per probe
    fanout_threshold: int = Field(default=6, ge=1)  # hosts before a virtual switch is added
    refused_latency_ms: float = 5.0
    # one attempt keeps the worst case at ceil(range / concurrency) * timeout
    probe_retry: RetryPolicy = Field(default_factory=lambda: RetryPolicy(max_attempts=1))

    @model_validator(mode="after")
    def _check_range(self) -> "ProberConfig":
        if self.range_start > self.range_end:
            raise ValueError(f"range_start {self.range_start} > range_end {self.range_end}")
        return self


class AssistantConfig(BaseModel):
    api_key: Optional[str] = None
    offline: bool = False
    model: str = DEFAULT_MODEL
    base_url: str = GEMINI_BASE_URL
    request_timeout: float = 60.0
    retry: RetryPolicy = Field(default_factory=lambda: RetryPolicy(max_attempts=4, initial_delay=2.0))

    @classmethod
    def from_env(cls, **overrides: object) -> "AssistantConfig":
        """Build a config from ``GEMINI_API_KEY``/``API_KEY`` and ``NETVISIO_OFFLINE``."""
        values: dict[str, object] = {
            "api_key": os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None,
            "offline": os.getenv("NETVISIO_OFFLINE", "").lower() in ("1", "true", "yes"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]
