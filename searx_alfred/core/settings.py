"""
Purpose:
- Centralized configuration using pydantic-settings.
- Alfred exports workflow variables as environment variables; we read them here.
- Loaded once per invocation (see cli.py); nothing else reads os.environ directly.
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Any, Dict, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BUNDLE_ID = "com.ggfevans.alfred-searxng"

DEFAULT_TIMEOUT_MS = 5000
MAX_TIMEOUT_MS = 30000

_FALSY = ("0", "false", "no")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_bool(value: Any, default: bool = True) -> bool:
    """
    Interpret a workflow checkbox/text variable.
    "0", "false", "no" (any case) are False; any other non-empty value is True.
    Empty or missing falls back to `default`.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    lower = str(value).strip().lower()
    if not lower:
        return default
    return lower not in _FALSY


def parse_timeout(value: Any, default_ms: int = DEFAULT_TIMEOUT_MS, max_ms: int = MAX_TIMEOUT_MS) -> int:
    """
    Parse a timeout in milliseconds. Only the leading integer is read ("2500ms" -> 2500).
    Invalid or non-positive values give `default_ms`; large values are clamped to `max_ms`.
    """
    if value is None:
        return default_ms
    m = _LEADING_INT.match(str(value))
    if not m:
        return default_ms
    parsed = int(m.group(1))
    if parsed <= 0:
        return default_ms
    return min(parsed, max_ms)


class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- SearXNG backend ---
    searxng_url: str = Field(default="", description="Base URL of the SearXNG instance")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, description="Full search timeout (ms)")
    # Shared secret for /favicon_proxy; unset disables favicons entirely
    secret_key: Optional[str] = Field(default=None, description="SearXNG server.secret_key")

    # --- Alfred response caching ---
    enable_result_cache: bool = Field(default=True)
    result_cache_seconds: int = Field(default=60)
    suggestion_cache_seconds: int = Field(default=30)

    # --- Response sizing / budgets ---
    max_suggestions: int = Field(default=5)
    favicon_max_fetches: int = Field(default=3)
    favicon_timeout_secs: float = Field(default=1.0)
    autocomplete_timeout_cap_secs: float = Field(default=2.0)

    # --- Provided by Alfred at runtime ---
    alfred_workflow_data: Optional[Path] = None
    alfred_workflow_version: str = Field(default="unknown")
    alfred_version: str = Field(default="unknown")
    alfred_debug: bool = Field(default=False)

    @field_validator("searxng_url", mode="before")
    @classmethod
    def _strip_url(cls, v: Any) -> str:
        return re.sub(r"/+$", "", str(v or "").strip())

    @field_validator("timeout_ms", mode="before")
    @classmethod
    def _timeout(cls, v: Any) -> int:
        return parse_timeout(v)

    @field_validator("secret_key", mode="before")
    @classmethod
    def _blank_secret(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("alfred_workflow_data", mode="before")
    @classmethod
    def _blank_path(cls, v: Any) -> Any:
        if v is None or not str(v).strip():
            return None
        return v

    @field_validator("enable_result_cache", mode="before")
    @classmethod
    def _cache_flag(cls, v: Any) -> bool:
        return parse_bool(v, True)

    @field_validator("alfred_debug", mode="before")
    @classmethod
    def _debug_flag(cls, v: Any) -> bool:
        return parse_bool(v, False)

    @property
    def is_configured(self) -> bool:
        return bool(self.searxng_url)

    @property
    def timeout_secs(self) -> float:
        return self.timeout_ms / 1000.0

    def workflow_data_dir(self) -> Path:
        """Alfred's per-workflow data dir, or the conventional location when run outside Alfred."""
        if self.alfred_workflow_data:
            return Path(self.alfred_workflow_data)
        return Path.home() / "Library" / "Application Support" / "Alfred" / "Workflow Data" / BUNDLE_ID

    def favicon_dir(self) -> Path:
        return self.workflow_data_dir() / "favicons"

    def version_info(self) -> Dict[str, str]:
        return {"Workflow": self.alfred_workflow_version, "Alfred": self.alfred_version}


def get_settings() -> Settings:
    """Fresh settings for one invocation."""
    return Settings()
