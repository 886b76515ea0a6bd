from __future__ import annotations

"""Startup configuration for the generation layer.

Values come from an optional YAML file and are overridden by environment
variables. The backend order is validated against the closed set of known
backends here, so unknown names never reach the orchestrator.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .breaker import DEFAULT_FAILURE_THRESHOLD, DEFAULT_RESET_TIMEOUT_S

logger = logging.getLogger("storyarcade.generation.settings")


class BackendName(str, Enum):
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    PERPLEXITY = "perplexity"


DEFAULT_ORDER = (BackendName.ANTHROPIC, BackendName.GEMINI)


class BackendCredentials(BaseModel):
    api_key: Optional[str] = None
    base_url: Optional[str] = None


class GenerationSettings(BaseModel):
    order: list[BackendName] = Field(default_factory=lambda: list(DEFAULT_ORDER))
    anthropic: BackendCredentials = Field(default_factory=BackendCredentials)
    gemini: BackendCredentials = Field(default_factory=BackendCredentials)
    perplexity: BackendCredentials = Field(default_factory=BackendCredentials)
    timeout_s: float = 45.0
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    reset_timeout_s: float = DEFAULT_RESET_TIMEOUT_S
    health_cache_ttl_s: int = 30

    @field_validator("order", mode="before")
    @classmethod
    def _parse_order(cls, value: Any) -> list[BackendName]:
        if value is None:
            return list(DEFAULT_ORDER)
        return parse_backend_order(value)

    @field_validator("timeout_s", "reset_timeout_s")
    @classmethod
    def _positive_float(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("failure_threshold", "health_cache_ttl_s")
    @classmethod
    def _positive_int(cls, value: int) -> int:
        return max(1, value)

    def credentials(self, name: BackendName) -> BackendCredentials:
        return getattr(self, name.value)

    def describe(self) -> dict[str, object]:
        return {
            "order": [name.value for name in self.order],
            "backends": {
                name.value: "configured" if self.credentials(name).api_key else "not configured"
                for name in BackendName
            },
            "timeout_s": self.timeout_s,
            "failure_threshold": self.failure_threshold,
            "reset_timeout_s": self.reset_timeout_s,
        }


def parse_backend_order(raw: str | list[Any] | tuple[Any, ...]) -> list[BackendName]:
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    order: list[BackendName] = []
    for item in items:
        token = str(item.value if isinstance(item, BackendName) else item).strip().casefold()
        if not token:
            continue
        try:
            name = BackendName(token)
        except ValueError:
            logger.warning("unknown_backend", extra={"extra_fields": {"backend": token}})
            continue
        if name in order:
            logger.warning("duplicate_backend", extra={"extra_fields": {"backend": token}})
            continue
        order.append(name)
    return order


_ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "AI_PROVIDER_FALLBACK_ORDER": ("order",),
    "AI_INTEGRATIONS_ANTHROPIC_API_KEY": ("anthropic", "api_key"),
    "AI_INTEGRATIONS_ANTHROPIC_BASE_URL": ("anthropic", "base_url"),
    "AI_INTEGRATIONS_GEMINI_API_KEY": ("gemini", "api_key"),
    "AI_INTEGRATIONS_GEMINI_BASE_URL": ("gemini", "base_url"),
    "PERPLEXITY_API_KEY": ("perplexity", "api_key"),
    "PERPLEXITY_BASE_URL": ("perplexity", "base_url"),
    "STORYARCADE_BACKEND_TIMEOUT_S": ("timeout_s",),
    "STORYARCADE_BREAKER_FAILURE_THRESHOLD": ("failure_threshold",),
    "STORYARCADE_BREAKER_RESET_SECONDS": ("reset_timeout_s",),
    "STORYARCADE_HEALTH_CACHE_TTL_S": ("health_cache_ttl_s",),
}


def _apply_env(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    for env_name, path in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw.strip() == "":
            continue
        if len(path) == 1:
            merged[path[0]] = raw.strip()
            continue
        section = dict(merged.get(path[0]) or {})
        section[path[1]] = raw.strip()
        merged[path[0]] = section
    return merged


def load_generation_settings(path: Optional[str] = None) -> GenerationSettings:
    """Load settings from YAML (if any) and apply environment overrides."""
    cfg_path = path or os.getenv("STORYARCADE_CONFIG_PATH")
    data: dict[str, Any] = {}
    if cfg_path:
        with Path(cfg_path).expanduser().open("r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Generation config must be a mapping: {cfg_path}")
        section = loaded.get("generation", loaded)
        if section is None:
            section = {}
        if not isinstance(section, dict):
            raise ValueError(f"Generation config must be a mapping: {cfg_path}")
        data = section
    return GenerationSettings.model_validate(_apply_env(data))
