from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

DEFAULT_FALLBACK_CACHE_CLASS = "memory"


class CachePolicy(BaseModel):
    model_config = ConfigDict(extra="forbid")

    get_allowed: bool = True
    add_allowed: bool = False
    update_allowed: bool = False
    delete_allowed: bool = False
    whitelist_cids: frozenset[str] = Field(default_factory=frozenset)
    fallback_cache_class: str = DEFAULT_FALLBACK_CACHE_CLASS
    cache_directory: str = "data/static_cache"
    update_ignore_keys: frozenset[str] = Field(
        default_factory=lambda: frozenset({"created"})
    )

    @field_validator("whitelist_cids", "update_ignore_keys", mode="before")
    @classmethod
    def normalize_string_set(cls, value: object) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("expected a list of strings")
        return frozenset(str(item).strip() for item in value if str(item).strip())

    @field_validator("fallback_cache_class", "cache_directory")
    @classmethod
    def validate_non_empty(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("fallback_cache_class and cache_directory must not be empty")
        return normalized


class FallbackConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    directory: str = "data/cache/fallback"
    default_ttl_seconds: int | None = Field(default=None, ge=0)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    static_file_cache: CachePolicy = Field(default_factory=CachePolicy)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)


def load_config(path: str | Path) -> AppConfig:
    raw = Path(path).read_text(encoding="utf-8")
    payload = _parse_yaml_or_json(raw)
    try:
        return AppConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = _parse_yaml(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed


def _parse_yaml(raw: str) -> dict[str, Any]:
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed
