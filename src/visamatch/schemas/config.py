"""Pydantic configuration schema for CLI YAML input."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CatalogConfig(BaseModel):
    path: str | None = None

    model_config = ConfigDict(extra="forbid")


class RulesConfig(BaseModel):
    empty_allowed_codes: Literal["unrestricted", "none"] | None = None
    special_permit_categories: list[str] | None = None
    disabled_rules: list[str] | None = None

    model_config = ConfigDict(extra="forbid")


class MatcherConfig(BaseModel):
    max_workers: int | None = Field(default=None, ge=1)
    cache_size: int | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)

    model_config = ConfigDict(extra="forbid")

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        for section in ("catalog", "rules", "matcher"):
            values = getattr(self, section).model_dump(exclude_none=True)
            if values:
                settings[section] = values
        return settings


def load_config(raw: Any) -> AppConfig:
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise TypeError("Config must be a mapping")
    return AppConfig.model_validate(raw)
