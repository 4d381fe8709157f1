#!/usr/bin/env python
#
#
# -----------------------------------------------------------------------------
"""
Application configuration.

All values can be overridden via environment variables or a .env file.
The prefix table is read from ``PREFIXES`` as a JSON list, e.g.::

    PREFIXES='[{"prefix": "@@", "handler": "render_expanded"}]'
"""
# -----------------------------------------------------------------------------

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sxpp.schemas import PrefixRule


# -----------------------------------------------------------------------------

def _default_prefixes() -> list[PrefixRule]:
    return [
        PrefixRule(prefix="#:", handler="print_expanded"),
        PrefixRule(prefix="#!", handler="evaluate_silently"),
        PrefixRule(prefix="#e:", handler="render_evaluated"),
        PrefixRule(prefix="#c:", handler="render_expanded"),
    ]


# -----------------------------------------------------------------------------

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ────────────────────────────────────────────────────────

    app_name: str = "sxpp"
    app_version: str = "0.5.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    # ── Directives ─────────────────────────────────────────────────────────

    prefixes: list[PrefixRule] = Field(default_factory=_default_prefixes)
    recursive_expansion: bool = False   # re-expand function-macro output

    # ── Streams ────────────────────────────────────────────────────────────

    input_encoding: str = "utf-8"

    @field_validator("prefixes")
    @classmethod
    def prefixes_unique(cls, v: list[PrefixRule]) -> list[PrefixRule]:
        if not v:
            raise ValueError("At least one prefix rule is required")
        seen: set[str] = set()
        for rule in v:
            if rule.prefix in seen:
                raise ValueError(f"Duplicate prefix '{rule.prefix}'")
            seen.add(rule.prefix)
        return v


# -----------------------------------------------------------------------------

@lru_cache
def get_settings() -> Settings:
    return Settings()


# -----------------------------------------------------------------------------
