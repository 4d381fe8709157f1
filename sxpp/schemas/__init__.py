"""
Pydantic v2 schemas for the prefix table configuration.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


HandlerKind = Literal[
    "print_expanded",
    "evaluate_silently",
    "render_evaluated",
    "render_expanded",
]

# Reading mode used when a rule does not say otherwise.
DEFAULT_PRESERVE_CASE: dict[str, bool] = {
    "print_expanded": False,
    "evaluate_silently": False,
    "render_evaluated": True,
    "render_expanded": True,
}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Prefix table
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class PrefixRule(BaseModel):
    prefix: str = Field(..., min_length=1, max_length=16)
    handler: HandlerKind
    preserve_case: Optional[bool] = None

    @field_validator("prefix")
    @classmethod
    def prefix_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Prefix must contain a non-whitespace character")
        return v

    @property
    def reads_preserving_case(self) -> bool:
        if self.preserve_case is None:
            return DEFAULT_PRESERVE_CASE[self.handler]
        return self.preserve_case
