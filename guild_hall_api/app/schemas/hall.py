"""
Pydantic schemas for the hall of heroes and patrons.

The hero endpoints are admin tooling: ``HeroRead`` exposes a fixed set
of fields of any user record and ``HeroUpdate`` describes the patch an
admin may apply.  ``itemPath``/``itemVal`` keep their camel-case wire
names for compatibility with the existing admin client.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class PatronRead(BaseModel):
    """Public projection used by both the patrons and heroes listings."""

    id: str
    name: str
    contributor: Optional[Dict[str, Any]] = None
    backer: Optional[Dict[str, Any]] = None


class HeroAuth(BaseModel):
    blocked: bool = False


class HeroRead(BaseModel):
    id: str
    name: str
    balance: float
    # Always present; an absent contributor record is returned as ``{}``.
    contributor: Dict[str, Any] = Field(default_factory=dict)
    purchased: Dict[str, Any] = Field(default_factory=dict)
    items: Dict[str, Any] = Field(default_factory=dict)
    auth: HeroAuth = Field(default_factory=HeroAuth)


class PurchasedPatch(BaseModel):
    ads: Optional[bool] = None


class AuthPatch(BaseModel):
    # Left untyped so that only a real boolean toggles the flag; strings
    # such as "true" are ignored rather than coerced.
    blocked: Any = None


class HeroUpdate(BaseModel):
    model_config = {"populate_by_name": True}

    balance: Optional[float] = None
    contributor: Optional[Dict[str, Any]] = None
    purchased: Optional[PurchasedPatch] = None
    item_path: Optional[str] = Field(None, alias="itemPath")
    item_val: Any = Field(None, alias="itemVal")
    auth: Optional[AuthPatch] = None

    @field_validator("contributor")
    @classmethod
    def level_is_integer(cls, value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        # Tier grants and the contributor pet only read integer levels.
        if value and "level" in value:
            level = value["level"]
            if isinstance(level, bool) or not isinstance(level, int) or level < 0:
                raise ValueError("contributor.level must be a non-negative integer")
        return value
