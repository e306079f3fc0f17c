"""
Pydantic models for user data.

Defines schemas for registering users, logging in and reading user
information, as well as the member projections embedded in group
responses.  Passwords are never returned through the API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    """Schema for registering a user."""

    email: str = Field(..., min_length=3, description="Login e-mail, unique per user")
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, description="Profile name shown to other players")


class UserLogin(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class Invitation(BaseModel):
    """A pending invitation to a group, stored on the invitee."""

    id: str
    name: Optional[str] = None


class Invitations(BaseModel):
    """Pending invitations of a user.

    A user has at most one pending party invitation but may be invited
    to any number of guilds.
    """

    party: Optional[Invitation] = None
    guilds: List[Invitation] = Field(default_factory=list)


class UserRead(BaseModel):
    """Schema for reading the authenticated user's own profile."""

    id: str
    email: str
    name: str
    balance: float
    invitations: Invitations
    contributor: Optional[Dict[str, Any]] = None
    backer: Optional[Dict[str, Any]] = None
    last_message_seen: Optional[str] = None


class MemberRead(BaseModel):
    """Member projection embedded in group responses.

    Guild and tavern responses only carry ``id`` and ``name``.  Party
    responses also carry the contributor/backer records and the
    equipped items so the party header can be drawn.
    """

    id: str
    name: str
    contributor: Optional[Dict[str, Any]] = None
    backer: Optional[Dict[str, Any]] = None
    items: Optional[Dict[str, Any]] = None
