"""
Pydantic schemas for groups (parties, guilds and the tavern).

``GroupRead`` is the fully populated shape returned by single-group
operations: member and invite lists are projected user records, never
raw ids.  ``GroupSummary`` is the light shape used in listings, where
member lists are withheld.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .chat import ChatMessageRead
from .user import MemberRead


class GroupType(str, Enum):
    PARTY = "party"
    GUILD = "guild"
    PUBLIC_GUILD = "public-guild"
    TAVERN = "tavern"


class Privacy(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


GUILD_TYPES = frozenset({GroupType.GUILD.value, GroupType.PUBLIC_GUILD.value})


class GroupCreate(BaseModel):
    """Schema for founding a group.

    Guilds (``guild`` and ``public-guild``) cost the founder one unit
    of balance; parties are free.  The tavern already exists and cannot
    be created.
    """

    name: str = Field(..., min_length=1)
    type: GroupType
    description: Optional[str] = None
    privacy: Privacy = Privacy.PRIVATE
    logo: Optional[str] = None
    websites: List[str] = Field(default_factory=list)
    leader_message: Optional[str] = None

    @field_validator("type")
    @classmethod
    def reject_tavern(cls, value: GroupType) -> GroupType:
        if value == GroupType.TAVERN:
            raise ValueError("The tavern cannot be created")
        return value


class GroupUpdate(BaseModel):
    """Fields the group leader may change.

    Only the fields present in the request body are applied.  Setting
    ``leader`` hands leadership to another current member.
    """

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    logo: Optional[str] = None
    websites: Optional[List[str]] = None
    leader_message: Optional[str] = None
    leader: Optional[str] = None


class GroupSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    member_count: int = 0
    # Only set in the ``public`` listing, where the member list itself
    # is withheld.
    is_member: Optional[bool] = None


class GroupRead(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    type: GroupType
    privacy: Privacy
    leader: Optional[str] = None
    leader_message: Optional[str] = None
    logo: Optional[str] = None
    websites: List[str] = Field(default_factory=list)
    balance: float = 0
    member_count: int = 0
    members: List[MemberRead] = Field(default_factory=list)
    invites: List[MemberRead] = Field(default_factory=list)
    chat: List[ChatMessageRead] = Field(default_factory=list)


class LeaveResult(BaseModel):
    id: str
