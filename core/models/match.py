# =============================================================================
# core/models/match.py - Match & Like Inbox Schemas
# =============================================================================
# Models for GET /matches and GET /likes-received.
# Nested user ids resolve _id -> id -> generated, like profile ids.
# =============================================================================

from pydantic import BaseModel


class MatchUser(BaseModel):
    """The other side of a mutual match."""

    id: str
    name: str | None = None
    email: str | None = None
    profile_image_url: str | None = None

    class Config:
        frozen = True


class Match(BaseModel):
    """A mutual match, optionally already linked to a chat."""

    match_id: str
    user: MatchUser
    has_chatted: bool = False
    chat_id: str | None = None
    created_at: str = ""

    class Config:
        frozen = True

    @property
    def id(self) -> str:
        return self.match_id


class LikeUser(BaseModel):
    """Someone who liked the current user."""

    id: str
    name: str | None = None
    profile_image_url: str | None = None
    avatar_url: str | None = None

    class Config:
        frozen = True


class LikeReceived(BaseModel):
    """An incoming like, flagged when it already turned into a match."""

    like_id: str
    from_user: LikeUser
    is_match: bool = False
    match_id: str | None = None
    created_at: str = ""

    class Config:
        frozen = True

    @property
    def id(self) -> str:
        return self.like_id
