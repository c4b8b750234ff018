# =============================================================================
# core/models/profile.py - Candidate Profile Schemas
# =============================================================================
# These models define what the swipe UI renders:
# - Profile: one candidate, every display field already defaulted
# - SportInfo: a sport entry on a profile
# - Pagination / ProfilePage: one page of GET /profiles
# - LikeResult: answer to POST /like
#
# Every field except `id` has a default. A Profile built by the normalizer
# never carries None into the presentation layer.
# =============================================================================

from pydantic import BaseModel, Field

# -----------------------------------------------------------------------------
# Display defaults
# -----------------------------------------------------------------------------
# Kept as module constants so tests and the normalizer agree on "unknown".

DEFAULT_NAME = "Unknown"
DEFAULT_AGE = 25
DEFAULT_LOCATION = "Unknown"
DEFAULT_DISTANCE_LABEL = "—"
DEFAULT_BIO = ""
DEFAULT_SPORT_NAME = "Sport"
DEFAULT_SPORT_ICON = "🏃"
DEFAULT_SPORT_LEVEL = "Intermediate"

# Only this many sports are derived from a generic sportsInterests list
MAX_DERIVED_SPORTS = 3


class SportInfo(BaseModel):
    """A sport shown on a candidate card."""

    name: str = DEFAULT_SPORT_NAME
    icon: str = DEFAULT_SPORT_ICON
    level: str = DEFAULT_SPORT_LEVEL

    class Config:
        frozen = True


class Profile(BaseModel):
    """
    A candidate presented for a swipe decision.

    Example:
        {
            "id": "665f1c...",
            "name": "Maya",
            "age": 27,
            "avatar_url": "https://cdn.example.com/a.jpg",
            "cover_image_url": "https://cdn.example.com/a.jpg",
            "location": "Sydney",
            "distance_label": "3 km",
            "bio": "Trail runner",
            "sports": [{"name": "Running", "icon": "🏃", "level": "Advanced"}],
            "interests": ["Running", "Climbing"],
            "rating": 4.0,
            "activities_joined_count": 12
        }
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Backend id, or a generated one when the backend sent none"
    )

    name: str = DEFAULT_NAME
    age: int = DEFAULT_AGE

    # Both image fields always hold a renderable URL
    avatar_url: str = Field(..., description="Avatar image URL")
    cover_image_url: str = Field(..., description="Cover image URL")

    location: str = DEFAULT_LOCATION
    distance_label: str = DEFAULT_DISTANCE_LABEL
    bio: str = DEFAULT_BIO

    sports: tuple[SportInfo, ...] = ()
    interests: tuple[str, ...] = ()

    rating: float = 0.0
    activities_joined_count: int = Field(default=0, ge=0)

    class Config:
        frozen = True


class Pagination(BaseModel):
    """Pagination block of GET /profiles."""

    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    total_pages: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)

    class Config:
        frozen = True

    @property
    def has_more(self) -> bool:
        """False once the server reports the last page."""
        return self.page < self.total_pages


class ProfilePage(BaseModel):
    """One page of candidates, in server order."""

    profiles: tuple[Profile, ...] = ()
    pagination: Pagination

    class Config:
        frozen = True


class LikeResult(BaseModel):
    """Answer to POST /like."""

    is_match: bool = False
    matched_profile: Profile | None = None

    class Config:
        frozen = True
