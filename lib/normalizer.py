# =============================================================================
# lib/normalizer.py - Response Normalizer
# =============================================================================
# Turns decoded JSON from the backend into canonical models (core/models).
#
# The backend's shape is not fixed: ids arrive as `id` or `_id`, tokens as
# `accessToken`, `access_token` or `token`, bodies are sometimes wrapped in
# `data`, and register sometimes answers without a token at all. Everything
# that knows about those variants lives in this module.
#
# Rules:
# - Well-formed but differently shaped input never crashes; values of the
#   wrong JSON type are treated as absent.
# - When the required minimum is missing (email for a User) a typed
#   NormalizationError is raised instead of returning a half-built model.
#
# Auth responses are decoded by an ordered chain of named strategies
# (AUTH_STRATEGIES). The first strategy that recognizes the payload wins;
# results are never merged across strategies.
#
# Usage:
#   from lib.normalizer import normalize_auth_result, normalize_profile
#   result = normalize_auth_result(body, fallback_user=request.fallback_user)
# =============================================================================

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError

from app.config import settings
from app.exceptions import NormalizationError, NormalizationErrorKind
from core.models.match import LikeReceived, LikeUser, Match, MatchUser
from core.models.profile import (
    DEFAULT_AGE,
    DEFAULT_BIO,
    DEFAULT_DISTANCE_LABEL,
    DEFAULT_LOCATION,
    DEFAULT_NAME,
    DEFAULT_SPORT_ICON,
    DEFAULT_SPORT_LEVEL,
    DEFAULT_SPORT_NAME,
    MAX_DERIVED_SPORTS,
    LikeResult,
    Pagination,
    Profile,
    ProfilePage,
    SportInfo,
)
from core.models.user import AuthResult, Message, ResetTokenValidation, User

logger = logging.getLogger(__name__)

JsonObject = dict[str, Any]

# Builds the user from the request's own fields, only when a strategy needs it
FallbackUser = Callable[[], User]

# Response kinds (used in error details and logs)
AUTH_ENVELOPE = "AuthEnvelope"
USER_ENVELOPE = "UserEnvelope"
MESSAGE_ENVELOPE = "MessageEnvelope"
PROFILE_ENVELOPE = "ProfileEnvelope"
PROFILE_PAGE = "ProfilePage"
LIKE_ENVELOPE = "LikeEnvelope"
RESET_TOKEN_ENVELOPE = "ResetTokenEnvelope"
MATCH_LIST = "MatchList"
LIKES_RECEIVED = "LikesReceived"

TOKEN_KEYS = ("accessToken", "access_token", "token")
MESSAGE_KEYS = ("message", "msg", "status")

# Keys that make a root-level object look like a user rather than noise
USER_HINT_KEYS = ("id", "_id", "email", "username", "name", "location")


# =============================================================================
# Tolerant value readers
# =============================================================================
# Each reader returns None when the value is absent or of the wrong type.

def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _as_id(value: Any) -> str | None:
    """Ids may arrive as numbers; they are always strings in the model."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return None


def _as_object(value: Any) -> JsonObject | None:
    return value if isinstance(value, dict) else None


def _as_str_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def _first(obj: JsonObject, keys: tuple[str, ...], reader: Callable[[Any], Any]) -> Any:
    """Return the first key whose value survives `reader`, else None."""
    for key in keys:
        value = reader(obj.get(key))
        if value is not None:
            return value
    return None


def _require_object(payload: Any, response_kind: str) -> JsonObject:
    obj = _as_object(payload)
    if obj is None:
        raise NormalizationError.unrecognized(response_kind)
    return obj


def _generated_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# User
# =============================================================================

def normalize_user(payload: Any) -> User:
    """
    Normalize a user object.

    id resolves from `id` then `_id`; email from `email` then `username`.
    Email is the only required field.

    Raises:
        NormalizationError: MISSING_REQUIRED_FIELD (email) or
            UNRECOGNIZED_SHAPE when the payload isn't an object
    """
    obj = _require_object(payload, USER_ENVELOPE)

    email = _first(obj, ("email", "username"), _as_str)
    if not email:
        raise NormalizationError.missing(USER_ENVELOPE, "email")

    return User(
        id=_first(obj, ("id", "_id"), _as_id),
        email=email,
        name=_as_str(obj.get("name")),
        location=_as_str(obj.get("location")),
    )


def normalize_user_envelope(payload: Any) -> User:
    """
    Find and normalize the user inside a response.

    Accepts {user}, {data: {user}}, {data: <user>} and a bare user object.
    """
    obj = _require_object(payload, USER_ENVELOPE)
    data = _as_object(obj.get("data"))

    candidates = [obj.get("user")]
    if data is not None:
        candidates.extend([data.get("user"), data])
    candidates.append(obj)

    for candidate in candidates:
        if _as_object(candidate) is not None:
            return normalize_user(candidate)

    raise NormalizationError.unrecognized(USER_ENVELOPE)


# =============================================================================
# Auth strategy chain
# =============================================================================

@dataclass(frozen=True)
class AuthStrategy:
    """
    One way of reading an auth response.

    `extract` returns None when the payload isn't this strategy's shape. Once
    the shape matches, the strategy owns the payload: a user object inside it
    that lacks an email raises MISSING_REQUIRED_FIELD and ends the chain.
    """
    name: str
    extract: Callable[[JsonObject, FallbackUser | None], AuthResult | None]


# Ordered: evaluation order is registration order
AUTH_STRATEGIES: list[AuthStrategy] = []


def auth_strategy(name: str):
    """
    Decorator to append a strategy to the auth chain.

    Usage:
        @auth_strategy("direct")
        def _direct(obj, fallback_user):
            ...
    """
    def decorator(func: Callable[[JsonObject, FallbackUser | None], AuthResult | None]):
        if any(s.name == name for s in AUTH_STRATEGIES):
            raise ValueError(f"Auth strategy '{name}' is already registered")
        AUTH_STRATEGIES.append(AuthStrategy(name=name, extract=func))
        return func
    return decorator


def _token_in(obj: JsonObject) -> str | None:
    return _first(obj, TOKEN_KEYS, _as_str)


def _user_in(obj: JsonObject) -> User | None:
    user_obj = _as_object(obj.get("user"))
    return normalize_user(user_obj) if user_obj is not None else None


@auth_strategy("direct")
def _direct(obj: JsonObject, fallback_user: FallbackUser | None) -> AuthResult | None:
    token = _token_in(obj)
    if token is None or _as_object(obj.get("user")) is None:
        return None
    return AuthResult(access_token=token, user=_user_in(obj))


@auth_strategy("nested_data")
def _nested_data(obj: JsonObject, fallback_user: FallbackUser | None) -> AuthResult | None:
    data = _as_object(obj.get("data"))
    if data is None:
        return None
    return _direct(data, fallback_user)


@auth_strategy("user_only")
def _user_only(obj: JsonObject, fallback_user: FallbackUser | None) -> AuthResult | None:
    for scope in (obj, _as_object(obj.get("data"))):
        if scope is not None and _as_object(scope.get("user")) is not None:
            return AuthResult(access_token="", user=_user_in(scope))
    return None


@auth_strategy("message_only")
def _message_only(obj: JsonObject, fallback_user: FallbackUser | None) -> AuthResult | None:
    if fallback_user is None:
        return None
    if _first(obj, MESSAGE_KEYS, _as_str) is None:
        return None

    data = _as_object(obj.get("data")) or {}
    for scope in (obj, data):
        if _token_in(scope) is not None or _as_object(scope.get("user")) is not None:
            return None

    try:
        user = fallback_user()
    except ValidationError as e:
        raise NormalizationError.missing(AUTH_ENVELOPE, "email") from e
    return AuthResult(access_token="", user=user)


@auth_strategy("bare_user")
def _bare_user(obj: JsonObject, fallback_user: FallbackUser | None) -> AuthResult | None:
    if not any(key in obj for key in USER_HINT_KEYS):
        return None
    return AuthResult(access_token="", user=normalize_user(obj))


def normalize_auth_result(
    payload: Any,
    fallback_user: User | FallbackUser | None = None,
) -> AuthResult:
    """
    Normalize a login/register response.

    Strategies run in registration order and the first one whose shape
    matches decides the result, including its errors. Fields are never
    combined from two strategies.

    Args:
        payload: Decoded JSON body of a 2xx response
        fallback_user: User built from the request's own fields, or a
            callable producing it. Only the message_only strategy uses it,
            for bodies like {"message": "ok"}, and only then is it built.

    Returns:
        AuthResult. access_token is "" when the backend issued no token.

    Raises:
        NormalizationError: MISSING_REQUIRED_FIELD when the matching shape's
            user has no email, UNRECOGNIZED_SHAPE when nothing matched
    """
    obj = _require_object(payload, AUTH_ENVELOPE)

    if isinstance(fallback_user, User):
        known_user = fallback_user
        fallback_user = lambda: known_user

    for strategy in AUTH_STRATEGIES:
        try:
            result = strategy.extract(obj, fallback_user)
        except NormalizationError as e:
            if e.kind is not NormalizationErrorKind.MISSING_REQUIRED_FIELD:
                raise
            logger.debug(f"Auth strategy '{strategy.name}' matched but {e.details['detail']}")
            raise NormalizationError.missing(AUTH_ENVELOPE, e.field or "email") from e

        if result is not None:
            logger.debug(f"Auth response decoded by strategy '{strategy.name}'")
            return result

    raise NormalizationError.unrecognized(AUTH_ENVELOPE)


# =============================================================================
# Messages
# =============================================================================

def normalize_message(payload: Any) -> Message:
    """
    Normalize an acknowledgement body.

    Reads `message`, then `msg`, then `status`; defaults to "OK".
    A bare JSON string is taken as the message itself.
    """
    if isinstance(payload, str):
        return Message(message=payload or "OK")
    obj = _require_object(payload, MESSAGE_ENVELOPE)
    return Message(message=_first(obj, MESSAGE_KEYS, _as_str) or "OK")


def normalize_reset_token(payload: Any) -> ResetTokenValidation:
    """Normalize GET /auth/reset-password. `valid` is required."""
    obj = _require_object(payload, RESET_TOKEN_ENVELOPE)
    valid = _as_bool(obj.get("valid"))
    if valid is None:
        raise NormalizationError.missing(RESET_TOKEN_ENVELOPE, "valid")
    return ResetTokenValidation(valid=valid, message=_as_str(obj.get("message")))


# =============================================================================
# Profiles
# =============================================================================

def _sport(obj: JsonObject) -> SportInfo:
    return SportInfo(
        name=_as_str(obj.get("name")) or DEFAULT_SPORT_NAME,
        icon=_as_str(obj.get("icon")) or DEFAULT_SPORT_ICON,
        level=_as_str(obj.get("level")) or DEFAULT_SPORT_LEVEL,
    )


def _sports(obj: JsonObject, sports_interests: list[str] | None) -> list[SportInfo]:
    explicit = obj.get("sports")
    if isinstance(explicit, list):
        sports = [_sport(item) for item in explicit if isinstance(item, dict)]
        if sports:
            return sports

    return [
        SportInfo(name=name)
        for name in (sports_interests or [])[:MAX_DERIVED_SPORTS]
    ]


def normalize_profile(
    payload: Any,
    avatar_placeholder: str | None = None,
    cover_placeholder: str | None = None,
) -> Profile:
    """
    Normalize a candidate profile.

    Never rejects a profile for a missing id: when both `_id` and `id` are
    absent a random id is generated. Every display field resolves to a
    default, and both image fields always hold a URL:

        avatar: avatarUrl -> coverImageUrl -> profileImageUrl -> placeholder
        cover:  coverImageUrl -> avatarUrl -> profileImageUrl -> placeholder

    Placeholders are URL templates formatted with the profile id, so a
    profile without images always gets the same picture.

    Args:
        payload: Decoded profile object
        avatar_placeholder: Template override (defaults to settings)
        cover_placeholder: Template override (defaults to settings)

    Raises:
        NormalizationError: UNRECOGNIZED_SHAPE when payload isn't an object
    """
    obj = _require_object(payload, PROFILE_ENVELOPE)

    profile_id = _first(obj, ("_id", "id"), _as_id) or _generated_id()

    avatar = _as_str(obj.get("avatarUrl")) or None
    cover = _as_str(obj.get("coverImageUrl")) or None
    profile_image = _as_str(obj.get("profileImageUrl")) or None

    avatar_template = avatar_placeholder or settings.AVATAR_PLACEHOLDER_URL
    cover_template = cover_placeholder or settings.COVER_PLACEHOLDER_URL

    sports_interests = _as_str_list(obj.get("sportsInterests"))
    interests = _as_str_list(obj.get("interests"))
    if interests is None:
        interests = sports_interests or []

    activities = _as_int(obj.get("activitiesJoined"))

    return Profile(
        id=profile_id,
        name=_as_str(obj.get("name")) or DEFAULT_NAME,
        age=_as_int(obj.get("age")) or DEFAULT_AGE,
        avatar_url=avatar or cover or profile_image or avatar_template.format(id=profile_id),
        cover_image_url=cover or avatar or profile_image or cover_template.format(id=profile_id),
        location=_as_str(obj.get("location")) or DEFAULT_LOCATION,
        distance_label=_as_str(obj.get("distance")) or DEFAULT_DISTANCE_LABEL,
        bio=_as_str(obj.get("bio")) or _as_str(obj.get("about")) or DEFAULT_BIO,
        sports=tuple(_sports(obj, sports_interests)),
        interests=tuple(interests),
        rating=_as_float(obj.get("rating")) or 0.0,
        activities_joined_count=max(activities or 0, 0),
    )


def _pagination(obj: JsonObject | None, profile_count: int, requested_page: int) -> Pagination:
    """
    Normalize the pagination block.

    Without a block the page is treated as the last one. When totalPages is
    missing it is derived from total and limit.
    """
    if obj is None:
        return Pagination(
            total=profile_count,
            page=requested_page,
            total_pages=requested_page,
            limit=profile_count,
        )

    page = _as_int(obj.get("page"))
    page = page if page and page >= 1 else requested_page
    total = max(_as_int(obj.get("total")) or 0, 0)
    limit = max(_as_int(obj.get("limit")) or 0, 0)

    total_pages = _first(obj, ("totalPages", "total_pages"), _as_int)
    if total_pages is None:
        total_pages = math.ceil(total / limit) if limit else page

    return Pagination(total=total, page=page, total_pages=max(total_pages, 0), limit=limit)


def normalize_profile_page(payload: Any, requested_page: int = 1) -> ProfilePage:
    """
    Normalize GET /profiles.

    Accepts {profiles, pagination}, the same under `data`, or a bare list
    of profiles. Non-object entries in the list are skipped.

    Args:
        payload: Decoded response body
        requested_page: Page that was asked for, used when the response
            doesn't say which page it is

    Raises:
        NormalizationError: UNRECOGNIZED_SHAPE when no profile list is found
    """
    if isinstance(payload, list):
        container: JsonObject = {"profiles": payload}
    else:
        container = _require_object(payload, PROFILE_PAGE)
        if not isinstance(container.get("profiles"), list):
            data = _as_object(container.get("data"))
            if data is None or not isinstance(data.get("profiles"), list):
                raise NormalizationError.unrecognized(PROFILE_PAGE)
            container = data

    raw_profiles = container["profiles"]
    profiles = [normalize_profile(item) for item in raw_profiles if isinstance(item, dict)]
    skipped = len(raw_profiles) - len(profiles)
    if skipped:
        logger.debug(f"Skipped {skipped} non-object entries in profile page")

    pagination = _pagination(_as_object(container.get("pagination")), len(profiles), requested_page)
    return ProfilePage(profiles=tuple(profiles), pagination=pagination)


def normalize_like_result(payload: Any) -> LikeResult:
    """
    Normalize POST /like.

    isMatch defaults to False. A matchedProfile that isn't an object is
    ignored rather than failing the whole like.
    """
    obj = _require_object(payload, LIKE_ENVELOPE)
    if _as_object(obj.get("data")) is not None and "isMatch" not in obj:
        obj = obj["data"]

    matched = _as_object(obj.get("matchedProfile"))
    return LikeResult(
        is_match=bool(_first(obj, ("isMatch", "is_match"), _as_bool)),
        matched_profile=normalize_profile(matched) if matched is not None else None,
    )


# =============================================================================
# Matches & likes received
# =============================================================================

def _list_under(payload: Any, key: str, response_kind: str) -> list[Any]:
    """Find the list in a bare list, {key: [...]} or {data: [...] | {key: [...]}}."""
    if isinstance(payload, list):
        return payload
    obj = _require_object(payload, response_kind)
    for scope in (obj, _as_object(obj.get("data")) or {}):
        if isinstance(scope.get(key), list):
            return scope[key]
    if isinstance(obj.get("data"), list):
        return obj["data"]
    raise NormalizationError.unrecognized(response_kind)


def _match(obj: JsonObject) -> Match:
    match_id = _first(obj, ("matchId", "_id", "id"), _as_id)
    if match_id is None:
        raise NormalizationError.missing(MATCH_LIST, "matchId")
    user = _as_object(obj.get("user"))
    if user is None:
        raise NormalizationError.missing(MATCH_LIST, "user")

    return Match(
        match_id=match_id,
        user=MatchUser(
            id=_first(user, ("_id", "id"), _as_id) or _generated_id(),
            name=_as_str(user.get("name")),
            email=_as_str(user.get("email")),
            profile_image_url=_as_str(user.get("profileImageUrl")),
        ),
        has_chatted=bool(_as_bool(obj.get("hasChatted"))),
        chat_id=_as_id(obj.get("chatId")),
        created_at=_as_str(obj.get("createdAt")) or "",
    )


def normalize_matches(payload: Any) -> list[Match]:
    """Normalize GET /matches. Every entry needs a match id and a user."""
    entries = _list_under(payload, "matches", MATCH_LIST)
    return [_match(item) for item in entries if isinstance(item, dict)]


def _like_received(obj: JsonObject) -> LikeReceived:
    like_id = _first(obj, ("likeId", "_id", "id"), _as_id)
    if like_id is None:
        raise NormalizationError.missing(LIKES_RECEIVED, "likeId")
    from_user = _as_object(obj.get("fromUser"))
    if from_user is None:
        raise NormalizationError.missing(LIKES_RECEIVED, "fromUser")

    return LikeReceived(
        like_id=like_id,
        from_user=LikeUser(
            id=_first(from_user, ("_id", "id"), _as_id) or _generated_id(),
            name=_as_str(from_user.get("name")),
            profile_image_url=_as_str(from_user.get("profileImageUrl")),
            avatar_url=_as_str(from_user.get("avatarUrl")),
        ),
        is_match=bool(_as_bool(obj.get("isMatch"))),
        match_id=_as_id(obj.get("matchId")),
        created_at=_as_str(obj.get("createdAt")) or "",
    )


def normalize_likes_received(payload: Any) -> list[LikeReceived]:
    """Normalize GET /likes-received ({likes: [...]})."""
    entries = _list_under(payload, "likes", LIKES_RECEIVED)
    return [_like_received(item) for item in entries if isinstance(item, dict)]
