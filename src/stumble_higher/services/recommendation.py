"""Pick the next resources to serve ("stumble").

Four strategies are available:

* ``popular``: approved resources by quality score.
* ``recent``: newest approved resources with a non-negative quality score.
* ``random``: a randomized top-k biased towards quality and trending
  (``0.7*q + 0.2*t + 0.1*U(0, 2)``), not uniform sampling.
* ``personalized``: a composite relevance score built from the user's recent
  liked content and explicit preferences.

Personalized requests that produce nothing (no user, or no history) fall
back to ``popular``; the selection reports the algorithm actually used.
"""

from __future__ import annotations

import random
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from sqlalchemy.orm import Query, Session

from stumble_higher.db.time import utcnow
from stumble_higher.models import Resource, UserInteraction, UserPreferences, Vote
from stumble_higher.models.interaction import INTERACTION_FAVORITE, INTERACTION_VIEW
from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED
from stumble_higher.models.vote import VOTE_UP

ALGORITHM_PERSONALIZED = "personalized"
ALGORITHM_POPULAR = "popular"
ALGORITHM_RECENT = "recent"
ALGORITHM_RANDOM = "random"

ALGORITHMS = (ALGORITHM_PERSONALIZED, ALGORITHM_POPULAR, ALGORITHM_RECENT, ALGORITHM_RANDOM)

PROFILE_WINDOW = timedelta(days=90)
VIEWED_WINDOW = timedelta(days=30)
DEFAULT_MAX_TIME_MINUTES = 60

DIFFICULTY_TIERS = {"beginner": 1, "intermediate": 2, "advanced": 3}
UNKNOWN_DIFFICULTY_TIER = 2


class ScoredResource(Protocol):
    category: str
    tags: list[str] | None
    difficulty_level: str | None
    estimated_time_minutes: int | None
    quality_score: float
    trending_score: float


@dataclass(frozen=True)
class DiscoveryRequest:
    """Parameters of a select-next call."""

    algorithm: str = ALGORITHM_PERSONALIZED
    user_id: str | None = None
    exclude_ids: frozenset[str] = frozenset()
    category: str | None = None
    difficulty: str | None = None
    max_time: int | None = None
    limit: int = 10
    exclude_viewed: bool = True


@dataclass
class DiscoverySelection:
    """Ordered resource ids plus the strategy that produced them."""

    resource_ids: list[str]
    algorithm_used: str
    scores: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class UserProfile:
    """Tastes inferred from content the user viewed or favorited and up-voted."""

    liked_categories: frozenset[str] = frozenset()
    liked_tags: frozenset[str] = frozenset()
    avg_difficulty: float = float(UNKNOWN_DIFFICULTY_TIER)
    sample_size: int = 0

    @property
    def is_empty(self) -> bool:
        return self.sample_size == 0


@dataclass(frozen=True)
class UserPrefs:
    """Explicit preferences; defaults apply when the user never set any."""

    preferred_categories: frozenset[str] = frozenset()
    excluded_categories: frozenset[str] = frozenset()
    max_time_minutes: int = DEFAULT_MAX_TIME_MINUTES


def difficulty_tier(level: str | None) -> int | None:
    """Map a difficulty label to the 1-3 scale."""
    if level is None:
        return None
    return DIFFICULTY_TIERS.get(level)


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_profile(liked: Iterable[ScoredResource]) -> UserProfile:
    """Summarise liked resources into categories, tags and difficulty."""
    categories: set[str] = set()
    tags: set[str] = set()
    tiers: list[int] = []
    for resource in liked:
        if resource.category:
            categories.add(resource.category)
        tags.update(resource.tags or ())
        tiers.append(difficulty_tier(resource.difficulty_level) or UNKNOWN_DIFFICULTY_TIER)

    if not tiers:
        return UserProfile()
    return UserProfile(
        liked_categories=frozenset(categories),
        liked_tags=frozenset(tags),
        avg_difficulty=sum(tiers) / len(tiers),
        sample_size=len(tiers),
    )


def personalized_score(resource: ScoredResource, profile: UserProfile, prefs: UserPrefs) -> float:
    """Composite relevance of ``resource`` for one user."""
    if resource.category in prefs.preferred_categories:
        category_match = 5.0
    elif resource.category in profile.liked_categories:
        category_match = 3.0
    else:
        category_match = 0.0

    tag_match = 0.5 * sum(1 for tag in (resource.tags or ()) if tag in profile.liked_tags)

    if resource.estimated_time_minutes is None:
        time_fit = 0.5
    elif resource.estimated_time_minutes <= prefs.max_time_minutes:
        time_fit = 2.0
    else:
        time_fit = 0.0

    tier = difficulty_tier(resource.difficulty_level)
    if tier is None:
        difficulty_match = 0.5
    elif tier == _round_half_up(profile.avg_difficulty):
        difficulty_match = 1.0
    else:
        difficulty_match = 0.0

    return round(
        category_match * 0.25
        + tag_match * 0.20
        + float(resource.quality_score or 0) * 0.25
        + float(resource.trending_score or 0) * 0.15
        + time_fit * 0.10
        + difficulty_match * 0.05,
        6,
    )


def random_score(resource: ScoredResource, rng: random.Random) -> float:
    """Quality-biased randomized score used by the ``random`` strategy."""
    return (
        float(resource.quality_score or 0) * 0.7
        + float(resource.trending_score or 0) * 0.2
        + rng.random() * 2.0 * 0.1
    )


def _eligible(db: Session, request: DiscoveryRequest) -> Query:
    """Approved resources after filters and session exclusions."""
    query = db.query(Resource).filter(Resource.status == RESOURCE_STATUS_APPROVED)
    if request.category:
        query = query.filter(Resource.category == request.category)
    if request.difficulty:
        query = query.filter(Resource.difficulty_level == request.difficulty)
    if request.max_time:
        query = query.filter(Resource.estimated_time_minutes <= request.max_time)
    if request.exclude_ids:
        query = query.filter(Resource.id.not_in(request.exclude_ids))
    return query


def _ids(resources: Iterable[Resource]) -> list[str]:
    return [resource.id for resource in resources]


def select_popular(db: Session, request: DiscoveryRequest) -> DiscoverySelection:
    resources = (
        _eligible(db, request)
        .order_by(Resource.quality_score.desc(), Resource.created_at.desc(), Resource.id)
        .limit(request.limit)
        .all()
    )
    return DiscoverySelection(
        _ids(resources),
        ALGORITHM_POPULAR,
        {resource.id: float(resource.quality_score) for resource in resources},
    )


def select_recent(db: Session, request: DiscoveryRequest) -> DiscoverySelection:
    resources = (
        _eligible(db, request)
        .filter(Resource.quality_score >= 0)
        .order_by(Resource.created_at.desc(), Resource.id)
        .limit(request.limit)
        .all()
    )
    return DiscoverySelection(_ids(resources), ALGORITHM_RECENT)


def select_random(
    db: Session,
    request: DiscoveryRequest,
    rng: random.Random | None = None,
) -> DiscoverySelection:
    rng = rng or random.Random()
    scored = [(random_score(resource, rng), resource.id) for resource in _eligible(db, request)]
    scored.sort(key=lambda item: item[0], reverse=True)
    top = scored[: request.limit]
    return DiscoverySelection(
        [resource_id for _, resource_id in top],
        ALGORITHM_RANDOM,
        {resource_id: round(score, 6) for score, resource_id in top},
    )


def load_user_profile(db: Session, user_id: str, now: datetime) -> UserProfile:
    """Profile from the last 90 days of viewed/favorited, up-voted resources."""
    liked = (
        db.query(Resource)
        .join(UserInteraction, UserInteraction.resource_id == Resource.id)
        .join(
            Vote,
            (Vote.resource_id == Resource.id)
            & (Vote.user_id == user_id)
            & (Vote.vote_type == VOTE_UP),
        )
        .filter(
            UserInteraction.user_id == user_id,
            UserInteraction.interaction_type.in_((INTERACTION_VIEW, INTERACTION_FAVORITE)),
            UserInteraction.created_at > now - PROFILE_WINDOW,
        )
        .all()
    )
    return build_profile(liked)


def load_user_prefs(db: Session, user_id: str) -> UserPrefs:
    prefs = db.get(UserPreferences, user_id)
    if prefs is None:
        return UserPrefs()
    return UserPrefs(
        preferred_categories=frozenset(prefs.preferred_categories or ()),
        excluded_categories=frozenset(prefs.excluded_categories or ()),
        max_time_minutes=prefs.max_time_minutes or DEFAULT_MAX_TIME_MINUTES,
    )


def recently_viewed_ids(db: Session, user_id: str, now: datetime) -> set[str]:
    return {
        resource_id
        for (resource_id,) in db.query(UserInteraction.resource_id).filter(
            UserInteraction.user_id == user_id,
            UserInteraction.interaction_type == INTERACTION_VIEW,
            UserInteraction.created_at > now - VIEWED_WINDOW,
        )
    }


def select_personalized(
    db: Session,
    request: DiscoveryRequest,
    now: datetime | None = None,
) -> DiscoverySelection:
    """Rank eligible resources by personal relevance.

    Returns an empty selection when the user has no usable history; the
    caller decides whether to fall back.
    """
    if request.user_id is None:
        return DiscoverySelection([], ALGORITHM_PERSONALIZED)

    now = now or utcnow()
    profile = load_user_profile(db, request.user_id, now)
    if profile.is_empty:
        return DiscoverySelection([], ALGORITHM_PERSONALIZED)

    prefs = load_user_prefs(db, request.user_id)
    query = _eligible(db, request)
    if prefs.excluded_categories:
        query = query.filter(Resource.category.not_in(prefs.excluded_categories))
    skip: Collection[str] = (
        recently_viewed_ids(db, request.user_id, now) if request.exclude_viewed else ()
    )

    scored = [
        (personalized_score(resource, profile, prefs), resource.id)
        for resource in query
        if resource.id not in skip
    ]
    # Stable tiebreak on id keeps repeated calls deterministic.
    scored.sort(key=lambda item: (-item[0], item[1]))
    top = scored[: request.limit]
    return DiscoverySelection(
        [resource_id for _, resource_id in top],
        ALGORITHM_PERSONALIZED,
        {resource_id: score for score, resource_id in top},
    )


def select_resources(
    db: Session,
    request: DiscoveryRequest,
    *,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> DiscoverySelection:
    """Dispatch to the requested strategy, falling back to popular.

    Raises:
        ValueError: If the algorithm name is unknown.
    """
    if request.algorithm == ALGORITHM_POPULAR:
        return select_popular(db, request)
    if request.algorithm == ALGORITHM_RECENT:
        return select_recent(db, request)
    if request.algorithm == ALGORITHM_RANDOM:
        return select_random(db, request, rng)
    if request.algorithm == ALGORITHM_PERSONALIZED:
        selection = select_personalized(db, request, now)
        if selection.resource_ids:
            return selection
        return select_popular(db, request)
    raise ValueError(f"Unknown discovery algorithm: {request.algorithm!r}")
