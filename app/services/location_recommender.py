"""
Recommendation scoring for location listings.

Each candidate gets a weighted score built from how well its categories
match what the caller has saved, how close it is, how popular and how well
rated it is, whether it suits the time of day, and whether the caller saved
it. A diversity pass then damps runs of locations sharing a first category.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Set

from app.utils.business_hours import evaluate_business_hours

WEIGHTS = {
    "category_match": 0.3,
    "distance": 0.25,
    "popularity": 0.15,
    "rating": 0.15,
    "time_relevance": 0.1,
    "user_behavior": 0.05,
}

# (first hour, last hour, first-category keywords) boosted during that window
TIME_WINDOWS = (
    (6, 11, ("coffee", "breakfast")),
    (11, 15, ("restaurant", "lunch")),
    (17, 22, ("restaurant", "dinner", "bar")),
)
LATE_NIGHT_KEYWORDS = ("bar", "nightlife")

MIN_DIVERSITY = 0.5
DIVERSITY_STEP = 0.1


@dataclass
class ScoredLocation:
    doc: Dict[str, Any]
    score: float


def _category_names(doc: Dict[str, Any]) -> List[str]:
    names = []
    for category in doc.get("categories") or []:
        name = category.get("name") if isinstance(category, dict) else category
        if isinstance(name, str) and name:
            names.append(name.lower())
    return names


def _first_category(doc: Dict[str, Any]) -> str:
    names = _category_names(doc)
    return names[0] if names else ""


def preferred_categories(docs: Sequence[Dict[str, Any]], saved_ids: Set[str]) -> Set[str]:
    """First-category names of the saved locations among ``docs``."""
    return {
        _first_category(doc)
        for doc in docs
        if str(doc.get("id")) in saved_ids and _first_category(doc)
    }


def category_match_score(doc: Dict[str, Any], preferred: Set[str]) -> float:
    if not preferred:
        return 0.0
    names = _category_names(doc)
    matches = [p for p in preferred if any(p in name for name in names)]
    return len(matches) / len(preferred)


def distance_score(doc: Dict[str, Any], radius_km: float) -> float:
    distance = doc.get("distance")
    if distance is None or radius_km <= 0:
        return 1.0
    return math.exp(-distance / radius_km)


def popularity_score(doc: Dict[str, Any]) -> float:
    visits = doc.get("visit_count") or 0
    reviews = doc.get("review_count") or 0
    return min(2.0, 1.0 + visits / 100 + reviews / 50)


def rating_score(doc: Dict[str, Any]) -> float:
    rating = doc.get("average_rating") or 0
    if rating >= 4.0:
        return 1.3
    if rating >= 3.5:
        return 1.1
    return 1.0


def time_relevance_score(doc: Dict[str, Any], now: datetime) -> float:
    """Boost open locations, then categories that suit the hour."""
    hours = doc.get("business_hours")
    if evaluate_business_hours(hours if isinstance(hours, list) else None, now).is_open:
        return 1.2

    category = _first_category(doc)
    if not category:
        return 1.0
    for first_hour, last_hour, keywords in TIME_WINDOWS:
        if first_hour <= now.hour <= last_hour and any(k in category for k in keywords):
            return 1.1
    if (now.hour >= 22 or now.hour <= 2) and any(k in category for k in LATE_NIGHT_KEYWORDS):
        return 1.1
    return 1.0


def user_behavior_score(doc: Dict[str, Any], saved_ids: Set[str]) -> float:
    score = 1.0
    if saved_ids:
        score += 0.3
    if str(doc.get("id")) in saved_ids:
        score += 0.5
    return score


def score_location(
    doc: Dict[str, Any],
    preferred: Set[str],
    saved_ids: Set[str],
    radius_km: float,
    now: datetime,
) -> float:
    return (
        category_match_score(doc, preferred) * WEIGHTS["category_match"]
        + distance_score(doc, radius_km) * WEIGHTS["distance"]
        + popularity_score(doc) * WEIGHTS["popularity"]
        + rating_score(doc) * WEIGHTS["rating"]
        + time_relevance_score(doc, now) * WEIGHTS["time_relevance"]
        + user_behavior_score(doc, saved_ids) * WEIGHTS["user_behavior"]
    )


def apply_diversity(scored: List[ScoredLocation]) -> List[ScoredLocation]:
    """
    Damp scores of locations whose first category is already represented.

    Walks the list best first; each location loses ``DIVERSITY_STEP`` of its
    score per earlier pick sharing its first category, down to
    ``MIN_DIVERSITY``. The result is re-sorted by the damped score.
    """
    ordered = sorted(scored, key=lambda s: s.score, reverse=True)
    seen: Dict[str, int] = {}
    for item in ordered:
        category = _first_category(item.doc)
        item.score *= max(MIN_DIVERSITY, 1.0 - seen.get(category, 0) * DIVERSITY_STEP)
        seen[category] = seen.get(category, 0) + 1
    return sorted(ordered, key=lambda s: s.score, reverse=True)


def recommend(
    docs: Sequence[Dict[str, Any]],
    saved_ids: Optional[Set[str]] = None,
    radius_km: float = 10.0,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Order candidate documents by recommendation score, best first.

    Args:
        docs: Candidate documents, carrying ``distance`` when an origin was given
        saved_ids: IDs (as strings) of locations the caller has saved
        radius_km: Search radius used to decay the distance score
        now: Moment used for time relevance, defaults to local time

    Returns:
        The same documents, reordered
    """
    saved_ids = saved_ids or set()
    now = now or datetime.now()
    preferred = preferred_categories(docs, saved_ids)
    scored = [
        ScoredLocation(doc=doc, score=score_location(doc, preferred, saved_ids, radius_km, now))
        for doc in docs
    ]
    return [item.doc for item in apply_diversity(scored)]
