"""
Unit tests for recommendation scoring.
"""

import math
from datetime import datetime

import pytest

from app.services.location_recommender import (
    ScoredLocation,
    apply_diversity,
    category_match_score,
    distance_score,
    popularity_score,
    preferred_categories,
    rating_score,
    recommend,
    time_relevance_score,
    user_behavior_score,
)
from tests.helpers import ALWAYS_OPEN

# A Monday
MORNING = datetime(2024, 1, 1, 8, 0)
EVENING = datetime(2024, 1, 1, 19, 0)
LATE_NIGHT = datetime(2024, 1, 1, 23, 30)


def categorized(doc_id, *names, **fields):
    return {"id": doc_id, "categories": [{"name": name} for name in names], **fields}


@pytest.mark.parametrize(
    "rating, expected",
    [(None, 1.0), (3.4, 1.0), (3.5, 1.1), (3.9, 1.1), (4.0, 1.3), (5.0, 1.3)],
)
def test_rating_score(rating, expected):
    assert rating_score({"average_rating": rating}) == expected


def test_popularity_score_is_capped():
    assert popularity_score({}) == 1.0
    assert popularity_score({"visit_count": 50, "review_count": 25}) == 2.0
    assert popularity_score({"visit_count": 1000, "review_count": 1000}) == 2.0


def test_distance_score_decays_with_distance():
    assert distance_score({}, 10) == 1.0
    assert distance_score({"distance": 0.0}, 10) == 1.0
    assert distance_score({"distance": 10.0}, 10) == pytest.approx(math.exp(-1))


@pytest.mark.parametrize(
    "category, now, expected",
    [
        ("Coffee Shops", MORNING, 1.1),
        ("Coffee Shops", LATE_NIGHT, 1.0),
        ("Bar", EVENING, 1.1),
        ("Bar", LATE_NIGHT, 1.1),
        ("Nightlife", MORNING, 1.0),
        ("Museum", EVENING, 1.0),
    ],
)
def test_time_relevance_by_category(category, now, expected):
    assert time_relevance_score(categorized(1, category), now) == expected


def test_time_relevance_prefers_open_locations():
    doc = categorized(1, "Museum", business_hours=ALWAYS_OPEN)

    assert time_relevance_score(doc, LATE_NIGHT) == 1.2


def test_user_behavior_score():
    assert user_behavior_score({"id": 1}, set()) == 1.0
    assert user_behavior_score({"id": 1}, {"2"}) == pytest.approx(1.3)
    assert user_behavior_score({"id": 2}, {"2"}) == pytest.approx(1.8)


def test_category_match_against_saved_categories():
    docs = [categorized(1, "Coffee"), categorized(2, "Bakery"), categorized(3, "Park")]

    preferred = preferred_categories(docs, {"1", "2"})

    assert preferred == {"coffee", "bakery"}
    assert category_match_score(categorized(4, "Coffee Roasters"), preferred) == 0.5
    assert category_match_score(categorized(5, "Park"), preferred) == 0.0
    assert category_match_score(categorized(6, "Park"), set()) == 0.0


def test_diversity_damps_repeated_categories():
    """Test that a third location of one category falls behind a fresh one."""
    scored = [
        ScoredLocation(doc=categorized(1, "Coffee"), score=1.0),
        ScoredLocation(doc=categorized(2, "Coffee"), score=1.0),
        ScoredLocation(doc=categorized(3, "Coffee"), score=1.0),
        ScoredLocation(doc=categorized(4, "Bar"), score=0.85),
    ]

    result = apply_diversity(scored)

    assert [s.doc["id"] for s in result] == [1, 2, 4, 3]
    assert [s.score for s in result] == pytest.approx([1.0, 0.9, 0.85, 0.8])


def test_diversity_floor():
    scored = [ScoredLocation(doc=categorized(i, "Coffee"), score=1.0) for i in range(8)]

    result = apply_diversity(scored)

    assert result[-1].score == pytest.approx(0.5)


def test_recommend_boosts_saved_categories():
    """Test that locations sharing a saved location's category rank higher."""
    docs = [
        categorized(1, "Museum"),
        categorized(2, "Coffee"),
        categorized(3, "Coffee Roasters"),
    ]

    result = recommend(docs, saved_ids={"2"}, now=LATE_NIGHT)

    assert [d["id"] for d in result] == [2, 3, 1]


def test_recommend_empty():
    assert recommend([], saved_ids={"1"}) == []
