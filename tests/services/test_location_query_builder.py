"""
Unit tests for the location query builder.
"""

import pytest

from app.schemas.location import LocationListType, LocationQuery, LocationSortKey, PriceRange
from app.services.location_query_builder import build_location_sort, build_location_where


def test_default_query_only_filters_published():
    """Test that an empty query only restricts to published locations."""
    where = build_location_where(LocationQuery())

    assert where == {"and": [{"status": {"equals": "published"}}]}


def test_search_matches_any_text_field():
    """Test that search text becomes a contains-disjunction over text fields."""
    where = build_location_where(LocationQuery(search="  cafe "))

    assert where["and"][1] == {
        "or": [
            {"name": {"contains": "cafe"}},
            {"description": {"contains": "cafe"}},
            {"short_description": {"contains": "cafe"}},
        ]
    }


def test_blank_search_is_ignored():
    """Test that whitespace-only search text adds no clause."""
    where = build_location_where(LocationQuery(search="   "))

    assert len(where["and"]) == 1


def test_all_filters_combined():
    """Test category, price range and rating clauses together."""
    query = LocationQuery(category="coffee", price_range=PriceRange.BUDGET, rating=4)

    where = build_location_where(query)

    assert where == {
        "and": [
            {"status": {"equals": "published"}},
            {"categories": {"contains": "coffee"}},
            {"price_range": {"equals": "budget"}},
            {"average_rating": {"greater_than_equal": 4}},
        ]
    }


def test_coordinates_and_open_state_are_not_store_filters():
    """Test that distance and open-now never reach the store predicate."""
    query = LocationQuery(latitude=42.36, longitude=-71.06, radius=5, is_open=True)

    where = build_location_where(query)

    assert where == {"and": [{"status": {"equals": "published"}}]}
    assert query.needs_refinement is True


@pytest.mark.parametrize(
    "sort_by, expected",
    [
        (LocationSortKey.RATING, "-average_rating"),
        (LocationSortKey.POPULARITY, "-review_count"),
        (LocationSortKey.NAME, "name"),
        (LocationSortKey.CREATED_AT, "-created_at"),
        (LocationSortKey.DISTANCE, "-created_at"),
    ],
)
def test_sort_mapping(sort_by, expected):
    """Test sort keys map to store sort strings."""
    assert build_location_sort(sort_by) == expected


def test_lone_latitude_is_rejected():
    """Test that latitude without longitude fails validation."""
    with pytest.raises(ValueError):
        LocationQuery(latitude=42.36)


def test_limit_is_capped():
    """Test that page sizes above the maximum fail validation."""
    with pytest.raises(ValueError):
        LocationQuery(limit=500)


def test_owner_and_id_clauses():
    """Test that personal listings narrow by owner or by saved IDs."""
    created = build_location_where(LocationQuery(created_by=3))
    saved = build_location_where(LocationQuery(location_ids=[5, 8]))

    assert created["and"][-1] == {"created_by": {"equals": 3}}
    assert saved["and"][-1] == {"id": {"in": [5, 8]}}


def test_recommended_listing_needs_refinement():
    """Test that recommendation scoring always runs in memory."""
    assert LocationQuery(list_type=LocationListType.RECOMMENDED).needs_refinement is True
    assert LocationQuery(list_type=LocationListType.CREATED).needs_refinement is False
