"""
Location query builder.

Translates validated request parameters into a store predicate. The
predicate is a plain nested dict so it can be inspected and tested
without a database:

    {"and": [
        {"status": {"equals": "published"}},
        {"or": [{"name": {"contains": "cafe"}}, ...]},
        {"categories": {"contains": "coffee"}},
        {"price_range": {"equals": "budget"}},
        {"average_rating": {"greater_than_equal": 4}},
    ]}

``app.services.location_service`` compiles it into SQL.
"""

from typing import Any, Dict, List

from app.schemas.location import LocationQuery, LocationSortKey

PUBLISHED = "published"

TEXT_SEARCH_FIELDS = ("name", "description", "short_description")

SORT_FIELDS = {
    LocationSortKey.RATING: "-average_rating",
    LocationSortKey.POPULARITY: "-review_count",
    LocationSortKey.NAME: "name",
    LocationSortKey.CREATED_AT: "-created_at",
}
DEFAULT_SORT = "-created_at"


def build_location_where(query: LocationQuery) -> Dict[str, Any]:
    """Build the store predicate for everything except distance and open state."""
    clauses: List[Dict[str, Any]] = [{"status": {"equals": PUBLISHED}}]

    search = (query.search or "").strip()
    if search:
        clauses.append({"or": [{field: {"contains": search}} for field in TEXT_SEARCH_FIELDS]})

    category = (query.category or "").strip()
    if category:
        clauses.append({"categories": {"contains": category}})

    if query.price_range is not None:
        clauses.append({"price_range": {"equals": query.price_range.value}})

    if query.rating is not None:
        clauses.append({"average_rating": {"greater_than_equal": query.rating}})

    if query.created_by is not None:
        clauses.append({"created_by": {"equals": query.created_by}})

    if query.location_ids is not None:
        clauses.append({"id": {"in": query.location_ids}})

    return {"and": clauses}


def build_location_sort(sort_by: LocationSortKey) -> str:
    """
    Map a sort key to a store sort string (``-`` prefix means descending).

    Distance is not a stored field, so it falls back to newest first; the
    ranker re-sorts by distance after fetching.
    """
    return SORT_FIELDS.get(sort_by, DEFAULT_SORT)
