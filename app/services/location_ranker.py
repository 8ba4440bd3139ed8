"""
Location ranking and pagination.

Two execution paths:

* Store mode: every filter and the sort order can be pushed to the
  database, which also applies the page offset.
* Refine mode: the request depends on values computed per row (distance
  from the caller, open-now state, recommendation score). Up to
  ``GEO_CANDIDATE_LIMIT`` candidates are fetched under the remaining
  filters, refined in memory, then sliced. Matches beyond the candidate cap
  are never seen, so totals can undercount in very dense areas.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Set

from sqlalchemy.orm import Session

from app.core.config import settings
from app.schemas.geo import Coordinates
from app.schemas.location import LocationListType, LocationQuery, LocationSortKey, Pagination
from app.services.location_formatter import extract_coordinates
from app.services.location_query_builder import build_location_sort, build_location_where
from app.services.location_recommender import recommend
from app.services.location_service import location_service
from app.utils.business_hours import evaluate_business_hours
from app.utils.geo import haversine_distance_km

logger = logging.getLogger(__name__)


@dataclass
class RankedLocations:
    docs: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    refined: bool = False


def refine_candidates(
    docs: Sequence[Dict[str, Any]],
    origin: Optional[Coordinates] = None,
    radius_km: float = settings.DEFAULT_RADIUS_KM,
    sort_by: LocationSortKey = LocationSortKey.DISTANCE,
    is_open: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Filter and order a candidate set by computed values.

    When ``origin`` is given, candidates without valid coordinates or beyond
    ``radius_km`` are dropped and the rest carry a ``distance`` key. They are
    ordered nearest first when sorting by distance; otherwise the incoming
    order is kept. When ``is_open`` is given, only candidates whose current
    open state equals it are kept.
    """
    refined: List[Dict[str, Any]] = []
    for doc in docs:
        if origin is not None:
            coords = extract_coordinates(doc)
            if coords is None:
                continue
            distance = haversine_distance_km(
                *origin.as_tuple(), *coords
            )
            if distance > radius_km:
                continue
            doc = {**doc, "distance": distance}

        if is_open is not None:
            hours = doc.get("business_hours")
            status = evaluate_business_hours(hours if isinstance(hours, list) else None, now)
            if status.is_open != is_open:
                continue

        refined.append(doc)

    if origin is not None and sort_by == LocationSortKey.DISTANCE:
        refined.sort(key=lambda d: d["distance"])

    return refined


def paginate(items: Sequence[Any], page: int, limit: int) -> List[Any]:
    """Return items ``[(page - 1) * limit, page * limit)``."""
    start = (page - 1) * limit
    return list(items[start : start + limit])


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


class LocationRanker:
    """Runs a location query through the store and, when needed, in-memory refinement."""

    def __init__(self, candidate_limit: int = settings.GEO_CANDIDATE_LIMIT):
        self.candidate_limit = candidate_limit

    def rank(
        self,
        db: Session,
        query: LocationQuery,
        now: Optional[datetime] = None,
        saved_ids: Optional[Set[str]] = None,
    ) -> RankedLocations:
        """
        Fetch one page of locations for a query.

        Args:
            db: Database session
            query: Validated location query
            now: Moment used for open-now filtering and recommendation scoring,
                defaults to local time
            saved_ids: IDs (as strings) of locations the caller saved, used by
                recommended listings

        Returns:
            RankedLocations with the page's documents and the total match count

        Raises:
            LocationStoreError: If the store query fails
        """
        where = build_location_where(query)
        sort = build_location_sort(query.sort_by)

        if not query.needs_refinement:
            page = location_service.find(db, where, sort, limit=query.limit, page=query.page)
            return RankedLocations(docs=page.docs, total=page.total_docs)

        candidates = location_service.find(db, where, sort, limit=self.candidate_limit, page=1)
        if candidates.total_docs > self.candidate_limit:
            logger.warning(
                "Candidate cap reached: %d matches, only %d refined",
                candidates.total_docs,
                self.candidate_limit,
            )

        refined = refine_candidates(
            candidates.docs,
            origin=query.origin,
            radius_km=query.radius,
            sort_by=query.sort_by,
            is_open=query.is_open,
            now=now,
        )
        if query.list_type == LocationListType.RECOMMENDED:
            refined = recommend(refined, saved_ids=saved_ids, radius_km=query.radius, now=now)
        logger.info(
            "Refined %d candidates down to %d locations", len(candidates.docs), len(refined)
        )
        return RankedLocations(
            docs=paginate(refined, query.page, query.limit),
            total=len(refined),
            refined=True,
        )


# Singleton instance for dependency injection
location_ranker = LocationRanker()
