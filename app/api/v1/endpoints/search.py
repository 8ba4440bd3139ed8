"""
Mobile Search API Endpoint

Global search across users, locations, events and posts.
"""

import logging
import math
from typing import Optional, Set

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.v1.endpoints.locations import load_location_interactions
from app.core.config import settings
from app.core.exceptions import BadRequestError, ServerError
from app.db.database import get_db
from app.models.user import User
from app.schemas.geo import Coordinates
from app.schemas.location import PriceRange
from app.schemas.search import (
    SearchData,
    SearchMeta,
    SearchResponse,
    SearchResults,
    SearchType,
    SuggestionData,
    SuggestionResponse,
)
from app.services.auth_service import auth_service
from app.services.search_service import SearchServiceError, search_service, search_timestamp
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter()


def load_following_ids(db: Session, user: Optional[User]) -> Set[str]:
    if user is None:
        return set()
    try:
        return user_service.get_following_ids(db, int(user.id))
    except Exception as e:  # pylint: disable=broad-except
        logger.warning("Failed to fetch followed users for user %s: %s", user.id, str(e))
        return set()


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query("", max_length=200),
    search_type: SearchType = Query(SearchType.ALL, alias="type"),
    limit: int = Query(settings.SEARCH_DEFAULT_LIMIT, ge=1, le=settings.MAX_PAGE_SIZE),
    category: Optional[str] = Query(None),
    event_type: Optional[str] = Query(None, alias="eventType"),
    price_range: Optional[PriceRange] = Query(None, alias="priceRange"),
    latitude: Optional[float] = Query(None, ge=-90.0, le=90.0),
    longitude: Optional[float] = Query(None, ge=-180.0, le=180.0),
    radius: float = Query(
        settings.SEARCH_DEFAULT_RADIUS_KM,
        ge=1,
        le=settings.MAX_RADIUS_KM,
        description="Radius in km",
    ),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(auth_service.get_current_user_optional),
):
    """
    Search users, locations, events and posts.

    ``type=all`` searches every type with a quarter of ``limit`` each.
    """
    query = q.strip()
    if len(query) < settings.SEARCH_MIN_QUERY_LENGTH:
        raise BadRequestError(
            f"Search query must be at least {settings.SEARCH_MIN_QUERY_LENGTH} characters"
        )
    if (latitude is None) != (longitude is None):
        raise BadRequestError("latitude and longitude must be provided together")

    origin = (
        Coordinates(latitude=latitude, longitude=longitude)
        if latitude is not None and longitude is not None
        else None
    )
    per_type_limit = math.ceil(limit / 4) if search_type == SearchType.ALL else limit

    logger.info(
        "Search request: query=%r, type=%s, limit=%s, origin=%s",
        query,
        search_type.value,
        limit,
        origin,
    )

    results = SearchResults()
    try:
        if search_type in (SearchType.ALL, SearchType.USERS):
            results.users = search_service.search_users(
                db,
                query,
                per_type_limit,
                following_ids=load_following_ids(db, current_user),
                exclude_user_id=int(current_user.id) if current_user else None,
            )

        if search_type in (SearchType.ALL, SearchType.LOCATIONS):
            saved_ids, subscribed_ids = load_location_interactions(db, current_user)
            results.locations = search_service.search_locations(
                db,
                query,
                per_type_limit,
                category=category,
                price_range=price_range,
                origin=origin,
                radius_km=radius,
                saved_ids=saved_ids,
                subscribed_ids=subscribed_ids,
            )

        if search_type in (SearchType.ALL, SearchType.EVENTS):
            results.events = search_service.search_events(
                db,
                query,
                per_type_limit,
                category=category,
                event_type=event_type,
                origin=origin,
                radius_km=radius,
            )

        if search_type in (SearchType.ALL, SearchType.POSTS):
            results.posts = search_service.search_posts(db, query, per_type_limit)

    except SearchServiceError as e:
        logger.error("Search service error: %s", str(e))
        raise ServerError("Failed to perform search") from e

    except Exception as e:
        logger.exception("Unexpected error in search")
        raise ServerError("Failed to perform search") from e

    filters = {
        "category": category,
        "eventType": event_type,
        "priceRange": price_range.value if price_range else None,
        "latitude": latitude,
        "longitude": longitude,
        "radius": radius if origin else None,
    }

    return SearchResponse(
        message="Search completed successfully",
        data=SearchData(
            query=query,
            type=search_type,
            results=results,
            meta=SearchMeta(
                total_results=results.total,
                filters={key: value for key, value in filters.items() if value is not None},
                search_time=search_timestamp(),
            ),
        ),
    )


@router.get("/suggestions", response_model=SuggestionResponse)
async def search_suggestions(
    q: str = Query("", max_length=200),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(auth_service.get_current_user_optional),
):
    """
    Suggest search terms for a partial query.

    Matching location names are only added for authenticated callers.
    """
    try:
        suggestions = search_service.suggest(db, q, include_locations=current_user is not None)
    except Exception as e:
        logger.exception("Unexpected error building search suggestions")
        raise ServerError("Failed to get suggestions") from e

    return SuggestionResponse(data=SuggestionData(query=q, suggestions=suggestions))
