"""
Mobile Locations API Endpoint

Location listing with text, category, price, rating, radius and open-now
filters, location details, and save/subscribe interactions.
"""

import logging
from typing import Optional, Set, Tuple

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import (
    AuthRequiredError,
    BadRequestError,
    NotFoundError,
    ServerError,
    first_validation_message,
)
from app.db.database import get_db
from app.models.user import User
from app.schemas.location import (
    InteractionRequest,
    InteractionResponse,
    InteractionState,
    LocationDetailData,
    LocationDetailResponse,
    LocationListData,
    LocationListMeta,
    LocationListResponse,
    LocationListType,
    LocationQuery,
    LocationSortKey,
    PriceRange,
)
from app.services.auth_service import auth_service
from app.services.location_formatter import format_location
from app.services.location_ranker import build_pagination, location_ranker
from app.services.location_service import LocationStoreError, location_service
from app.services.user_service import UserServiceError, user_service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_location_query(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(None, description="Category ID or slug"),
    latitude: Optional[float] = Query(None, ge=-90.0, le=90.0),
    longitude: Optional[float] = Query(None, ge=-180.0, le=180.0),
    radius: float = Query(
        settings.DEFAULT_RADIUS_KM, ge=1, le=settings.MAX_RADIUS_KM, description="Radius in km"
    ),
    price_range: Optional[PriceRange] = Query(None, alias="priceRange"),
    rating: Optional[float] = Query(None, ge=1, le=5, description="Minimum average rating"),
    sort_by: LocationSortKey = Query(LocationSortKey.DISTANCE, alias="sortBy"),
    is_open: Optional[bool] = Query(None, alias="isOpen"),
    list_type: LocationListType = Query(LocationListType.ALL, alias="type"),
) -> LocationQuery:
    """Collect and validate location listing query parameters."""
    try:
        return LocationQuery(
            page=page,
            limit=limit,
            search=search,
            category=category,
            latitude=latitude,
            longitude=longitude,
            radius=radius,
            price_range=price_range,
            rating=rating,
            sort_by=sort_by,
            is_open=is_open,
            list_type=list_type,
        )
    except ValidationError as e:
        raise BadRequestError(first_validation_message(e.errors())) from e


def load_location_interactions(db: Session, user: Optional[User]) -> Tuple[Set[str], Set[str]]:
    """
    Get the caller's saved and subscribed location IDs.

    Anonymous callers and lookup failures both yield empty sets; a failure
    here never fails the request.
    """
    if user is None:
        return set(), set()
    try:
        return user_service.get_location_interaction_ids(db, int(user.id))
    except Exception as e:  # pylint: disable=broad-except
        logger.warning("Failed to fetch location interactions for user %s: %s", user.id, str(e))
        return set(), set()


@router.get("", response_model=LocationListResponse)
async def list_locations(
    query: LocationQuery = Depends(get_location_query),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(auth_service.get_current_user_optional),
):
    """
    List published locations.

    Supplying ``latitude`` and ``longitude`` limits results to ``radius`` km
    and enables nearest-first ordering with ``sortBy=distance``. Each
    location carries a live open/closed flag and, for authenticated
    callers, saved and subscribed flags.

    ``type`` narrows or reorders the listing: ``created`` and ``saved`` list
    the caller's own and saved locations and require authentication;
    ``recommended`` orders results by recommendation score.
    """
    logger.info(
        "Location list request: type=%s, page=%s, limit=%s, sort_by=%s, origin=%s, "
        "radius=%s, user_id=%s",
        query.list_type.value,
        query.page,
        query.limit,
        query.sort_by.value,
        query.origin,
        query.radius,
        current_user.id if current_user else None,
    )

    if query.list_type in (LocationListType.CREATED, LocationListType.SAVED) and not current_user:
        raise AuthRequiredError(f"Authentication required for {query.list_type.value} locations")

    try:
        if query.list_type == LocationListType.SAVED:
            # Listing saved locations cannot degrade to an empty set
            saved_ids, subscribed_ids = user_service.get_location_interaction_ids(
                db, int(current_user.id)
            )
            query = query.model_copy(update={"location_ids": sorted(int(i) for i in saved_ids)})
        else:
            saved_ids, subscribed_ids = load_location_interactions(db, current_user)
            if query.list_type == LocationListType.CREATED:
                query = query.model_copy(update={"created_by": int(current_user.id)})

        ranked = location_ranker.rank(db, query, saved_ids=saved_ids)
        locations = [format_location(doc, saved_ids, subscribed_ids) for doc in ranked.docs]

    except LocationStoreError as e:
        logger.error("Location store error: %s", str(e))
        raise ServerError("Failed to fetch locations") from e

    except Exception as e:
        logger.exception("Unexpected error while listing locations")
        raise ServerError("Failed to fetch locations") from e

    logger.info("Location list successful: %d of %d locations", len(locations), ranked.total)

    return LocationListResponse(
        message="Locations retrieved successfully",
        data=LocationListData(
            locations=locations,
            pagination=build_pagination(query.page, query.limit, ranked.total),
            meta=LocationListMeta(
                search=query.search,
                category=query.category,
                coordinates=query.origin,
                radius=query.radius if query.origin else None,
                price_range=query.price_range.value if query.price_range else None,
                rating=query.rating,
                sort_by=query.sort_by.value,
                is_open=query.is_open,
                type=query.list_type.value,
            ),
        ),
    )


@router.get("/{location_id}", response_model=LocationDetailResponse)
async def get_location(
    location_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(auth_service.get_current_user_optional),
):
    """
    Get a single published location.
    """
    try:
        doc = location_service.get_published(db, location_id)
    except LocationStoreError as e:
        logger.error("Location store error: %s", str(e))
        raise ServerError("Failed to fetch location details") from e

    if doc is None:
        raise NotFoundError("Location not found")

    saved_ids, subscribed_ids = load_location_interactions(db, current_user)

    return LocationDetailResponse(
        message="Location retrieved successfully",
        data=LocationDetailData(location=format_location(doc, saved_ids, subscribed_ids)),
    )


@router.post("/{location_id}/interact", response_model=InteractionResponse)
async def interact_with_location(
    location_id: int,
    request: InteractionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(auth_service.get_current_user),
):
    """
    Save, unsave, subscribe to or unsubscribe from a location. Requires authentication.
    """
    logger.info(
        "Location interaction: action=%s, location_id=%s, user_id=%s",
        request.action.value,
        location_id,
        current_user.id,
    )

    try:
        is_saved, is_subscribed = user_service.apply_location_interaction(
            db, current_user, location_id, request.action
        )
    except UserServiceError as e:
        logger.error("Location interaction error: %s", str(e))
        raise ServerError("Failed to update location interaction") from e

    return InteractionResponse(
        message=f"Location {request.action.value} recorded",
        data=InteractionState(
            location_id=str(location_id),
            is_saved=is_saved,
            is_subscribed=is_subscribed,
        ),
    )
