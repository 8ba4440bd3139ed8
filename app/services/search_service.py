"""
Search Service

Per-type search over users, locations, events and posts for the mobile
global search endpoint.
"""

import logging
from datetime import datetime
from typing import AbstractSet, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.event import Event
from app.models.post import Post
from app.models.user import User
from app.schemas.geo import Coordinates
from app.schemas.location import FormattedLocation, LocationQuery, LocationSortKey, PriceRange
from app.schemas.search import (
    EventSearchResult,
    PostSearchResult,
    RelatedRef,
    UserSearchResult,
)
from app.services.location_formatter import extract_coordinates, format_location
from app.services.location_query_builder import PUBLISHED
from app.services.location_ranker import location_ranker
from app.services.location_service import LocationStoreError, location_service, to_document
from app.utils.geo import haversine_distance_km

logger = logging.getLogger(__name__)

POPULAR_SEARCHES = (
    "restaurants",
    "hiking trails",
    "coffee shops",
    "beaches",
    "museums",
    "parks",
    "bars",
    "shopping",
    "events",
    "activities",
    "nightlife",
)
MAX_SUGGESTIONS = 8
LOCATION_SUGGESTIONS = 3


class SearchServiceError(Exception):
    """Raised when a search cannot be completed."""


def _contains(column, term: str):
    return func.lower(column).contains(term.lower(), autoescape=True)


class SearchService:
    """Service for searching across content types."""

    @staticmethod
    def search_users(
        db: Session,
        query: str,
        limit: int,
        following_ids: AbstractSet[str] = frozenset(),
        exclude_user_id: Optional[int] = None,
    ) -> List[UserSearchResult]:
        """
        Search users by username or display name.

        Args:
            db: Database session
            query: Search text
            limit: Maximum number of results
            following_ids: IDs of users the caller follows
            exclude_user_id: The caller's own ID, left out of results

        Returns:
            List of UserSearchResult
        """
        try:
            users_query = db.query(User).filter(
                or_(_contains(User.username, query), _contains(User.name, query))
            )
            if exclude_user_id is not None:
                users_query = users_query.filter(User.id != exclude_user_id)
            users = users_query.order_by(User.username.asc()).limit(limit).all()

            return [
                UserSearchResult(
                    id=str(user.id),
                    name=user.name,
                    username=user.username,
                    bio=user.bio,
                    profile_image=user.profile_image_url,
                    follower_count=len(user.followers),
                    is_following=str(user.id) in following_ids,
                    is_verified=bool(user.is_verified),
                )
                for user in users
            ]
        except SQLAlchemyError as e:
            logger.error("User search failed: %s", str(e))
            raise SearchServiceError(f"User search failed: {str(e)}") from e

    @staticmethod
    def search_locations(
        db: Session,
        query: str,
        limit: int,
        category: Optional[str] = None,
        price_range: Optional[PriceRange] = None,
        origin: Optional[Coordinates] = None,
        radius_km: float = settings.SEARCH_DEFAULT_RADIUS_KM,
        saved_ids: AbstractSet[str] = frozenset(),
        subscribed_ids: AbstractSet[str] = frozenset(),
    ) -> List[FormattedLocation]:
        """
        Search published locations through the location query pipeline.

        With an origin, results are limited to ``radius_km`` and ordered
        nearest first; otherwise newest first.
        """
        location_query = LocationQuery(
            page=1,
            limit=limit,
            search=query,
            category=category,
            price_range=price_range,
            latitude=origin.latitude if origin else None,
            longitude=origin.longitude if origin else None,
            radius=radius_km,
            sort_by=LocationSortKey.DISTANCE if origin else LocationSortKey.CREATED_AT,
        )
        try:
            ranked = location_ranker.rank(db, location_query)
        except LocationStoreError as e:
            raise SearchServiceError(str(e)) from e

        return [format_location(doc, saved_ids, subscribed_ids) for doc in ranked.docs]

    @staticmethod
    def search_events(
        db: Session,
        query: str,
        limit: int,
        category: Optional[str] = None,
        event_type: Optional[str] = None,
        origin: Optional[Coordinates] = None,
        radius_km: float = settings.SEARCH_DEFAULT_RADIUS_KM,
    ) -> List[EventSearchResult]:
        """
        Search published events by title or description.

        With an origin, events are limited to those whose location lies
        within ``radius_km`` and are ordered nearest first.
        """
        try:
            events_query = db.query(Event).filter(
                Event.status == PUBLISHED,
                or_(_contains(Event.title, query), _contains(Event.description, query)),
            )
            if category:
                events_query = events_query.filter(func.lower(Event.category) == category.lower())
            if event_type:
                events_query = events_query.filter(
                    func.lower(Event.event_type) == event_type.lower()
                )
            events_query = events_query.order_by(Event.start_date.asc(), Event.id.asc())

            if origin is None:
                return [SearchService._format_event(e) for e in events_query.limit(limit).all()]

            candidates = events_query.limit(settings.GEO_CANDIDATE_LIMIT).all()
        except SQLAlchemyError as e:
            logger.error("Event search failed: %s", str(e))
            raise SearchServiceError(f"Event search failed: {str(e)}") from e

        nearby = []
        for event in candidates:
            if event.location is None:
                continue
            coords = extract_coordinates(to_document(event.location))
            if coords is None:
                continue
            distance = haversine_distance_km(
                *origin.as_tuple(), *coords
            )
            if distance <= radius_km:
                nearby.append((distance, event))

        nearby.sort(key=lambda pair: pair[0])
        return [SearchService._format_event(event, distance) for distance, event in nearby[:limit]]

    @staticmethod
    def search_posts(db: Session, query: str, limit: int) -> List[PostSearchResult]:
        """Search published posts by title, content or caption, newest first."""
        try:
            posts = (
                db.query(Post)
                .filter(
                    Post.status == PUBLISHED,
                    or_(
                        _contains(Post.title, query),
                        _contains(Post.content, query),
                        _contains(Post.caption, query),
                    ),
                )
                .order_by(Post.created_at.desc(), Post.id.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error("Post search failed: %s", str(e))
            raise SearchServiceError(f"Post search failed: {str(e)}") from e

        return [
            PostSearchResult(
                id=str(post.id),
                title=post.title,
                content=post.content,
                caption=post.caption,
                featured_image=post.featured_image_url,
                author=(
                    RelatedRef(
                        id=str(post.author.id), name=post.author.name or post.author.username
                    )
                    if post.author
                    else None
                ),
                location=(
                    RelatedRef(id=str(post.location.id), name=post.location.name)
                    if post.location
                    else None
                ),
                like_count=post.like_count or 0,
                comment_count=post.comment_count or 0,
                created_at=post.created_at,
            )
            for post in posts
        ]

    @staticmethod
    def suggest(db: Session, query: str, include_locations: bool) -> List[str]:
        """
        Build search suggestions for a partial query.

        Popular search terms containing the query come first, followed by
        matching location names when ``include_locations`` is set.
        """
        term = query.strip().lower()
        if not term:
            return []

        suggestions = [s for s in POPULAR_SEARCHES if term in s]

        if include_locations and len(term) >= settings.SEARCH_MIN_QUERY_LENGTH:
            where = {
                "and": [
                    {"status": {"equals": PUBLISHED}},
                    {"name": {"contains": term}},
                ]
            }
            try:
                page = location_service.find(db, where, sort="name", limit=LOCATION_SUGGESTIONS)
            except LocationStoreError as e:
                logger.warning("Failed to fetch location suggestions: %s", str(e))
            else:
                for doc in page.docs:
                    if doc["name"] not in suggestions:
                        suggestions.append(doc["name"])

        return suggestions[:MAX_SUGGESTIONS]

    @staticmethod
    def _format_event(event: Event, distance: Optional[float] = None) -> EventSearchResult:
        return EventSearchResult(
            id=str(event.id),
            title=event.title,
            slug=event.slug,
            description=event.description,
            start_date=event.start_date,
            end_date=event.end_date,
            featured_image=event.featured_image_url,
            category=event.category,
            event_type=event.event_type,
            location=(
                RelatedRef(id=str(event.location.id), name=event.location.name)
                if event.location
                else None
            ),
            organizer=(
                RelatedRef(
                    id=str(event.organizer.id),
                    name=event.organizer.name or event.organizer.username,
                )
                if event.organizer
                else None
            ),
            participant_count=event.participant_count or 0,
            max_participants=event.max_participants,
            is_matchmaking=bool(event.is_matchmaking),
            distance=round(distance, 2) if distance is not None else None,
        )


def search_timestamp() -> int:
    """Current time in epoch milliseconds."""
    return int(datetime.now().timestamp() * 1000)


# Singleton instance for dependency injection
search_service = SearchService()
