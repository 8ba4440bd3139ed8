"""
Location store service.

Runs location queries against the database and hands results back as plain
document dicts, the shape the ranker and formatter work with.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.location import Location
from app.services.location_query_builder import PUBLISHED

logger = logging.getLogger(__name__)


class LocationStoreError(Exception):
    """Raised when the location store cannot be queried."""


@dataclass
class LocationPage:
    """One page of store results."""

    docs: List[Dict[str, Any]] = field(default_factory=list)
    total_docs: int = 0
    page: int = 1
    limit: int = 0


FILTER_COLUMNS = {
    "id": Location.id,
    "status": Location.status,
    "name": Location.name,
    "description": Location.description,
    "short_description": Location.short_description,
    "price_range": Location.price_range,
    "average_rating": Location.average_rating,
    "created_by": Location.created_by_id,
}

SORT_COLUMNS = {
    "name": Location.name,
    "average_rating": Location.average_rating,
    "review_count": Location.review_count,
    "created_at": Location.created_at,
}


def _contains(column, value):
    return func.lower(column).contains(str(value).lower(), autoescape=True)


OPERATORS: Dict[str, Callable] = {
    "equals": lambda column, value: column == value,
    "contains": _contains,
    "greater_than_equal": lambda column, value: column >= value,
    "in": lambda column, value: column.in_(list(value)),
}


def _category_matches(value: Any):
    ref = str(value).strip()
    if ref.isdigit():
        return Location.categories.any(Category.id == int(ref))
    ref = ref.lower()
    return Location.categories.any(or_(Category.slug == ref, func.lower(Category.name) == ref))


def compile_where(where: Dict[str, Any]):
    """
    Compile a predicate dict into a SQLAlchemy boolean expression.

    Raises:
        ValueError: If the predicate uses an unknown field or operator
    """
    if "and" in where:
        return and_(*[compile_where(clause) for clause in where["and"]])
    if "or" in where:
        return or_(*[compile_where(clause) for clause in where["or"]])

    if len(where) != 1:
        raise ValueError(f"Predicate must name exactly one field: {where}")
    field_name, condition = next(iter(where.items()))

    expressions = []
    for operator, value in condition.items():
        if field_name == "categories":
            if operator not in ("contains", "equals"):
                raise ValueError(f"Unsupported operator for categories: {operator}")
            expressions.append(_category_matches(value))
            continue

        column = FILTER_COLUMNS.get(field_name)
        if column is None:
            raise ValueError(f"Unknown location field: {field_name}")
        op = OPERATORS.get(operator)
        if op is None:
            raise ValueError(f"Unknown operator: {operator}")
        expressions.append(op(column, value))

    return and_(*expressions)


def compile_sort(sort: str) -> list:
    descending = sort.startswith("-")
    name = sort.lstrip("-")
    column = SORT_COLUMNS.get(name)
    if column is None:
        raise ValueError(f"Unknown sort field: {name}")
    # Stable tie-breaker so offsets never skip or repeat rows
    return [column.desc() if descending else column.asc(), Location.id.asc()]


def to_document(location: Location) -> Dict[str, Any]:
    """Convert a Location row into a document dict with its stored shapes intact."""
    return {
        "id": location.id,
        "name": location.name,
        "slug": location.slug,
        "description": location.description,
        "short_description": location.short_description,
        "status": location.status,
        "latitude": location.latitude,
        "longitude": location.longitude,
        "coordinates": location.coordinates,
        "address": location.address,
        "featured_image": location.featured_image,
        "image_url": location.image_url,
        "gallery": location.gallery,
        "categories": [
            {"id": c.id, "name": c.name, "slug": c.slug, "color": c.color}
            for c in location.categories
        ],
        "price_range": location.price_range,
        "average_rating": location.average_rating,
        "review_count": location.review_count,
        "visit_count": location.visit_count,
        "business_hours": location.business_hours,
        "contact_info": location.contact_info,
        "is_verified": location.is_verified,
        "is_featured": location.is_featured,
        "created_by": location.created_by_id,
        "created_at": location.created_at,
        "updated_at": location.updated_at,
    }


class LocationService:
    """Service for reading locations from the database."""

    @staticmethod
    def find(
        db: Session,
        where: Dict[str, Any],
        sort: str = "-created_at",
        limit: int = 20,
        page: int = 1,
    ) -> LocationPage:
        """
        Find locations matching a predicate.

        Args:
            db: Database session
            where: Predicate built by ``location_query_builder``
            sort: Sort field, ``-`` prefix for descending
            limit: Page size
            page: 1-based page number

        Returns:
            LocationPage with the page's documents and the total match count

        Raises:
            LocationStoreError: If the database query fails
        """
        criteria = compile_where(where)
        order_by = compile_sort(sort)

        offset = (page - 1) * limit
        try:
            query = db.query(Location).filter(criteria)
            total = query.count()
            # Pages past the end never reach the driver, whose integers are bounded
            if offset >= total:
                rows = []
            else:
                rows = query.order_by(*order_by).offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            logger.error("Location query failed: %s", str(e))
            raise LocationStoreError(f"Location query failed: {str(e)}") from e

        return LocationPage(
            docs=[to_document(row) for row in rows],
            total_docs=total,
            page=page,
            limit=limit,
        )

    @staticmethod
    def get_published(db: Session, location_id: int) -> Optional[Dict[str, Any]]:
        """
        Get a single published location document by ID.

        Raises:
            LocationStoreError: If the database query fails
        """
        try:
            location = (
                db.query(Location)
                .filter(Location.id == location_id, Location.status == PUBLISHED)
                .first()
            )
        except SQLAlchemyError as e:
            logger.error("Location lookup failed: %s", str(e))
            raise LocationStoreError(f"Location lookup failed: {str(e)}") from e
        return to_document(location) if location else None


# Create a singleton instance
location_service = LocationService()
