"""
Shared test data builders.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.security import create_access_token, hash_password
from app.models.category import Category
from app.models.location import Location
from app.models.user import User

# Boston Common, used as the caller's position in radius tests
BOSTON = (42.36, -71.06)

# One degree of latitude is about 111.19 km
KM_PER_DEGREE_LAT = 111.19

ALWAYS_OPEN = [
    {"day": day, "open": "00:00", "close": "23:59"}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
]
ALWAYS_CLOSED = [
    {"day": day, "closed": True}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
]


def north_of(origin, km: float) -> Dict[str, float]:
    """Coordinates ``km`` kilometers due north of ``origin``."""
    return {"latitude": origin[0] + km / KM_PER_DEGREE_LAT, "longitude": origin[1]}


def create_test_user(
    db: Session, username: str = "testuser", name: Optional[str] = None
) -> User:
    """Helper function to create a test user"""
    user = User(
        username=username,
        hashed_password=hash_password("testpassword"),
        name=name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_auth_header(user_id: int) -> dict:
    """Helper function to generate authorization header with token"""
    token = create_access_token(subject=user_id)
    return {"Authorization": f"Bearer {token}"}


def create_category(db: Session, name: str, slug: str, color: Optional[str] = None) -> Category:
    category = Category(name=name, slug=slug, color=color)
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


def create_location(
    db: Session,
    name: str,
    categories: Optional[List[Category]] = None,
    **fields: Any,
) -> Location:
    """Helper function to create a published location"""
    fields.setdefault("status", "published")
    location = Location(name=name, **fields)
    if categories:
        location.categories.extend(categories)
    db.add(location)
    db.commit()
    db.refresh(location)
    return location
