import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ServerError
from app.db.database import get_db
from app.models.user import User
from app.schemas.location import FormattedLocation
from app.schemas.user import UserResponse
from app.services.auth_service import auth_service
from app.services.location_formatter import format_location
from app.services.location_query_builder import PUBLISHED
from app.services.location_service import to_document
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def read_current_user(
    current_user: User = Depends(auth_service.get_current_user),
) -> Any:
    """
    Get current user.
    """
    return current_user


@router.get("/me/saved-locations", response_model=list[FormattedLocation])
async def read_saved_locations(
    current_user: User = Depends(auth_service.get_current_user),
    db: Session = Depends(get_db),
) -> Any:
    """
    Get the published locations the current user has saved.
    """
    try:
        _, subscribed_ids = user_service.get_location_interaction_ids(db, int(current_user.id))
    except SQLAlchemyError as e:
        # Subscribed flags are optional; the listing itself still works
        logger.warning(
            "Failed to fetch subscriptions for user %s: %s", current_user.id, str(e)
        )
        db.rollback()
        subscribed_ids = set()

    try:
        saved = sorted(
            (loc for loc in current_user.saved_locations if loc.status == PUBLISHED),
            key=lambda loc: loc.name.lower(),
        )
        return [
            format_location(to_document(loc), {str(loc.id)}, subscribed_ids) for loc in saved
        ]
    except SQLAlchemyError as e:
        logger.error("Failed to fetch saved locations for user %s: %s", current_user.id, str(e))
        raise ServerError("Failed to fetch saved locations") from e
