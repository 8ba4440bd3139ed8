"""
User service for handling user-related business logic.
"""

import logging
from typing import Optional, Set, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.location import Location
from app.models.user import User, location_subscriptions, saved_locations, user_follows
from app.schemas.location import InteractionAction
from app.schemas.user import UserCreate
from app.services.location_query_builder import PUBLISHED

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Raised when a user update cannot be written."""


class UserService:
    """Service for handling user operations."""

    @staticmethod
    def get_user_by_username(db: Session, username: str) -> Optional[User]:
        """
        Get a user by username.

        Args:
            db: Database session
            username: Username to search for

        Returns:
            User object if found, None otherwise
        """
        return db.query(User).filter(User.username == username).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        """
        Get a user by ID.

        Args:
            db: Database session
            user_id: User ID to search for

        Returns:
            User object if found, None otherwise
        """
        return db.query(User).filter(User.id == user_id).first()

    @classmethod
    def create_user(cls, db: Session, user_in: UserCreate, hashed_password: str) -> User:
        """
        Create a new user in the database.

        Args:
            db: Database session
            user_in: User creation data
            hashed_password: Pre-hashed password for the user

        Returns:
            Created User object

        Raises:
            BadRequestError: If user already exists or validation fails
        """
        if cls.get_user_by_username(db, user_in.username):
            raise BadRequestError("A user with this username already exists")

        if len(user_in.username) < 3:
            raise BadRequestError("Username must be at least 3 characters")

        if len(user_in.password) < 8:
            raise BadRequestError("Password must be at least 8 characters")

        user = User(
            username=user_in.username,
            hashed_password=hashed_password,
            name=user_in.name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        return user

    @staticmethod
    def get_location_interaction_ids(db: Session, user_id: int) -> Tuple[Set[str], Set[str]]:
        """
        Get the IDs of locations a user has saved and subscribed to.

        IDs are returned as strings to match formatted location IDs.

        Returns:
            Tuple of (saved location IDs, subscribed location IDs)
        """
        saved = db.execute(
            select(saved_locations.c.location_id).where(saved_locations.c.user_id == user_id)
        ).scalars()
        subscribed = db.execute(
            select(location_subscriptions.c.location_id).where(
                location_subscriptions.c.user_id == user_id
            )
        ).scalars()
        return {str(i) for i in saved}, {str(i) for i in subscribed}

    @staticmethod
    def get_following_ids(db: Session, user_id: int) -> Set[str]:
        """Get the IDs (as strings) of users the given user follows."""
        rows = db.execute(
            select(user_follows.c.followed_id).where(user_follows.c.follower_id == user_id)
        ).scalars()
        return {str(i) for i in rows}

    @staticmethod
    def apply_location_interaction(
        db: Session, user: User, location_id: int, action: InteractionAction
    ) -> Tuple[bool, bool]:
        """
        Save, unsave, subscribe to or unsubscribe from a location.

        Repeating an action is a no-op. A save or subscribe that loses a race
        with an identical concurrent request still succeeds.

        Returns:
            Tuple of (is_saved, is_subscribed) after the change

        Raises:
            NotFoundError: If the location does not exist or is not published
            UserServiceError: If the database update fails
        """
        try:
            location = (
                db.query(Location)
                .filter(Location.id == location_id, Location.status == PUBLISHED)
                .first()
            )
            if not location:
                raise NotFoundError("Location not found")

            if action == InteractionAction.SAVE and location not in user.saved_locations:
                user.saved_locations.append(location)
            elif action == InteractionAction.UNSAVE and location in user.saved_locations:
                user.saved_locations.remove(location)
            elif (
                action == InteractionAction.SUBSCRIBE
                and location not in user.subscribed_locations
            ):
                user.subscribed_locations.append(location)
            elif action == InteractionAction.UNSUBSCRIBE and location in user.subscribed_locations:
                user.subscribed_locations.remove(location)

            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.info(
                    "Duplicate %s for location %s by user %s", action.value, location_id, user.id
                )

            return location in user.saved_locations, location in user.subscribed_locations

        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Location interaction failed: %s", str(e))
            raise UserServiceError(f"Location interaction failed: {str(e)}") from e


# Create a singleton instance
user_service = UserService()
