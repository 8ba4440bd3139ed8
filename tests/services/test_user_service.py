"""
Unit tests for the user service.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, NotFoundError
from app.schemas.location import InteractionAction
from app.schemas.user import UserCreate
from app.services.user_service import UserServiceError, user_service
from tests.helpers import create_location, create_test_user


def test_create_user(db: Session):
    """Test creating a user."""
    user = user_service.create_user(
        db, UserCreate(username="newuser", password="longenough"), "hashed"
    )

    assert user.id is not None
    assert user_service.get_user_by_username(db, "newuser").id == user.id


@pytest.mark.parametrize(
    "username, password",
    [("ab", "longenough"), ("validname", "short")],
)
def test_create_user_validation(db: Session, username, password):
    """Test username and password length rules."""
    with pytest.raises(BadRequestError):
        user_service.create_user(db, UserCreate(username=username, password=password), "hashed")


def test_create_duplicate_user(db: Session):
    """Test that usernames are unique."""
    create_test_user(db, "taken")

    with pytest.raises(BadRequestError, match="already exists"):
        user_service.create_user(
            db, UserCreate(username="taken", password="longenough"), "hashed"
        )


def test_save_and_subscribe_are_idempotent(db: Session):
    """Test that repeated interactions do not duplicate rows."""
    user = create_test_user(db)
    location = create_location(db, "Cafe")

    user_service.apply_location_interaction(db, user, location.id, InteractionAction.SAVE)
    user_service.apply_location_interaction(db, user, location.id, InteractionAction.SAVE)
    state = user_service.apply_location_interaction(
        db, user, location.id, InteractionAction.SUBSCRIBE
    )

    assert state == (True, True)
    assert user_service.get_location_interaction_ids(db, user.id) == (
        {str(location.id)},
        {str(location.id)},
    )


def test_unsave(db: Session):
    """Test removing a saved location."""
    user = create_test_user(db)
    location = create_location(db, "Cafe")
    user_service.apply_location_interaction(db, user, location.id, InteractionAction.SAVE)

    state = user_service.apply_location_interaction(db, user, location.id, InteractionAction.UNSAVE)

    assert state == (False, False)
    assert user_service.get_location_interaction_ids(db, user.id) == (set(), set())


def test_interaction_with_unpublished_location(db: Session):
    """Test that drafts cannot be saved."""
    user = create_test_user(db)
    draft = create_location(db, "Draft", status="draft")

    with pytest.raises(NotFoundError):
        user_service.apply_location_interaction(db, user, draft.id, InteractionAction.SAVE)


def test_following_ids(db: Session):
    """Test the followed-user lookup."""
    user = create_test_user(db, "follower")
    other = create_test_user(db, "followed")
    user.following.append(other)
    db.commit()

    assert user_service.get_following_ids(db, user.id) == {str(other.id)}


def test_interaction_commit_failure_rolls_back(db: Session):
    """Test that a failed write is rolled back and reported as a service error."""
    user = create_test_user(db)
    location = create_location(db, "Cafe")

    with patch.object(db, "commit", side_effect=OperationalError("UPDATE", {}, Exception("down"))):
        with pytest.raises(UserServiceError):
            user_service.apply_location_interaction(db, user, location.id, InteractionAction.SAVE)

    assert user_service.get_location_interaction_ids(db, user.id) == (set(), set())


def test_interaction_duplicate_write_reports_stored_state(db: Session):
    """Test that a save losing a unique-key race returns what is stored."""
    user = create_test_user(db)
    location = create_location(db, "Cafe")
    duplicate = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

    with patch.object(db, "commit", side_effect=duplicate):
        state = user_service.apply_location_interaction(
            db, user, location.id, InteractionAction.SAVE
        )

    assert state == (False, False)
