"""
Authentication service for handling password hashing, verification, and token generation.
"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import AuthRequiredError
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    oauth2_scheme,
    verify_password,
)
from app.db.database import get_db
from app.models.user import User
from app.schemas.token import TokenPayload
from app.services.user_service import user_service

logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling authentication operations."""

    @staticmethod
    def get_password_hash(password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password to hash

        Returns:
            Hashed password string
        """
        return hash_password(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Previously hashed password to check against

        Returns:
            True if password matches, False otherwise
        """
        return verify_password(plain_password, hashed_password)

    @staticmethod
    def generate_access_token(user_id: int) -> str:
        """
        Generate an access token for a user.

        Args:
            user_id: The ID of the user to generate token for

        Returns:
            JWT access token string
        """
        access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        return create_access_token(subject=user_id, expires_delta=access_token_expires)

    @staticmethod
    def authenticate_user(db: Session, username: str, password: str) -> Optional[User]:
        """
        Authenticate a user by username and password.

        Args:
            db: Database session
            username: Username to authenticate
            password: Plain text password to verify

        Returns:
            User object if authentication successful, None otherwise
        """
        user = user_service.get_user_by_username(db, username)
        if not user:
            return None
        if not AuthService.verify_password(password, str(user.hashed_password)):
            return None
        return user

    @staticmethod
    def resolve_user(db: Session, token: Optional[str]) -> Optional[User]:
        """
        Resolve a bearer token to a user.

        Returns:
            The token's user, or None if the token is missing, invalid,
            expired or refers to an unknown user
        """
        if not token:
            return None
        try:
            token_data = TokenPayload(**decode_access_token(token))
            user_id = int(token_data.sub or "")
        except (JWTError, ValidationError, ValueError):
            logger.info("Ignoring invalid access token")
            return None
        return user_service.get_user_by_id(db, user_id)

    @staticmethod
    def get_current_user(
        db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)
    ) -> User:
        """
        Decode JWT token and return the current user.

        Raises:
            AuthRequiredError: If no valid token is provided
        """
        user = AuthService.resolve_user(db, token)
        if user is None:
            raise AuthRequiredError("Authentication required")
        return user

    @staticmethod
    def get_current_user_optional(
        db: Session = Depends(get_db), token: Optional[str] = Depends(oauth2_scheme)
    ) -> Optional[User]:
        """
        Return the current user if a valid token is provided.

        Anonymous access is allowed: a missing or invalid token yields None.
        """
        return AuthService.resolve_user(db, token)


# Create a singleton instance
auth_service = AuthService()
