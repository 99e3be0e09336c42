"""
Business logic for users.

``UserService`` creates, authenticates, looks up, updates and deletes
user records identified by their unique username.  Records live in an
injected ``DocumentCollection``; password storage and comparison are
delegated to an injected ``CredentialVerifier``.

Every method returns a ``SafeUser`` (never the password) or raises a
``ServiceError``.  Store failures are translated here and never reach
the endpoints as raw store exceptions.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core.errors import (
    InvalidCredentialsError,
    NotFoundError,
    PersistenceError,
    UsernameExistsError,
)
from ..core.security import CredentialVerifier, PlainTextVerifier
from ..core.store import DocumentCollection, DuplicateKeyError, StoreError
from ..schemas.user import SafeUser, UserCredentials


logger = logging.getLogger(__name__)

# Fields a caller may change through ``update_user``.
UPDATABLE_FIELDS = ("username", "password")


class UserService:
    """Service for user accounts."""

    def __init__(self, users: DocumentCollection, verifier: Optional[CredentialVerifier] = None) -> None:
        self.users = users
        self.verifier = verifier or PlainTextVerifier()

    async def create_user(self, credentials: UserCredentials) -> SafeUser:
        """Register a new user.

        The username is probed first so a duplicate is reported without
        attempting the insert; the store's unique index covers signups
        racing past the probe.  ``dateJoined`` is always set to now.
        """
        logger.info("Registering user %s", credentials.username)
        try:
            existing = await self.users.find_one({"username": credentials.username})
        except StoreError as exc:
            logger.error("Username lookup failed for %s: %s", credentials.username, exc)
            raise PersistenceError("Failed to save user") from exc
        if existing:
            raise UsernameExistsError()

        try:
            created = await self.users.create(
                {
                    "username": credentials.username,
                    "password": self.verifier.hash(credentials.password),
                    "dateJoined": datetime.now(timezone.utc),
                }
            )
        except DuplicateKeyError as exc:
            raise UsernameExistsError() from exc
        except StoreError as exc:
            logger.error("Failed to save user %s: %s", credentials.username, exc)
            raise PersistenceError("Failed to save user") from exc
        return SafeUser.model_validate(created)

    async def get_user_by_username(self, username: str) -> SafeUser:
        """Retrieve a user by username."""
        try:
            user = await self.users.find_one({"username": username})
        except StoreError as exc:
            logger.error("Failed to get user %s: %s", username, exc)
            raise PersistenceError("Failed to get user") from exc
        if not user:
            raise NotFoundError()
        return SafeUser.model_validate(user)

    async def login_user(self, credentials: UserCredentials) -> SafeUser:
        """Authenticate a user by username and password.

        An unknown username and a wrong password raise the same
        ``InvalidCredentialsError`` so callers cannot tell which one
        failed.
        """
        try:
            user = await self.users.find_one({"username": credentials.username})
        except StoreError as exc:
            logger.error("Login lookup failed for %s: %s", credentials.username, exc)
            raise PersistenceError("Failed to login") from exc
        if not user or not self.verifier.verify(user.get("password"), credentials.password):
            raise InvalidCredentialsError()
        return SafeUser.model_validate(user)

    async def delete_user_by_username(self, username: str) -> SafeUser:
        """Delete a user and return the removed record."""
        try:
            user = await self.users.find_one_and_delete({"username": username})
        except StoreError as exc:
            logger.error("Failed to delete user %s: %s", username, exc)
            raise PersistenceError("Failed to delete user") from exc
        if not user:
            raise NotFoundError()
        logger.info("Deleted user %s", username)
        return SafeUser.model_validate(user)

    async def update_user(self, username: str, updates: Dict[str, Any]) -> SafeUser:
        """Apply ``updates`` to the user called ``username``.

        Any subset of ``username`` and ``password`` may be changed; other
        keys are ignored.  Values are not validated here, so an empty
        password is stored as given.
        """
        changes = {key: value for key, value in updates.items() if key in UPDATABLE_FIELDS}
        if "password" in changes:
            changes["password"] = self.verifier.hash(changes["password"])
        try:
            user = await self.users.find_one_and_update({"username": username}, changes)
        except StoreError as exc:
            logger.error("Failed to update user %s: %s", username, exc)
            raise PersistenceError("Failed to update user") from exc
        if not user:
            raise NotFoundError()
        logger.info("Updated user %s (%s)", username, ", ".join(sorted(changes)) or "no changes")
        return SafeUser.model_validate(user)
