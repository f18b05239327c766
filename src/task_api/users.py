from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from .repositories import DocumentRepository
from .schemas import UserProfile

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class UserDirectory:
    """
    Read access to user profiles, used to check that assignees exist and to
    pick a task's default timezone. Accounts themselves are managed by the
    authentication service; ``register`` only mirrors a profile locally.
    """

    def __init__(self, repository: DocumentRepository) -> None:
        self._repository = repository

    def get(self, user_id: str) -> Optional[UserProfile]:
        doc = self._repository.find_one({"id": user_id})
        if doc is None:
            return None
        try:
            return UserProfile.model_validate(doc)
        except ValidationError:
            logger.warning("Ignoring malformed user profile id=%s", user_id)
            return None

    def exists(self, user_id: str) -> bool:
        return self._repository.count({"id": user_id}) > 0

    def register(self, profile: UserProfile) -> UserProfile:
        """Insert the profile, or overwrite the stored one with the same id."""
        doc = profile.model_dump(mode="json")
        if not self._repository.update_one({"id": profile.id}, doc):
            self._repository.insert(doc)
            logger.info("Registered user profile id=%s role=%s", profile.id, profile.role.value)
        return profile
