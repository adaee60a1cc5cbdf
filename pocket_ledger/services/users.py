"""
User Service

The profile document at ``users/{uid}`` and account deletion.
"""

from typing import Any, Optional

from pocket_ledger.audit import AuditLogger
from pocket_ledger.auth import SessionContext
from pocket_ledger.ledger.purge import BulkPurge, PurgeReport
from pocket_ledger.models.ledger import UserProfile, UserSettings
from pocket_ledger.services.storage import (
    SERVER_TIMESTAMP,
    DocumentStoreInterface,
    NotFoundError,
    user_path,
)


class UserService:
    """Profile reads and edits for the signed-in user."""

    def __init__(
        self,
        store: DocumentStoreInterface,
        purge: Optional[BulkPurge] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._purge = purge or BulkPurge(store, audit_logger=audit_logger)

    async def create_profile(
        self,
        session: SessionContext,
        email: str,
        display_name: str = "",
    ) -> UserProfile:
        """Write a fresh profile, replacing any existing one."""
        user_id = session.require_user_id()
        profile = UserProfile(email=email, display_name=display_name)
        await self._write_new(user_id, profile)
        return profile

    async def fetch_profile(self, session: SessionContext) -> UserProfile:
        """
        Read the profile, creating a default one if none is stored yet.

        The default takes the email from the session.
        """
        user_id = session.require_user_id()
        data = await self._store.get_document(user_path(user_id))
        if data is not None:
            return UserProfile.from_document(data)

        profile = UserProfile(email=session.email or "")
        await self._write_new(user_id, profile)
        return profile

    async def update_profile(self, session: SessionContext, display_name: str) -> None:
        """
        Raises:
            NotFoundError: No profile is stored
        """
        user_id = session.require_user_id()
        await self._require_profile(user_id)
        await self._store.update_document(
            user_path(user_id),
            {"displayName": display_name.strip()},
        )

    async def update_settings(
        self,
        session: SessionContext,
        changes: dict[str, Any],
    ) -> UserSettings:
        """
        Change some of the user's settings; the others keep their values.

        Raises:
            NotFoundError: No profile is stored
            ValueError: An unknown setting was given
        """
        user_id = session.require_user_id()
        profile = UserProfile.from_document(await self._require_profile(user_id))

        unknown = set(changes) - set(UserSettings.model_fields)
        if unknown:
            raise ValueError(f"Unknown settings: {sorted(unknown)}")

        settings = UserSettings.model_validate({**profile.settings.model_dump(), **changes})
        await self._store.update_document(
            user_path(user_id),
            {"settings": UserProfile(settings=settings).to_document()["settings"]},
        )
        return settings

    async def delete_all_data(self, session: SessionContext) -> PurgeReport:
        """
        Remove every record the user owns, profile last.

        Raises:
            PurgeIncompleteError: Something was left behind; safe to retry
        """
        return await self._purge.purge_user(session)

    async def _require_profile(self, user_id: str) -> dict[str, Any]:
        data = await self._store.get_document(user_path(user_id))
        if data is None:
            raise NotFoundError(f"No profile for user {user_id}")
        return data

    async def _write_new(self, user_id: str, profile: UserProfile) -> None:
        document = profile.to_document()
        document["createdAt"] = SERVER_TIMESTAMP
        await self._store.set_document(user_path(user_id), document)
