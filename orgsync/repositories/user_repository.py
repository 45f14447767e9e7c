"""User persistence."""

import logging
from typing import Optional

from sqlalchemy import func

from orgsync.models.user import User
from orgsync.repositories.base_repo import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Upsert and lookup of users keyed by clerk_user_id."""

    model = User

    def get_by_clerk_id(self, clerk_user_id: str) -> Optional[User]:
        """
        Get user by Clerk user ID.

        Args:
            clerk_user_id: Clerk user ID

        Returns:
            User if found, None otherwise
        """
        return self.db_session.query(User).filter(
            User.clerk_user_id == clerk_user_id
        ).populate_existing().first()

    def upsert(
        self,
        clerk_user_id: str,
        email: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> User:
        """
        Insert a user or overwrite the profile fields of the existing one.

        A single INSERT ... ON CONFLICT (clerk_user_id) DO UPDATE statement;
        replaying the same event leaves exactly one row holding the latest
        values.

        Returns:
            The stored User
        """
        stmt = self._insert().values(
            clerk_user_id=clerk_user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            avatar_url=avatar_url,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["clerk_user_id"],
            set_={
                "email": stmt.excluded.email,
                "first_name": stmt.excluded.first_name,
                "last_name": stmt.excluded.last_name,
                "avatar_url": stmt.excluded.avatar_url,
                "updated_at": func.now(),
            },
        )
        self.db_session.execute(stmt)

        user = self.get_by_clerk_id(clerk_user_id)
        logger.debug(
            "Upserted user",
            extra={"clerk_user_id": clerk_user_id, "user_id": user.id},
        )
        return user
