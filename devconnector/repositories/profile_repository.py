"""Profile repository."""

from sqlalchemy.orm import joinedload

from devconnector.models import Profile

from .base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile operations."""

    model = Profile

    def get_by_user_id(self, user_id: int, with_owner: bool = False) -> Profile | None:
        """Get profile by owner ID, optionally eager-loading the owner's display fields."""
        query = self.session.query(Profile).filter(Profile.user_id == user_id)
        if with_owner:
            query = query.options(joinedload(Profile.user))
        return query.first()

    def get_all_with_owners(self) -> list[Profile]:
        """Every profile, oldest first, with owners eager-loaded."""
        return (
            self.session.query(Profile)
            .options(joinedload(Profile.user))
            .order_by(Profile.id)
            .all()
        )

    def insert(self, profile: Profile) -> Profile:
        """
        Stage a new profile.

        A concurrent insert for the same owner fails on the unique
        ``user_id`` constraint when flushed or committed.
        """
        return self.add(profile)

    def replace(self, profile: Profile) -> Profile:
        """
        Flush pending changes to an existing profile.

        The UPDATE is conditional on the loaded ``version``; a concurrent
        writer that committed first makes this raise ``StaleDataError``.
        """
        self.session.flush()
        return profile

    def delete_by_owner(self, user_id: int) -> bool:
        """Delete the owner's profile. Returns False when there was none."""
        profile = self.get_by_user_id(user_id)
        if profile is None:
            return False
        self.session.delete(profile)
        self.session.flush()
        return True

