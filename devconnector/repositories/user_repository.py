"""User repository for authentication and account management."""

from datetime import datetime, timezone

from devconnector.logging import get_logger
from devconnector.models import TokenBlacklist, User

from .base import BaseRepository

logger = get_logger("repository.user")


class UserRepository(BaseRepository[User]):
    """Repository for User operations."""

    model = User

    def get_by_email(self, email: str) -> User | None:
        """Get user by email (case-insensitive)."""
        return self.session.query(User).filter(User.email == email.strip().lower()).first()

    def create(self, name: str, email: str, password_hash: str, avatar: str | None) -> User:
        """Create a new, inactive account."""
        user = User(
            name=name,
            email=email.strip().lower(),
            password=password_hash,
            avatar=avatar,
            is_active=False,
        )
        self.add(user)
        logger.info("user_created", user_id=user.id)
        return user

    def activate(self, user: User) -> User:
        """Mark an account as active."""
        user.is_active = True
        user.updated_at = datetime.now(timezone.utc)
        self.session.flush()
        return user


class TokenBlacklistRepository(BaseRepository[TokenBlacklist]):
    """Repository for managing blacklisted JWT tokens."""

    model = TokenBlacklist

    def is_blacklisted(self, token_jti: str) -> bool:
        """Check if a token JTI is blacklisted."""
        return self.exists_where(token_jti=token_jti)

    def blacklist_token(self, token_jti: str, expires_at: datetime) -> TokenBlacklist:
        """Add a token to the blacklist."""
        return self.add(TokenBlacklist(token_jti=token_jti, expires_at=expires_at))

    def cleanup_expired(self) -> int:
        """Remove expired tokens from blacklist."""
        result = (
            self.session.query(TokenBlacklist)
            .filter(TokenBlacklist.expires_at < datetime.now(timezone.utc))
            .delete()
        )
        self.session.flush()
        return result
