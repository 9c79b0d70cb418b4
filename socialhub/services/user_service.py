import logging
from typing import Any, Dict, List, Optional

from socialhub.errors import InvalidRequestError, NotFoundError
from socialhub.models.user import UserDocument
from socialhub.repositories.user_repository import UserRepository
from socialhub.utils.security import hash_password, verify_password


logger = logging.getLogger(__name__)


class UserService:
    """Registration, login and profile operations for users."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    async def register_user(self, username: str, email: str, password: str, display_name: Optional[str]) -> UserDocument:
        """
        Register a new account.
        - username and email must both be unused
        - the password is stored as a bcrypt hash
        """
        if await self.user_repository.get_user_by_username(username):
            raise InvalidRequestError("Username already exists")
        if await self.user_repository.get_user_by_email(email):
            raise InvalidRequestError("Email already registered")

        user = await self.user_repository.create_user(
            username=username,
            email=email,
            hashed_password=hash_password(password),
            display_name=display_name or username,
        )
        logger.info("Registered user %s (%s)", user["_id"], username)
        return user

    async def authenticate_user(self, username: str, password: str) -> Optional[UserDocument]:
        """Return the user when the credentials match an active, unbanned account."""
        user = await self.user_repository.get_user_by_username(username)
        if not user:
            return None
        if not verify_password(password, user.get("hashed_password", "")):
            return None
        if not user.get("is_active", True) or user.get("is_banned"):
            return None
        return user

    async def get_profile(self, user_id: int) -> UserDocument:
        user = await self.user_repository.get_user_by_id(user_id)
        if not user or not user.get("is_active", True):
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: int, updates: Dict[str, Any]) -> UserDocument:
        allowed = {k: v for k, v in updates.items() if k in ("display_name", "bio", "avatar")}
        return await self.user_repository.update_user(user_id, allowed)

    async def search(self, query: str) -> List[UserDocument]:
        query = query.strip()
        if not query:
            return []
        return await self.user_repository.search(query)
