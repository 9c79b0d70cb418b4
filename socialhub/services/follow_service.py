from typing import Any, Dict, List

from pymongo.errors import DuplicateKeyError

from socialhub.errors import InvalidRequestError, NotFoundError
from socialhub.repositories.follow_repository import FollowRepository
from socialhub.repositories.user_repository import UserRepository


class FollowService:

    def __init__(self, follow_repo: FollowRepository, user_repo: UserRepository):
        self.follow_repo = follow_repo
        self.user_repo = user_repo

    async def toggle_follow(self, follower_id: int, following_id: int) -> bool:
        """Follow or unfollow; returns the new state and keeps both users' counters in step."""
        if follower_id == following_id:
            raise InvalidRequestError("Cannot follow yourself")
        if not await self.user_repo.get_user_by_id(following_id):
            raise NotFoundError("User not found")

        existing = await self.follow_repo.get_follow(follower_id, following_id)
        if existing:
            if await self.follow_repo.delete_follow(existing["_id"]):
                await self.user_repo.increment(follower_id, "following_count", -1)
                await self.user_repo.increment(following_id, "followers_count", -1)
            return False

        try:
            await self.follow_repo.create_follow(follower_id, following_id)
        except DuplicateKeyError:
            # a concurrent toggle already created this edge and bumped the counters
            return True
        await self.user_repo.increment(follower_id, "following_count", 1)
        await self.user_repo.increment(following_id, "followers_count", 1)
        return True

    async def get_followers(self, user_id: int) -> List[Dict[str, Any]]:
        ids = await self.follow_repo.list_follower_ids(user_id)
        return await self.user_repo.get_summaries(ids)

    async def get_following(self, user_id: int) -> List[Dict[str, Any]]:
        ids = await self.follow_repo.list_following_ids(user_id)
        return await self.user_repo.get_summaries(ids)
