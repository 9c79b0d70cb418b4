from typing import List, Optional

from socialhub.errors import ForbiddenError, NotFoundError
from socialhub.models.post import CommentDocument, PostDocument
from socialhub.repositories.like_repository import LikeRepository
from socialhub.repositories.post_repository import CommentRepository, PostRepository
from socialhub.repositories.user_repository import UserRepository


class PostService:

    def __init__(
        self,
        post_repo: PostRepository,
        comment_repo: CommentRepository,
        like_repo: LikeRepository,
        user_repo: UserRepository,
    ) -> None:
        self._posts = post_repo
        self._comments = comment_repo
        self._likes = like_repo
        self._users = user_repo

    async def create_post(self, user_id: int, content: Optional[str], media_url: Optional[str], media_type: Optional[str]) -> PostDocument:
        post = await self._posts.create_post(user_id, content, media_url, media_type)
        await self._users.increment(user_id, "posts_count", 1)
        return post

    async def feed(self, user_id: int, limit: int = 20, offset: int = 0) -> List[PostDocument]:
        # global feed of active posts, newest first
        return await self._posts.list_active(limit=limit, offset=offset)

    async def user_posts(self, user_id: int, limit: int = 20, offset: int = 0) -> List[PostDocument]:
        return await self._posts.list_active(limit=limit, offset=offset, user_id=user_id)

    async def delete_post(self, post_id: int, user_id: int) -> None:
        post = await self._posts.get_post(post_id)
        if not post:
            raise NotFoundError("Post not found")
        if post["user_id"] != user_id:
            raise ForbiddenError("Only the author can delete this post")
        if await self._posts.deactivate(post_id):
            await self._users.increment(user_id, "posts_count", -1)

    async def toggle_post_like(self, user_id: int, post_id: int) -> bool:
        if not await self._posts.get_post(post_id):
            raise NotFoundError("Post not found")
        existing = await self._likes.get_like(user_id, post_id=post_id)
        if existing:
            if await self._likes.delete_like(existing["_id"]):
                await self._posts.increment(post_id, "likes_count", -1)
            return False
        await self._likes.create_like(user_id, post_id=post_id)
        await self._posts.increment(post_id, "likes_count", 1)
        return True

    async def toggle_comment_like(self, user_id: int, comment_id: int) -> bool:
        if not await self._comments.get_comment(comment_id):
            raise NotFoundError("Comment not found")
        existing = await self._likes.get_like(user_id, comment_id=comment_id)
        if existing:
            if await self._likes.delete_like(existing["_id"]):
                await self._comments.increment(comment_id, "likes_count", -1)
            return False
        await self._likes.create_like(user_id, comment_id=comment_id)
        await self._comments.increment(comment_id, "likes_count", 1)
        return True

    async def add_comment(self, user_id: int, post_id: int, content: str) -> CommentDocument:
        if not await self._posts.get_post(post_id):
            raise NotFoundError("Post not found")
        comment = await self._comments.create_comment(post_id, user_id, content.strip())
        await self._posts.increment(post_id, "comments_count", 1)
        return comment

    async def comments(self, post_id: int) -> List[CommentDocument]:
        return await self._comments.list_for_post(post_id)

    async def search(self, query: str) -> List[PostDocument]:
        query = query.strip()
        if not query:
            return []
        return await self._posts.search(query)
