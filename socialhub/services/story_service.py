import asyncio
import logging
from typing import List, Optional

from pymongo.errors import PyMongoError

from socialhub.errors import NotFoundError
from socialhub.models.story import StoryDocument
from socialhub.repositories.story_repository import StoryRepository


logger = logging.getLogger(__name__)


class StoryService:

    def __init__(self, story_repo: StoryRepository) -> None:
        self._stories = story_repo

    async def create_story(
        self,
        user_id: int,
        content: Optional[str],
        media_url: Optional[str],
        media_type: Optional[str],
        background_color: Optional[str],
    ) -> StoryDocument:
        return await self._stories.create_story(user_id, content, media_url, media_type, background_color)

    async def active_stories(self) -> List[StoryDocument]:
        return await self._stories.list_active()

    async def view_story(self, story_id: int, viewer_id: int) -> bool:
        story = await self._stories.get_active(story_id)
        if not story:
            raise NotFoundError("Story not found")
        # authors looking at their own story do not count
        if story["user_id"] == viewer_id:
            return False
        return await self._stories.record_view(story_id, viewer_id)


async def sweep_expired_stories(story_repo: StoryRepository, interval_seconds: float) -> None:
    """Deactivate expired stories forever, every `interval_seconds`; cancelled on shutdown."""
    while True:
        try:
            count = await story_repo.deactivate_expired()
            if count:
                logger.info("Deactivated %d expired stories", count)
        except PyMongoError:
            logger.exception("Story sweep failed")
        await asyncio.sleep(interval_seconds)
