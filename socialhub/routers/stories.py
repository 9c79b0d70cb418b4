from typing import List

from fastapi import APIRouter, Depends, status

from socialhub.database.connection import mongo_db_dependency
from socialhub.repositories.story_repository import StoryRepository
from socialhub.schemas.post import StoryCreate, StoryPublic
from socialhub.services.story_service import StoryService
from socialhub.utils.dependencies import get_current_user


router = APIRouter(prefix="/api/stories", tags=["stories"])


def get_story_service(db=Depends(mongo_db_dependency)) -> StoryService:
    return StoryService(StoryRepository(db))


@router.post("", response_model=StoryPublic, status_code=status.HTTP_201_CREATED)
async def create_story(body: StoryCreate, current_user: dict = Depends(get_current_user), service: StoryService = Depends(get_story_service)):
    return await service.create_story(current_user["_id"], body.content, body.media_url, body.media_type, body.background_color)


@router.get("", response_model=List[StoryPublic])
async def active_stories(current_user: dict = Depends(get_current_user), service: StoryService = Depends(get_story_service)):
    return await service.active_stories()


@router.post("/{story_id}/view")
async def view_story(story_id: int, current_user: dict = Depends(get_current_user), service: StoryService = Depends(get_story_service)):
    recorded = await service.view_story(story_id, current_user["_id"])
    return {"recorded": recorded}
