from typing import List

from fastapi import APIRouter, Depends

from socialhub.routers.auth import get_user_service
from socialhub.routers.posts import get_post_service
from socialhub.schemas.post import PostPublic
from socialhub.schemas.user import UserPublic
from socialhub.services.post_service import PostService
from socialhub.services.user_service import UserService


router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("/users", response_model=List[UserPublic])
async def search_users(q: str = "", service: UserService = Depends(get_user_service)):
    return await service.search(q)


@router.get("/posts", response_model=List[PostPublic])
async def search_posts(q: str = "", service: PostService = Depends(get_post_service)):
    return await service.search(q)
