from typing import List

from fastapi import APIRouter, Depends, Query, status

from socialhub.database.connection import mongo_db_dependency
from socialhub.repositories.like_repository import LikeRepository
from socialhub.repositories.post_repository import CommentRepository, PostRepository
from socialhub.repositories.user_repository import UserRepository
from socialhub.schemas.post import CommentCreate, CommentPublic, LikeResult, PostCreate, PostPublic
from socialhub.services.post_service import PostService
from socialhub.utils.dependencies import get_current_user


router = APIRouter(prefix="/api", tags=["posts"])


def get_post_service(db=Depends(mongo_db_dependency)) -> PostService:
    return PostService(PostRepository(db), CommentRepository(db), LikeRepository(db), UserRepository(db))


@router.post("/posts", response_model=PostPublic, status_code=status.HTTP_201_CREATED)
async def create_post(body: PostCreate, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return await service.create_post(current_user["_id"], body.content, body.media_url, body.media_type)


@router.get("/posts/feed", response_model=List[PostPublic])
async def feed(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
):
    return await service.feed(current_user["_id"], limit=limit, offset=offset)


@router.get("/posts/user/{user_id}", response_model=List[PostPublic])
async def user_posts(user_id: int, limit: int = Query(20, ge=1, le=100), offset: int = Query(0, ge=0), service: PostService = Depends(get_post_service)):
    return await service.user_posts(user_id, limit=limit, offset=offset)


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    await service.delete_post(post_id, current_user["_id"])


@router.post("/posts/{post_id}/like", response_model=LikeResult)
async def like_post(post_id: int, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return {"liked": await service.toggle_post_like(current_user["_id"], post_id)}


@router.post("/posts/{post_id}/comments", response_model=CommentPublic, status_code=status.HTTP_201_CREATED)
async def add_comment(post_id: int, body: CommentCreate, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return await service.add_comment(current_user["_id"], post_id, body.content)


@router.get("/posts/{post_id}/comments", response_model=List[CommentPublic])
async def list_comments(post_id: int, service: PostService = Depends(get_post_service)):
    return await service.comments(post_id)


@router.post("/comments/{comment_id}/like", response_model=LikeResult)
async def like_comment(comment_id: int, current_user: dict = Depends(get_current_user), service: PostService = Depends(get_post_service)):
    return {"liked": await service.toggle_comment_like(current_user["_id"], comment_id)}
