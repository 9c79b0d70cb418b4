from typing import List

from fastapi import APIRouter, Depends

from socialhub.database.connection import mongo_db_dependency
from socialhub.repositories.follow_repository import FollowRepository
from socialhub.repositories.product_repository import ProductRepository
from socialhub.repositories.user_repository import UserRepository
from socialhub.routers.auth import get_user_service
from socialhub.schemas.market import ProductPublic
from socialhub.schemas.post import FollowResult
from socialhub.schemas.user import UserPublic, UserSummary
from socialhub.services.follow_service import FollowService
from socialhub.services.market_service import ProductService
from socialhub.services.user_service import UserService
from socialhub.utils.dependencies import get_current_user


router = APIRouter(prefix="/api/users", tags=["users"])


def get_follow_service(db=Depends(mongo_db_dependency)) -> FollowService:
    return FollowService(FollowRepository(db), UserRepository(db))


@router.get("/{user_id}", response_model=UserPublic)
async def get_profile(user_id: int, service: UserService = Depends(get_user_service)):
    return await service.get_profile(user_id)


@router.post("/{user_id}/follow", response_model=FollowResult)
async def toggle_follow(user_id: int, current_user: dict = Depends(get_current_user), service: FollowService = Depends(get_follow_service)):
    following = await service.toggle_follow(current_user["_id"], user_id)
    return {"following": following}


@router.get("/{user_id}/followers", response_model=List[UserSummary])
async def followers(user_id: int, service: FollowService = Depends(get_follow_service)):
    return await service.get_followers(user_id)


@router.get("/{user_id}/following", response_model=List[UserSummary])
async def following(user_id: int, service: FollowService = Depends(get_follow_service)):
    return await service.get_following(user_id)


@router.get("/{user_id}/products", response_model=List[ProductPublic])
async def seller_products(user_id: int, db=Depends(mongo_db_dependency)):
    return await ProductService(ProductRepository(db)).seller_products(user_id)
