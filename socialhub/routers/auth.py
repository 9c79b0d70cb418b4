from fastapi import APIRouter, Depends, HTTPException, status

from socialhub.database.connection import mongo_db_dependency
from socialhub.repositories.user_repository import UserRepository
from socialhub.schemas.user import LoginRequest, Token, UserCreate, UserPrivate, UserUpdate
from socialhub.services.user_service import UserService
from socialhub.utils.dependencies import get_current_user
from socialhub.utils.security import create_access_token


router = APIRouter(prefix="/api", tags=["auth"])


def get_user_service(db=Depends(mongo_db_dependency)) -> UserService:
    return UserService(UserRepository(db))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(body: UserCreate, service: UserService = Depends(get_user_service)):
    user = await service.register_user(body.username, body.email, body.password, body.display_name)
    return Token(access_token=create_access_token(user["_id"]), user=UserPrivate.model_validate(user))


@router.post("/login", response_model=Token)
async def login(body: LoginRequest, service: UserService = Depends(get_user_service)):
    user = await service.authenticate_user(body.username, body.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    return Token(access_token=create_access_token(user["_id"]), user=UserPrivate.model_validate(user))


@router.get("/user", response_model=UserPrivate)
async def me(current_user: dict = Depends(get_current_user)):
    return current_user


@router.patch("/user", response_model=UserPrivate)
async def update_me(body: UserUpdate, current_user: dict = Depends(get_current_user), service: UserService = Depends(get_user_service)):
    return await service.update_profile(current_user["_id"], body.model_dump(exclude_unset=True))
