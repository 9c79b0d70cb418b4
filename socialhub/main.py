import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from socialhub.config import get_settings
from socialhub.database.connection import close_mongo_connection, connect_to_mongo, get_database
from socialhub.errors import ForbiddenError, InvalidRequestError, NotFoundError
from socialhub.logging_config import setup_logging
from socialhub.repositories.conversation_repository import ConversationRepository
from socialhub.repositories.follow_repository import FollowRepository
from socialhub.repositories.like_repository import LikeRepository
from socialhub.repositories.message_repository import MessageRepository
from socialhub.repositories.post_repository import PostRepository
from socialhub.repositories.product_repository import ProductRepository
from socialhub.repositories.story_repository import StoryRepository
from socialhub.repositories.user_repository import UserRepository
from socialhub.routers.auth import router as auth_router
from socialhub.routers.chat import router as chat_router
from socialhub.routers.conversations import router as conversations_router
from socialhub.routers.posts import router as posts_router
from socialhub.routers.presence import router as presence_router
from socialhub.routers.products import router as products_router
from socialhub.routers.search import router as search_router
from socialhub.routers.stories import router as stories_router
from socialhub.routers.users import router as users_router
from socialhub.routers.wallet import router as wallet_router
from socialhub.services.story_service import sweep_expired_stories
from socialhub.utils.realtime_bus import BROADCAST_CHANNEL, build_bus
from socialhub.utils.websocket_manager import ConnectionRegistry


logger = logging.getLogger(__name__)


async def ensure_indexes(db) -> None:
    for repo in (
        UserRepository(db),
        PostRepository(db),
        FollowRepository(db),
        LikeRepository(db),
        StoryRepository(db),
        ConversationRepository(db),
        MessageRepository(db),
        ProductRepository(db),
    ):
        await repo.ensure_indexes()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    registry: ConnectionRegistry = app.state.registry

    await connect_to_mongo()
    db = get_database()
    await ensure_indexes(db)

    tasks = [asyncio.create_task(sweep_expired_stories(StoryRepository(db), settings.story_sweep_seconds))]
    subscription = None
    if getattr(registry.bus, "enabled", False):
        subscription = await registry.bus.subscribe(BROADCAST_CHANNEL, registry.deliver_from_bus)
        tasks.append(asyncio.create_task(subscription.run()))
    logger.info("SocialHub started (broadcast scope: %s)", settings.ws_broadcast_scope)
    try:
        yield
    finally:
        if subscription is not None:
            await subscription.cancel()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await registry.bus.close()
        await close_mongo_connection()


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc) or exc.__class__.__name__})


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="SocialHub API", lifespan=lifespan)
    app.state.registry = ConnectionRegistry(bus=build_bus(settings.redis_url))

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(ForbiddenError)
    async def forbidden(request: Request, exc: ForbiddenError):
        return _error(status.HTTP_403_FORBIDDEN, exc)

    @app.exception_handler(InvalidRequestError)
    async def bad_request(request: Request, exc: InvalidRequestError):
        return _error(status.HTTP_400_BAD_REQUEST, exc)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(posts_router)
    app.include_router(stories_router)
    app.include_router(conversations_router)
    app.include_router(chat_router)
    app.include_router(products_router)
    app.include_router(search_router)
    app.include_router(wallet_router)
    app.include_router(presence_router)

    @app.get("/")
    async def root():
        db = get_database()
        collections = await db.list_collection_names()
        return {"message": "SocialHub API", "collections": collections, "liveSockets": len(app.state.registry)}

    return app


app = create_app()
