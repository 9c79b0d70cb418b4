import os
from functools import lru_cache

from dotenv import load_dotenv


load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class Settings:

    def __init__(self) -> None:
        self.mongodb_url = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
        self.mongodb_db = os.getenv("MONGODB_DB", "socialhub")
        self.redis_url = os.getenv("REDIS_URL") or None

        self.jwt_secret = os.getenv("JWT_SECRET", "change-me")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

        # "all" keeps the public fanout; "participants" restricts it to conversation members
        self.ws_broadcast_scope = os.getenv("WS_BROADCAST_SCOPE", "all").lower()
        self.ws_require_token = _flag("WS_REQUIRE_TOKEN")

        self.story_sweep_seconds = int(os.getenv("STORY_SWEEP_SECONDS", "300"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
