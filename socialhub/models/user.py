from datetime import datetime
from typing import Optional, TypedDict


class UserDocument(TypedDict, total=False):

    _id: int
    username: str
    email: str
    hashed_password: str
    display_name: Optional[str]
    bio: Optional[str]
    avatar: Optional[str]
    is_verified: bool
    is_premium: bool
    premium_expires_at: Optional[datetime]
    # money is kept in integer cents
    wallet_balance_cents: int
    followers_count: int
    following_count: int
    posts_count: int
    is_active: bool
    is_banned: bool
    created_at: datetime
    updated_at: datetime
