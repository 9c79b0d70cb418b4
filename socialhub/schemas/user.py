from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from socialhub.schemas.common import CamelModel, DocumentModel, cents_to_str


class UserCreate(CamelModel):

    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$")
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(CamelModel):

    username: str
    password: str


class UserUpdate(CamelModel):

    display_name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = None


class UserSummary(DocumentModel):

    username: str
    display_name: Optional[str] = None
    avatar: Optional[str] = None
    is_verified: bool = False


class UserPublic(UserSummary):

    bio: Optional[str] = None
    is_premium: bool = False
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    created_at: Optional[datetime] = None


class UserPrivate(UserPublic):

    email: EmailStr
    wallet_balance: str = Field(default="0.00", validation_alias=AliasChoices("wallet_balance_cents", "wallet_balance", "walletBalance"))

    @field_validator("wallet_balance", mode="before")
    @classmethod
    def _balance(cls, value):
        return cents_to_str(value) or "0.00"


class Token(BaseModel):

    access_token: str
    token_type: str = "bearer"
    user: UserPrivate
