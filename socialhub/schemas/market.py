from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AliasChoices, Field, field_validator

from socialhub.schemas.common import CamelModel, DocumentModel, cents_to_str


Amount = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)]


class ProductCreate(CamelModel):

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    price: Amount
    category: Optional[str] = Field(default=None, max_length=100)
    images: List[str] = []
    condition: Optional[str] = Field(default=None, max_length=50)
    location: Optional[str] = Field(default=None, max_length=200)


class ProductPublic(DocumentModel):

    seller_id: int
    title: str
    description: Optional[str] = None
    price: str = Field(validation_alias=AliasChoices("price_cents", "price"))
    category: Optional[str] = None
    images: List[str] = []
    condition: Optional[str] = None
    location: Optional[str] = None
    is_active: bool = True
    is_sold: bool = False
    views_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value):
        return cents_to_str(value)


class WalletAmount(CamelModel):

    amount: Amount
    description: Optional[str] = Field(default=None, max_length=255)


class TransferRequest(WalletAmount):

    recipient_id: int


class WalletBalance(CamelModel):

    balance: str


class TransactionPublic(DocumentModel):

    user_id: int
    type: str
    amount: str = Field(validation_alias=AliasChoices("amount_cents", "amount"))
    description: Optional[str] = None
    reference_id: Optional[str] = None
    status: str
    created_at: datetime

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value):
        return cents_to_str(value)
