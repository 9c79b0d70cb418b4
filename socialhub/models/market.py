from datetime import datetime
from typing import List, Literal, Optional, TypedDict


TransactionType = Literal["deposit", "withdraw", "transfer_in", "transfer_out"]


class ProductDocument(TypedDict, total=False):
    _id: int
    seller_id: int
    title: str
    description: Optional[str]
    price_cents: int
    category: Optional[str]
    images: List[str]
    condition: Optional[str]
    location: Optional[str]
    is_active: bool
    is_sold: bool
    views_count: int
    created_at: datetime
    updated_at: datetime


class WalletTransactionDocument(TypedDict, total=False):
    _id: int
    user_id: int
    type: TransactionType
    amount_cents: int
    description: Optional[str]
    reference_id: Optional[str]
    status: Literal["pending", "completed", "failed"]
    created_at: datetime
