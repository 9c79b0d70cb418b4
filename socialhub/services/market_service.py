import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List, Optional

from socialhub.errors import InvalidRequestError, NotFoundError
from socialhub.models.market import ProductDocument, WalletTransactionDocument
from socialhub.repositories.product_repository import ProductRepository
from socialhub.repositories.user_repository import UserRepository
from socialhub.repositories.wallet_repository import WalletRepository
from socialhub.schemas.common import cents_to_str, to_cents


logger = logging.getLogger(__name__)


class ProductService:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._products = product_repo

    async def create_product(self, seller_id: int, fields: Dict[str, Any]) -> ProductDocument:
        data = dict(fields)
        data["price_cents"] = to_cents(data.pop("price"))
        return await self._products.create_product(seller_id, data)

    async def get_product(self, product_id: int) -> ProductDocument:
        product = await self._products.view_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    async def list_products(self, category: Optional[str] = None, limit: int = 20, offset: int = 0) -> List[ProductDocument]:
        return await self._products.list_active(category=category, limit=limit, offset=offset)

    async def seller_products(self, seller_id: int) -> List[ProductDocument]:
        return await self._products.list_for_seller(seller_id)


class WalletService:
    """Balance changes always go together with a ledger row in `wallet_transactions`."""

    def __init__(self, user_repo: UserRepository, wallet_repo: WalletRepository) -> None:
        self._users = user_repo
        self._ledger = wallet_repo

    async def balance(self, user_id: int) -> str:
        user = await self._users.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return cents_to_str(user.get("wallet_balance_cents", 0))

    async def transactions(self, user_id: int) -> List[WalletTransactionDocument]:
        return await self._ledger.list_for_user(user_id)

    async def deposit(self, user_id: int, amount: Decimal, description: Optional[str] = None) -> WalletTransactionDocument:
        cents = to_cents(amount)
        if not await self._users.credit_balance(user_id, cents):
            raise NotFoundError("User not found")
        return await self._ledger.record(user_id, "deposit", cents, description or "Wallet deposit")

    async def withdraw(self, user_id: int, amount: Decimal, description: Optional[str] = None) -> WalletTransactionDocument:
        cents = to_cents(amount)
        if not await self._users.debit_balance(user_id, cents):
            raise InvalidRequestError("Insufficient balance")
        return await self._ledger.record(user_id, "withdraw", cents, description or "Wallet withdrawal")

    async def transfer(self, sender_id: int, recipient_id: int, amount: Decimal, description: Optional[str] = None) -> WalletTransactionDocument:
        if sender_id == recipient_id:
            raise InvalidRequestError("Cannot transfer to yourself")
        if not await self._users.get_user_by_id(recipient_id):
            raise NotFoundError("Recipient not found")
        cents = to_cents(amount)
        if not await self._users.debit_balance(sender_id, cents):
            raise InvalidRequestError("Insufficient balance")
        reference = uuid.uuid4().hex
        if not await self._users.credit_balance(recipient_id, cents):
            # recipient vanished between the check and the credit
            await self._users.credit_balance(sender_id, cents)
            raise NotFoundError("Recipient not found")
        out = await self._ledger.record(sender_id, "transfer_out", cents, description or f"Transfer to user {recipient_id}", reference)
        await self._ledger.record(recipient_id, "transfer_in", cents, description or f"Transfer from user {sender_id}", reference)
        logger.info("Transfer %s: %s -> %s (%d cents)", reference, sender_id, recipient_id, cents)
        return out
