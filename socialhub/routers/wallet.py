from typing import List

from fastapi import APIRouter, Depends

from socialhub.database.connection import mongo_db_dependency
from socialhub.repositories.user_repository import UserRepository
from socialhub.repositories.wallet_repository import WalletRepository
from socialhub.schemas.market import TransactionPublic, TransferRequest, WalletAmount, WalletBalance
from socialhub.services.market_service import WalletService
from socialhub.utils.dependencies import get_current_user


router = APIRouter(prefix="/api/wallet", tags=["wallet"])


def get_wallet_service(db=Depends(mongo_db_dependency)) -> WalletService:
    return WalletService(UserRepository(db), WalletRepository(db))


@router.get("", response_model=WalletBalance)
async def balance(current_user: dict = Depends(get_current_user), service: WalletService = Depends(get_wallet_service)):
    return {"balance": await service.balance(current_user["_id"])}


@router.get("/transactions", response_model=List[TransactionPublic])
async def transactions(current_user: dict = Depends(get_current_user), service: WalletService = Depends(get_wallet_service)):
    return await service.transactions(current_user["_id"])


@router.post("/deposit", response_model=TransactionPublic)
async def deposit(body: WalletAmount, current_user: dict = Depends(get_current_user), service: WalletService = Depends(get_wallet_service)):
    return await service.deposit(current_user["_id"], body.amount, body.description)


@router.post("/withdraw", response_model=TransactionPublic)
async def withdraw(body: WalletAmount, current_user: dict = Depends(get_current_user), service: WalletService = Depends(get_wallet_service)):
    return await service.withdraw(current_user["_id"], body.amount, body.description)


@router.post("/transfer", response_model=TransactionPublic)
async def transfer(body: TransferRequest, current_user: dict = Depends(get_current_user), service: WalletService = Depends(get_wallet_service)):
    return await service.transfer(current_user["_id"], body.recipient_id, body.amount, body.description)
