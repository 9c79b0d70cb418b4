from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from socialhub.database.connection import mongo_db_dependency
from socialhub.repositories.product_repository import ProductRepository
from socialhub.schemas.market import ProductCreate, ProductPublic
from socialhub.services.market_service import ProductService
from socialhub.utils.dependencies import get_current_user


router = APIRouter(prefix="/api/products", tags=["marketplace"])


def get_product_service(db=Depends(mongo_db_dependency)) -> ProductService:
    return ProductService(ProductRepository(db))


@router.post("", response_model=ProductPublic, status_code=status.HTTP_201_CREATED)
async def create_product(body: ProductCreate, current_user: dict = Depends(get_current_user), service: ProductService = Depends(get_product_service)):
    return await service.create_product(current_user["_id"], body.model_dump())


@router.get("", response_model=List[ProductPublic])
async def list_products(
    category: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: ProductService = Depends(get_product_service),
):
    return await service.list_products(category, limit=limit, offset=offset)


@router.get("/{product_id}", response_model=ProductPublic)
async def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return await service.get_product(product_id)
