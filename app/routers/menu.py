# app/routers/menu.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.category import CategoryWithCount
from app.schemas.product import ProductRead
from app.services.category_service import CategoryService
from app.services.product_service import ProductService

router = APIRouter(prefix="/menu", tags=["Menu"])

category_repo = CategoryRepository()
product_repo = ProductRepository()
category_service = CategoryService(category_repo)
product_service = ProductService(product_repo, category_repo)


@router.get("/categories", response_model=list[CategoryWithCount])
def list_categories(session: Session = Depends(get_session)):
    """
    Active categories with the number of active products in each.

    - Public endpoint.
    """
    return category_service.list_public(session)


@router.get("/products", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    category_id: uuid.UUID | None = None,
    q: str | None = None,
):
    """
    Active products, optionally filtered by category and/or a search text
    matched against name and description.

    - Public endpoint.
    """
    return product_service.list_products(
        session, only_active=True, category_id=category_id, search=q
    )


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single active product by id.

    - Public endpoint.
    """
    return product_service.get_product_read(session, product_id)
