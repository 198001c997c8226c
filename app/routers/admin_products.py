# app/routers/admin_products.py
import uuid

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.services.product_service import ProductService

router = APIRouter(prefix="/admin/products", tags=["Admin Products"])

repo = ProductRepository()
category_repo = CategoryRepository()
service = ProductService(repo, category_repo)


@router.get(
    "",
    response_model=list[ProductRead],
    dependencies=[Depends(require_admin)],
)
def list_products(
    session: Session = Depends(get_session),
    category_id: uuid.UUID | None = None,
    q: str | None = None,
):
    """
    All products (inactive included) with their category.
    """
    return service.list_products(
        session, only_active=False, category_id=category_id, search=q
    )


@router.get(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.get_product_read(session, product_id, only_active=False)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).
    """
    return service.create_product(session, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product and its picture (admin only).

    Orders that contain it keep their copy of its name and price.
    """
    service.delete_product(session, product_id)
    return None


@router.post(
    "/{product_id}/image",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
    summary="Upload or replace the picture of a product",
)
def upload_product_image(
    product_id: uuid.UUID,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    """
    Upload a new picture for the product.

    - Any image Pillow can read; stored as JPEG of at most 4 MB.
    - The previous picture is removed from Storage.
    """
    file_bytes = file.file.read()
    return service.set_image(
        session=session,
        product_id=product_id,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )
