# app/routers/admin_categories.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryWithCount
from app.services.category_service import CategoryService

router = APIRouter(prefix="/admin/categories", tags=["Admin Categories"])

repo = CategoryRepository()
service = CategoryService(repo)


@router.get(
    "",
    response_model=list[CategoryWithCount],
    dependencies=[Depends(require_admin)],
)
def list_categories(session: Session = Depends(get_session)):
    """
    All categories, inactive ones included, with their product counts.
    """
    return service.list_admin(session)


@router.post(
    "",
    response_model=CategoryWithCount,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
):
    return service.create_category(session, payload)


@router.patch(
    "/{category_id}",
    response_model=CategoryWithCount,
    dependencies=[Depends(require_admin)],
)
def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
):
    """
    Rename a category or toggle whether the storefront shows it.
    """
    return service.update_category(session, category_id, payload)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete an empty category. 409 while products still use it.
    """
    service.delete_category(session, category_id)
    return None
