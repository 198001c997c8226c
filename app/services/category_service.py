# app/services/category_service.py
import logging
import uuid

from sqlmodel import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.models.product import Category
from app.repositories.category_repo import CategoryRepository
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryWithCount

logger = logging.getLogger(__name__)


def to_with_count(category: Category, product_count: int) -> CategoryWithCount:
    return CategoryWithCount(
        id=category.id,
        name=category.name,
        is_active=category.is_active,
        created_at=category.created_at,
        product_count=product_count,
    )


class CategoryService:
    """
    Business logic for menu categories.

    Responsibilities:
      - storefront listing (active categories, active product counts)
      - admin CRUD
      - refuse to delete a category that still holds products
    """

    def __init__(self, repo: CategoryRepository):
        self.repo = repo

    def list_public(self, session: Session) -> list[CategoryWithCount]:
        rows = self.repo.list_with_counts(session, only_active=True)
        return [to_with_count(c, n) for c, n in rows]

    def list_admin(self, session: Session) -> list[CategoryWithCount]:
        rows = self.repo.list_with_counts(session, only_active=False)
        return [to_with_count(c, n) for c, n in rows]

    def get_category(self, session: Session, category_id: uuid.UUID) -> Category:
        category = self.repo.get_by_id(session, category_id)
        if not category:
            raise NotFoundError("Category not found")
        return category

    def create_category(self, session: Session, payload: CategoryCreate) -> CategoryWithCount:
        category = self.repo.create(
            session,
            Category(name=payload.name, is_active=payload.is_active),
        )
        logger.info("Category %s created (%r)", category.id, category.name)
        return to_with_count(category, 0)

    def update_category(
        self,
        session: Session,
        category_id: uuid.UUID,
        payload: CategoryUpdate,
    ) -> CategoryWithCount:
        category = self.get_category(session, category_id)

        if payload.name is not None:
            category.name = payload.name

        if payload.is_active is not None:
            category.is_active = payload.is_active

        category = self.repo.update(session, category)
        return to_with_count(category, self.repo.count_products(session, category.id))

    def delete_category(self, session: Session, category_id: uuid.UUID) -> None:
        """
        Delete an empty category.

        Raises:
            ConflictError: products still point at the category.
        """
        category = self.get_category(session, category_id)
        product_count = self.repo.count_products(session, category.id)
        if product_count:
            raise ConflictError(
                f"Category still has {product_count} product(s); "
                "move or delete them first"
            )
        self.repo.delete(session, category)
        logger.info("Category %s deleted", category_id)
