# app/repositories/category_repo.py
import uuid

from sqlalchemy import and_, func
from sqlmodel import Session, select

from app.models.product import Category, Product


class CategoryRepository:
    """
    Data access layer for Category.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, category_id: uuid.UUID) -> Category | None:
        return session.get(Category, category_id)

    def list_with_counts(
        self,
        session: Session,
        only_active: bool = False,
    ) -> list[tuple[Category, int]]:
        """
        Categories ordered by name, each with its product count.

        With `only_active`, inactive categories are skipped and only
        active products are counted.
        """
        join_on = Product.category_id == Category.id
        if only_active:
            join_on = and_(join_on, Product.is_active == True)  # noqa: E712

        stmt = (
            select(Category, func.count(Product.id))
            .outerjoin(Product, join_on)
            .group_by(Category.id)
            .order_by(Category.name)
        )
        if only_active:
            stmt = stmt.where(Category.is_active == True)  # noqa: E712

        return [(category, int(count)) for category, count in session.exec(stmt).all()]

    def count_products(self, session: Session, category_id: uuid.UUID) -> int:
        stmt = select(func.count(Product.id)).where(Product.category_id == category_id)
        return int(session.exec(stmt).one() or 0)

    def create(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def update(self, session: Session, category: Category) -> Category:
        session.add(category)
        session.commit()
        session.refresh(category)
        return category

    def delete(self, session: Session, category: Category) -> None:
        session.delete(category)
        session.commit()
