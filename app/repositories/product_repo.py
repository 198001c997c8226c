# app/repositories/product_repo.py
import uuid

from sqlalchemy import or_
from sqlmodel import Session, select

from app.models.product import Category, Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_with_category(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> tuple[Product, Category] | None:
        stmt = (
            select(Product, Category)
            .join(Category, Category.id == Product.category_id)
            .where(Product.id == product_id)
        )
        return session.exec(stmt).first()

    def list_with_category(
        self,
        session: Session,
        only_active: bool = True,
        category_id: uuid.UUID | None = None,
        search: str | None = None,
    ) -> list[tuple[Product, Category]]:
        """
        Products ordered by name, joined with their category.

        `search` matches name or description, case-insensitively.
        """
        stmt = select(Product, Category).join(Category, Category.id == Product.category_id)

        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        if category_id is not None:
            stmt = stmt.where(Product.category_id == category_id)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    Product.name.ilike(pattern),
                    Product.description.ilike(pattern),
                )
            )

        stmt = stmt.order_by(Product.name)
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()
