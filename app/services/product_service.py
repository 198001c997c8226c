# app/services/product_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.exceptions import NotFoundError, PersistenceError, ValidationError
from app.core.storage_utils import PRODUCTS_FOLDER, delete_public_url, upload_image
from app.models.product import Category, Product
from app.repositories.category_repo import CategoryRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import CategoryRef, ProductCreate, ProductRead, ProductUpdate

logger = logging.getLogger(__name__)


def to_read(product: Product, category: Category | None = None) -> ProductRead:
    return ProductRead(
        id=product.id,
        name=product.name,
        category_id=product.category_id,
        description=product.description,
        price=product.price,
        image_url=product.image_url,
        is_active=product.is_active,
        created_at=product.created_at,
        category=CategoryRef(id=category.id, name=category.name) if category else None,
    )


class ProductService:
    """
    Business logic for Product.

    Responsibilities:
      - storefront listing / search / detail (active products only)
      - admin CRUD
      - image upload/delete orchestration with Supabase Storage
    """

    def __init__(self, repo: ProductRepository, category_repo: CategoryRepository):
        self.repo = repo
        self.category_repo = category_repo

    # ----- Helpers -----

    def _ensure_category(self, session: Session, category_id: uuid.UUID) -> Category:
        category = self.category_repo.get_by_id(session, category_id)
        if not category:
            raise ValidationError("Category does not exist")
        return category

    # ----- Reads -----

    def list_products(
        self,
        session: Session,
        only_active: bool = True,
        category_id: uuid.UUID | None = None,
        search: str | None = None,
    ) -> list[ProductRead]:
        search = (search or "").strip() or None
        rows = self.repo.list_with_category(
            session,
            only_active=only_active,
            category_id=category_id,
            search=search,
        )
        return [to_read(p, c) for p, c in rows]

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def get_product_read(
        self,
        session: Session,
        product_id: uuid.UUID,
        only_active: bool = True,
    ) -> ProductRead:
        row = self.repo.get_with_category(session, product_id)
        if row is None or (only_active and not row[0].is_active):
            raise NotFoundError("Product not found")
        return to_read(*row)

    # ----- Admin writes -----

    def create_product(self, session: Session, payload: ProductCreate) -> ProductRead:
        category = self._ensure_category(session, payload.category_id)
        product = self.repo.create(
            session,
            Product(
                name=payload.name,
                category_id=category.id,
                description=payload.description,
                price=payload.price,
                is_active=payload.is_active,
            ),
        )
        logger.info("Product %s created (%r)", product.id, product.name)
        return to_read(product, category)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> ProductRead:
        """
        Partial update of a product.

        Only fields present in the payload change; an explicit empty
        description clears it.
        """
        product = self.get_product(session, product_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("category_id") is not None:
            self._ensure_category(session, changes["category_id"])

        for key in ("name", "category_id", "price", "is_active"):
            if changes.get(key) is not None:
                setattr(product, key, changes[key])

        if "description" in changes:
            product.description = (changes["description"] or "").strip() or None

        product = self.repo.update(session, product)
        return to_read(product, self.category_repo.get_by_id(session, product.category_id))

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product row and, best-effort, its picture in Storage.

        Past orders keep their snapshot lines.
        """
        product = self.get_product(session, product_id)
        if product.image_url:
            delete_public_url(product.image_url)
        self.repo.delete(session, product)
        logger.info("Product %s deleted", product_id)

    # ----- Image -----

    def set_image(
        self,
        session: Session,
        product_id: uuid.UUID,
        content_type: str | None,
        file_bytes: bytes,
    ) -> ProductRead:
        """
        Upload or replace the product picture.

        - Compresses before uploading (see image_compressor).
        - Deletes the previous picture from Storage once the new one is in.
        - If saving the row fails, the new upload is deleted instead.
        """
        product = self.get_product(session, product_id)
        old_url = product.image_url

        new_url = upload_image(PRODUCTS_FOLDER, file_bytes, content_type)
        product.image_url = new_url
        try:
            product = self.repo.update(session, product)
        except SQLAlchemyError as exc:
            # The row still points at the old picture; drop the unused upload
            session.rollback()
            logger.error("Saving image for product %s failed: %s", product_id, exc)
            delete_public_url(new_url)
            raise PersistenceError("Failed to save product image") from exc

        if old_url and old_url != product.image_url:
            delete_public_url(old_url)

        return to_read(product, self.category_repo.get_by_id(session, product.category_id))
