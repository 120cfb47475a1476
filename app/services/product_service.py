# app/services/product_service.py
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import ProductNotFound
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductUpdate


class ProductService:
    """
    Catalog maintenance (create, price/metadata edits).

    Price edits take effect on open carts immediately; orders keep
    the unit price frozen at checkout.
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        return self.repo.list(session, skip=skip, limit=limit)

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise ProductNotFound()
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = Product(**payload.model_dump())
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update: only fields present in the payload change.
        """
        product = self.get_product(session, product_id)

        for field, value in payload.model_dump(exclude_none=True).items():
            setattr(product, field, value)
        product.updated_at = datetime.now(timezone.utc)

        return self.repo.update(session, product)
