# app/repositories/product_repo.py
from sqlmodel import Session, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def get_many(self, session: Session, product_ids: list[int]) -> dict[int, Product]:
        """
        Batch lookup keyed by id; unknown ids are simply absent.
        """
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        return {p.id: p for p in session.exec(stmt).all()}

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        stmt = select(Product).order_by(Product.id).offset(skip).limit(limit)
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
