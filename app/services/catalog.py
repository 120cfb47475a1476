# app/services/catalog.py
from typing import Protocol

from sqlmodel import Session

from app.models.product import Product


class ProductCatalog(Protocol):
    """
    Read-only product lookup used by the cart, checkout and order flows.

    ProductRepository satisfies it; tests can pass any object with
    matching methods.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None: ...

    def get_many(self, session: Session, product_ids: list[int]) -> dict[int, Product]: ...
