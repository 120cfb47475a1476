# app/routers/products.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.services.product_service import ProductService

# No DELETE route: order items keep referencing their product. Carts
# still tolerate rows removed out of band (the cart view skips the line,
# checkout answers 400 with the missing product ids).
router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List products.
    """
    return service.list_products(session, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id.
    """
    return service.get_product(session, product_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product.
    """
    return service.create_product(session, payload)


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product.

    A price change is visible in carts right away; existing orders
    keep their checkout prices.
    """
    return service.update_product(session, product_id, payload)
