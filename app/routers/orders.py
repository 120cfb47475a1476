# app/routers/orders.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.config import get_settings
from app.core.errors import OrderNotFound
from app.database import get_session
from app.models.order import OrderStatus
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.order import OrderRead, OrderStatusUpdate
from app.services.order_service import OrderService
from app.services.order_status import get_status_policy

settings = get_settings()

router = APIRouter(prefix="/orders", tags=["Orders"])

service = OrderService(
    OrderRepository(),
    ProductRepository(),
    get_status_policy(settings.ORDER_STATUS_POLICY),
)


@router.get("", response_model=list[OrderRead])
def list_all_orders(session: Session = Depends(get_session)):
    """
    List all orders, newest first.
    """
    return service.list_orders(session)


@router.get("/number/{order_number}", response_model=OrderRead)
def get_order_by_number(
    order_number: str,
    session: Session = Depends(get_session),
):
    """
    Look up an order by its order number.
    """
    order = service.get_order_by_number(session, order_number)
    if order is None:
        raise OrderNotFound()
    return order


@router.get("/user/{user_id}", response_model=list[OrderRead])
def list_user_orders(
    user_id: int,
    session: Session = Depends(get_session),
):
    """
    Order history of one user, newest first.
    """
    return service.list_user_orders(session, user_id)


@router.get("/status/{order_status}", response_model=list[OrderRead])
def list_orders_by_status(
    order_status: OrderStatus,
    session: Session = Depends(get_session),
):
    """
    Orders in a given status (Pending, Processing, Shipped, Delivered, Cancelled).
    """
    return service.list_orders_by_status(session, order_status)


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    """
    Get an order with its items.
    """
    order = service.get_order(session, order_id)
    if order is None:
        raise OrderNotFound()
    return order


@router.put("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status.

    Transition rules depend on ORDER_STATUS_POLICY ("permissive"
    accepts any status).
    """
    return service.update_status(session, order_id, payload.status)


@router.delete("/{order_id}")
def delete_order(
    order_id: int,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    """
    Delete an order and its items.
    """
    if not service.delete_order(session, order_id):
        raise OrderNotFound()
    return {"message": "Order deleted successfully"}
