# app/services/order_service.py
import logging
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.errors import OrderNotFound
from app.models.order import Order, OrderItem, OrderStatus
from app.models.product import Product
from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderItemRead, OrderRead
from app.services.catalog import ProductCatalog
from app.services.order_status import PermissiveStatusPolicy, StatusPolicy

logger = logging.getLogger(__name__)


def build_order_dto(
    order: Order,
    items: list[OrderItem],
    products: dict[int, Product],
) -> OrderRead:
    """
    Compose OrderRead from ORM rows.

    Quantities and prices come from the order items as frozen at
    checkout; only the display fields are read from the catalog.
    """
    item_dtos: list[OrderItemRead] = []

    for it in items:
        product = products.get(it.product_id)
        item_dtos.append(
            OrderItemRead(
                id=it.id,
                product_id=it.product_id,
                product_name=product.product_name if product else None,
                product_description=product.description if product else None,
                team=product.team if product else None,
                driver=product.driver if product else None,
                size=product.size if product else None,
                image_path=product.image_path if product else None,
                quantity=it.quantity,
                unit_price=it.unit_price,
                total_price=it.total_price,
                created_at=it.created_at,
            )
        )

    return OrderRead(
        id=order.id,
        user_id=order.user_id,
        order_number=order.order_number,
        total_amount=order.total_amount,
        status=order.status,
        shipping_address=order.shipping_address,
        shipping_city=order.shipping_city,
        shipping_postal_code=order.shipping_postal_code,
        shipping_country=order.shipping_country,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=item_dtos,
    )


class OrderService:
    """
    Read and admin operations on existing orders.

    Orders are only created by CheckoutService. After that only the
    status (and updated_at) may change, through the StatusPolicy.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        catalog: ProductCatalog,
        status_policy: StatusPolicy | None = None,
    ):
        self.order_repo = order_repo
        self.catalog = catalog
        self.status_policy = status_policy or PermissiveStatusPolicy()

    # -------- Helper DTO builders --------

    def _to_dtos(self, session: Session, orders: list[Order]) -> list[OrderRead]:
        items = self.order_repo.list_items_for_orders(session, [o.id for o in orders])
        products = self.catalog.get_many(session, [it.product_id for it in items])

        items_by_order: dict[int, list[OrderItem]] = {}
        for it in items:
            items_by_order.setdefault(it.order_id, []).append(it)

        return [
            build_order_dto(o, items_by_order.get(o.id, []), products)
            for o in orders
        ]

    def _to_dto(self, session: Session, order: Order) -> OrderRead:
        return self._to_dtos(session, [order])[0]

    # -------- Lookups --------

    def get_order(self, session: Session, order_id: int) -> OrderRead | None:
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            return None
        return self._to_dto(session, order)

    def get_order_by_number(
        self, session: Session, order_number: str
    ) -> OrderRead | None:
        order = self.order_repo.get_by_order_number(session, order_number)
        if order is None:
            return None
        return self._to_dto(session, order)

    def list_orders(self, session: Session) -> list[OrderRead]:
        return self._to_dtos(session, self.order_repo.list_all(session))

    def list_user_orders(self, session: Session, user_id: int) -> list[OrderRead]:
        return self._to_dtos(session, self.order_repo.list_for_user(session, user_id))

    def list_orders_by_status(
        self, session: Session, status: OrderStatus
    ) -> list[OrderRead]:
        orders = self.order_repo.list_by_status(session, status.value)
        return self._to_dtos(session, orders)

    # -------- Admin operations --------

    def update_status(
        self,
        session: Session,
        order_id: int,
        status: OrderStatus,
    ) -> OrderRead:
        """
        Change the order status.

        Raises:
            OrderNotFound(404): no such order.
            ValidationFailed(400): rejected by the status policy.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise OrderNotFound()

        self.status_policy.check(OrderStatus(order.status), status)

        previous = order.status
        order.status = status.value
        order.updated_at = datetime.now(timezone.utc)
        self.order_repo.update_order(session, order)
        session.commit()

        logger.info(
            "Order %s status %s -> %s", order.order_number, previous, status.value
        )
        return self._to_dto(session, order)

    def delete_order(self, session: Session, order_id: int) -> bool:
        """
        Hard delete of the order and its items. False if absent.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            return False

        self.order_repo.delete_order(session, order)
        session.commit()
        return True
