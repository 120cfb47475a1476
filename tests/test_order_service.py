from decimal import Decimal

import pytest

from app.core.errors import OrderNotFound, ValidationFailed
from app.models.order import Order, OrderItem, OrderStatus
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.stats_repo import StatsRepository
from app.services.order_service import OrderService
from app.services.order_status import (
    PermissiveStatusPolicy,
    StrictStatusPolicy,
    get_status_policy,
)
from app.services.stats_service import StatsService


@pytest.fixture
def service():
    return OrderService(OrderRepository(), ProductRepository())


@pytest.fixture
def strict_service():
    return OrderService(OrderRepository(), ProductRepository(), StrictStatusPolicy())


@pytest.fixture
def make_order(session, make_user, make_product):
    seq = iter(range(1, 1000))

    def _make(total: str = "10.00", status: OrderStatus = OrderStatus.PENDING, user=None):
        user = user or make_user()
        product = make_product(total, name="Pit Crew Jacket", team="McLaren")
        order = Order(
            user_id=user.id,
            order_number=f"ORD-TEST-{next(seq)}",
            total_amount=Decimal(total),
            status=status.value,
            shipping_address="Woking Business Park",
            shipping_city="Woking",
            shipping_postal_code="GU21 4YH",
            shipping_country="United Kingdom",
        )
        session.add(order)
        session.flush()
        session.add(
            OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=1,
                unit_price=Decimal(total),
                total_price=Decimal(total),
            )
        )
        session.commit()
        session.refresh(order)
        return order

    return _make


def test_get_order_by_id_and_number(service, session, make_order):
    order = make_order("45.00")

    by_id = service.get_order(session, order.id)
    by_number = service.get_order_by_number(session, order.order_number)

    assert by_id == by_number
    assert by_id.order_number == order.order_number
    assert len(by_id.items) == 1
    assert by_id.items[0].product_name == "Pit Crew Jacket"
    assert by_id.items[0].team == "McLaren"


def test_get_missing_order_returns_none(service, session):
    assert service.get_order(session, 404) is None
    assert service.get_order_by_number(session, "ORD-NOPE") is None


def test_list_orders_by_user_and_status(service, session, make_user, make_order):
    alice = make_user("alice")
    bob = make_user("bob")
    a1 = make_order(user=alice)
    a2 = make_order(user=alice, status=OrderStatus.SHIPPED)
    b1 = make_order(user=bob, status=OrderStatus.SHIPPED)

    assert {o.id for o in service.list_user_orders(session, alice.id)} == {a1.id, a2.id}
    assert {o.id for o in service.list_orders_by_status(session, OrderStatus.SHIPPED)} == {
        a2.id,
        b1.id,
    }
    assert len(service.list_orders(session)) == 3
    assert service.list_user_orders(session, 9999) == []


def test_update_status_accepts_any_status_by_default(service, session, make_order):
    order = make_order()

    updated = service.update_status(session, order.id, OrderStatus.DELIVERED)
    assert updated.status == OrderStatus.DELIVERED

    back = service.update_status(session, order.id, OrderStatus.PENDING)
    assert back.status == OrderStatus.PENDING
    assert back.total_amount == Decimal("10")


def test_update_status_of_missing_order(service, session):
    with pytest.raises(OrderNotFound) as exc:
        service.update_status(session, 123, OrderStatus.SHIPPED)
    assert exc.value.status_code == 404


def test_strict_policy_walks_the_lifecycle(strict_service, session, make_order):
    order = make_order()

    for status in (OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
        assert strict_service.update_status(session, order.id, status).status == status

    with pytest.raises(ValidationFailed):
        strict_service.update_status(session, order.id, OrderStatus.CANCELLED)


def test_strict_policy_rejects_skipping_states(strict_service, session, make_order):
    order = make_order()

    with pytest.raises(ValidationFailed) as exc:
        strict_service.update_status(session, order.id, OrderStatus.DELIVERED)

    assert exc.value.status_code == 400
    assert "Pending -> Delivered" in exc.value.detail
    assert strict_service.get_order(session, order.id).status == OrderStatus.PENDING


def test_strict_policy_allows_cancel_before_delivery(strict_service, session, make_order):
    order = make_order(status=OrderStatus.SHIPPED)
    cancelled = strict_service.update_status(session, order.id, OrderStatus.CANCELLED)
    assert cancelled.status == OrderStatus.CANCELLED


def test_status_policy_selection():
    assert isinstance(get_status_policy("strict"), StrictStatusPolicy)
    assert isinstance(get_status_policy("permissive"), PermissiveStatusPolicy)


def test_delete_order_removes_items(service, session, make_order):
    order = make_order()
    order_id = order.id

    assert service.delete_order(session, order_id) is True
    assert service.get_order(session, order_id) is None
    assert OrderRepository().list_items_for_order(session, order_id) == []
    assert service.delete_order(session, order_id) is False


def test_revenue_excludes_pending_and_cancelled(session, make_order):
    make_order("10.00", OrderStatus.PENDING)
    make_order("20.00", OrderStatus.PROCESSING)
    make_order("30.00", OrderStatus.SHIPPED)
    make_order("40.00", OrderStatus.DELIVERED)
    make_order("50.00", OrderStatus.CANCELLED)

    stats = StatsService(StatsRepository())

    assert stats.total_revenue(session) == Decimal("90.00")
    assert stats.total_orders(session) == 5


def test_aggregates_on_empty_store(session):
    stats = StatsService(StatsRepository())
    assert stats.total_revenue(session) == Decimal("0")
    assert stats.total_orders(session) == 0
