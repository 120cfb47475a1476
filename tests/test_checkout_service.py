from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import select

from app.core.errors import (
    CartValidationError,
    CheckoutFailed,
    EmptyCartError,
    OrderNumberConflict,
)
from app.models.order import ORDER_NUMBER_CONSTRAINT, Order, OrderItem, OrderStatus
from app.models.product import Product
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.schemas.cart import CartItemCreate
from app.schemas.order import CheckoutRequest
from app.services.cart_service import CartService
from app.services.checkout_service import (
    CheckoutService,
    OrderNumberGenerator,
    is_order_number_violation,
)
from app.services.order_service import OrderService

FIXED_NOW = datetime(2025, 3, 1, 12, 30, 45, tzinfo=timezone.utc)

ADDRESS = CheckoutRequest(
    shipping_address="1 Copse Corner",
    shipping_city="Silverstone",
    shipping_postal_code="NN12 8TN",
    shipping_country="United Kingdom",
)


@pytest.fixture
def order_repo():
    return OrderRepository()


@pytest.fixture
def cart_service():
    return CartService(CartRepository(), ProductRepository(), UserRepository())


@pytest.fixture
def checkout_service(order_repo):
    return CheckoutService(
        CartRepository(),
        order_repo,
        ProductRepository(),
        OrderNumberGenerator(clock=lambda: FIXED_NOW),
    )


@pytest.fixture
def order_service(order_repo):
    return OrderService(order_repo, ProductRepository())


def _fill_cart(cart_service, session, user_id, *lines):
    for product, quantity in lines:
        cart_service.add_item(
            session, user_id, CartItemCreate(product_id=product.id, quantity=quantity)
        )


def _order_count(session) -> int:
    return len(session.exec(select(Order)).all())


def test_checkout_scenario(cart_service, checkout_service, session, make_user, make_product):
    user = make_user()
    a = make_product("50.00", name="Product A")
    b = make_product("30.00", name="Product B")
    _fill_cart(cart_service, session, user.id, (a, 2), (b, 1))
    assert cart_service.get_cart(session, user.id).total_amount == Decimal("130")

    order = checkout_service.checkout(session, user.id, ADDRESS)

    assert order.total_amount == Decimal("130")
    assert order.status == OrderStatus.PENDING
    assert order.user_id == user.id
    assert order.shipping_city == "Silverstone"
    assert order.shipping_postal_code == "NN12 8TN"

    lines = {i.product_id: i for i in order.items}
    assert len(lines) == 2
    assert lines[a.id].unit_price == Decimal("50")
    assert lines[a.id].total_price == Decimal("100")
    assert lines[a.id].product_name == "Product A"
    assert lines[b.id].unit_price == Decimal("30")
    assert lines[b.id].total_price == Decimal("30")

    cart = cart_service.get_cart(session, user.id)
    assert cart is not None
    assert cart.items == []


def test_order_total_matches_sum_of_line_totals(
    cart_service, checkout_service, session, make_user, make_product
):
    user = make_user()
    _fill_cart(
        cart_service,
        session,
        user.id,
        (make_product("19.99", name="Keyring"), 3),
        (make_product("74.50", name="Hoodie"), 2),
    )

    order = checkout_service.checkout(session, user.id, ADDRESS)

    assert order.total_amount == sum(i.total_price for i in order.items)
    assert order.total_amount == Decimal("208.97")


def test_checkout_freezes_unit_price(
    cart_service, checkout_service, order_service, session, make_user, make_product
):
    user = make_user()
    p = make_product("100.00")
    _fill_cart(cart_service, session, user.id, (p, 3))

    order = checkout_service.checkout(session, user.id, ADDRESS)

    p.price = Decimal("80.00")
    session.add(p)
    session.commit()

    stored = order_service.get_order(session, order.id)
    assert stored.items[0].unit_price == Decimal("100")
    assert stored.items[0].total_price == Decimal("300")
    assert stored.total_amount == Decimal("300")


def test_checkout_without_cart_is_rejected(checkout_service, session, make_user):
    user = make_user()

    with pytest.raises(EmptyCartError) as exc:
        checkout_service.checkout(session, user.id, ADDRESS)

    assert exc.value.status_code == 400
    assert exc.value.detail == "Cart is empty"
    assert _order_count(session) == 0


def test_checkout_with_emptied_cart_is_rejected(
    cart_service, checkout_service, session, make_user, make_product
):
    user = make_user()
    _fill_cart(cart_service, session, user.id, (make_product("10.00"), 1))
    cart_service.clear_cart(session, user.id)

    with pytest.raises(EmptyCartError):
        checkout_service.checkout(session, user.id, ADDRESS)

    assert _order_count(session) == 0


def test_second_checkout_after_success_is_rejected(
    cart_service, checkout_service, session, make_user, make_product
):
    user = make_user()
    _fill_cart(cart_service, session, user.id, (make_product("10.00"), 1))
    checkout_service.checkout(session, user.id, ADDRESS)

    with pytest.raises(EmptyCartError):
        checkout_service.checkout(session, user.id, ADDRESS)

    assert _order_count(session) == 1


def test_order_number_shape_and_same_second_retry(
    cart_service, checkout_service, session, make_user, make_product
):
    user = make_user()
    p = make_product("10.00")

    _fill_cart(cart_service, session, user.id, (p, 1))
    first = checkout_service.checkout(session, user.id, ADDRESS)

    _fill_cart(cart_service, session, user.id, (p, 1))
    second = checkout_service.checkout(session, user.id, ADDRESS)

    assert first.order_number == f"ORD-20250301123045-{user.id}"
    assert second.order_number == f"ORD-20250301123045-{user.id}-2"


def test_order_number_exhaustion_raises_conflict(
    cart_service, order_repo, session, make_user, make_product
):
    service = CheckoutService(
        CartRepository(),
        order_repo,
        ProductRepository(),
        OrderNumberGenerator(max_attempts=1, clock=lambda: FIXED_NOW),
    )
    user = make_user()
    p = make_product("10.00")

    _fill_cart(cart_service, session, user.id, (p, 1))
    service.checkout(session, user.id, ADDRESS)

    _fill_cart(cart_service, session, user.id, (p, 2))
    with pytest.raises(OrderNumberConflict) as exc:
        service.checkout(session, user.id, ADDRESS)

    assert exc.value.status_code == 409
    assert _order_count(session) == 1
    assert cart_service.get_cart(session, user.id).items[0].quantity == 2


def test_failure_mid_checkout_leaves_no_order_and_keeps_cart(
    cart_service, checkout_service, order_repo, session, make_user, make_product, monkeypatch
):
    user = make_user()
    _fill_cart(cart_service, session, user.id, (make_product("25.00"), 2))

    def broken_create_items(session, items):
        raise OperationalError("INSERT INTO order_items", {}, Exception("disk I/O error"))

    monkeypatch.setattr(order_repo, "create_items", broken_create_items)

    with pytest.raises(CheckoutFailed) as exc:
        checkout_service.checkout(session, user.id, ADDRESS)

    assert exc.value.status_code == 500
    assert _order_count(session) == 0
    assert session.exec(select(OrderItem)).all() == []

    cart = cart_service.get_cart(session, user.id)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert cart.total_amount == Decimal("50")


def test_generator_candidates():
    gen = OrderNumberGenerator(prefix="F1", max_attempts=3, clock=lambda: FIXED_NOW)
    assert list(gen.candidates(7)) == [
        "F1-20250301123045-7",
        "F1-20250301123045-7-2",
        "F1-20250301123045-7-3",
    ]


def test_concurrent_duplicate_order_number_rolls_back(
    cart_service, checkout_service, order_repo, session, make_user, make_product, monkeypatch
):
    user = make_user()
    p = make_product("10.00")

    _fill_cart(cart_service, session, user.id, (p, 1))
    checkout_service.checkout(session, user.id, ADDRESS)

    # Another checkout took the number between the lookup and the insert
    monkeypatch.setattr(order_repo, "order_number_exists", lambda session, number: False)

    _fill_cart(cart_service, session, user.id, (p, 2))
    with pytest.raises(OrderNumberConflict) as exc:
        checkout_service.checkout(session, user.id, ADDRESS)

    assert exc.value.status_code == 409
    assert _order_count(session) == 1
    assert len(session.exec(select(OrderItem)).all()) == 1
    assert cart_service.get_cart(session, user.id).items[0].quantity == 2


def test_other_integrity_errors_fail_checkout(
    cart_service, checkout_service, order_repo, session, make_user, make_product, monkeypatch
):
    user = make_user()
    _fill_cart(cart_service, session, user.id, (make_product("25.00"), 1))

    def conflicting_create_items(session, items):
        raise IntegrityError(
            "INSERT INTO order_items",
            {},
            Exception("FOREIGN KEY constraint failed"),
        )

    monkeypatch.setattr(order_repo, "create_items", conflicting_create_items)

    with pytest.raises(CheckoutFailed):
        checkout_service.checkout(session, user.id, ADDRESS)

    assert _order_count(session) == 0
    assert len(cart_service.get_cart(session, user.id).items) == 1


class _Diag:
    def __init__(self, constraint_name):
        self.constraint_name = constraint_name


class _DriverError(Exception):
    def __init__(self, message, constraint_name=None):
        super().__init__(message)
        self.diag = _Diag(constraint_name)


def test_order_number_violation_detection():
    sqlite_dup = IntegrityError(
        "INSERT", {}, Exception("UNIQUE constraint failed: orders.order_number")
    )
    pg_dup = IntegrityError(
        "INSERT", {}, _DriverError("duplicate key value", ORDER_NUMBER_CONSTRAINT)
    )
    pg_other = IntegrityError(
        "INSERT", {}, _DriverError("duplicate key value", "uq_cart_items_cart_product")
    )

    assert is_order_number_violation(sqlite_dup)
    assert is_order_number_violation(pg_dup)
    assert not is_order_number_violation(pg_other)


def test_checkout_rejects_cart_with_vanished_product(
    cart_service, checkout_service, session, make_user, make_product
):
    user = make_user()
    keep = make_product("30.00", name="Team Shirt")
    gone = make_product("50.00", name="Team Cap")
    gone_id = gone.id
    _fill_cart(cart_service, session, user.id, (keep, 1), (gone, 2))

    session.delete(session.get(Product, gone_id))
    session.commit()

    with pytest.raises(CartValidationError) as exc:
        checkout_service.checkout(session, user.id, ADDRESS)

    assert exc.value.status_code == 400
    assert exc.value.detail["missing_product_ids"] == [gone_id]
    assert _order_count(session) == 0

    cart = CartRepository().get_for_user(session, user.id)
    assert len(CartRepository().list_items(session, cart.id)) == 2
