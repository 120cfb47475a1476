from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from app.database import build_engine, get_session
from app.main import app
from app.models.product import Product
from app.models.user import User


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    seq = count(1)

    def _make(username: str | None = None) -> User:
        n = next(seq)
        username = username or f"fan{n}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            phone_number=f"+44 7700 90{n:04d}",
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_product(session):
    def _make(price: str, name: str = "Team Cap", **extra) -> Product:
        product = Product(product_name=name, price=Decimal(price), **extra)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make
