# app/routers/users.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.database import get_session
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserCreate, UserRead
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: UserCreate,
    session: Session = Depends(get_session),
):
    """
    Register a customer.

    409 if the username or email is already in use.
    """
    return service.register(session, payload)


@router.get("", response_model=list[UserRead])
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    """
    List users.

    Pagination via skip/limit.
    """
    return service.list_users(session, skip, limit)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id.
    """
    return service.get_user(session, user_id)
