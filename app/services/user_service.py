# app/services/user_service.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.errors import DuplicateUserError, UserNotFound
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.user import UserCreate

logger = logging.getLogger(__name__)


class UserService:
    """
    Minimal user directory: register, look up, list.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def register(self, session: Session, payload: UserCreate) -> User:
        """
        Create a user.

        Raises:
            DuplicateUserError(409): username or email already taken.
        """
        if self.repo.get_by_username_or_email(session, payload.username, payload.email):
            raise DuplicateUserError()

        user = User(
            username=payload.username,
            email=payload.email,
            phone_number=payload.phone_number,
        )
        try:
            return self.repo.create(session, user)
        except IntegrityError:
            # Lost a race with a concurrent registration
            session.rollback()
            logger.warning("Duplicate registration for %s", payload.email)
            raise DuplicateUserError()

    def list_users(self, session: Session, skip: int, limit: int) -> list[User]:
        return self.repo.list(session, skip=skip, limit=limit)

    def get_user(self, session: Session, user_id: int) -> User:
        """
        Raises:
            UserNotFound(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise UserNotFound()
        return user
