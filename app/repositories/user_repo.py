# app/repositories/user_repo.py
from sqlmodel import Session, or_, select

from app.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: int) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_username_or_email(
        self, session: Session, username: str, email: str
    ) -> User | None:
        """Return the first User holding either identifier."""
        stmt = select(User).where(or_(User.username == username, User.email == email))
        return session.exec(stmt).first()

    def list(self, session: Session, skip: int = 0, limit: int = 50) -> list[User]:
        """
        Paginated user listing.

        Args:
            skip: offset rows (for paging)
            limit: max number of rows returned
        """
        stmt = select(User).order_by(User.id).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
