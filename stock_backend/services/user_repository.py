"""
User Repository

SQL persistence for registered users.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stock_backend.errors import EmailAlreadyExists, UserNotFound
from stock_backend.models.user import User


class UserRepository:
    """User store using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, email: str, password_hash: str) -> User:
        """
        Insert a new user.

        Args:
            email: Unique email address
            password_hash: bcrypt hash of the password

        Returns:
            User: The created user

        Raises:
            EmailAlreadyExists: If the email is already registered
        """
        user = User(email=email, password=password_hash)
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise EmailAlreadyExists(email) from e

        self.db.refresh(user)
        return user

    def find_by_email(self, email: str) -> User:
        user = self.db.query(User).filter(User.email == email).first()
        if user is None:
            raise UserNotFound(email)
        return user

    def find_by_id(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise UserNotFound(str(user_id))
        return user
