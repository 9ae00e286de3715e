import logging
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from printshop.core.exceptions import EmailAlreadyRegisteredError, InvalidCredentials, NotFound
from printshop.core.security import PasswordHasher
from printshop.models.user import User

logger = logging.getLogger(__name__)

USER_NOT_FOUND_MESSAGE = "User not found"


class UserService:
    """Credential store: registration, login checks and profile updates"""

    def __init__(self, db: Session, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    def register(self, name: str, email: str, password: str, phone: Optional[str] = None) -> User:
        """
        Create a user with a hashed password.

        There is no separate existence check: the insert either succeeds or
        trips the unique constraint on email, which becomes a Conflict.
        """
        db_user = User(
            name=name,
            email=email,
            hashed_password=self.hasher.hash(password),
            phone=phone,
        )
        self.db.add(db_user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise EmailAlreadyRegisteredError()
        self.db.refresh(db_user)

        logger.info(f"Registered user {db_user.id}")
        return db_user

    def verify(self, email: str, password: str) -> User:
        """Return the user for a matching email/password pair"""
        user = self.get_user_by_email(email)
        if user is None:
            self.hasher.dummy_verify()
            logger.info("Failed login attempt")
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.hashed_password):
            logger.info("Failed login attempt")
            raise InvalidCredentials()
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_profile(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None:
            raise NotFound(USER_NOT_FOUND_MESSAGE)
        return user

    def update_profile(self, user_id: int, name: str, phone: Optional[str]) -> None:
        """Overwrite name and phone. Email cannot be changed here."""
        self.db.query(User).filter(User.id == user_id).update(
            {User.name: name, User.phone: phone},
            synchronize_session=False,
        )
        self.db.commit()

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        user = self.get_profile(user_id)
        old_hash = user.hashed_password

        if not self.hasher.verify(current_password, old_hash):
            raise InvalidCredentials("Current password is incorrect")

        # Keyed on the old hash so a concurrent change makes this one fail
        changed = self.db.query(User).filter(
            User.id == user_id,
            User.hashed_password == old_hash,
        ).update(
            {User.hashed_password: self.hasher.hash(new_password)},
            synchronize_session=False,
        )
        if changed == 0:
            self.db.rollback()
            raise InvalidCredentials("Current password is incorrect")
        self.db.commit()

        logger.info(f"Password changed for user {user_id}")
