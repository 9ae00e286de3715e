from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from printshop.core.database import Base


class User(Base):
    """
    User model representing shop customers.

    Stores login credentials and contact details.
    Passwords are stored as hashes (never plaintext).
    Users are never hard-deleted.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # Unique constraint is what rejects duplicate registrations
    email = Column(String, unique=True, index=True, nullable=False)
    # Password is hashed using bcrypt - never store plaintext passwords
    hashed_password = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
