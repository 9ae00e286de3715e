import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, Float, Text, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from printshop.core.database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(Base):
    """
    A customer's print job.

    total_price is computed once when the order is submitted and never
    recomputed. Orders are never deleted; cancellation is a status.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    # Foreign key to user - every query filters on it
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    service_type = Column(String, nullable=False)
    material = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    needs_design = Column(Boolean, nullable=False, default=False)
    # Stored by value ("pending", ...) so the column reads like the API
    status = Column(
        Enum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    # Path handed back by the upload store, if a print file was attached
    file_path = Column(String, nullable=True)
    total_price = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # backref creates the reverse side: user.orders
    user = relationship("User", backref="orders")
