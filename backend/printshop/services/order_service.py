import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import case, func
from sqlalchemy.orm import Session
from printshop.core.exceptions import InvalidTransition, NotFound
from printshop.models.order import Order, OrderStatus
from printshop.services.pricing import quote

logger = logging.getLogger(__name__)

ORDER_NOT_FOUND_MESSAGE = "Order not found"
RECENT_ORDERS_LIMIT = 5

# completed and cancelled are terminal
VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


def is_valid_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in VALID_TRANSITIONS.get(current, set())


def allowed_sources(new: OrderStatus) -> List[OrderStatus]:
    """Statuses an order may be in to move to `new`"""
    return [source for source, targets in VALID_TRANSITIONS.items() if new in targets]


class OrderService:
    """
    Order lifecycle.

    Customer-facing reads and writes always filter on (id, user_id), so an
    order owned by someone else looks exactly like one that does not exist.
    Writes are single conditional UPDATEs rather than read-then-write, which
    keeps concurrent edit/cancel calls on one order from clobbering each other.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_order(
        self,
        user_id: int,
        service_type: str,
        material: str,
        description: Optional[str],
        needs_design: bool,
        file_path: Optional[str] = None,
    ) -> Order:
        order = Order(
            user_id=user_id,
            service_type=service_type,
            material=material,
            description=description,
            needs_design=needs_design,
            status=OrderStatus.PENDING,
            file_path=file_path,
            total_price=quote(material, needs_design),
        )
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)

        logger.info(f"Created order {order.id} for user {user_id} ({material}, total {order.total_price})")
        return order

    def list_orders(self, user_id: int) -> List[Order]:
        """All of a user's orders, newest first"""
        return self._newest_first(user_id).all()

    def recent_orders(self, user_id: int, limit: int = RECENT_ORDERS_LIMIT) -> List[Order]:
        return self._newest_first(user_id).limit(limit).all()

    def get_order(self, user_id: int, order_id: int) -> Order:
        order = self.db.query(Order).filter(
            Order.id == order_id,
            Order.user_id == user_id
        ).first()

        if not order:
            raise NotFound(ORDER_NOT_FOUND_MESSAGE)
        return order

    def update_description(self, user_id: int, order_id: int, description: Optional[str]) -> None:
        """Edit a pending order's description"""
        if not self._update_pending(user_id, order_id, {Order.description: description}):
            raise NotFound("Order not found or cannot be updated anymore")

    def cancel_order(self, user_id: int, order_id: int) -> None:
        """Cancel a pending order. Cancellation cannot be undone."""
        if not self._update_pending(user_id, order_id, {Order.status: OrderStatus.CANCELLED}):
            raise NotFound("Order not found or cannot be cancelled anymore")
        logger.info(f"Order {order_id} cancelled by user {user_id}")

    def advance_status(self, order_id: int, new_status: OrderStatus) -> Order:
        """
        Shop-side status change (e.g. pending -> processing -> completed).

        Raises NotFound if the order does not exist and InvalidTransition if
        its current status cannot move to new_status.
        """
        sources = allowed_sources(new_status)
        changed = 0
        if sources:
            changed = self.db.query(Order).filter(
                Order.id == order_id,
                Order.status.in_(sources)
            ).update({Order.status: new_status}, synchronize_session=False)
        self.db.commit()

        order = self.db.query(Order).filter(Order.id == order_id).first()
        if order is None:
            raise NotFound(ORDER_NOT_FOUND_MESSAGE)
        if changed == 0:
            raise InvalidTransition(order.status.value, new_status.value)

        self.db.refresh(order)
        logger.info(f"Order {order_id} moved to {new_status.value}")
        return order

    def dashboard_summary(self, user_id: int) -> Dict[str, Any]:
        """Order counts and spend for one user. total_spent covers every order."""
        active = case(
            (Order.status.in_([OrderStatus.PENDING, OrderStatus.PROCESSING]), 1),
            else_=0,
        )
        completed = case((Order.status == OrderStatus.COMPLETED, 1), else_=0)

        row = self.db.query(
            func.count(Order.id),
            func.coalesce(func.sum(active), 0),
            func.coalesce(func.sum(completed), 0),
            func.coalesce(func.sum(Order.total_price), 0),
        ).filter(Order.user_id == user_id).one()

        total_orders, active_orders, completed_orders, total_spent = row
        return {
            "total_orders": int(total_orders),
            "active_orders": int(active_orders),
            "completed_orders": int(completed_orders),
            "total_spent": float(total_spent),
        }

    def _newest_first(self, user_id: int):
        # id breaks ties between orders created within the same second
        return self.db.query(Order).filter(
            Order.user_id == user_id
        ).order_by(Order.created_at.desc(), Order.id.desc())

    def _update_pending(self, user_id: int, order_id: int, values: Dict[Any, Any]) -> bool:
        """Apply `values` only if the order exists, belongs to user_id and is pending"""
        changed = self.db.query(Order).filter(
            Order.id == order_id,
            Order.user_id == user_id,
            Order.status == OrderStatus.PENDING
        ).update(values, synchronize_session=False)
        self.db.commit()
        return changed > 0
