import logging
from datetime import datetime
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Form, Path, UploadFile, File as FastAPIFile, status
from pydantic import BaseModel, ConfigDict, field_serializer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from printshop.core.database import get_db
from printshop.core.security import SessionClaims
from printshop.api.dependencies import get_current_session, get_storage, require_staff
from printshop.models.order import OrderStatus
from printshop.services.order_service import OrderService
from printshop.storage.local_storage import LocalStorage
from printshop.utils.validators import parse_flag

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

# Ids are SQLite INTEGERs; anything outside this range cannot name a row
MAX_ORDER_ID = 2**63 - 1
OrderId = Annotated[int, Path(ge=1, le=MAX_ORDER_ID)]


class OrderResponse(BaseModel):
    id: int
    user_id: int
    service_type: str
    material: str
    description: Optional[str]
    needs_design: bool
    status: OrderStatus
    file_path: Optional[str]
    total_price: float
    created_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('created_at')
    def serialize_created_at(self, value: Optional[datetime], _info):
        return value.isoformat() if value else None


class OrderCreatedResponse(BaseModel):
    message: str
    orderId: int
    totalPrice: float


class OrderUpdate(BaseModel):
    description: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    service_type: str = Form(..., min_length=1),
    material: str = Form(..., min_length=1),
    description: Optional[str] = Form(None),
    needs_design: Optional[str] = Form(None),
    file: Optional[UploadFile] = FastAPIFile(None),
    session: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db),
    storage: LocalStorage = Depends(get_storage)
):
    """
    Submit a print order.

    The price is computed here and stored with the order; any estimate the
    client showed beforehand is informational only.
    """
    file_path = None
    if file is not None and file.filename:
        file_path, _ = await storage.save_file(file, session.user_id)

    try:
        order = OrderService(db).create_order(
            user_id=session.user_id,
            service_type=service_type,
            material=material,
            description=description,
            needs_design=parse_flag(needs_design),
            file_path=file_path,
        )
    except SQLAlchemyError:
        # Don't leave an upload behind that no order points at
        if file_path:
            storage.delete_path(file_path)
        raise

    return {
        "message": "Order created successfully",
        "orderId": order.id,
        "totalPrice": order.total_price,
    }


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    session: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    """List the caller's orders, newest first"""
    return OrderService(db).list_orders(session.user_id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: OrderId,
    session: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    """Get one of the caller's orders"""
    return OrderService(db).get_order(session.user_id, order_id)


@router.put("/{order_id}")
async def update_order(
    order_id: OrderId,
    order_update: OrderUpdate,
    session: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    """Edit the description of a pending order"""
    OrderService(db).update_description(session.user_id, order_id, order_update.description)
    return {"message": "Order updated successfully"}


@router.delete("/{order_id}")
async def cancel_order(
    order_id: OrderId,
    session: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    """Cancel a pending order. The order is kept with status 'cancelled'."""
    OrderService(db).cancel_order(session.user_id, order_id)
    return {"message": "Order cancelled successfully"}


@router.patch("/{order_id}/status", response_model=OrderResponse, dependencies=[Depends(require_staff)])
async def update_order_status(
    order_id: OrderId,
    status_update: OrderStatusUpdate,
    db: Session = Depends(get_db)
):
    """
    Move an order along its lifecycle (shop staff only).

    Valid status transitions:
    - pending → processing, completed, cancelled
    - processing → completed
    - completed, cancelled → (no transitions allowed)
    """
    return OrderService(db).advance_status(order_id, status_update.status)
