from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from printshop.core.database import get_db
from printshop.core.security import SessionClaims
from printshop.api.dependencies import get_current_session
from printshop.api.routes.orders import OrderResponse
from printshop.services.order_service import OrderService

router = APIRouter(tags=["dashboard"])


class DashboardSummary(BaseModel):
    total_orders: int
    active_orders: int
    completed_orders: int
    total_spent: float


class DashboardResponse(BaseModel):
    summary: DashboardSummary
    recentOrders: List[OrderResponse]


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    session: SessionClaims = Depends(get_current_session),
    db: Session = Depends(get_db)
):
    """Order counts, total spend and the five most recent orders"""
    order_service = OrderService(db)
    summary = order_service.dashboard_summary(session.user_id)
    recent_orders = order_service.recent_orders(session.user_id)
    return {"summary": summary, "recentOrders": recent_orders}
