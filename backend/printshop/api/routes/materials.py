from typing import List, Optional
from fastapi import APIRouter, Query
from pydantic import BaseModel
from printshop.services.pricing import DESIGN_SERVICE_FEE, base_price, list_materials, quote
from printshop.utils.validators import parse_flag

router = APIRouter(tags=["materials"])


class MaterialResponse(BaseModel):
    id: str
    name: str
    description: str
    strength: str
    flexibility: str
    durability: str
    base_price: float


class QuoteResponse(BaseModel):
    material: str
    needs_design: bool
    base_price: float
    design_fee: float
    total_price: float
    # The price charged is computed again when the order is submitted
    estimate: bool = True


@router.get("/materials", response_model=List[MaterialResponse])
async def get_materials():
    """Printable materials with their base prices"""
    return list_materials()


@router.get("/quote", response_model=QuoteResponse)
async def get_quote(
    material: str = Query(..., min_length=1),
    needs_design: Optional[str] = Query(None)
):
    """Price estimate for the order form"""
    design = parse_flag(needs_design)
    return {
        "material": material,
        "needs_design": design,
        "base_price": base_price(material),
        "design_fee": DESIGN_SERVICE_FEE if design else 0,
        "total_price": quote(material, design),
    }
