"""
Order pricing.

Everything here is pure: no I/O, no clock, no database. The same quote()
answers both the public estimate endpoint and order submission; only the
value computed at submission is persisted on the order.
"""

from typing import Any, Dict, List

DEFAULT_BASE_PRICE = 15
DESIGN_SERVICE_FEE = 50

# Unknown materials are priced at DEFAULT_BASE_PRICE, not rejected
BASE_PRICES: Dict[str, int] = {
    "pla": 10,
    "abs": 18,
    "petg": 18,
    "resin": 25,
    "nylon": 25,
    "metal": 25,
}

MATERIAL_CATALOG: Dict[str, Dict[str, str]] = {
    "pla": {
        "name": "PLA",
        "description": "Biodegradable and easy to print. Great for decorative items, prototypes, and low-stress applications.",
        "strength": "Medium",
        "flexibility": "Low",
        "durability": "Medium",
    },
    "abs": {
        "name": "ABS",
        "description": "Strong and impact-resistant. Good for functional parts that need to withstand moderate stress.",
        "strength": "High",
        "flexibility": "Medium",
        "durability": "High",
    },
    "petg": {
        "name": "PETG",
        "description": "Combines strength of ABS with ease of printing like PLA. Good for mechanical parts and water-resistant applications.",
        "strength": "High",
        "flexibility": "Medium",
        "durability": "High",
    },
    "resin": {
        "name": "Resin",
        "description": "Superior detail and smooth finish. Ideal for miniatures, jewelry, and highly detailed models.",
        "strength": "Medium",
        "flexibility": "Low",
        "durability": "Medium",
    },
    "nylon": {
        "name": "Nylon",
        "description": "Extremely durable and flexible. Perfect for functional parts that need to bend without breaking.",
        "strength": "Very High",
        "flexibility": "High",
        "durability": "Very High",
    },
    "metal": {
        "name": "Metal (Steel/Aluminum)",
        "description": "For industrial-grade parts that need maximum strength and heat resistance.",
        "strength": "Extremely High",
        "flexibility": "Low",
        "durability": "Extremely High",
    },
}


def base_price(material: str) -> int:
    """Base price for a material, exact key match"""
    return BASE_PRICES.get(material, DEFAULT_BASE_PRICE)


def quote(material: str, needs_design: bool) -> int:
    """Total price for an order: material base price plus the design fee if requested"""
    return base_price(material) + (DESIGN_SERVICE_FEE if needs_design else 0)


def list_materials() -> List[Dict[str, Any]]:
    """Catalog entries in display order, each with its base price"""
    return [
        {"id": material_id, "base_price": BASE_PRICES[material_id], **info}
        for material_id, info in MATERIAL_CATALOG.items()
    ]
