# valuegraph/pricing.py
import math
from typing import Dict, Literal

SoldTier = Literal["sold out", "nearly sold", "selling"]


def floor_plan_pricing(price: float, bonus: float, square_feet: float) -> Dict[str, float]:
    """
    Derived floor plan prices. Net price is price plus bonus (bonus is
    usually negative); per-square-foot prices are 0 when square_feet is 0.
    """
    price = float(price or 0)
    bonus = float(bonus or 0)
    sqft = float(square_feet or 0)
    net = price + bonus
    return {
        "net_price": net,
        "price_per_sq_ft": price / sqft if sqft > 0 else 0.0,
        "net_price_per_sq_ft": net / sqft if sqft > 0 else 0.0,
    }


def sold_ratio(total_sold: int, total_lots: int) -> float:
    return total_sold / total_lots if total_lots > 0 else 0.0


def sold_percentage(total_sold: int, total_lots: int) -> int:
    # half-up, so 62.5 reads as 63
    return int(math.floor(sold_ratio(total_sold, total_lots) * 100 + 0.5))


def sold_tier(percentage: int) -> SoldTier:
    if percentage >= 100:
        return "sold out"
    if percentage >= 75:
        return "nearly sold"
    return "selling"
