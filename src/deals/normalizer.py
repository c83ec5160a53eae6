from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Iterable, List, Mapping, Optional

DEFAULT_TITLE = "Untitled Product"
DEFAULT_SOURCE = "Unknown Source"
DEFAULT_CURRENCY = "USD"


@dataclass(frozen=True)
class Deal:
    title: str
    source: str
    product_link: str
    image_url: str
    price: Optional[float] = None
    original_price: Optional[float] = None
    discount_percent: Optional[int] = None
    currency: str = DEFAULT_CURRENCY

    def to_dict(self) -> dict:
        return asdict(self)


def compute_discount_percent(
    price: Optional[float], original_price: Optional[float]
) -> Optional[int]:
    """Percentage saved off ``original_price``, rounded half up.

    Returns None when the discount cannot be derived: a missing price, a zero
    original price, or an original price that is not above the current one.
    """
    if price is None or original_price is None:
        return None
    if original_price == 0 or original_price <= price:
        return None
    discount = (original_price - price) / original_price * 100
    return int(math.floor(discount + 0.5))


def _as_price(value: Any) -> Optional[float]:
    # bool is an int subclass; a flag is never a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def normalize_result(result: Mapping[str, Any]) -> Deal:
    """Convert one raw Google Shopping result into a :class:`Deal`."""
    if not isinstance(result, Mapping):
        result = {}

    price = _as_price(result.get("extracted_price"))
    original_price = _as_price(result.get("extracted_old_price"))

    return Deal(
        title=_as_text(result.get("title")) or DEFAULT_TITLE,
        source=_as_text(result.get("source")) or DEFAULT_SOURCE,
        product_link=_as_text(result.get("product_link")) or _as_text(result.get("link")),
        image_url=_as_text(result.get("thumbnail")),
        price=price,
        original_price=original_price,
        discount_percent=compute_discount_percent(price, original_price),
        currency=DEFAULT_CURRENCY,
    )


def filter_by_min_discount(
    deals: Iterable[Deal], min_discount: Optional[float]
) -> List[Deal]:
    """Keep deals whose discount is known and at least ``min_discount``."""
    if min_discount is None:
        return list(deals)
    return [
        d
        for d in deals
        if d.discount_percent is not None and d.discount_percent >= min_discount
    ]
