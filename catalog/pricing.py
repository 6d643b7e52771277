"""
Catalog pricing resolution.

Pure read transformations over an item's warehouse offers: which offer to
show, whether its promotion is running, and the home page tab selections.
Expects offers with their warehouse (and country) already loaded.
"""
from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence

from django.utils import timezone

from .models import Badge, Item, ItemPrice

HOME_TAB_LIMITS = {
    'bestsellers': 8,
    'discount': 6,
    'new': 4,
}


@dataclass(frozen=True)
class ResolvedPrice:
    """Price information shown for an item on catalog pages."""
    price: Decimal
    original_price: Optional[Decimal]
    promotion_price: Optional[Decimal]
    in_stock: bool
    quantity: int
    warehouse_id: Optional[int]
    warehouse_name: Optional[str]
    warehouse_country: Optional[str]
    displayed_name: Optional[str]
    badge: str = Badge.ABSENT

    def to_dict(self) -> dict:
        return asdict(self)


EMPTY_PRICE = ResolvedPrice(
    price=Decimal('0.00'),
    original_price=None,
    promotion_price=None,
    in_stock=False,
    quantity=0,
    warehouse_id=None,
    warehouse_name=None,
    warehouse_country=None,
    displayed_name=None,
)


def _offers(item: Item) -> List[ItemPrice]:
    return list(item.prices.all())


def select_offer(offers: Sequence[ItemPrice], preferred_country_code: Optional[str] = None) -> Optional[ItemPrice]:
    """
    Pick the offer to display for an item.

    Priority: preferred country with stock, preferred country, any offer with
    stock, first offer.
    """
    offers = list(offers)
    if not offers:
        return None

    if preferred_country_code:
        preferred = [o for o in offers if o.warehouse.country_code == preferred_country_code]
        for offer in preferred:
            if offer.quantity > 0:
                return offer
        if preferred:
            return preferred[0]

    for offer in offers:
        if offer.quantity > 0:
            return offer
    return offers[0]


def is_promotion_active(offer: ItemPrice, now: Optional[datetime] = None) -> bool:
    """
    A promotion runs when its price undercuts the base price and `now` falls
    inside the optional [promo_start_date, promo_end_date] window.
    """
    if offer.promotion_price is None or offer.promotion_price >= offer.price:
        return False

    now = now or timezone.now()
    if offer.promo_start_date and now < offer.promo_start_date:
        return False
    if offer.promo_end_date and now > offer.promo_end_date:
        return False
    return True


def resolve_price(item: Item, preferred_country_code: Optional[str] = None,
                  now: Optional[datetime] = None) -> ResolvedPrice:
    offer = select_offer(_offers(item), preferred_country_code)
    if offer is None:
        return EMPTY_PRICE

    promotion_active = is_promotion_active(offer, now)
    warehouse = offer.warehouse
    return ResolvedPrice(
        price=offer.promotion_price if promotion_active else offer.price,
        original_price=offer.price if promotion_active else None,
        promotion_price=offer.promotion_price if promotion_active else None,
        in_stock=offer.quantity > 0,
        quantity=offer.quantity,
        warehouse_id=warehouse.pk,
        warehouse_name=warehouse.name or warehouse.displayed_name or None,
        warehouse_country=warehouse.country_code,
        displayed_name=warehouse.displayed_name or None,
        badge=offer.badge,
    )


def available_warehouses(item: Item, now: Optional[datetime] = None) -> List[dict]:
    """Every visible warehouse offer of an item, as shown in the warehouse picker."""
    warehouses = []
    for offer in _offers(item):
        warehouse = offer.warehouse
        if not warehouse.is_visible:
            continue
        promotion_active = is_promotion_active(offer, now)
        warehouses.append({
            'warehouse_id': warehouse.pk,
            'warehouse_name': warehouse.name or warehouse.displayed_name or 'Unknown Warehouse',
            'warehouse_country': warehouse.country_code or 'Unknown Country',
            'display_name': warehouse.displayed_name or None,
            'price': offer.promotion_price if promotion_active else offer.price,
            'special_price': offer.promotion_price if promotion_active else None,
            'in_stock': offer.quantity > 0,
            'quantity': offer.quantity,
            'badge': offer.badge,
        })
    return warehouses


def has_badge(item: Item, badge: str) -> bool:
    return any(offer.badge == badge for offer in _offers(item))


def has_active_promotion(item: Item, now: Optional[datetime] = None) -> bool:
    return any(is_promotion_active(offer, now) for offer in _offers(item))


def home_tab(items: Iterable[Item], tab: str, now: Optional[datetime] = None) -> List[Item]:
    """
    Items for one of the home page tabs.

    - bestsellers: top 8 by sell counter
    - discount: up to 6 items with a HOT_DEALS badge or a running promotion
    - new: up to 4 items with a NEW_ARRIVALS badge
    """
    if tab not in HOME_TAB_LIMITS:
        raise ValueError(f"Unknown home tab: {tab}")

    now = now or timezone.now()
    displayed = [item for item in items if item.is_displayed]
    limit = HOME_TAB_LIMITS[tab]

    if tab == 'bestsellers':
        selling = [item for item in displayed if item.sell_counter > 0]
        selling.sort(key=lambda item: item.sell_counter, reverse=True)
        return selling[:limit]

    if tab == 'discount':
        return [
            item for item in displayed
            if has_badge(item, Badge.HOT_DEALS) or has_active_promotion(item, now)
        ][:limit]

    return [item for item in displayed if has_badge(item, Badge.NEW_ARRIVALS)][:limit]


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, str):
        value = ''.join(ch for ch in value if ch.isdigit() or ch in '.,-').replace(',', '.')
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal('0')


def calculate_discount_percentage(original_price, discounted_price) -> int:
    """Whole-percent discount, or 0 when the prices do not describe a discount."""
    original = _to_decimal(original_price)
    discounted = _to_decimal(discounted_price)

    if original <= 0 or discounted <= 0 or discounted >= original:
        return 0

    percentage = (original - discounted) / original * 100
    return int(percentage.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
