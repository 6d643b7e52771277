"""
Immutable line-item snapshot stored in Order.line_items.
"""
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Optional


def _money(value) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal('0.01'))


@dataclass(frozen=True)
class LineItem:
    """
    One (item, warehouse, quantity) entry of an order with the prices
    captured when the order was placed.

    Amounts are kept as Decimal and written to JSON as strings.
    """
    item_id: int
    article_id: str
    name: str
    quantity: int
    warehouse_id: int
    warehouse_name: Optional[str] = None
    warehouse_displayed_name: Optional[str] = None
    warehouse_country: Optional[str] = None
    base_price: Optional[Decimal] = None
    base_special_price: Optional[Decimal] = None
    unit_price: Decimal = Decimal('0.00')
    line_total: Decimal = Decimal('0.00')

    @classmethod
    def from_offer(cls, offer, quantity: int, name: Optional[str] = None) -> 'LineItem':
        """Snapshot a warehouse offer; the unit price is the promotion price whenever one is set."""
        item = offer.item
        warehouse = offer.warehouse
        unit_price = offer.unit_price
        return cls(
            item_id=item.pk,
            article_id=item.article_id,
            name=name or item.article_id,
            quantity=quantity,
            warehouse_id=warehouse.pk,
            warehouse_name=warehouse.name or warehouse.displayed_name or 'Unknown warehouse',
            warehouse_displayed_name=warehouse.displayed_name,
            warehouse_country=warehouse.country_code,
            base_price=_money(offer.price),
            base_special_price=_money(offer.promotion_price),
            unit_price=_money(unit_price),
            line_total=_money(unit_price * quantity),
        )

    @classmethod
    def price_request(cls, offer, quantity: int, name: Optional[str] = None) -> 'LineItem':
        """Snapshot for a price request: base prices recorded, nothing charged."""
        line = cls.from_offer(offer, quantity, name)
        return replace(line, unit_price=Decimal('0.00'), line_total=Decimal('0.00'))

    @classmethod
    def from_dict(cls, data: Dict) -> 'LineItem':
        return cls(
            item_id=data['item_id'],
            article_id=data['article_id'],
            name=data.get('name') or data['article_id'],
            quantity=int(data['quantity']),
            warehouse_id=data['warehouse_id'],
            warehouse_name=data.get('warehouse_name'),
            warehouse_displayed_name=data.get('warehouse_displayed_name'),
            warehouse_country=data.get('warehouse_country'),
            base_price=_money(data.get('base_price')),
            base_special_price=_money(data.get('base_special_price')),
            unit_price=_money(data.get('unit_price', 0)),
            line_total=_money(data.get('line_total', 0)),
        )

    def to_dict(self) -> Dict:
        def text(value):
            return None if value is None else str(value)

        return {
            'item_id': self.item_id,
            'article_id': self.article_id,
            'name': self.name,
            'quantity': self.quantity,
            'warehouse_id': self.warehouse_id,
            'warehouse_name': self.warehouse_name,
            'warehouse_displayed_name': self.warehouse_displayed_name,
            'warehouse_country': self.warehouse_country,
            'base_price': text(self.base_price),
            'base_special_price': text(self.base_special_price),
            'unit_price': text(self.unit_price),
            'line_total': text(self.line_total),
        }
