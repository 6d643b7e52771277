"""
Order Service Layer - Atomic order creation and status changes.

Implements fail-fast pattern:
1. Validate cart structure before touching the database
2. Lock the requested warehouse offers with select_for_update()
3. Validate ALL lines have an offer with sufficient stock
4. If ANY fails: raise, nothing is written
5. If ALL pass: create the order in NEW status and deduct stock,
   inside the same transaction
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Dict, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q

from catalog.models import Item, ItemPrice
from .line_items import LineItem
from .models import Order

logger = logging.getLogger(__name__)


class OrderValidationError(Exception):
    """Raised when the order payload is malformed."""
    pass


class ItemNotFoundError(Exception):
    """Raised when a cart line references an unknown article."""
    def __init__(self, article_id: str):
        self.article_id = article_id
        super().__init__(f"Item {article_id} not found")


class InsufficientStockError(Exception):
    """Raised when there's not enough stock for a cart line."""
    def __init__(self, article_id: str, requested: int, available: int, name: Optional[str] = None):
        self.article_id = article_id
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for item {name or article_id}")


class OfferUnavailableError(Exception):
    """Raised when an item has no offer in the requested warehouse."""
    def __init__(self, message: str = 'Item not available in selected warehouse'):
        super().__init__(message)


class InvalidOrderActionError(Exception):
    """Raised when a customer action is not allowed in the current order state."""
    pass


class OrderStatusError(Exception):
    """Raised when a back-office status change is invalid."""
    pass


def _positive_int(value, label: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value)
    else:
        number = 0
    if number < 1:
        raise OrderValidationError(f"{label}: quantity must be a positive integer")
    return number


def _warehouse_id(value, label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise OrderValidationError(f"{label}: warehouse_id is required")


def validate_cart_items(cart_items) -> List[Dict]:
    """
    Validate cart lines structure.

    Args:
        cart_items: List of dicts with 'article_id', 'warehouse_id', 'quantity'
            and optional 'name'

    Returns:
        Normalized list of lines; lines repeating an (article, warehouse)
        pair are merged into the first one with the quantities summed

    Raises:
        OrderValidationError: If validation fails
    """
    if not isinstance(cart_items, list) or not cart_items:
        raise OrderValidationError('Cart is empty')

    normalized = []
    merged = {}
    for idx, line in enumerate(cart_items):
        if not isinstance(line, dict):
            raise OrderValidationError(f"Item {idx}: must be an object")
        article_id = line.get('article_id')
        if not article_id or not str(article_id).strip():
            raise OrderValidationError('Each cart item must include an article_id')

        label = f"Item {idx}"
        warehouse_id = _warehouse_id(line.get('warehouse_id'), label)
        quantity = _positive_int(line.get('quantity'), label)

        key = (str(article_id), warehouse_id)
        if key in merged:
            merged[key]['quantity'] += quantity
            logger.info(f"{label}: merged duplicate article_id {article_id} for warehouse {warehouse_id}")
            continue

        entry = {
            'article_id': str(article_id),
            'warehouse_id': warehouse_id,
            'quantity': quantity,
            'name': line.get('name') or None,
        }
        merged[key] = entry
        normalized.append(entry)
    return normalized


def _parse_client_total(value) -> Optional[Decimal]:
    if value is None or value == '':
        return None
    try:
        return Decimal(str(value)).quantize(Decimal('0.01'))
    except InvalidOperation:
        raise OrderValidationError('original_total_price must be a number')


def _default_item_name(item: Item) -> Optional[str]:
    detail = item.details.order_by('id').first()
    return detail.item_name if detail else None


def _lock_offers(pairs):
    """
    Lock the offers for the given (item_id, warehouse_id) pairs.

    Rows are locked in id order to prevent deadlocks between concurrent
    orders touching the same offers.
    """
    pairs = list(pairs)
    if not pairs:
        return {}

    condition = Q()
    for item_id, warehouse_id in pairs:
        condition |= Q(item_id=item_id, warehouse_id=warehouse_id)

    offers = ItemPrice.objects.select_for_update(of=('self',)).select_related(
        'item', 'warehouse__country'
    ).filter(condition).order_by('id')
    return {(offer.item_id, offer.warehouse_id): offer for offer in offers}


def create_order(
    user,
    cart_items,
    total_price,
    original_total_price=None,
    delivery_id: Optional[str] = None,
    customer_info: Optional[Dict] = None,
) -> Order:
    """
    Create an order and deduct stock in one transaction.

    Fail-fast: if ANY line's item is missing or ANY offer lacks stock, the
    whole request fails and nothing is written.

    Args:
        user: Customer placing the order
        cart_items: List of dicts with 'article_id', 'warehouse_id', 'quantity'
        total_price: Formatted total as displayed to the customer
        original_total_price: Client-side total in the base currency, compared
            against the computed total for logging only
        delivery_id: Optional delivery ticket identifier
        customer_info: Optional contact/shipping details

    Returns:
        The created Order in NEW status

    Raises:
        OrderValidationError: If the payload is malformed
        ItemNotFoundError: If an article does not exist
        InsufficientStockError: If an offer is missing or short on stock
    """
    lines = validate_cart_items(cart_items)

    if not isinstance(total_price, str) or not total_price.strip():
        raise OrderValidationError('A formatted total_price string is required')
    client_total = _parse_client_total(original_total_price)

    article_ids = [line['article_id'] for line in lines]
    items = {item.article_id: item for item in Item.objects.filter(article_id__in=article_ids)}
    for article_id in article_ids:
        if article_id not in items:
            logger.warning(f"Order rejected: item {article_id} not found")
            raise ItemNotFoundError(article_id)

    with transaction.atomic():
        offers = _lock_offers(
            (items[line['article_id']].pk, line['warehouse_id']) for line in lines
        )

        # FAIL-FAST: Check all stock BEFORE any deductions
        snapshot = []
        for line in lines:
            item = items[line['article_id']]
            offer = offers.get((item.pk, line['warehouse_id']))
            name = line['name'] or _default_item_name(item)
            available = offer.quantity if offer else 0
            if offer is None or available < line['quantity']:
                logger.warning(
                    f"Order rejected: {item.article_id} @ warehouse {line['warehouse_id']} "
                    f"requested {line['quantity']}, available {available}"
                )
                raise InsufficientStockError(item.article_id, line['quantity'], available, name)
            snapshot.append((offer, LineItem.from_offer(offer, line['quantity'], name)))

        computed_total = sum((li.line_total for _, li in snapshot), Decimal('0.00'))
        tolerance = Decimal(str(settings.ORDER_TOTAL_TOLERANCE))
        if client_total is not None and abs(client_total - computed_total) > tolerance:
            logger.warning(
                f"Mismatch between client supplied and computed original totals: "
                f"client {client_total}, computed {computed_total}"
            )

        order = Order.objects.create(
            user=user,
            status=Order.Status.NEW,
            original_total_price=computed_total,
            total_price=total_price.strip(),
            line_items=[li.to_dict() for _, li in snapshot],
            customer_info=customer_info or {},
            delivery_id=delivery_id or None,
        )

        for offer, li in snapshot:
            ItemPrice.objects.filter(pk=offer.pk).update(quantity=F('quantity') - li.quantity)
            Item.objects.filter(pk=offer.item_id).update(sell_counter=F('sell_counter') + li.quantity)
            logger.debug(
                f"Order #{order.id}: deducted {li.quantity} of {li.article_id} "
                f"at warehouse {li.warehouse_id}, remaining stock: {offer.quantity - li.quantity}"
            )

    logger.info(
        f"Order #{order.id} created for user {user.pk}: {len(snapshot)} lines, "
        f"total {computed_total} {settings.BASE_CURRENCY}"
    )
    return order


def create_price_request(user, item_id, warehouse_id, quantity, comment: Optional[str] = None) -> Order:
    """
    Record a price request for one item at one warehouse.

    No stock is reserved; the order carries a single zero-priced line.
    """
    quantity = _positive_int(quantity, 'Price request')
    try:
        item = Item.objects.get(pk=int(item_id))
    except (TypeError, ValueError, Item.DoesNotExist):
        raise ItemNotFoundError(str(item_id))

    offer = ItemPrice.objects.select_related('item', 'warehouse__country').filter(
        item=item, warehouse_id=_warehouse_id(warehouse_id, 'Price request')
    ).first()
    if offer is None:
        raise OfferUnavailableError()

    line = LineItem.price_request(offer, quantity, _default_item_name(item))
    order = Order.objects.create(
        user=user,
        status=Order.Status.ASK_FOR_PRICE,
        original_total_price=Decimal('0.00'),
        total_price='0',
        line_items=[line.to_dict()],
        comment=comment or '',
    )
    logger.info(f"Price request #{order.id} created for {item.article_id} by user {user.pk}")
    return order


def cancel_order(order_id: int, user) -> Order:
    """
    Cancel a customer's own order.

    Only orders in NEW status may be cancelled. Stock taken by the order
    is not returned to the warehouse offers.

    Raises:
        Order.DoesNotExist: If the order does not exist or belongs to someone else
        InvalidOrderActionError: If the order is not NEW
    """
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id, user=user)
        if not order.can_be_cancelled:
            logger.warning(f"Order #{order.id} cancel rejected: status {order.status}")
            raise InvalidOrderActionError(
                f"Only orders with status {Order.Status.NEW} can be cancelled"
            )

        order.status = Order.Status.CANCELLED
        order.save(update_fields=['status', 'updated_at'])

    logger.info(f"Order #{order.id} cancelled by user {user.pk}")
    return order


def update_order_status(order: Order, new_status: str, delivery_id: Optional[str] = None) -> Order:
    """
    Set an order's status from the back-office.

    Any status may follow any other; DELIVERY requires a delivery id.

    Raises:
        OrderStatusError: If the status is unknown or the delivery id is missing
    """
    if new_status not in Order.Status.values:
        raise OrderStatusError(f"Invalid status: {new_status}")

    delivery_id = (delivery_id or '').strip() or None
    if new_status == Order.Status.DELIVERY and not delivery_id:
        raise OrderStatusError('Delivery ID is required for DELIVERY status')

    previous = order.status
    order.status = new_status
    if delivery_id:
        order.delivery_id = delivery_id
    order.save(update_fields=['status', 'delivery_id', 'updated_at'])

    logger.info(f"Order #{order.id} status changed {previous} -> {new_status}")
    return order
