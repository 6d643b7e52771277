"""
Catalog Service Layer - back-office batch operations on items.

1. select_items: resolve a batch from explicit article ids or list filters
2. batch_delete_items / batch_set_visibility: act on the whole batch at once
3. bulk_update_prices: upsert one warehouse's offers row by row, recording
   the previous values in ItemPriceHistory
4. export_rows / rows_to_csv: flatten items into one row per (locale, offer)
"""
import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from django.db import DatabaseError, transaction
from django.db.models import Q, QuerySet

from .models import Badge, Brand, Item, ItemDetail, ItemPrice, ItemPriceHistory, Warehouse

logger = logging.getLogger(__name__)

PLACEHOLDER_LOCALE = 'pl'
EXPORT_FIELDS = [
    'article_id', 'is_displayed', 'image_link', 'category_name', 'subcategory_name',
    'brand_name', 'warranty_type', 'warranty_length', 'sell_counter', 'locale',
    'item_name', 'description', 'specifications', 'seller', 'discount',
    'popularity', 'warehouse_name', 'price', 'quantity', 'promotion_price',
    'promo_code', 'promo_end_date', 'badge',
]


class BatchSelectionError(Exception):
    """Raised when a batch request names neither items nor filters."""
    pass


class WarehouseNotFoundError(Exception):
    pass


@dataclass
class BulkPriceUpdateResult:
    updated: int = 0
    created: int = 0
    created_items: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.updated + self.created


# =============================================================================
# Batch selection
# =============================================================================

def select_items(article_ids: Optional[List[str]] = None, filters: Optional[Dict] = None) -> QuerySet:
    """
    Items targeted by a batch request.

    Explicit article ids win; otherwise the filters ('search_term', 'brand'
    alias, 'category' or subcategory slug) are applied, and an empty filter
    object selects every item.

    Raises:
        BatchSelectionError: If neither article ids nor filters are given
    """
    if article_ids:
        return Item.objects.filter(article_id__in=article_ids)

    if filters is None:
        raise BatchSelectionError('Either article_ids or filters must be provided')

    queryset = Item.objects.all()

    term = (filters.get('search_term') or '').strip()
    if term:
        queryset = queryset.filter(
            Q(article_id__icontains=term) |
            Q(brand__alias__icontains=term) |
            Q(brand__name__icontains=term) |
            Q(details__item_name__icontains=term)
        )

    if filters.get('brand'):
        queryset = queryset.filter(brand__alias=filters['brand'])

    if filters.get('category'):
        queryset = queryset.filter(
            Q(category__slug=filters['category']) | Q(subcategory__slug=filters['category'])
        )

    return queryset


def _item_ids(queryset: QuerySet) -> List[int]:
    return list(queryset.values_list('pk', flat=True).distinct())


def batch_delete_items(article_ids=None, filters=None) -> int:
    """Delete the selected items with their details, offers and price history."""
    ids = _item_ids(select_items(article_ids, filters))
    if not ids:
        return 0

    with transaction.atomic():
        Item.objects.filter(pk__in=ids).delete()

    logger.info(f"Batch deleted {len(ids)} item(s)")
    return len(ids)


def batch_set_visibility(is_displayed: bool, article_ids=None, filters=None) -> int:
    """Show or hide the selected items; returns the number of items affected."""
    ids = _item_ids(select_items(article_ids, filters))
    if not ids:
        return 0

    affected = Item.objects.filter(pk__in=ids).update(is_displayed=is_displayed)
    logger.info(f"Batch set is_displayed={is_displayed} on {affected} item(s)")
    return affected


# =============================================================================
# Bulk price update
# =============================================================================

def _placeholder_item(article_id: str, brand_name: Optional[str]) -> Item:
    """Hidden item for an unknown article id, to be completed in the back-office."""
    brand = Brand.objects.filter(name=brand_name).first() if brand_name else None
    item = Item.objects.create(article_id=article_id, is_displayed=False, brand=brand)
    ItemDetail.objects.create(
        item=item,
        locale=PLACEHOLDER_LOCALE,
        item_name=article_id,
        description=article_id,
    )
    return item


def _apply_price_row(warehouse: Warehouse, row: Dict) -> Tuple[bool, bool]:
    """Returns (offer_created, item_created)."""
    item = Item.objects.filter(article_id=row['article_id']).first()
    item_created = item is None
    if item_created:
        item = _placeholder_item(row['article_id'], row.get('brand'))

    values = {
        'price': row['price'],
        'quantity': row['quantity'],
        'badge': row.get('badge') or Badge.ABSENT,
        'promo_code': row.get('promo_code') or '',
        'promotion_price': row.get('promotion_price'),
        'promo_start_date': row.get('promo_start_date'),
        'promo_end_date': row.get('promo_end_date'),
    }

    offer = ItemPrice.objects.select_for_update().filter(item=item, warehouse=warehouse).first()
    if offer is None:
        ItemPrice.objects.create(item=item, warehouse=warehouse, **values)
        return True, item_created

    ItemPriceHistory.record(offer)
    for name, value in values.items():
        setattr(offer, name, value)
    offer.save()
    return False, item_created


def bulk_update_prices(warehouse_id: int, rows: List[Dict]) -> BulkPriceUpdateResult:
    """
    Upsert the offers of one warehouse.

    Each row is applied in its own savepoint, so a failing row is reported
    in the result without undoing the others. Unknown article ids get a
    hidden placeholder item.

    Args:
        warehouse_id: Warehouse whose offers are updated
        rows: Validated rows with 'article_id', 'price', 'quantity' and
            optional 'badge', 'brand', 'promo_code', 'promotion_price',
            'promo_start_date', 'promo_end_date'

    Raises:
        WarehouseNotFoundError: If the warehouse does not exist
    """
    try:
        warehouse = Warehouse.objects.get(pk=warehouse_id)
    except Warehouse.DoesNotExist:
        raise WarehouseNotFoundError('Warehouse not found')

    result = BulkPriceUpdateResult()
    logger.info(f"Starting bulk price update of {len(rows)} row(s) for warehouse {warehouse.name}")

    for row in rows:
        try:
            with transaction.atomic():
                offer_created, item_created = _apply_price_row(warehouse, row)
        except DatabaseError as e:
            logger.error(f"Bulk price update failed for {row['article_id']}: {e}")
            result.errors.append(f"Error processing {row['article_id']}: {e}")
            continue

        if offer_created:
            result.created += 1
        else:
            result.updated += 1
        if item_created:
            result.created_items += 1

    logger.info(
        f"Bulk price update for warehouse {warehouse.name} done: {result.updated} updated, "
        f"{result.created} created, {result.created_items} new item(s), {len(result.errors)} error(s)"
    )
    return result


# =============================================================================
# Export
# =============================================================================

def _text(value) -> str:
    if value is None:
        return ''
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def export_rows() -> Iterator[Dict[str, str]]:
    """
    One row per (detail, offer) combination of every item, newest first.
    Items without details or offers still produce a row with blanks.
    """
    items = Item.objects.select_related('category', 'subcategory', 'brand').prefetch_related(
        'details', 'prices__warehouse'
    ).order_by('-id')

    for item in items:
        base = {
            'article_id': item.article_id,
            'is_displayed': _text(item.is_displayed),
            'image_link': item.image_links[0] if item.image_links else '',
            'category_name': item.category.name if item.category else '',
            'subcategory_name': item.subcategory.name if item.subcategory else '',
            'brand_name': item.brand.name if item.brand else '',
            'warranty_type': item.warranty_type,
            'warranty_length': _text(item.warranty_length),
            'sell_counter': _text(item.sell_counter),
        }
        for detail in list(item.details.all()) or [None]:
            for offer in list(item.prices.all()) or [None]:
                row = dict(base)
                row.update({
                    'locale': detail.locale if detail else PLACEHOLDER_LOCALE,
                    'item_name': detail.item_name if detail else '',
                    'description': detail.description if detail else '',
                    'specifications': detail.specifications if detail else '',
                    'seller': detail.seller if detail else '',
                    'discount': _text(detail.discount) if detail else '',
                    'popularity': _text(detail.popularity) if detail else '',
                    'warehouse_name': offer.warehouse.name if offer else '',
                    'price': _text(offer.price) if offer else '',
                    'quantity': _text(offer.quantity) if offer else '',
                    'promotion_price': _text(offer.promotion_price) if offer else '',
                    'promo_code': offer.promo_code if offer else '',
                    'promo_end_date': _text(offer.promo_end_date) if offer else '',
                    'badge': offer.badge if offer else '',
                })
                yield row


def rows_to_csv(rows) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_FIELDS)
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()
