"""
Read-side queries for the public catalog.

Every query loads details, offers, warehouses and taxonomy up front so the
serializers and pricing helpers never trigger per-item queries.
"""
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.conf import settings
from django.db.models import Prefetch, Q, QuerySet

from .models import Category, Item, ItemDetail, ItemPrice, Subcategory
from .pricing import resolve_price


class InvalidLocaleError(ValueError):
    pass


def validate_locale(locale: str) -> str:
    if locale not in settings.SUPPORTED_LOCALES:
        raise InvalidLocaleError(f"Invalid locale: {locale}")
    return locale


def offers_prefetch() -> Prefetch:
    return Prefetch(
        'prices',
        queryset=ItemPrice.objects.select_related('warehouse', 'warehouse__country').order_by('id'),
    )


def items_for_locale(locale: str) -> QuerySet:
    """
    Displayed items that have a detail row for the locale.

    Each item carries ``locale_details``: a one-element list with its detail
    for the requested locale.
    """
    return (
        Item.objects.filter(is_displayed=True, details__locale=locale)
        .select_related('brand', 'category', 'subcategory', 'subcategory__category')
        .prefetch_related(
            Prefetch(
                'details',
                queryset=ItemDetail.objects.filter(locale=locale),
                to_attr='locale_details',
            ),
            offers_prefetch(),
        )
        .distinct()
        .order_by('-created_at')
    )


def get_item_for_locale(locale: str, article_id: str) -> Optional[Item]:
    return items_for_locale(locale).filter(article_id=article_id).first()


def items_in_category(locale: str, slug: str) -> QuerySet:
    """Items of a category, or of a subcategory when the slug names one."""
    return items_for_locale(locale).filter(
        Q(category__slug=slug) | Q(subcategory__slug=slug)
    )


def filter_category_items(queryset: QuerySet, params) -> QuerySet:
    """Apply the repeatable subcategory / brand / warehouse filters."""
    subcategories = params.getlist('subcategory')
    if subcategories:
        queryset = queryset.filter(subcategory__slug__in=subcategories)

    brands = params.getlist('brand')
    if brands:
        queryset = queryset.filter(Q(brand__alias__in=brands) | Q(brand__name__in=brands))

    warehouses = params.getlist('warehouse')
    if warehouses:
        warehouse_ids = [w for w in warehouses if w.isdigit()]
        queryset = queryset.filter(
            Q(prices__warehouse__name__in=warehouses) | Q(prices__warehouse_id__in=warehouse_ids)
        ).distinct()

    return queryset


def _parse_decimal(value: Optional[str]) -> Optional[Decimal]:
    if not value:
        return None
    try:
        result = Decimal(value)
    except InvalidOperation:
        return None
    # NaN and Infinity parse but cannot be compared
    return result if result.is_finite() else None


def price_filtered_and_sorted(items, params, country_code: Optional[str] = None) -> List[tuple]:
    """
    Resolve each item's display price, then filter by min_price/max_price and
    order by ``sort`` (price_asc, price_desc, popular, newest).

    Returns a list of (item, ResolvedPrice) tuples.
    """
    resolved = [(item, resolve_price(item, country_code)) for item in items]

    # Invalid bounds are ignored
    min_price = _parse_decimal(params.get('min_price'))
    if min_price is not None:
        resolved = [(item, price) for item, price in resolved if price.price >= min_price]

    max_price = _parse_decimal(params.get('max_price'))
    if max_price is not None:
        resolved = [(item, price) for item, price in resolved if price.price <= max_price]

    sort = params.get('sort', 'newest')
    if sort == 'price_asc':
        resolved.sort(key=lambda pair: pair[1].price)
    elif sort == 'price_desc':
        resolved.sort(key=lambda pair: pair[1].price, reverse=True)
    elif sort == 'popular':
        resolved.sort(key=lambda pair: pair[0].sell_counter, reverse=True)

    return resolved


def visible_categories() -> QuerySet:
    return (
        Category.objects.filter(is_visible=True)
        .prefetch_related(
            'translations',
            Prefetch(
                'subcategories',
                queryset=Subcategory.objects.filter(is_visible=True).prefetch_related('translations'),
                to_attr='visible_subcategories',
            ),
        )
        .order_by('name')
    )


def search_items(keyword: str, locale: Optional[str] = None) -> QuerySet:
    """Displayed items whose article id or (localized) name contains the keyword."""
    name_filter = Q(details__item_name__icontains=keyword)
    if locale:
        name_filter &= Q(details__locale=locale)

    return (
        Item.objects.filter(is_displayed=True)
        .filter(Q(article_id__icontains=keyword) | name_filter)
        .select_related('brand', 'category', 'subcategory')
        .prefetch_related('details', offers_prefetch())
        .distinct()
        .order_by('-sell_counter', 'article_id')
    )
