"""
Catalog API Views.

Implements:
- Public, locale-specific item listings with resolved prices
- Home page tabs and category pages
- Keyword search and rate-limited autocomplete
- Admin CRUD for brands, categories, warehouses, items, offers and exchange rates
- Admin batch delete / visibility, bulk price updates and item export
"""
import logging

from django.conf import settings
from django.db.models import Count, Q
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import error_response, server_error_response
from core.permissions import IsAdminRole
from core.rate_limiting import rate_limit
from .currency import base_currency, get_exchange_rate, normalize_currency
from .models import (
    Brand,
    Category,
    CurrencyExchange,
    Item,
    ItemPrice,
    Subcategory,
    Warehouse,
    WarehouseCountry,
)
from .pricing import home_tab, HOME_TAB_LIMITS
from .selectors import (
    InvalidLocaleError,
    filter_category_items,
    get_item_for_locale,
    items_for_locale,
    items_in_category,
    price_filtered_and_sorted,
    search_items,
    validate_locale,
    visible_categories,
)
from .services import (
    batch_delete_items,
    batch_set_visibility,
    bulk_update_prices,
    export_rows,
    rows_to_csv,
    BatchSelectionError,
    WarehouseNotFoundError,
)
from .serializers import (
    AdminItemSerializer,
    BrandSerializer,
    BulkPriceRowSerializer,
    BulkPriceUpdateSerializer,
    CategorySerializer,
    CurrencyExchangeSerializer,
    CurrencyExchangeUpsertSerializer,
    ItemBatchSerializer,
    ItemBatchVisibilitySerializer,
    ItemPriceSerializer,
    ItemVisibilitySerializer,
    PublicCategorySerializer,
    PublicItemSerializer,
    SubcategorySerializer,
    WarehouseCountrySerializer,
    WarehouseSerializer,
)

logger = logging.getLogger(__name__)


def build_catalog_context(request, locale):
    """
    Serializer context shared by the public item views.

    Query Parameters:
        - country: Preferred warehouse country (default DEFAULT_COUNTRY_CODE)
        - currency: Adds converted and formatted prices (EUR, PLN, UAH)

    Raises ValueError for an unknown locale or currency.
    """
    validate_locale(locale)
    context = {
        'locale': locale,
        'country': request.query_params.get('country', settings.DEFAULT_COUNTRY_CODE).upper(),
    }
    currency = request.query_params.get('currency')
    if currency:
        currency = normalize_currency(currency)
        context['currency'] = currency
        context['exchange_rate'] = get_exchange_rate(base_currency(), currency)
    return context


# =============================================================================
# Public Item Views
# =============================================================================

class PublicItemListView(generics.ListAPIView):
    """
    GET: Displayed items that have details in the given locale.

    Query Parameters:
        - country: Preferred warehouse country for price resolution
        - currency: Display currency
    """
    serializer_class = PublicItemSerializer
    permission_classes = [AllowAny]

    def list(self, request, *args, **kwargs):
        try:
            self.catalog_context = build_catalog_context(request, kwargs['locale'])
        except ValueError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        return super().list(request, *args, **kwargs)

    def get_queryset(self):
        return items_for_locale(self.kwargs['locale'])

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context.update(getattr(self, 'catalog_context', {}))
        return context


class PublicItemDetailView(APIView):
    """
    GET: One displayed item with every visible warehouse offer.
    """
    permission_classes = [AllowAny]

    def get(self, request, locale, article_id):
        try:
            context = build_catalog_context(request, locale)
        except ValueError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))

        item = get_item_for_locale(locale, article_id)
        if item is None:
            return error_response(status.HTTP_404_NOT_FOUND, 'Item not found')

        context.update({'request': request, 'include_warehouses': True})
        return Response(PublicItemSerializer(item, context=context).data)


class HomeTabView(APIView):
    """
    GET: Items for a home page tab.

    Query Parameters:
        - tab: bestsellers (default), discount or new
    """
    permission_classes = [AllowAny]

    def get(self, request, locale):
        tab = request.query_params.get('tab', 'bestsellers')
        if tab not in HOME_TAB_LIMITS:
            return error_response(
                status.HTTP_400_BAD_REQUEST,
                f"tab must be one of: {', '.join(HOME_TAB_LIMITS)}"
            )
        try:
            context = build_catalog_context(request, locale)
        except ValueError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))

        items = home_tab(items_for_locale(locale), tab)
        context['request'] = request
        return Response({
            'tab': tab,
            'items': PublicItemSerializer(items, many=True, context=context).data,
        })


# =============================================================================
# Public Taxonomy Views
# =============================================================================

class PublicCategoryListView(APIView):
    """GET: Visible categories with names translated to the locale."""
    permission_classes = [AllowAny]

    def get(self, request, locale):
        try:
            validate_locale(locale)
        except InvalidLocaleError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))

        serializer = PublicCategorySerializer(
            visible_categories(), many=True, context={'locale': locale}
        )
        return Response(serializer.data)


class CategoryItemsView(APIView):
    """
    GET: Items of a category (or subcategory) page.

    Query Parameters:
        - subcategory, brand, warehouse: Repeatable filters
        - min_price / max_price: Bounds on the resolved display price
        - sort: newest (default), price_asc, price_desc, popular
        - country, currency: As for item listings
    """
    permission_classes = [AllowAny]

    def get(self, request, locale, slug):
        try:
            context = build_catalog_context(request, locale)
        except ValueError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))

        queryset = filter_category_items(items_in_category(locale, slug), request.query_params)
        resolved = price_filtered_and_sorted(queryset, request.query_params, context['country'])

        context.update({
            'request': request,
            'resolved_prices': {item.pk: price for item, price in resolved},
        })
        items = [item for item, _ in resolved]
        return Response({
            'slug': slug,
            'count': len(items),
            'items': PublicItemSerializer(items, many=True, context=context).data,
        })


class PublicBrandListView(generics.ListAPIView):
    """GET: Visible brands."""
    serializer_class = BrandSerializer
    permission_classes = [AllowAny]
    pagination_class = None

    def get_queryset(self):
        return Brand.objects.filter(is_visible=True).order_by('name')


# =============================================================================
# Search Views
# =============================================================================

class SearchView(APIView):
    """
    GET: Search displayed items by article id or name.

    Query Parameters:
        - q: Keyword
        - locale: Restrict name matches and output to one locale (default pl)

    Also returns matching categories and subcategories.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        keyword = request.query_params.get('q', '').strip()
        if not keyword:
            return Response({'items': [], 'categories': [], 'subcategories': []})

        locale = request.query_params.get('locale', settings.SUPPORTED_LOCALES[0])
        try:
            context = build_catalog_context(request, locale)
        except ValueError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))

        items = search_items(keyword, locale)[:50]
        categories = Category.objects.filter(is_visible=True).filter(
            Q(name__icontains=keyword) | Q(translations__name__icontains=keyword)
        ).distinct()
        subcategories = Subcategory.objects.filter(is_visible=True).filter(
            Q(name__icontains=keyword) | Q(translations__name__icontains=keyword)
        ).distinct()

        context['request'] = request
        return Response({
            'items': PublicItemSerializer(items, many=True, context=context).data,
            'categories': [{'id': c.pk, 'name': c.name, 'slug': c.slug} for c in categories],
            'subcategories': [
                {'id': s.pk, 'name': s.name, 'slug': s.slug, 'category_id': s.category_id}
                for s in subcategories
            ],
        })


class SearchAutocompleteView(APIView):
    """
    GET: Fast prefix-matching autocomplete for item names and article ids.

    Query Parameters:
        - q: Search query (minimum 3 characters)
        - locale: Locale of the names (default pl)

    Returns top 10 matches.
    Rate limited to 20 requests per minute.
    """
    permission_classes = [AllowAny]

    @rate_limit(max_requests=20, window_seconds=60)
    def get(self, request):
        query = request.query_params.get('q', '').strip()

        if len(query) < 3:
            return error_response(
                status.HTTP_400_BAD_REQUEST,
                'Query must be at least 3 characters'
            )

        locale = request.query_params.get('locale', settings.SUPPORTED_LOCALES[0])
        matches = Item.objects.filter(is_displayed=True).prefetch_related('details').filter(
            Q(article_id__istartswith=query) |
            Q(details__locale=locale, details__item_name__istartswith=query)
        ).distinct().order_by('-sell_counter')[:10]

        results = []
        for item in matches:
            name = next(
                (d.item_name for d in item.details.all() if d.locale == locale),
                item.article_id
            )
            results.append({'id': item.pk, 'article_id': item.article_id, 'name': name})
        return Response(results)


class CurrencyExchangeListView(generics.ListAPIView):
    """GET: Current exchange rates."""
    queryset = CurrencyExchange.objects.all().order_by('-updated_at')
    serializer_class = CurrencyExchangeSerializer
    permission_classes = [AllowAny]
    pagination_class = None


# =============================================================================
# Admin Taxonomy Views
# =============================================================================

class AdminBrandListCreateView(generics.ListCreateAPIView):
    """
    GET: List all brands
    POST: Create a brand
    """
    queryset = Brand.objects.all().order_by('name')
    serializer_class = BrandSerializer
    permission_classes = [IsAdminRole]


class AdminBrandDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Brand.objects.all()
    serializer_class = BrandSerializer
    permission_classes = [IsAdminRole]


class AdminCategoryListCreateView(generics.ListCreateAPIView):
    """
    GET: List all categories with translations and subcategories
    POST: Create a category
    """
    serializer_class = CategorySerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return Category.objects.prefetch_related('translations', 'subcategories').order_by('name')


class AdminCategoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = CategorySerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return Category.objects.prefetch_related('translations', 'subcategories')

    def perform_destroy(self, instance):
        logger.info(f"Category {instance.slug} deleted by user #{self.request.user.pk}")
        instance.delete()


class AdminSubcategoryListCreateView(generics.ListCreateAPIView):
    """
    GET: List subcategories

    Query Parameters:
        - category_id: Filter by parent category
    POST: Create a subcategory
    """
    serializer_class = SubcategorySerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = Subcategory.objects.select_related('category').prefetch_related('translations')
        category_id = self.request.query_params.get('category_id')
        if category_id:
            queryset = queryset.filter(category_id=category_id)
        return queryset.order_by('category__name', 'name')


class AdminSubcategoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = SubcategorySerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return Subcategory.objects.select_related('category').prefetch_related('translations')


# =============================================================================
# Admin Warehouse Views
# =============================================================================

class AdminWarehouseCountryListCreateView(generics.ListCreateAPIView):
    queryset = WarehouseCountry.objects.all().order_by('name')
    serializer_class = WarehouseCountrySerializer
    permission_classes = [IsAdminRole]


class AdminWarehouseCountryDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = WarehouseCountry.objects.all()
    serializer_class = WarehouseCountrySerializer
    permission_classes = [IsAdminRole]


class AdminWarehouseListCreateView(generics.ListCreateAPIView):
    """
    GET: List warehouses with their offer counts
    POST: Create a warehouse
    """
    serializer_class = WarehouseSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return (
            Warehouse.objects.select_related('country')
            .annotate(offer_count=Count('item_prices'))
            .order_by('name')
        )


class AdminWarehouseDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = WarehouseSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return Warehouse.objects.select_related('country').annotate(offer_count=Count('item_prices'))

    def perform_destroy(self, instance):
        logger.info(
            f"Warehouse #{instance.pk} deleted with {instance.offer_count} offers "
            f"by user #{self.request.user.pk}"
        )
        instance.delete()


# =============================================================================
# Admin Item Views
# =============================================================================

class AdminItemListCreateView(generics.ListCreateAPIView):
    """
    GET: List items with details and offers

    Query Parameters:
        - q: Search in article id and item names
        - category_id: Filter by category
        - brand_id: Filter by brand
        - displayed: true / false

    POST: Create an item with nested details and offers
    """
    serializer_class = AdminItemSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = Item.objects.prefetch_related(
            'details', 'prices', 'prices__warehouse', 'prices__warehouse__country'
        )

        keyword = self.request.query_params.get('q', '').strip()
        if keyword:
            queryset = queryset.filter(
                Q(article_id__icontains=keyword) |
                Q(details__item_name__icontains=keyword)
            ).distinct()

        category_id = self.request.query_params.get('category_id')
        if category_id:
            queryset = queryset.filter(category_id=category_id)

        brand_id = self.request.query_params.get('brand_id')
        if brand_id:
            queryset = queryset.filter(brand_id=brand_id)

        displayed = self.request.query_params.get('displayed', '').lower()
        if displayed in ('true', 'false'):
            queryset = queryset.filter(is_displayed=displayed == 'true')

        return queryset.order_by('-created_at')

    def perform_create(self, serializer):
        item = serializer.save()
        logger.info(f"Item {item.article_id} created by user #{self.request.user.pk}")


class AdminItemDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve an item by article id
    PUT/PATCH: Update it, upserting details by locale and offers by warehouse
    DELETE: Delete it with its details and offers
    """
    serializer_class = AdminItemSerializer
    permission_classes = [IsAdminRole]
    lookup_field = 'article_id'

    def get_queryset(self):
        return Item.objects.prefetch_related(
            'details', 'prices', 'prices__warehouse', 'prices__warehouse__country'
        )

    def perform_destroy(self, instance):
        logger.info(f"Item {instance.article_id} deleted by user #{self.request.user.pk}")
        instance.delete()


class AdminItemVisibilityView(APIView):
    """PATCH: Show or hide an item in the storefront."""
    permission_classes = [IsAdminRole]

    def patch(self, request, article_id):
        serializer = ItemVisibilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        updated = Item.objects.filter(article_id=article_id).update(
            is_displayed=serializer.validated_data['is_displayed']
        )
        if not updated:
            return error_response(status.HTTP_404_NOT_FOUND, 'Item not found')

        logger.info(
            f"Item {article_id} visibility set to "
            f"{serializer.validated_data['is_displayed']} by user #{request.user.pk}"
        )
        return Response({
            'article_id': article_id,
            'is_displayed': serializer.validated_data['is_displayed'],
        })


class AdminItemPriceDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a single warehouse offer
    PATCH: Edit price, stock, promotion or badge
    DELETE: Remove the offer
    """
    serializer_class = ItemPriceSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return ItemPrice.objects.select_related('item', 'warehouse', 'warehouse__country')

    def perform_update(self, serializer):
        offer = serializer.save()
        logger.info(
            f"Offer #{offer.pk} ({offer.item.article_id} @ warehouse #{offer.warehouse_id}) "
            f"updated by user #{self.request.user.pk}"
        )


# =============================================================================
# Admin Item Batch Views
# =============================================================================

def _first_error(errors) -> str:
    """First message of a serializer error structure."""
    if isinstance(errors, dict):
        field_name, messages = next(iter(errors.items()))
        return f"{field_name}: {_first_error(messages)}"
    if isinstance(errors, list):
        return _first_error(errors[0])
    return str(errors)


class AdminItemBatchDeleteView(APIView):
    """
    POST: Delete the items named by article id or matched by filters.

    Request Body:
        {"article_ids": ["ABC1"]} or {"filters": {"brand": "bosch"}}
    """
    permission_classes = [IsAdminRole]

    def post(self, request):
        serializer = ItemBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            affected = batch_delete_items(data.get('article_ids'), data.get('filters'))
        except BatchSelectionError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in batch delete: {e}")
            return server_error_response(e)

        logger.info(f"Batch delete of {affected} item(s) by user #{request.user.pk}")
        message = f"Successfully deleted {affected} item(s)" if affected else 'No items to delete'
        return Response({'affected_count': affected, 'message': message})


class AdminItemBatchVisibilityView(APIView):
    """
    POST: Show or hide the items named by article id or matched by filters.

    Request Body:
        {"action": "hide", "article_ids": ["ABC1"]}
    """
    permission_classes = [IsAdminRole]

    def post(self, request):
        serializer = ItemBatchVisibilitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        action = data['action']

        try:
            affected = batch_set_visibility(action == 'show', data.get('article_ids'), data.get('filters'))
        except BatchSelectionError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in batch visibility update: {e}")
            return server_error_response(e)

        verb = 'made visible' if action == 'show' else 'hidden'
        return Response({
            'affected_count': affected,
            'action': action,
            'message': f"Successfully {verb} {affected} item(s)",
        })


class AdminItemBulkPriceUpdateView(APIView):
    """
    POST: Upsert price, stock and promotion of many items in one warehouse.

    Invalid rows are skipped and reported; at most 10 error messages are returned.
    """
    permission_classes = [IsAdminRole]
    max_reported_errors = 10

    def post(self, request):
        serializer = BulkPriceUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        rows, errors = [], []
        for idx, raw_row in enumerate(data['items']):
            row_serializer = BulkPriceRowSerializer(data=raw_row)
            if row_serializer.is_valid():
                rows.append(row_serializer.validated_data)
            else:
                errors.append(f"Row {idx}: {_first_error(row_serializer.errors)}")

        try:
            result = bulk_update_prices(data['warehouse_id'], rows)
        except WarehouseNotFoundError as e:
            return error_response(status.HTTP_400_BAD_REQUEST, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in bulk price update: {e}")
            return server_error_response(e)

        errors += result.errors
        body = {
            'message': f"Successfully processed {result.processed} items",
            'results': {
                'updated': result.updated,
                'created': result.created,
                'created_items': result.created_items,
                'errors': len(errors),
            },
        }
        if errors:
            body['details'] = errors[:self.max_reported_errors]
        return Response(body)


class AdminItemExportView(APIView):
    """
    GET: Download every item as one row per (locale, warehouse offer).

    Query Parameters:
        - export_format: json (default) or csv
    """
    permission_classes = [IsAdminRole]

    def get(self, request):
        export_format = request.query_params.get('export_format', 'json').lower()
        if export_format not in ('json', 'csv'):
            return error_response(status.HTTP_400_BAD_REQUEST, 'export_format must be json or csv')

        filename = f"items_export_{timezone.localdate().isoformat()}.{export_format}"
        rows = export_rows()

        if export_format == 'csv':
            response = HttpResponse(rows_to_csv(rows), content_type='text/csv; charset=utf-8')
        else:
            response = Response(list(rows))

        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        logger.info(f"Item export ({export_format}) downloaded by user #{request.user.pk}")
        return response


# =============================================================================
# Admin Currency Exchange View
# =============================================================================

class AdminCurrencyExchangeView(APIView):
    """
    GET: List exchange rates
    PUT: Create or update the rate of a currency pair

    Request Body (PUT):
        {"from_currency": "EUR", "to_currency": "PLN", "rate": "4.31"}
    """
    permission_classes = [IsAdminRole]

    def get(self, request):
        rates = CurrencyExchange.objects.all().order_by('-updated_at')
        return Response(CurrencyExchangeSerializer(rates, many=True).data)

    def put(self, request):
        serializer = CurrencyExchangeUpsertSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(status.HTTP_400_BAD_REQUEST, serializer.errors)

        try:
            rate = serializer.save()
        except Exception as e:
            logger.exception(f"Failed to save exchange rate: {e}")
            return server_error_response(e)

        logger.info(
            f"Exchange rate {rate.from_currency}->{rate.to_currency} set to {rate.rate} "
            f"({'created' if serializer.created else 'updated'}) by user #{request.user.pk}"
        )
        return Response(
            CurrencyExchangeSerializer(rate).data,
            status=status.HTTP_201_CREATED if serializer.created else status.HTTP_200_OK
        )
