"""
Serializers for catalog models.

Public serializers render locale-specific, price-resolved views of items;
admin serializers handle CRUD including nested detail / offer upserts.
"""
from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from .currency import convert_price, format_price
from .models import (
    Badge,
    Brand,
    Category,
    CategoryTranslation,
    Currency,
    CurrencyExchange,
    Item,
    ItemDetail,
    ItemPrice,
    Subcategory,
    SubcategoryTranslation,
    Warehouse,
    WarehouseCountry,
)
from .pricing import available_warehouses, resolve_price


# =============================================================================
# Taxonomy
# =============================================================================

class BrandSerializer(serializers.ModelSerializer):
    class Meta:
        model = Brand
        fields = ['id', 'name', 'alias', 'image_link', 'is_visible', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class TranslationSerializer(serializers.Serializer):
    locale = serializers.CharField(max_length=5)
    name = serializers.CharField(max_length=200)


def _replace_translations(owner, translations, model, owner_field):
    """Upsert the given locales; locales not mentioned are left untouched."""
    for translation in translations:
        model.objects.update_or_create(
            **{owner_field: owner, 'locale': translation['locale']},
            defaults={'name': translation['name']},
        )


class SubcategoryMinimalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Subcategory
        fields = ['id', 'name', 'slug']


class CategorySerializer(serializers.ModelSerializer):
    """Admin serializer for categories with per-locale names."""
    translations = TranslationSerializer(many=True, required=False)
    subcategories = SubcategoryMinimalSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'slug', 'is_visible', 'image_link',
            'translations', 'subcategories', 'item_count',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_item_count(self, obj):
        return obj.items.count()

    @transaction.atomic
    def create(self, validated_data):
        translations = validated_data.pop('translations', [])
        category = super().create(validated_data)
        _replace_translations(category, translations, CategoryTranslation, 'category')
        return category

    @transaction.atomic
    def update(self, instance, validated_data):
        translations = validated_data.pop('translations', [])
        category = super().update(instance, validated_data)
        _replace_translations(category, translations, CategoryTranslation, 'category')
        return category


class SubcategorySerializer(serializers.ModelSerializer):
    translations = TranslationSerializer(many=True, required=False)
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        source='category'
    )
    category_slug = serializers.CharField(source='category.slug', read_only=True)

    class Meta:
        model = Subcategory
        fields = [
            'id', 'name', 'slug', 'category_id', 'category_slug', 'is_visible',
            'translations', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    @transaction.atomic
    def create(self, validated_data):
        translations = validated_data.pop('translations', [])
        subcategory = super().create(validated_data)
        _replace_translations(subcategory, translations, SubcategoryTranslation, 'subcategory')
        return subcategory

    @transaction.atomic
    def update(self, instance, validated_data):
        translations = validated_data.pop('translations', [])
        subcategory = super().update(instance, validated_data)
        _replace_translations(subcategory, translations, SubcategoryTranslation, 'subcategory')
        return subcategory


class PublicCategorySerializer(serializers.ModelSerializer):
    """Category with names translated to the locale in context."""
    name = serializers.SerializerMethodField()
    subcategories = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = ['id', 'name', 'slug', 'image_link', 'subcategories']

    def get_name(self, obj):
        return obj.name_for(self.context['locale'])

    def get_subcategories(self, obj):
        locale = self.context['locale']
        return [
            {'id': sub.pk, 'name': sub.name_for(locale), 'slug': sub.slug}
            for sub in getattr(obj, 'visible_subcategories', obj.subcategories.filter(is_visible=True))
        ]


# =============================================================================
# Warehouses
# =============================================================================

class WarehouseCountrySerializer(serializers.ModelSerializer):
    class Meta:
        model = WarehouseCountry
        fields = ['id', 'slug', 'country_code', 'phone_code', 'name', 'is_active']
        read_only_fields = ['id']

    def validate_country_code(self, value):
        return value.upper()


class WarehouseSerializer(serializers.ModelSerializer):
    """Admin serializer; ``offer_count`` comes from a queryset annotation."""
    country = WarehouseCountrySerializer(read_only=True)
    country_id = serializers.PrimaryKeyRelatedField(
        queryset=WarehouseCountry.objects.all(),
        source='country',
        write_only=True,
        required=False,
        allow_null=True
    )
    offer_count = serializers.SerializerMethodField()

    class Meta:
        model = Warehouse
        fields = [
            'id', 'name', 'displayed_name', 'country', 'country_id',
            'is_visible', 'offer_count', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_offer_count(self, obj):
        count = getattr(obj, 'offer_count', None)
        return count if count is not None else obj.item_prices.count()


class WarehouseMinimalSerializer(serializers.ModelSerializer):
    country_code = serializers.CharField(read_only=True)

    class Meta:
        model = Warehouse
        fields = ['id', 'name', 'displayed_name', 'country_code']


# =============================================================================
# Items (admin)
# =============================================================================

class ItemDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = ItemDetail
        fields = [
            'id', 'locale', 'item_name', 'description', 'specifications', 'seller',
            'discount', 'popularity', 'meta_description', 'meta_keywords',
        ]
        read_only_fields = ['id']


class ItemPriceSerializer(serializers.ModelSerializer):
    """Warehouse offer. Used nested under an item and for single-offer edits."""
    warehouse = WarehouseMinimalSerializer(read_only=True)
    warehouse_id = serializers.PrimaryKeyRelatedField(
        queryset=Warehouse.objects.all(),
        source='warehouse',
        write_only=True
    )

    class Meta:
        model = ItemPrice
        fields = [
            'id', 'warehouse', 'warehouse_id', 'price', 'quantity',
            'promotion_price', 'promo_code', 'promo_start_date', 'promo_end_date',
            'badge', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate(self, attrs):
        start = attrs.get('promo_start_date', getattr(self.instance, 'promo_start_date', None))
        end = attrs.get('promo_end_date', getattr(self.instance, 'promo_end_date', None))
        if start and end and start > end:
            raise serializers.ValidationError(
                {'promo_end_date': 'Promotion end date must be after its start date.'}
            )
        return attrs


class AdminItemSerializer(serializers.ModelSerializer):
    """
    Item with nested details and offers.

    Details are upserted by locale and offers by warehouse; rows not present
    in the payload are kept.
    """
    details = ItemDetailSerializer(many=True, required=False)
    prices = ItemPriceSerializer(many=True, required=False)
    category_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), source='category',
        required=False, allow_null=True
    )
    subcategory_id = serializers.PrimaryKeyRelatedField(
        queryset=Subcategory.objects.all(), source='subcategory',
        required=False, allow_null=True
    )
    brand_id = serializers.PrimaryKeyRelatedField(
        queryset=Brand.objects.all(), source='brand',
        required=False, allow_null=True
    )

    class Meta:
        model = Item
        fields = [
            'id', 'article_id', 'is_displayed', 'image_links',
            'category_id', 'subcategory_id', 'brand_id',
            'warranty_length', 'warranty_type', 'sell_counter',
            'details', 'prices', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'sell_counter', 'created_at', 'updated_at']

    def validate_details(self, value):
        locales = [detail['locale'] for detail in value]
        if len(locales) != len(set(locales)):
            raise serializers.ValidationError('Each locale may appear only once.')
        return value

    def validate_prices(self, value):
        warehouses = [price['warehouse'].pk for price in value]
        if len(warehouses) != len(set(warehouses)):
            raise serializers.ValidationError('Each warehouse may appear only once.')
        return value

    def _upsert_children(self, item, details, prices):
        for detail in details:
            locale = detail.pop('locale')
            ItemDetail.objects.update_or_create(item=item, locale=locale, defaults=detail)
        for price in prices:
            warehouse = price.pop('warehouse')
            ItemPrice.objects.update_or_create(item=item, warehouse=warehouse, defaults=price)

    @transaction.atomic
    def create(self, validated_data):
        details = validated_data.pop('details', [])
        prices = validated_data.pop('prices', [])
        item = super().create(validated_data)
        self._upsert_children(item, details, prices)
        return item

    @transaction.atomic
    def update(self, instance, validated_data):
        details = validated_data.pop('details', [])
        prices = validated_data.pop('prices', [])
        item = super().update(instance, validated_data)
        self._upsert_children(item, details, prices)
        return item


class ItemVisibilitySerializer(serializers.Serializer):
    is_displayed = serializers.BooleanField()


# =============================================================================
# Items (batch operations)
# =============================================================================

class ItemBatchFiltersSerializer(serializers.Serializer):
    search_term = serializers.CharField(required=False, allow_blank=True)
    brand = serializers.CharField(required=False, allow_blank=True, help_text="Brand alias")
    category = serializers.CharField(required=False, allow_blank=True, help_text="Category or subcategory slug")


class ItemBatchSerializer(serializers.Serializer):
    """
    Request format:
    {"article_ids": ["ABC1", "XYZ9"]}
    or
    {"filters": {"search_term": "drill", "brand": "bosch", "category": "power-tools"}}
    """
    article_ids = serializers.ListField(child=serializers.CharField(), required=False)
    filters = ItemBatchFiltersSerializer(required=False)

    def validate(self, attrs):
        if not attrs.get('article_ids') and 'filters' not in attrs:
            raise serializers.ValidationError('Either article_ids or filters must be provided')
        return attrs


class ItemBatchVisibilitySerializer(ItemBatchSerializer):
    action = serializers.ChoiceField(
        choices=['show', 'hide'],
        error_messages={'invalid_choice': 'Invalid action. Must be "show" or "hide"'}
    )


class BulkPriceRowSerializer(serializers.Serializer):
    article_id = serializers.CharField(max_length=100)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    quantity = serializers.IntegerField(min_value=0)
    badge = serializers.ChoiceField(choices=Badge.choices, required=False, allow_blank=True)
    brand = serializers.CharField(required=False, allow_blank=True)
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    promotion_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0'), required=False, allow_null=True
    )
    promo_start_date = serializers.DateTimeField(required=False, allow_null=True)
    promo_end_date = serializers.DateTimeField(required=False, allow_null=True)


class BulkPriceUpdateSerializer(serializers.Serializer):
    """
    Request format:
    {
        "warehouse_id": 3,
        "items": [{"article_id": "ABC1", "price": "99.00", "quantity": 4, "badge": "HOT_DEALS"}]
    }

    Rows are validated one by one in the view so that bad rows are reported
    without rejecting the whole upload.
    """
    warehouse_id = serializers.IntegerField(error_messages={'required': 'Warehouse ID is required'})
    items = serializers.ListField(
        child=serializers.DictField(),
        allow_empty=False,
        error_messages={
            'required': 'Items array is required',
            'empty': 'Items array is required',
        }
    )


# =============================================================================
# Items (public)
# =============================================================================

class PublicItemSerializer(serializers.ModelSerializer):
    """
    Locale-specific item view with its resolved display price.

    Context:
        - locale: required
        - country: preferred warehouse country code
        - currency / exchange_rate: adds converted and formatted prices
        - include_warehouses: adds every visible offer
    """
    name = serializers.SerializerMethodField()
    description = serializers.SerializerMethodField()
    specifications = serializers.SerializerMethodField()
    seller = serializers.SerializerMethodField()
    brand = serializers.SerializerMethodField()
    category_slug = serializers.CharField(source='category.slug', read_only=True)
    subcategory_slug = serializers.CharField(source='subcategory.slug', read_only=True)
    pricing = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = [
            'id', 'article_id', 'name', 'description', 'specifications', 'seller',
            'image_links', 'brand', 'category_slug', 'subcategory_slug',
            'warranty_length', 'warranty_type', 'sell_counter', 'pricing',
        ]

    def _detail(self, obj):
        details = getattr(obj, 'locale_details', None)
        if details is None:
            details = [d for d in obj.details.all() if d.locale == self.context.get('locale')]
        return details[0] if details else None

    def get_name(self, obj):
        detail = self._detail(obj)
        return detail.item_name if detail else obj.article_id

    def get_description(self, obj):
        detail = self._detail(obj)
        return detail.description if detail else ''

    def get_specifications(self, obj):
        detail = self._detail(obj)
        return detail.specifications if detail else ''

    def get_seller(self, obj):
        detail = self._detail(obj)
        return detail.seller if detail else ''

    def get_brand(self, obj):
        if not obj.brand_id:
            return None
        return {'name': obj.brand.name, 'alias': obj.brand.alias}

    def get_pricing(self, obj):
        resolved = self.context.get('resolved_prices', {}).get(obj.pk)
        if resolved is None:
            resolved = resolve_price(obj, self.context.get('country'))
        data = resolved.to_dict()

        currency = self.context.get('currency')
        rate = self.context.get('exchange_rate')
        if currency and rate is not None:
            data['currency'] = currency
            data['converted_price'] = convert_price(resolved.price, rate)
            data['formatted_price'] = format_price(data['converted_price'], currency)
            if resolved.original_price is not None:
                data['converted_original_price'] = convert_price(resolved.original_price, rate)
                data['formatted_original_price'] = format_price(data['converted_original_price'], currency)

        if self.context.get('include_warehouses'):
            data['available_warehouses'] = available_warehouses(obj)
        return data


# =============================================================================
# Currency exchange
# =============================================================================

class CurrencyExchangeSerializer(serializers.ModelSerializer):
    from_currency = serializers.ChoiceField(choices=Currency.choices)
    to_currency = serializers.ChoiceField(choices=Currency.choices)
    rate = serializers.DecimalField(max_digits=14, decimal_places=6)

    class Meta:
        model = CurrencyExchange
        fields = ['id', 'from_currency', 'to_currency', 'rate', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        # Upserts go through CurrencyExchangeUpsertSerializer
        validators = []

    def validate_rate(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Rate must be a positive number')
        return value


class CurrencyExchangeUpsertSerializer(CurrencyExchangeSerializer):
    """PUT payload: create the pair or update its rate."""

    def validate(self, attrs):
        if attrs['from_currency'] == attrs['to_currency']:
            raise serializers.ValidationError('Source and target currency must differ')
        return attrs

    def save(self, **kwargs):
        rate, created = CurrencyExchange.objects.update_or_create(
            from_currency=self.validated_data['from_currency'],
            to_currency=self.validated_data['to_currency'],
            defaults={'rate': self.validated_data['rate']},
        )
        self.instance = rate
        self.created = created
        return rate
