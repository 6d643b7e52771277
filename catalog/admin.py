"""
Django Admin configuration for catalog models.
"""
from django.contrib import admin
from .models import (
    Brand,
    Category,
    CategoryTranslation,
    CurrencyExchange,
    Item,
    ItemDetail,
    ItemPrice,
    ItemPriceHistory,
    Subcategory,
    SubcategoryTranslation,
    Warehouse,
    WarehouseCountry,
)


class CategoryTranslationInline(admin.TabularInline):
    model = CategoryTranslation
    extra = 0


class SubcategoryTranslationInline(admin.TabularInline):
    model = SubcategoryTranslation
    extra = 0


class ItemDetailInline(admin.StackedInline):
    model = ItemDetail
    extra = 0


class ItemPriceInline(admin.TabularInline):
    model = ItemPrice
    extra = 0
    raw_id_fields = ['warehouse']


@admin.register(WarehouseCountry)
class WarehouseCountryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'country_code', 'phone_code', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'country_code']


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'displayed_name', 'country', 'is_visible', 'offer_count', 'created_at']
    list_filter = ['is_visible', 'country']
    search_fields = ['name', 'displayed_name']
    ordering = ['name']

    def offer_count(self, obj):
        return obj.item_prices.count()
    offer_count.short_description = 'Offers'


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'alias', 'is_visible']
    list_filter = ['is_visible']
    search_fields = ['name', 'alias']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'slug', 'is_visible', 'item_count']
    search_fields = ['name', 'slug']
    ordering = ['name']
    inlines = [CategoryTranslationInline]

    def item_count(self, obj):
        return obj.items.count()
    item_count.short_description = 'Items'


@admin.register(Subcategory)
class SubcategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'slug', 'category', 'is_visible']
    list_filter = ['category', 'is_visible']
    search_fields = ['name', 'slug']
    inlines = [SubcategoryTranslationInline]


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'article_id', 'brand', 'category', 'is_displayed', 'sell_counter', 'created_at']
    list_filter = ['is_displayed', 'category', 'brand']
    search_fields = ['article_id', 'details__item_name']
    ordering = ['-created_at']
    raw_id_fields = ['category', 'subcategory', 'brand']
    inlines = [ItemDetailInline, ItemPriceInline]


@admin.register(ItemPrice)
class ItemPriceAdmin(admin.ModelAdmin):
    list_display = ['id', 'item', 'warehouse', 'price', 'promotion_price', 'quantity', 'badge', 'is_in_stock']
    list_filter = ['warehouse', 'badge']
    search_fields = ['item__article_id', 'warehouse__name', 'promo_code']
    raw_id_fields = ['item', 'warehouse']

    def is_in_stock(self, obj):
        return obj.is_in_stock
    is_in_stock.boolean = True
    is_in_stock.short_description = 'In Stock'


@admin.register(ItemPriceHistory)
class ItemPriceHistoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'item_price', 'price', 'promotion_price', 'quantity', 'badge', 'recorded_at']
    list_filter = ['badge']
    search_fields = ['item_price__item__article_id']
    raw_id_fields = ['item_price']
    readonly_fields = ['recorded_at']


@admin.register(CurrencyExchange)
class CurrencyExchangeAdmin(admin.ModelAdmin):
    list_display = ['id', 'from_currency', 'to_currency', 'rate', 'updated_at']
    list_filter = ['from_currency', 'to_currency']
