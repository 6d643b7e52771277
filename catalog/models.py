"""
Catalog Models - Core data entities for the storefront catalog.

Models:
    - WarehouseCountry / Warehouse: Stock locations
    - Brand, Category, Subcategory (+ per-locale translations)
    - Item: Sellable article with per-locale ItemDetail rows
    - ItemPrice: Warehouse offer (price, stock, promotion) per item and warehouse
    - CurrencyExchange: Conversion rates from the base currency
"""
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class Currency(models.TextChoices):
    EUR = 'EUR', 'Euro'
    PLN = 'PLN', 'Polish złoty'
    UAH = 'UAH', 'Ukrainian hryvnia'


class Badge(models.TextChoices):
    NEW_ARRIVALS = 'NEW_ARRIVALS', 'New arrivals'
    BESTSELLER = 'BESTSELLER', 'Bestseller'
    HOT_DEALS = 'HOT_DEALS', 'Hot deals'
    LIMITED_EDITION = 'LIMITED_EDITION', 'Limited edition'
    ABSENT = 'ABSENT', 'No badge'
    USED = 'USED', 'Used'


class WarehouseCountry(models.Model):
    """Country a warehouse ships from."""
    slug = models.SlugField(max_length=50, unique=True)
    country_code = models.CharField(
        max_length=2,
        db_index=True,
        help_text="ISO 3166-1 alpha-2 code, e.g. PL"
    )
    phone_code = models.CharField(max_length=8, blank=True, default='')
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = 'Warehouse Country'
        verbose_name_plural = 'Warehouse Countries'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.country_code})"


class Warehouse(models.Model):
    """
    Stock location holding warehouse offers.
    """
    name = models.CharField(max_length=200, db_index=True)
    displayed_name = models.CharField(
        max_length=200,
        help_text="Name shown to customers"
    )
    country = models.ForeignKey(
        WarehouseCountry,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='warehouses'
    )
    is_visible = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Warehouse'
        verbose_name_plural = 'Warehouses'
        ordering = ['name']

    def __str__(self):
        return self.displayed_name or self.name

    @property
    def country_code(self):
        return self.country.country_code if self.country_id else None


class Brand(models.Model):
    name = models.CharField(max_length=200)
    alias = models.SlugField(max_length=200, unique=True)
    image_link = models.CharField(max_length=500, blank=True, default='')
    is_visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Category(models.Model):
    """
    Top-level product category.
    """
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    is_visible = models.BooleanField(default=True)
    image_link = models.CharField(max_length=500, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'
        ordering = ['name']

    def __str__(self):
        return self.name

    def name_for(self, locale: str) -> str:
        for translation in self.translations.all():
            if translation.locale == locale:
                return translation.name
        return self.name


class CategoryTranslation(models.Model):
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name='translations'
    )
    locale = models.CharField(max_length=5)
    name = models.CharField(max_length=200)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['category', 'locale'],
                name='unique_category_translation_locale'
            )
        ]

    def __str__(self):
        return f"{self.category.slug} [{self.locale}]: {self.name}"


class Subcategory(models.Model):
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name='subcategories'
    )
    is_visible = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Subcategory'
        verbose_name_plural = 'Subcategories'
        ordering = ['name']

    def __str__(self):
        return f"{self.category.name} / {self.name}"

    def name_for(self, locale: str) -> str:
        for translation in self.translations.all():
            if translation.locale == locale:
                return translation.name
        return self.name


class SubcategoryTranslation(models.Model):
    subcategory = models.ForeignKey(
        Subcategory,
        on_delete=models.CASCADE,
        related_name='translations'
    )
    locale = models.CharField(max_length=5)
    name = models.CharField(max_length=200)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['subcategory', 'locale'],
                name='unique_subcategory_translation_locale'
            )
        ]

    def __str__(self):
        return f"{self.subcategory.slug} [{self.locale}]: {self.name}"


class Item(models.Model):
    """
    Sellable article. Locale-specific text lives in ItemDetail, prices and
    stock per warehouse in ItemPrice.
    """
    article_id = models.CharField(
        max_length=100,
        unique=True,
        help_text="Public article identifier"
    )
    is_displayed = models.BooleanField(default=False, db_index=True)
    image_links = models.JSONField(default=list, blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items'
    )
    subcategory = models.ForeignKey(
        Subcategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items'
    )
    brand = models.ForeignKey(
        Brand,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='items'
    )
    warranty_length = models.PositiveIntegerField(
        default=12,
        help_text="Warranty length in months"
    )
    warranty_type = models.CharField(max_length=50, default='manufacturer')
    sell_counter = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Item'
        verbose_name_plural = 'Items'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_displayed', 'created_at'], name='item_displayed_created_idx'),
        ]

    def __str__(self):
        return self.article_id

    @property
    def category_slug(self):
        if self.subcategory_id:
            return self.subcategory.slug
        return self.category.slug if self.category_id else None


class ItemDetail(models.Model):
    """
    Display text for an item in one locale.
    """
    item = models.ForeignKey(
        Item,
        on_delete=models.CASCADE,
        related_name='details'
    )
    locale = models.CharField(max_length=5, default='pl', db_index=True)
    item_name = models.CharField(max_length=300)
    description = models.TextField(blank=True, default='')
    specifications = models.TextField(blank=True, default='')
    seller = models.CharField(max_length=200, blank=True, default='')
    discount = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    popularity = models.IntegerField(null=True, blank=True)
    meta_description = models.TextField(blank=True, default='')
    meta_keywords = models.TextField(blank=True, default='')

    class Meta:
        verbose_name = 'Item Detail'
        verbose_name_plural = 'Item Details'
        ordering = ['item', 'locale']
        constraints = [
            models.UniqueConstraint(
                fields=['item', 'locale'],
                name='unique_item_detail_locale'
            )
        ]

    def __str__(self):
        return f"{self.item.article_id} [{self.locale}]: {self.item_name}"


class ItemPrice(models.Model):
    """
    Warehouse offer: price, stock and optional promotion of an item at one
    warehouse.

    Constraint: Exactly one offer per item per warehouse.
    """
    item = models.ForeignKey(
        Item,
        on_delete=models.CASCADE,
        related_name='prices'
    )
    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.CASCADE,
        related_name='item_prices'
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Base price in the base currency"
    )
    quantity = models.PositiveIntegerField(
        default=0,
        help_text="Units in stock"
    )
    promotion_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    promo_code = models.CharField(max_length=50, blank=True, default='')
    promo_start_date = models.DateTimeField(null=True, blank=True)
    promo_end_date = models.DateTimeField(null=True, blank=True)
    badge = models.CharField(
        max_length=20,
        choices=Badge.choices,
        default=Badge.ABSENT
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Item Price'
        verbose_name_plural = 'Item Prices'
        ordering = ['id']
        constraints = [
            models.UniqueConstraint(
                fields=['item', 'warehouse'],
                name='unique_item_warehouse_price'
            )
        ]
        indexes = [
            models.Index(fields=['warehouse', 'quantity'], name='itemprice_warehouse_qty_idx'),
        ]

    def __str__(self):
        return f"{self.item.article_id} @ {self.warehouse}: {self.quantity} units"

    @property
    def unit_price(self) -> Decimal:
        """Price charged at order time: the promotion price whenever one is set."""
        return self.promotion_price if self.promotion_price is not None else self.price

    @property
    def is_in_stock(self) -> bool:
        return self.quantity > 0


class ItemPriceHistory(models.Model):
    """
    Previous values of a warehouse offer, recorded before a bulk price update
    overwrites them. Append-only.
    """
    item_price = models.ForeignKey(
        ItemPrice,
        on_delete=models.CASCADE,
        related_name='history'
    )
    price = models.DecimalField(max_digits=12, decimal_places=2)
    quantity = models.PositiveIntegerField()
    promotion_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    promo_code = models.CharField(max_length=50, blank=True, default='')
    promo_start_date = models.DateTimeField(null=True, blank=True)
    promo_end_date = models.DateTimeField(null=True, blank=True)
    badge = models.CharField(max_length=20, choices=Badge.choices, default=Badge.ABSENT)
    recorded_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'Item Price History'
        verbose_name_plural = 'Item Price History'
        ordering = ['-recorded_at', '-id']

    def __str__(self):
        return f"{self.item_price_id}: {self.price} x {self.quantity} at {self.recorded_at}"

    @classmethod
    def record(cls, offer: ItemPrice) -> 'ItemPriceHistory':
        return cls.objects.create(
            item_price=offer,
            price=offer.price,
            quantity=offer.quantity,
            promotion_price=offer.promotion_price,
            promo_code=offer.promo_code,
            promo_start_date=offer.promo_start_date,
            promo_end_date=offer.promo_end_date,
            badge=offer.badge,
        )


class CurrencyExchange(models.Model):
    """Conversion rate between two currencies."""
    from_currency = models.CharField(max_length=3, choices=Currency.choices)
    to_currency = models.CharField(max_length=3, choices=Currency.choices)
    rate = models.DecimalField(
        max_digits=14,
        decimal_places=6,
        validators=[MinValueValidator(Decimal('0.000001'))]
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Currency Exchange'
        verbose_name_plural = 'Currency Exchange Rates'
        ordering = ['-updated_at']
        constraints = [
            models.UniqueConstraint(
                fields=['from_currency', 'to_currency'],
                name='unique_currency_pair'
            )
        ]

    def __str__(self):
        return f"1 {self.from_currency} = {self.rate} {self.to_currency}"
