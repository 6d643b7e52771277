"""
Management command to seed the database with a sample storefront catalog.

Generates:
- Warehouse countries and warehouses
- Brands, categories and subcategories (with translations)
- Items with a detail row per supported locale
- Warehouse offers (price, stock, promotions, badges)
- Exchange rates from the base currency

Usage:
    python manage.py seed_data
    python manage.py seed_data --clear  # Clear existing data first
    python manage.py seed_data --items 50 --warehouses 3
"""
import random
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from catalog.models import (
    Badge,
    Brand,
    Category,
    CategoryTranslation,
    CurrencyExchange,
    Item,
    ItemDetail,
    ItemPrice,
    Subcategory,
    SubcategoryTranslation,
    Warehouse,
    WarehouseCountry,
)

COUNTRIES = [
    ('poland', 'PL', '+48', 'Poland'),
    ('germany', 'DE', '+49', 'Germany'),
    ('spain', 'ES', '+34', 'Spain'),
    ('ukraine', 'UA', '+380', 'Ukraine'),
]

# slug -> (English name, {locale: name}, [(subcategory slug, English name)])
CATEGORIES = {
    'power-tools': ('Power Tools', {'pl': 'Elektronarzędzia', 'es': 'Herramientas eléctricas', 'ua': 'Електроінструменти'}, [
        ('drills', 'Drills'), ('grinders', 'Grinders'), ('saws', 'Saws'),
    ]),
    'garden': ('Garden', {'pl': 'Ogród', 'es': 'Jardín', 'ua': 'Сад'}, [
        ('lawn-mowers', 'Lawn Mowers'), ('trimmers', 'Trimmers'),
    ]),
    'hand-tools': ('Hand Tools', {'pl': 'Narzędzia ręczne', 'es': 'Herramientas manuales', 'ua': 'Ручні інструменти'}, [
        ('wrenches', 'Wrenches'), ('screwdrivers', 'Screwdrivers'),
    ]),
    'workwear': ('Workwear', {'pl': 'Odzież robocza', 'es': 'Ropa de trabajo', 'ua': 'Робочий одяг'}, [
        ('gloves', 'Gloves'), ('boots', 'Boots'),
    ]),
}

BRANDS = ['Bosch', 'Makita', 'DeWalt', 'Stihl', 'Husqvarna', 'Milwaukee', 'Yato', 'Metabo']

ADJECTIVES = ['Compact', 'Professional', 'Heavy Duty', 'Cordless', 'Classic', 'Pro', 'Ultra']

BADGE_WEIGHTS = [
    (Badge.ABSENT, 60),
    (Badge.NEW_ARRIVALS, 12),
    (Badge.HOT_DEALS, 12),
    (Badge.BESTSELLER, 8),
    (Badge.LIMITED_EDITION, 5),
    (Badge.USED, 3),
]


class Command(BaseCommand):
    help = 'Seed the database with sample warehouses, taxonomy, items, offers and exchange rates'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before seeding',
        )
        parser.add_argument(
            '--items',
            type=int,
            default=200,
            help='Number of items to create (default: 200)',
        )
        parser.add_argument(
            '--warehouses',
            type=int,
            default=6,
            help='Number of warehouses to create (default: 6)',
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=None,
            help='Random seed for reproducible data',
        )

    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])

        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self._clear_data()

        self.stdout.write('Starting database seeding...')

        with transaction.atomic():
            warehouses = self._create_warehouses(options['warehouses'])
            brands = self._create_brands()
            subcategories = self._create_categories()
            items = self._create_items(options['items'], brands, subcategories)
            self._create_offers(items, warehouses)
            self._create_exchange_rates()

        self.stdout.write(self.style.SUCCESS('Database seeding completed successfully!'))

    def _clear_data(self):
        """Clear all existing catalog data together with orders and payments."""
        from orders.models import Order
        from payments.models import Payment

        Payment.objects.all().delete()
        Order.objects.all().delete()
        ItemPrice.objects.all().delete()
        ItemDetail.objects.all().delete()
        Item.objects.all().delete()
        Subcategory.objects.all().delete()
        Category.objects.all().delete()
        Brand.objects.all().delete()
        Warehouse.objects.all().delete()
        WarehouseCountry.objects.all().delete()
        CurrencyExchange.objects.all().delete()

        self.stdout.write(self.style.WARNING('All existing data cleared.'))

    def _create_warehouses(self, count):
        countries = []
        for slug, code, phone_code, name in COUNTRIES:
            country, _ = WarehouseCountry.objects.get_or_create(
                slug=slug,
                defaults={'country_code': code, 'phone_code': phone_code, 'name': name},
            )
            countries.append(country)

        warehouses = []
        for i in range(count):
            country = countries[i % len(countries)]
            warehouse, created = Warehouse.objects.get_or_create(
                name=f"WH-{country.country_code}-{i + 1}",
                defaults={
                    'displayed_name': f"{country.name} warehouse {i // len(countries) + 1}",
                    'country': country,
                },
            )
            warehouses.append(warehouse)
            if created:
                self.stdout.write(f'  Created warehouse: {warehouse.name}')

        self.stdout.write(self.style.SUCCESS(f'Created {len(warehouses)} warehouses'))
        return warehouses

    def _create_brands(self):
        brands = []
        for name in BRANDS:
            brand, _ = Brand.objects.get_or_create(alias=name.lower(), defaults={'name': name})
            brands.append(brand)
        self.stdout.write(self.style.SUCCESS(f'Created {len(brands)} brands'))
        return brands

    def _create_categories(self):
        """Create categories and subcategories; returns the subcategories."""
        subcategories = []
        for slug, (name, translations, children) in CATEGORIES.items():
            category, _ = Category.objects.get_or_create(slug=slug, defaults={'name': name})
            for locale, translated in translations.items():
                CategoryTranslation.objects.get_or_create(
                    category=category, locale=locale, defaults={'name': translated}
                )
            for child_slug, child_name in children:
                subcategory, _ = Subcategory.objects.get_or_create(
                    slug=child_slug, defaults={'name': child_name, 'category': category}
                )
                SubcategoryTranslation.objects.get_or_create(
                    subcategory=subcategory, locale='en', defaults={'name': child_name}
                )
                subcategories.append(subcategory)

        self.stdout.write(self.style.SUCCESS(
            f'Created {len(CATEGORIES)} categories with {len(subcategories)} subcategories'
        ))
        return subcategories

    def _create_items(self, count, brands, subcategories):
        """Create items with one detail row per supported locale."""
        self.stdout.write(f'Creating {count} items...')

        start = Item.objects.count()
        items = []
        for i in range(count):
            subcategory = random.choice(subcategories)
            items.append(Item(
                article_id=f"ART-{start + i + 1:06d}",
                is_displayed=random.random() > 0.05,  # 95% displayed
                image_links=[f"/uploads/items/{start + i + 1}.jpg"],
                category=subcategory.category,
                subcategory=subcategory,
                brand=random.choice(brands),
                warranty_length=random.choice([12, 24, 36]),
                sell_counter=random.randint(0, 500),
            ))
        Item.objects.bulk_create(items, ignore_conflicts=True)
        items = list(
            Item.objects.select_related('subcategory', 'brand')
            .filter(article_id__in=[item.article_id for item in items])
        )

        details = []
        for item in items:
            base_name = f"{random.choice(ADJECTIVES)} {item.subcategory.name} {item.article_id[-4:]}"
            for locale in settings.SUPPORTED_LOCALES:
                details.append(ItemDetail(
                    item=item,
                    locale=locale,
                    item_name=f"{base_name} [{locale}]" if locale != 'en' else base_name,
                    description=f"{item.brand.name} {base_name.lower()} for everyday work.",
                    seller=item.brand.name,
                    popularity=random.randint(0, 100),
                ))
        ItemDetail.objects.bulk_create(details, ignore_conflicts=True, batch_size=1000)

        self.stdout.write(self.style.SUCCESS(f'Created {len(items)} items with {len(details)} details'))
        return items

    def _create_offers(self, items, warehouses):
        """Each item is offered by one to three warehouses."""
        now = timezone.now()
        badges, weights = zip(*BADGE_WEIGHTS)
        offers = []

        for item in items:
            for warehouse in random.sample(warehouses, k=min(len(warehouses), random.randint(1, 3))):
                price = Decimal(str(round(random.uniform(10, 2000), 2)))
                offer = ItemPrice(
                    item=item,
                    warehouse=warehouse,
                    price=price,
                    quantity=random.randint(0, 100),
                    badge=random.choices(badges, weights=weights)[0],
                )
                # Roughly a fifth of offers run a promotion
                if random.random() < 0.2:
                    offer.promotion_price = (price * Decimal('0.85')).quantize(Decimal('0.01'))
                    offer.promo_start_date = now - timedelta(days=random.randint(0, 10))
                    offer.promo_end_date = now + timedelta(days=random.randint(1, 30))
                offers.append(offer)

        batch_size = 5000
        total = len(offers)
        for i in range(0, total, batch_size):
            ItemPrice.objects.bulk_create(offers[i:i + batch_size], ignore_conflicts=True)
            self.stdout.write(f'  Created {min(i + batch_size, total)} offers...')

        self.stdout.write(self.style.SUCCESS(f'Created {ItemPrice.objects.count()} offers'))

    def _create_exchange_rates(self):
        for to_currency, rate in (('PLN', Decimal('4.30')), ('UAH', Decimal('45.20'))):
            CurrencyExchange.objects.update_or_create(
                from_currency='EUR', to_currency=to_currency, defaults={'rate': rate}
            )
        self.stdout.write(self.style.SUCCESS('Exchange rates set'))
