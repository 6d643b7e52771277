"""
Tests for catalog pricing, currency helpers and catalog endpoints.

Test Cases:
1. Offer selection priority (preferred country, stock, fallback)
2. Promotion window checks
3. Home page tabs
4. Currency conversion, formatting and parsing
5. Public item, category and search endpoints
6. Admin CRUD permissions and exchange rate upserts
7. Admin batch delete, visibility, bulk price update and export
8. seed_data command
"""
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APITestCase

from accounts.models import User
from catalog.currency import (
    convert_price,
    detect_currency_from_locale,
    format_price,
    get_exchange_rate,
    parse_price_string,
)
from catalog.models import (
    Badge,
    Brand,
    Category,
    CategoryTranslation,
    CurrencyExchange,
    Item,
    ItemDetail,
    ItemPrice,
    ItemPriceHistory,
    Subcategory,
    Warehouse,
    WarehouseCountry,
)
from catalog.pricing import (
    calculate_discount_percentage,
    home_tab,
    is_promotion_active,
    resolve_price,
    select_offer,
)


class CatalogFixtureMixin:
    """Two countries, three warehouses and a helper to build items."""

    def create_catalog(self):
        self.poland = WarehouseCountry.objects.create(slug='poland', country_code='PL', name='Poland')
        self.germany = WarehouseCountry.objects.create(slug='germany', country_code='DE', name='Germany')
        self.wh_pl = Warehouse.objects.create(name='WH-PL', displayed_name='Warsaw', country=self.poland)
        self.wh_pl2 = Warehouse.objects.create(name='WH-PL-2', displayed_name='Krakow', country=self.poland)
        self.wh_de = Warehouse.objects.create(name='WH-DE', displayed_name='Berlin', country=self.germany)
        self.category = Category.objects.create(name='Power Tools', slug='power-tools')
        self.subcategory = Subcategory.objects.create(name='Drills', slug='drills', category=self.category)
        self.brand = Brand.objects.create(name='Bosch', alias='bosch')

    def create_item(self, article_id, offers, displayed=True, locales=('pl', 'en'), sell_counter=0):
        item = Item.objects.create(
            article_id=article_id,
            is_displayed=displayed,
            category=self.category,
            subcategory=self.subcategory,
            brand=self.brand,
            sell_counter=sell_counter,
        )
        for locale in locales:
            ItemDetail.objects.create(item=item, locale=locale, item_name=f'{article_id} {locale}')
        for warehouse, fields in offers:
            ItemPrice.objects.create(item=item, warehouse=warehouse, **fields)
        return item


class SelectOfferTestCase(CatalogFixtureMixin, TestCase):

    def setUp(self):
        self.create_catalog()

    def offers_of(self, item):
        return list(item.prices.select_related('warehouse', 'warehouse__country').order_by('id'))

    def test_preferred_country_with_stock_wins(self):
        """
        Given: An in-stock German offer listed before an in-stock Polish one
        When: Selecting with preferred country PL
        Then: The Polish offer is chosen
        """
        item = self.create_item('ABC1', [
            (self.wh_de, {'price': Decimal('90.00'), 'quantity': 5}),
            (self.wh_pl, {'price': Decimal('100.00'), 'quantity': 3}),
        ])
        offer = select_offer(self.offers_of(item), 'PL')
        self.assertEqual(offer.warehouse, self.wh_pl)

    def test_preferred_country_in_stock_beats_empty_one(self):
        item = self.create_item('ABC2', [
            (self.wh_pl, {'price': Decimal('100.00'), 'quantity': 0}),
            (self.wh_pl2, {'price': Decimal('110.00'), 'quantity': 4}),
        ])
        offer = select_offer(self.offers_of(item), 'PL')
        self.assertEqual(offer.warehouse, self.wh_pl2)

    def test_preferred_country_without_stock_still_preferred(self):
        item = self.create_item('ABC3', [
            (self.wh_de, {'price': Decimal('90.00'), 'quantity': 5}),
            (self.wh_pl, {'price': Decimal('100.00'), 'quantity': 0}),
        ])
        offer = select_offer(self.offers_of(item), 'PL')
        self.assertEqual(offer.warehouse, self.wh_pl)

    def test_falls_back_to_any_offer_with_stock(self):
        item = self.create_item('ABC4', [
            (self.wh_pl, {'price': Decimal('100.00'), 'quantity': 0}),
            (self.wh_de, {'price': Decimal('90.00'), 'quantity': 2}),
        ])
        offer = select_offer(self.offers_of(item), 'FR')
        self.assertEqual(offer.warehouse, self.wh_de)

    def test_falls_back_to_first_offer(self):
        item = self.create_item('ABC5', [
            (self.wh_de, {'price': Decimal('90.00'), 'quantity': 0}),
            (self.wh_pl, {'price': Decimal('100.00'), 'quantity': 0}),
        ])
        offer = select_offer(self.offers_of(item), 'FR')
        self.assertEqual(offer.warehouse, self.wh_de)

    def test_no_offers(self):
        self.assertIsNone(select_offer([], 'PL'))

        item = self.create_item('EMPTY', [])
        resolved = resolve_price(item, 'PL')
        self.assertFalse(resolved.in_stock)
        self.assertEqual(resolved.price, Decimal('0.00'))
        self.assertIsNone(resolved.warehouse_id)


class PromotionTestCase(CatalogFixtureMixin, TestCase):

    def setUp(self):
        self.create_catalog()
        self.now = timezone.now()

    def offer(self, **fields):
        defaults = {'price': Decimal('100.00'), 'quantity': 5}
        defaults.update(fields)
        item = self.create_item(f'P{ItemPrice.objects.count()}', [(self.wh_pl, defaults)])
        return item.prices.get()

    def test_promotion_without_window_is_active(self):
        offer = self.offer(promotion_price=Decimal('80.00'))
        self.assertTrue(is_promotion_active(offer, self.now))

    def test_promotion_not_below_price_is_inactive(self):
        offer = self.offer(promotion_price=Decimal('100.00'))
        self.assertFalse(is_promotion_active(offer, self.now))

    def test_no_promotion_price(self):
        self.assertFalse(is_promotion_active(self.offer(), self.now))

    def test_promotion_not_started_yet(self):
        """The persisted start date bounds the window from below."""
        offer = self.offer(
            promotion_price=Decimal('80.00'),
            promo_start_date=self.now + timedelta(days=1),
        )
        self.assertFalse(is_promotion_active(offer, self.now))

    def test_promotion_expired(self):
        offer = self.offer(
            promotion_price=Decimal('80.00'),
            promo_end_date=self.now - timedelta(seconds=1),
        )
        self.assertFalse(is_promotion_active(offer, self.now))

    def test_promotion_within_window(self):
        offer = self.offer(
            promotion_price=Decimal('80.00'),
            promo_start_date=self.now - timedelta(days=1),
            promo_end_date=self.now + timedelta(days=1),
        )
        self.assertTrue(is_promotion_active(offer, self.now))

    def test_resolve_price_applies_active_promotion(self):
        item = self.create_item('PROMO', [
            (self.wh_pl, {'price': Decimal('100.00'), 'promotion_price': Decimal('80.00'), 'quantity': 5}),
        ])
        resolved = resolve_price(item, 'PL', self.now)
        self.assertEqual(resolved.price, Decimal('80.00'))
        self.assertEqual(resolved.original_price, Decimal('100.00'))
        self.assertEqual(resolved.warehouse_country, 'PL')
        self.assertTrue(resolved.in_stock)

    def test_resolve_price_ignores_expired_promotion(self):
        item = self.create_item('OLD', [
            (self.wh_pl, {
                'price': Decimal('100.00'),
                'promotion_price': Decimal('80.00'),
                'promo_end_date': self.now - timedelta(days=1),
                'quantity': 5,
            }),
        ])
        resolved = resolve_price(item, 'PL', self.now)
        self.assertEqual(resolved.price, Decimal('100.00'))
        self.assertIsNone(resolved.original_price)

    def test_discount_percentage(self):
        self.assertEqual(calculate_discount_percentage(Decimal('100'), Decimal('80')), 20)
        self.assertEqual(calculate_discount_percentage('120,00 zł', '90'), 25)
        self.assertEqual(calculate_discount_percentage(100, 100), 0)
        self.assertEqual(calculate_discount_percentage(0, 10), 0)


class HomeTabTestCase(CatalogFixtureMixin, TestCase):

    def setUp(self):
        self.create_catalog()

    def test_bestsellers_sorted_and_limited(self):
        for i in range(10):
            self.create_item(f'BS{i}', [(self.wh_pl, {'price': Decimal('10.00'), 'quantity': 1})], sell_counter=i)
        self.create_item('HIDDEN', [(self.wh_pl, {'price': Decimal('10.00'), 'quantity': 1})],
                         displayed=False, sell_counter=100)

        result = home_tab(Item.objects.prefetch_related('prices'), 'bestsellers')

        self.assertEqual(len(result), 8)
        self.assertEqual(result[0].article_id, 'BS9')
        self.assertNotIn('HIDDEN', [item.article_id for item in result])
        self.assertNotIn('BS0', [item.article_id for item in result])

    def test_discount_tab_uses_badge_or_running_promotion(self):
        now = timezone.now()
        self.create_item('HOT', [(self.wh_pl, {'price': Decimal('10.00'), 'badge': Badge.HOT_DEALS})])
        self.create_item('PROMO', [(self.wh_pl, {'price': Decimal('10.00'), 'promotion_price': Decimal('8.00')})])
        self.create_item('EXPIRED', [(self.wh_pl, {
            'price': Decimal('10.00'),
            'promotion_price': Decimal('8.00'),
            'promo_end_date': now - timedelta(days=1),
        })])
        self.create_item('PLAIN', [(self.wh_pl, {'price': Decimal('10.00')})])

        result = {item.article_id for item in home_tab(Item.objects.all(), 'discount', now)}

        self.assertEqual(result, {'HOT', 'PROMO'})

    def test_new_tab_limited_to_four(self):
        for i in range(6):
            self.create_item(f'NEW{i}', [(self.wh_pl, {'price': Decimal('10.00'), 'badge': Badge.NEW_ARRIVALS})])

        self.assertEqual(len(home_tab(Item.objects.all(), 'new')), 4)

    def test_unknown_tab(self):
        with self.assertRaises(ValueError):
            home_tab([], 'clearance')


class CurrencyTestCase(TestCase):

    def test_detect_currency_from_locale(self):
        self.assertEqual(detect_currency_from_locale('pl'), 'PLN')
        self.assertEqual(detect_currency_from_locale('ua'), 'UAH')
        self.assertEqual(detect_currency_from_locale('uk-UA'), 'UAH')
        self.assertEqual(detect_currency_from_locale('en'), 'EUR')
        self.assertEqual(detect_currency_from_locale(None), 'EUR')

    def test_fallback_rates_without_stored_rate(self):
        self.assertEqual(get_exchange_rate('EUR', 'PLN'), Decimal('4.5'))
        self.assertEqual(get_exchange_rate('EUR', 'UAH'), Decimal('40'))
        self.assertEqual(get_exchange_rate('EUR', 'EUR'), Decimal('1'))

    def test_stored_rate_preferred(self):
        CurrencyExchange.objects.create(from_currency='EUR', to_currency='PLN', rate=Decimal('4.300000'))
        self.assertEqual(get_exchange_rate('EUR', 'PLN'), Decimal('4.3'))
        self.assertEqual(convert_price(Decimal('100'), get_exchange_rate('PLN', 'EUR')), Decimal('23.26'))

    def test_unsupported_currency(self):
        with self.assertRaises(ValueError):
            get_exchange_rate('EUR', 'USD')

    def test_convert_price_rounds_half_up(self):
        self.assertEqual(convert_price(Decimal('10.005'), 1), Decimal('10.01'))
        self.assertEqual(convert_price('19.99', Decimal('4.5')), Decimal('89.96'))

    def test_format_price(self):
        self.assertEqual(format_price(Decimal('1234.56'), 'EUR'), '€1,234.56')
        self.assertEqual(format_price(Decimal('1234.56'), 'PLN'), '1 234,56 zł')
        self.assertEqual(format_price(Decimal('1234567.5'), 'UAH'), '1 234 567,50 ₴')
        self.assertEqual(format_price(Decimal('5'), 'EUR'), '€5.00')

    def test_parse_price_string(self):
        self.assertEqual(parse_price_string('1 234,56 zł'), Decimal('1234.56'))
        self.assertEqual(parse_price_string('€1,234.56'), Decimal('1234.56'))
        self.assertEqual(parse_price_string(12.5), Decimal('12.5'))
        self.assertEqual(parse_price_string('n/a'), Decimal('0'))
        self.assertEqual(parse_price_string(None), Decimal('0'))


class PublicCatalogAPITestCase(CatalogFixtureMixin, APITestCase):

    def setUp(self):
        self.create_catalog()
        CategoryTranslation.objects.create(category=self.category, locale='pl', name='Elektronarzędzia')
        self.item = self.create_item('ABC1', [
            (self.wh_pl, {'price': Decimal('100.00'), 'promotion_price': Decimal('80.00'), 'quantity': 5}),
            (self.wh_de, {'price': Decimal('95.00'), 'quantity': 2}),
        ], sell_counter=10)
        self.create_item('ENONLY', [(self.wh_pl, {'price': Decimal('50.00'), 'quantity': 1})], locales=('en',))
        self.create_item('HIDDEN', [(self.wh_pl, {'price': Decimal('50.00'), 'quantity': 1})], displayed=False)

    def test_items_only_with_locale_details(self):
        response = self.client.get('/api/public/items/pl/')

        self.assertEqual(response.status_code, 200)
        article_ids = [item['article_id'] for item in response.data['results']]
        self.assertEqual(article_ids, ['ABC1'])
        self.assertEqual(response.data['results'][0]['name'], 'ABC1 pl')

    def test_item_price_in_requested_currency(self):
        CurrencyExchange.objects.create(from_currency='EUR', to_currency='PLN', rate=Decimal('4.000000'))

        response = self.client.get('/api/public/items/pl/', {'currency': 'PLN'})

        pricing = response.data['results'][0]['pricing']
        self.assertEqual(Decimal(str(pricing['price'])), Decimal('80.00'))
        self.assertEqual(pricing['formatted_price'], '320,00 zł')

    def test_invalid_locale(self):
        response = self.client.get('/api/public/items/fr/')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['error'], 'Validation Error')

    def test_item_detail_lists_warehouses(self):
        response = self.client.get('/api/public/items/en/ABC1/', {'country': 'DE'})

        self.assertEqual(response.status_code, 200)
        pricing = response.data['pricing']
        self.assertEqual(pricing['warehouse_country'], 'DE')
        self.assertEqual(len(pricing['available_warehouses']), 2)

    def test_item_detail_not_found(self):
        response = self.client.get('/api/public/items/pl/ENONLY/')
        self.assertEqual(response.status_code, 404)

    def test_categories_translated(self):
        response = self.client.get('/api/public/categories/pl/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data[0]['name'], 'Elektronarzędzia')
        self.assertEqual(response.data[0]['subcategories'][0]['slug'], 'drills')

    def test_category_items_price_filter_and_sort(self):
        self.create_item('ABC2', [(self.wh_pl, {'price': Decimal('30.00'), 'quantity': 1})])

        response = self.client.get(
            '/api/public/category/pl/power-tools/',
            {'sort': 'price_asc', 'max_price': '90'},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual([i['article_id'] for i in response.data['items']], ['ABC2', 'ABC1'])

    def test_category_items_ignore_non_finite_price_bounds(self):
        for bound in ('NaN', 'sNaN', 'Infinity', 'abc'):
            with self.subTest(bound=bound):
                response = self.client.get(
                    '/api/public/category/pl/power-tools/',
                    {'min_price': bound, 'max_price': bound},
                )

                self.assertEqual(response.status_code, 200)
                self.assertEqual(response.data['count'], 1)

    def test_category_items_by_subcategory_slug(self):
        response = self.client.get('/api/public/category/pl/drills/')
        self.assertEqual(response.data['count'], 1)

    def test_home_tab(self):
        response = self.client.get('/api/public/home/pl/', {'tab': 'discount'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([i['article_id'] for i in response.data['items']], ['ABC1'])

    def test_home_tab_invalid(self):
        response = self.client.get('/api/public/home/pl/', {'tab': 'clearance'})
        self.assertEqual(response.status_code, 400)

    def test_search(self):
        response = self.client.get('/api/search/', {'q': 'abc1', 'locale': 'en'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual([i['article_id'] for i in response.data['items']], ['ABC1'])

    def test_search_empty_query(self):
        response = self.client.get('/api/search/')
        self.assertEqual(response.data, {'items': [], 'categories': [], 'subcategories': []})

    @override_settings(RATE_LIMIT_ENABLED=False)
    def test_autocomplete_requires_three_characters(self):
        response = self.client.get('/api/search/autocomplete/', {'q': 'ab'})
        self.assertEqual(response.status_code, 400)

    @override_settings(RATE_LIMIT_ENABLED=False)
    def test_autocomplete(self):
        response = self.client.get('/api/search/autocomplete/', {'q': 'ABC', 'locale': 'pl'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, [{'id': self.item.id, 'article_id': 'ABC1', 'name': 'ABC1 pl'}])


class AdminCatalogAPITestCase(CatalogFixtureMixin, APITestCase):

    def setUp(self):
        self.create_catalog()
        self.admin = User.objects.create_user('admin', password='pass', role=User.Role.ADMIN)
        self.employee = User.objects.create_user('employee', password='pass', role=User.Role.EMPLOYEE)

    def test_anonymous_rejected(self):
        response = self.client.get('/api/admin/brands/')
        self.assertEqual(response.status_code, 401)

    def test_employee_cannot_manage_catalog(self):
        self.client.force_authenticate(self.employee)
        response = self.client.post('/api/admin/brands/', {'name': 'Makita', 'alias': 'makita'})
        self.assertEqual(response.status_code, 403)

    def test_admin_creates_brand(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post('/api/admin/brands/', {'name': 'Makita', 'alias': 'makita'})

        self.assertEqual(response.status_code, 201)
        self.assertTrue(Brand.objects.filter(alias='makita').exists())

    def test_admin_creates_item_with_details_and_offers(self):
        self.client.force_authenticate(self.admin)
        payload = {
            'article_id': 'NEW-1',
            'is_displayed': True,
            'category_id': self.category.id,
            'brand_id': self.brand.id,
            'details': [
                {'locale': 'pl', 'item_name': 'Wiertarka'},
                {'locale': 'en', 'item_name': 'Drill'},
            ],
            'prices': [
                {'warehouse_id': self.wh_pl.id, 'price': '199.99', 'quantity': 7},
            ],
        }

        response = self.client.post('/api/admin/items/', payload, format='json')

        self.assertEqual(response.status_code, 201)
        item = Item.objects.get(article_id='NEW-1')
        self.assertEqual(item.details.count(), 2)
        self.assertEqual(item.prices.get().quantity, 7)

    def test_admin_item_update_upserts_offer(self):
        item = self.create_item('UPD', [(self.wh_pl, {'price': Decimal('10.00'), 'quantity': 1})])
        self.client.force_authenticate(self.admin)

        response = self.client.patch(
            '/api/admin/items/UPD/',
            {'prices': [
                {'warehouse_id': self.wh_pl.id, 'price': '12.00', 'quantity': 3},
                {'warehouse_id': self.wh_de.id, 'price': '11.00', 'quantity': 4},
            ]},
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(item.prices.count(), 2)
        self.assertEqual(item.prices.get(warehouse=self.wh_pl).price, Decimal('12.00'))

    def test_visibility_toggle(self):
        self.create_item('VIS', [], displayed=True)
        self.client.force_authenticate(self.admin)

        response = self.client.patch('/api/admin/items/VIS/visibility/', {'is_displayed': False})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Item.objects.get(article_id='VIS').is_displayed)

    def test_warehouse_list_has_offer_counts(self):
        self.create_item('W1', [(self.wh_pl, {'price': Decimal('10.00')})])
        self.client.force_authenticate(self.admin)

        response = self.client.get('/api/admin/warehouses/')

        counts = {w['name']: w['offer_count'] for w in response.data['results']}
        self.assertEqual(counts['WH-PL'], 1)
        self.assertEqual(counts['WH-DE'], 0)

    def test_offer_rejects_inverted_promotion_window(self):
        item = self.create_item('OFF', [(self.wh_pl, {'price': Decimal('10.00')})])
        offer = item.prices.get()
        self.client.force_authenticate(self.admin)
        now = timezone.now()

        response = self.client.patch(
            f'/api/admin/item-prices/{offer.id}/',
            {
                'promo_start_date': (now + timedelta(days=2)).isoformat(),
                'promo_end_date': now.isoformat(),
            },
            format='json',
        )

        self.assertEqual(response.status_code, 400)

    def test_currency_exchange_upsert(self):
        self.client.force_authenticate(self.admin)

        created = self.client.put(
            '/api/admin/currency-exchange/',
            {'from_currency': 'EUR', 'to_currency': 'PLN', 'rate': '4.31'},
            format='json',
        )
        updated = self.client.put(
            '/api/admin/currency-exchange/',
            {'from_currency': 'EUR', 'to_currency': 'PLN', 'rate': '4.35'},
            format='json',
        )

        self.assertEqual(created.status_code, 201)
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(CurrencyExchange.objects.count(), 1)
        self.assertEqual(CurrencyExchange.objects.get().rate, Decimal('4.350000'))

    def test_currency_exchange_rejects_bad_input(self):
        self.client.force_authenticate(self.admin)

        negative = self.client.put(
            '/api/admin/currency-exchange/',
            {'from_currency': 'EUR', 'to_currency': 'PLN', 'rate': '-1'},
            format='json',
        )
        unknown = self.client.put(
            '/api/admin/currency-exchange/',
            {'from_currency': 'EUR', 'to_currency': 'USD', 'rate': '1.1'},
            format='json',
        )

        self.assertEqual(negative.status_code, 400)
        self.assertEqual(unknown.status_code, 400)
        self.assertFalse(CurrencyExchange.objects.exists())


class AdminItemBatchAPITestCase(CatalogFixtureMixin, APITestCase):

    def setUp(self):
        self.create_catalog()
        self.admin = User.objects.create_user('admin', password='pass', role=User.Role.ADMIN)
        self.makita = Brand.objects.create(name='Makita', alias='makita')
        self.abc1 = self.create_item('ABC1', [(self.wh_pl, {'price': Decimal('100.00'), 'quantity': 5})])
        self.abc2 = self.create_item('ABC2', [(self.wh_pl, {'price': Decimal('60.00'), 'quantity': 2})])
        self.mk1 = self.create_item('MK1', [])
        self.mk1.brand = self.makita
        self.mk1.save()
        self.client.force_authenticate(self.admin)

    def test_batch_delete_by_article_ids(self):
        response = self.client.post(
            '/api/admin/items/batch-delete/', {'article_ids': ['ABC1', 'MK1']}, format='json'
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['affected_count'], 2)
        self.assertEqual(list(Item.objects.values_list('article_id', flat=True)), ['ABC2'])
        self.assertFalse(ItemPrice.objects.filter(item_id=self.abc1.id).exists())

    def test_batch_delete_by_filters(self):
        response = self.client.post(
            '/api/admin/items/batch-delete/', {'filters': {'brand': 'makita'}}, format='json'
        )

        self.assertEqual(response.data['affected_count'], 1)
        self.assertFalse(Item.objects.filter(article_id='MK1').exists())

    def test_batch_requires_ids_or_filters(self):
        response = self.client.post('/api/admin/items/batch-delete/', {}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Item.objects.count(), 3)

    def test_batch_hide_by_search_term(self):
        """
        Given: Three displayed items, two of them matching "abc"
        When: Hiding items filtered by search term "abc"
        Then: Only ABC1 and ABC2 are hidden
        """
        response = self.client.post(
            '/api/admin/items/batch-update/',
            {'action': 'hide', 'filters': {'search_term': 'abc'}},
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['affected_count'], 2)
        self.assertEqual(
            sorted(Item.objects.filter(is_displayed=False).values_list('article_id', flat=True)),
            ['ABC1', 'ABC2'],
        )

    def test_batch_update_invalid_action(self):
        response = self.client.post(
            '/api/admin/items/batch-update/', {'action': 'archive', 'article_ids': ['ABC1']}, format='json'
        )
        self.assertEqual(response.status_code, 400)

    def test_bulk_update_prices(self):
        """
        Given: ABC1 offered at WH-PL, ABC2 not offered at WH-DE, NEW1 unknown
        When: Bulk updating prices for WH-PL with one invalid row
        Then: One update with history, one new offer on a hidden placeholder item,
              the invalid row reported
        """
        response = self.client.post(
            '/api/admin/items/bulk-update-prices/',
            {
                'warehouse_id': self.wh_pl.id,
                'items': [
                    {'article_id': 'ABC1', 'price': '90.00', 'quantity': 7, 'badge': 'HOT_DEALS'},
                    {'article_id': 'NEW1', 'price': '15.00', 'quantity': 1, 'brand': 'Makita'},
                    {'article_id': 'BAD1', 'price': '-1', 'quantity': 1},
                ],
            },
            format='json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.data['results'],
            {'updated': 1, 'created': 1, 'created_items': 1, 'errors': 1},
        )
        self.assertTrue(response.data['details'][0].startswith('Row 2: price'))

        offer = ItemPrice.objects.get(item=self.abc1, warehouse=self.wh_pl)
        self.assertEqual(offer.price, Decimal('90.00'))
        self.assertEqual(offer.quantity, 7)
        self.assertEqual(offer.badge, Badge.HOT_DEALS)

        history = ItemPriceHistory.objects.get(item_price=offer)
        self.assertEqual(history.price, Decimal('100.00'))
        self.assertEqual(history.quantity, 5)

        placeholder = Item.objects.get(article_id='NEW1')
        self.assertFalse(placeholder.is_displayed)
        self.assertEqual(placeholder.brand, self.makita)
        self.assertEqual(placeholder.details.get().item_name, 'NEW1')
        self.assertFalse(Item.objects.filter(article_id='BAD1').exists())

    def test_bulk_update_prices_unknown_warehouse(self):
        response = self.client.post(
            '/api/admin/items/bulk-update-prices/',
            {'warehouse_id': 99999, 'items': [{'article_id': 'ABC1', 'price': '1', 'quantity': 1}]},
            format='json',
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['detail'], 'Warehouse not found')

    def test_export_json_rows_per_locale_and_offer(self):
        response = self.client.get('/api/admin/items/export/')

        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment; filename="items_export_', response['Content-Disposition'])
        abc1_rows = [row for row in response.data if row['article_id'] == 'ABC1']
        self.assertEqual(sorted(row['locale'] for row in abc1_rows), ['en', 'pl'])
        self.assertEqual(abc1_rows[0]['warehouse_name'], 'WH-PL')
        self.assertEqual(abc1_rows[0]['price'], '100.00')
        mk1_rows = [row for row in response.data if row['article_id'] == 'MK1']
        self.assertEqual([row['warehouse_name'] for row in mk1_rows], ['', ''])

    def test_export_csv(self):
        response = self.client.get('/api/admin/items/export/', {'export_format': 'csv'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')
        lines = response.content.decode('utf-8').splitlines()
        self.assertTrue(lines[0].startswith('article_id,is_displayed,image_link'))
        self.assertEqual(len(lines), 1 + 6)

    def test_employee_cannot_run_batches(self):
        employee = User.objects.create_user('employee', password='pass', role=User.Role.EMPLOYEE)
        self.client.force_authenticate(employee)

        response = self.client.post('/api/admin/items/batch-delete/', {'article_ids': ['ABC1']}, format='json')

        self.assertEqual(response.status_code, 403)
        self.assertTrue(Item.objects.filter(article_id='ABC1').exists())


class SeedDataCommandTestCase(TestCase):

    def test_seed_creates_catalog(self):
        out = StringIO()
        call_command('seed_data', items=5, warehouses=2, seed=1, stdout=out)

        self.assertEqual(Item.objects.count(), 5)
        self.assertEqual(Warehouse.objects.count(), 2)
        self.assertEqual(ItemDetail.objects.count(), 5 * 4)
        self.assertTrue(ItemPrice.objects.exists())
        self.assertEqual(CurrencyExchange.objects.count(), 2)
        self.assertIn('completed successfully', out.getvalue())
