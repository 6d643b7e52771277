"""
Tests for order transaction logic and order endpoints.

Test Cases:
1. Order created with sufficient stock, total from promotion price
2. Order rejected with insufficient stock, nothing written
3. Stock deducted per (item, warehouse)
4. Price requests carry a single zero-priced line
5. Customer cancel only from NEW, stock left as ordered
6. Back-office status changes, DELIVERY needs a delivery id, recent orders
7. Concurrent order race condition prevention
8. Daily report task
"""
import threading
from datetime import timedelta
from decimal import Decimal

from django.db import connection
from django.test import TestCase, TransactionTestCase, override_settings, skipUnlessDBFeature
from django.utils import timezone
from rest_framework.test import APITestCase

from accounts.models import User
from catalog.models import ItemPrice
from catalog.tests import CatalogFixtureMixin
from orders.models import Order
from orders.services import (
    cancel_order,
    create_order,
    create_price_request,
    update_order_status,
    InsufficientStockError,
    InvalidOrderActionError,
    ItemNotFoundError,
    OfferUnavailableError,
    OrderStatusError,
    OrderValidationError,
)
from orders.tasks import generate_daily_order_report


class OrderFixtureMixin(CatalogFixtureMixin):
    """
    ABC1 at WH-PL: price 100, promotion 80, 5 in stock.
    XYZ9 at WH-PL: price 50, 10 in stock; at WH-DE: price 40, 1 in stock.
    """

    def create_order_fixtures(self):
        self.create_catalog()
        self.user = User.objects.create_user('customer', password='pass')
        self.abc1 = self.create_item('ABC1', [
            (self.wh_pl, {'price': Decimal('100.00'), 'promotion_price': Decimal('80.00'), 'quantity': 5}),
        ])
        self.xyz9 = self.create_item('XYZ9', [
            (self.wh_pl, {'price': Decimal('50.00'), 'quantity': 10}),
            (self.wh_de, {'price': Decimal('40.00'), 'quantity': 1}),
        ])

    def stock(self, item, warehouse):
        return ItemPrice.objects.get(item=item, warehouse=warehouse).quantity


class CreateOrderTestCase(OrderFixtureMixin, TestCase):
    """Test cases for create_order."""

    def setUp(self):
        self.create_order_fixtures()

    def test_order_created_with_promotion_price(self):
        """
        Test: Promotion price wins and stock is deducted.

        Given: ABC1 at WH-PL priced 100 with promotion 80 and 5 in stock
        When: Ordering 2 units
        Then: Total is 160 and 3 units remain
        """
        order = create_order(
            self.user,
            [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 2}],
            total_price='€160.00',
        )

        self.assertEqual(order.status, Order.Status.NEW)
        self.assertEqual(order.original_total_price, Decimal('160.00'))
        self.assertEqual(order.total_price, '€160.00')
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 3)

        line = order.line_items[0]
        self.assertEqual(line['unit_price'], '80.00')
        self.assertEqual(line['line_total'], '160.00')
        self.assertEqual(line['base_price'], '100.00')
        self.assertEqual(line['base_special_price'], '80.00')
        self.assertEqual(line['warehouse_name'], 'WH-PL')
        self.assertEqual(line['warehouse_country'], 'PL')

    def test_order_rejected_with_insufficient_stock(self):
        """
        Test: Requesting more than available stock is rejected.

        Given: ABC1 at WH-PL has 5 units
        When: Ordering 6 units
        Then: InsufficientStockError, no order row, stock still 5
        """
        with self.assertRaises(InsufficientStockError) as context:
            create_order(
                self.user,
                [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 6}],
                total_price='€480.00',
            )

        self.assertEqual(context.exception.article_id, 'ABC1')
        self.assertEqual(context.exception.available, 5)
        self.assertEqual(Order.objects.count(), 0)
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 5)

    def test_no_stock_deduction_when_any_line_fails(self):
        """
        Test: One short line rejects the whole cart.

        Given: ABC1 has enough stock, XYZ9 at WH-DE has 1 unit
        When: Ordering 2 ABC1 and 3 XYZ9 from WH-DE
        Then: Nothing is deducted from either offer
        """
        with self.assertRaises(InsufficientStockError) as context:
            create_order(
                self.user,
                [
                    {'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 2},
                    {'article_id': 'XYZ9', 'warehouse_id': self.wh_de.id, 'quantity': 3},
                ],
                total_price='€280.00',
            )

        self.assertEqual(context.exception.article_id, 'XYZ9')
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 5)
        self.assertEqual(self.stock(self.xyz9, self.wh_de), 1)
        self.assertEqual(Order.objects.count(), 0)

    def test_total_is_sum_of_line_totals(self):
        order = create_order(
            self.user,
            [
                {'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 2},
                {'article_id': 'XYZ9', 'warehouse_id': self.wh_pl.id, 'quantity': 3},
            ],
            total_price='1 333,00 zł',
        )

        line_totals = sum(Decimal(line['line_total']) for line in order.line_items)
        self.assertEqual(order.original_total_price, Decimal('310.00'))
        self.assertEqual(order.original_total_price, line_totals)
        self.assertEqual(order.item_count, 5)

    def test_deducts_from_requested_warehouse_only(self):
        create_order(
            self.user,
            [{'article_id': 'XYZ9', 'warehouse_id': self.wh_de.id, 'quantity': 1}],
            total_price='€40.00',
        )

        self.assertEqual(self.stock(self.xyz9, self.wh_de), 0)
        self.assertEqual(self.stock(self.xyz9, self.wh_pl), 10)

    def test_order_with_exact_stock(self):
        create_order(
            self.user,
            [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 5}],
            total_price='€400.00',
        )

        self.assertEqual(self.stock(self.abc1, self.wh_pl), 0)

    def test_sell_counter_incremented(self):
        create_order(
            self.user,
            [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 2}],
            total_price='€160.00',
        )

        self.abc1.refresh_from_db()
        self.assertEqual(self.abc1.sell_counter, 2)

    def test_unknown_article(self):
        with self.assertRaises(ItemNotFoundError) as context:
            create_order(
                self.user,
                [{'article_id': 'NOPE', 'warehouse_id': self.wh_pl.id, 'quantity': 1}],
                total_price='€1.00',
            )

        self.assertEqual(context.exception.article_id, 'NOPE')
        self.assertEqual(Order.objects.count(), 0)

    def test_missing_offer_in_warehouse(self):
        with self.assertRaises(InsufficientStockError) as context:
            create_order(
                self.user,
                [{'article_id': 'ABC1', 'warehouse_id': self.wh_de.id, 'quantity': 1}],
                total_price='€80.00',
            )

        self.assertEqual(context.exception.available, 0)

    def test_line_name_falls_back_to_item_detail(self):
        order = create_order(
            self.user,
            [
                {'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 1, 'name': 'Drill'},
                {'article_id': 'XYZ9', 'warehouse_id': self.wh_pl.id, 'quantity': 1},
            ],
            total_price='€130.00',
        )

        names = [line['name'] for line in order.line_items]
        self.assertEqual(names, ['Drill', 'XYZ9 pl'])

    def test_total_mismatch_is_logged_not_rejected(self):
        """
        Given: A client total that differs from the computed one by more than 1
        When: Creating the order
        Then: The order is created and a warning is logged
        """
        with self.assertLogs('orders.services', level='WARNING') as logs:
            order = create_order(
                self.user,
                [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 2}],
                total_price='€200.00',
                original_total_price=Decimal('200.00'),
            )

        self.assertEqual(order.original_total_price, Decimal('160.00'))
        self.assertTrue(any('Mismatch' in message for message in logs.output))

    def test_validation_error_empty_cart(self):
        with self.assertRaises(OrderValidationError) as context:
            create_order(self.user, [], total_price='€0.00')

        self.assertIn('Cart is empty', str(context.exception))

    def test_validation_error_invalid_quantity(self):
        with self.assertRaises(OrderValidationError):
            create_order(
                self.user,
                [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 0}],
                total_price='€0.00',
            )

    def test_duplicate_lines_are_merged(self):
        """
        Given: The same ABC1 / WH-PL pair appears twice with 1 and 2 units
        When: Creating the order
        Then: One line of 3 units at the promotion price, 2 units left
        """
        order = create_order(
            self.user,
            [
                {'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 1},
                {'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 2},
            ],
            total_price='€240.00',
        )

        self.assertEqual(len(order.line_items), 1)
        self.assertEqual(order.line_items[0]['quantity'], 3)
        self.assertEqual(order.original_total_price, Decimal('240.00'))
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 2)

    def test_merged_duplicate_lines_checked_against_stock(self):
        with self.assertRaises(InsufficientStockError) as context:
            create_order(
                self.user,
                [
                    {'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 3},
                    {'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 3},
                ],
                total_price='€480.00',
            )

        self.assertEqual(context.exception.requested, 6)
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 5)

    def test_validation_error_missing_total_price(self):
        with self.assertRaises(OrderValidationError) as context:
            create_order(
                self.user,
                [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 1}],
                total_price='  ',
            )

        self.assertIn('total_price', str(context.exception))


class PriceRequestTestCase(OrderFixtureMixin, TestCase):

    def setUp(self):
        self.create_order_fixtures()

    def test_price_request_has_zero_priced_line(self):
        """
        Given: ABC1 offered at WH-PL
        When: Requesting a price for 10 units
        Then: ASK_FOR_PRICE order with total 0, one zero-priced line, no stock change
        """
        order = create_price_request(self.user, self.abc1.id, self.wh_pl.id, 10, comment='Bulk quote')

        self.assertEqual(order.status, Order.Status.ASK_FOR_PRICE)
        self.assertEqual(order.original_total_price, Decimal('0.00'))
        self.assertEqual(order.total_price, '0')
        self.assertEqual(order.comment, 'Bulk quote')
        self.assertEqual(len(order.line_items), 1)

        line = order.line_items[0]
        self.assertEqual(line['unit_price'], '0.00')
        self.assertEqual(line['line_total'], '0.00')
        self.assertEqual(line['base_price'], '100.00')
        self.assertEqual(line['quantity'], 10)
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 5)

    def test_price_request_without_offer(self):
        with self.assertRaises(OfferUnavailableError) as context:
            create_price_request(self.user, self.abc1.id, self.wh_de.id, 1)

        self.assertEqual(str(context.exception), 'Item not available in selected warehouse')
        self.assertEqual(Order.objects.count(), 0)

    def test_price_request_unknown_item(self):
        with self.assertRaises(ItemNotFoundError):
            create_price_request(self.user, 99999, self.wh_pl.id, 1)


class CancelOrderTestCase(OrderFixtureMixin, TestCase):

    def setUp(self):
        self.create_order_fixtures()
        self.order = create_order(
            self.user,
            [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 2}],
            total_price='€160.00',
        )

    def test_cancel_new_order_keeps_stock(self):
        """
        Test: Cancelling only changes the status.

        Given: A NEW order for 2 units of ABC1, leaving 3 in stock
        When: The customer cancels it
        Then: Status is CANCELLED, stock stays at 3 and the sell counter at 2
        """
        order = cancel_order(self.order.id, self.user)

        self.assertEqual(order.status, Order.Status.CANCELLED)
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 3)
        self.abc1.refresh_from_db()
        self.assertEqual(self.abc1.sell_counter, 2)

    def test_cancel_only_from_new(self):
        for order_status in Order.Status.values:
            if order_status == Order.Status.NEW:
                continue
            with self.subTest(status=order_status):
                Order.objects.filter(pk=self.order.pk).update(status=order_status)

                with self.assertRaises(InvalidOrderActionError):
                    cancel_order(self.order.id, self.user)

                self.order.refresh_from_db()
                self.assertEqual(self.order.status, order_status)
                self.assertEqual(self.stock(self.abc1, self.wh_pl), 3)

    def test_cannot_cancel_someone_elses_order(self):
        other = User.objects.create_user('other', password='pass')

        with self.assertRaises(Order.DoesNotExist):
            cancel_order(self.order.id, other)


class UpdateOrderStatusTestCase(OrderFixtureMixin, TestCase):

    def setUp(self):
        self.create_order_fixtures()
        self.order = create_order(
            self.user,
            [{'article_id': 'ABC1', 'warehouse_id': self.wh_pl.id, 'quantity': 1}],
            total_price='€80.00',
        )

    def test_delivery_requires_delivery_id(self):
        with self.assertRaises(OrderStatusError):
            update_order_status(self.order, Order.Status.DELIVERY, '  ')

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.NEW)

    def test_delivery_with_id(self):
        order = update_order_status(self.order, Order.Status.DELIVERY, 'DPD-123')

        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.DELIVERY)
        self.assertEqual(order.delivery_id, 'DPD-123')

    def test_any_transition_allowed(self):
        update_order_status(self.order, Order.Status.COMPLETED)
        order = update_order_status(self.order, Order.Status.NEW)

        self.assertEqual(order.status, Order.Status.NEW)

    def test_unknown_status(self):
        with self.assertRaises(OrderStatusError):
            update_order_status(self.order, 'SHIPPED')

    def test_admin_cancel_leaves_stock(self):
        update_order_status(self.order, Order.Status.CANCELLED)

        self.assertEqual(self.stock(self.abc1, self.wh_pl), 4)


@override_settings(RATE_LIMIT_ENABLED=False)
class OrderAPITestCase(OrderFixtureMixin, APITestCase):
    """Test cases for the customer order endpoints."""

    def setUp(self):
        self.create_order_fixtures()
        self.client.force_authenticate(self.user)

    def cart(self, quantity, article_id='ABC1'):
        return {
            'cart_items': [{'article_id': article_id, 'warehouse_id': self.wh_pl.id, 'quantity': quantity}],
            'total_price': '€160.00',
        }

    def test_anonymous_rejected(self):
        self.client.force_authenticate(None)

        response = self.client.post('/api/orders/', self.cart(2), format='json')

        self.assertEqual(response.status_code, 401)

    def test_create_order(self):
        response = self.client.post('/api/orders/', self.cart(2), format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Order created successfully')
        self.assertEqual(response.data['order']['original_total_price'], '160.00')
        self.assertEqual(response.data['order']['status'], 'NEW')
        self.assertTrue(Order.objects.filter(pk=response.data['order_id'], user=self.user).exists())
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 3)

    def test_insufficient_stock_returns_400(self):
        response = self.client.post('/api/orders/', self.cart(6), format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['article_id'], 'ABC1')
        self.assertEqual(response.data['detail'], 'Insufficient stock for item ABC1 pl')
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 5)

    def test_unknown_item_returns_404(self):
        response = self.client.post('/api/orders/', self.cart(1, article_id='NOPE'), format='json')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['article_id'], 'NOPE')

    def test_empty_cart(self):
        response = self.client.post('/api/orders/', {'cart_items': [], 'total_price': '€0.00'}, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('cart_items', response.data['detail'])

    def test_missing_total_price(self):
        payload = self.cart(1)
        del payload['total_price']

        response = self.client.post('/api/orders/', payload, format='json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('total_price', response.data['detail'])

    def test_price_request(self):
        response = self.client.post('/api/orders/', {
            'is_price_request': True,
            'item_id': self.abc1.id,
            'warehouse_id': self.wh_pl.id,
            'quantity': 3,
        }, format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['message'], 'Price request submitted successfully')
        self.assertEqual(response.data['order']['status'], 'ASK_FOR_PRICE')

    def test_price_request_unavailable_warehouse(self):
        response = self.client.post('/api/orders/', {
            'is_price_request': True,
            'item_id': self.abc1.id,
            'warehouse_id': self.wh_de.id,
        }, format='json')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['detail'], 'Item not available in selected warehouse')

    def test_list_only_own_orders(self):
        other = User.objects.create_user('other', password='pass')
        Order.objects.create(user=other, total_price='€1.00')
        mine = Order.objects.create(user=self.user, total_price='€2.00')

        response = self.client.get('/api/orders/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual([o['id'] for o in response.data['results']], [mine.id])

    def test_detail_of_other_users_order_not_found(self):
        other = User.objects.create_user('other', password='pass')
        order = Order.objects.create(user=other, total_price='€1.00')

        response = self.client.get(f'/api/orders/{order.id}/')

        self.assertEqual(response.status_code, 404)

    def test_detail_includes_payment_summary(self):
        order = Order.objects.create(user=self.user, total_price='€1.00')

        response = self.client.get(f'/api/orders/{order.id}/')

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.data['payment'])

    def test_cancel_via_patch(self):
        created = self.client.post('/api/orders/', self.cart(2), format='json')
        order_id = created.data['order_id']

        first = self.client.patch(f'/api/orders/{order_id}/', {'action': 'cancel'}, format='json')
        second = self.client.patch(f'/api/orders/{order_id}/', {'action': 'cancel'}, format='json')

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.data['status'], 'CANCELLED')
        self.assertEqual(second.status_code, 400)
        self.assertEqual(self.stock(self.abc1, self.wh_pl), 3)

    def test_unknown_action(self):
        order = Order.objects.create(user=self.user, total_price='€1.00')

        response = self.client.patch(f'/api/orders/{order.id}/', {'action': 'refund'}, format='json')

        self.assertEqual(response.status_code, 400)


class AdminOrderAPITestCase(OrderFixtureMixin, APITestCase):
    """Test cases for the back-office order endpoints."""

    def setUp(self):
        self.create_order_fixtures()
        self.employee = User.objects.create_user('employee', password='pass', role=User.Role.EMPLOYEE)
        self.order = Order.objects.create(
            user=self.user,
            total_price='€160.00',
            original_total_price=Decimal('160.00'),
        )

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.user)

        response = self.client.get('/api/admin/orders/')

        self.assertEqual(response.status_code, 403)

    def test_employee_lists_orders_with_contact(self):
        self.client.force_authenticate(self.employee)

        response = self.client.get('/api/admin/orders/', {'status': 'new'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['results'][0]['user']['id'], self.user.id)

    def test_delivery_status_requires_delivery_id(self):
        self.client.force_authenticate(self.employee)

        missing = self.client.patch(
            f'/api/admin/orders/{self.order.id}/', {'status': 'DELIVERY'}, format='json'
        )
        provided = self.client.patch(
            f'/api/admin/orders/{self.order.id}/',
            {'status': 'DELIVERY', 'delivery_id': 'DPD-123'},
            format='json',
        )

        self.assertEqual(missing.status_code, 400)
        self.assertEqual(provided.status_code, 200)
        self.assertEqual(provided.data['delivery_id'], 'DPD-123')

    def test_invalid_status_rejected(self):
        self.client.force_authenticate(self.employee)

        response = self.client.patch(
            f'/api/admin/orders/{self.order.id}/', {'status': 'SHIPPED'}, format='json'
        )

        self.assertEqual(response.status_code, 400)

    def test_stats(self):
        Order.objects.create(
            user=self.user, total_price='€40.00',
            original_total_price=Decimal('40.00'), status=Order.Status.COMPLETED,
        )
        self.client.force_authenticate(self.employee)

        response = self.client.get('/api/admin/orders/stats/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total_orders'], 2)
        self.assertEqual(response.data['total_revenue'], '40.00')
        self.assertEqual(response.data['by_status']['NEW'], 1)

    def test_recent_orders_for_dashboard(self):
        """
        Given: Seven orders
        When: Employee requests the dashboard's recent orders
        Then: The five newest are returned with the customer's name
        """
        for n in range(6):
            Order.objects.create(
                user=self.user, total_price=f'€{n}.00', original_total_price=Decimal(n),
            )
        self.client.force_authenticate(self.employee)

        response = self.client.get('/api/admin/dashboard/recent-orders/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 5)
        self.assertEqual(response.data[0]['total_price_formatted'], '€5.00')
        self.assertEqual(response.data[0]['customer_name'], 'customer')
        self.assertNotIn(self.order.id, [row['id'] for row in response.data])


@skipUnlessDBFeature('has_select_for_update')
class ConcurrentOrderTestCase(OrderFixtureMixin, TransactionTestCase):
    """
    Test concurrent order handling to verify select_for_update works.
    Uses TransactionTestCase for proper multi-threading support.
    """

    def setUp(self):
        self.create_catalog()
        self.user = User.objects.create_user('racer', password='pass')
        self.item = self.create_item('RACE1', [
            (self.wh_pl, {'price': Decimal('50.00'), 'quantity': 10}),
        ])

    def test_concurrent_orders_no_overselling(self):
        """
        Test: Concurrent orders don't oversell stock.

        Given: 10 units in stock
        When: Two concurrent orders of 8 units each
        Then: At most one succeeds and final stock matches (2 or 10)
        """
        results = {}

        def place_order(key):
            try:
                create_order(
                    self.user,
                    [{'article_id': 'RACE1', 'warehouse_id': self.wh_pl.id, 'quantity': 8}],
                    total_price='€400.00',
                )
                results[key] = 'created'
            except InsufficientStockError:
                results[key] = 'rejected'
            finally:
                connection.close()

        threads = [threading.Thread(target=place_order, args=(key,)) for key in ('order1', 'order2')]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        created = sum(1 for result in results.values() if result == 'created')
        self.assertLessEqual(created, 1)

        expected = 2 if created == 1 else 10
        self.assertEqual(self.stock(self.item, self.wh_pl), expected)
        self.assertEqual(Order.objects.count(), created)


class DailyReportTestCase(OrderFixtureMixin, TestCase):

    def setUp(self):
        self.create_order_fixtures()

    def make_order(self, order_status, total, days_ago=1):
        order = Order.objects.create(
            user=self.user,
            status=order_status,
            total_price=f'€{total}',
            original_total_price=Decimal(total),
        )
        Order.objects.filter(pk=order.pk).update(
            created_at=timezone.now() - timedelta(days=days_ago)
        )
        return order

    def test_report_counts_and_revenue(self):
        self.make_order(Order.Status.PROCESSING, '160.00')
        self.make_order(Order.Status.COMPLETED, '40.00')
        self.make_order(Order.Status.NEW, '50.00')
        self.make_order(Order.Status.COMPLETED, '999.00', days_ago=0)

        stats = generate_daily_order_report()

        self.assertEqual(stats['total_orders'], 3)
        self.assertEqual(stats['by_status']['PROCESSING'], 1)
        self.assertEqual(stats['by_status']['NEW'], 1)
        self.assertEqual(stats['by_status']['CANCELLED'], 0)
        self.assertEqual(Decimal(stats['total_revenue']), Decimal('200.00'))
