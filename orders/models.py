"""
Order Models - customer orders with an embedded line-item snapshot.

Order Status Flow:
    NEW -> CANCELLED (customer cancel, only from NEW)
    NEW -> WAITING_FOR_PAYMENT (payment initiated)
    WAITING_FOR_PAYMENT -> PROCESSING (payment verified)
    PROCESSING -> DELIVERY -> COMPLETED (back-office)
    any -> REFUND (refund issued)
    ASK_FOR_PRICE: price request, never paid directly
"""
from decimal import Decimal

from django.conf import settings
from django.db import models

from .line_items import LineItem


class Order(models.Model):
    """
    Customer order.

    Line items are a denormalized JSON snapshot taken at order time, so later
    price or name changes do not affect historical orders.
    """

    class Status(models.TextChoices):
        NEW = 'NEW', 'New'
        WAITING_FOR_PAYMENT = 'WAITING_FOR_PAYMENT', 'Waiting for payment'
        PROCESSING = 'PROCESSING', 'Processing'
        DELIVERY = 'DELIVERY', 'Delivery'
        COMPLETED = 'COMPLETED', 'Completed'
        CANCELLED = 'CANCELLED', 'Cancelled'
        REFUND = 'REFUND', 'Refund'
        ASK_FOR_PRICE = 'ASK_FOR_PRICE', 'Price request'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='orders'
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.NEW,
        db_index=True,
        help_text="Current order status"
    )
    original_total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Computed total in the base currency"
    )
    total_price = models.CharField(
        max_length=64,
        help_text="Total as shown to the customer, possibly in another currency"
    )
    line_items = models.JSONField(default=list, blank=True)
    customer_info = models.JSONField(default=dict, blank=True)
    delivery_id = models.CharField(max_length=100, null=True, blank=True)
    comment = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'status'], name='order_user_status_idx'),
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
        ]

    def __str__(self):
        return f"Order #{self.id} ({self.status})"

    @property
    def is_price_request(self) -> bool:
        return self.status == self.Status.ASK_FOR_PRICE

    @property
    def can_be_cancelled(self) -> bool:
        return self.status == self.Status.NEW

    @property
    def item_count(self) -> int:
        return sum(int(line.get('quantity', 0)) for line in self.line_items or [])

    def get_line_items(self):
        return [LineItem.from_dict(line) for line in self.line_items or []]
