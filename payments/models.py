"""
Payment Models - Przelewy24 transactions attached to orders.

Payment Status Flow:
    INITIATED -> COMPLETED (notification verified)
    INITIATED -> FAILED (verification rejected)
    COMPLETED -> REFUNDED (back-office refund)
"""
from django.db import models

from orders.models import Order


class Payment(models.Model):
    """
    One payment attempt for an order.

    Amounts are stored in minor units (grosze for PLN).
    """

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        INITIATED = 'INITIATED', 'Initiated'
        PROCESSING = 'PROCESSING', 'Processing'
        COMPLETED = 'COMPLETED', 'Completed'
        FAILED = 'FAILED', 'Failed'
        CANCELLED = 'CANCELLED', 'Cancelled'
        REFUNDED = 'REFUNDED', 'Refunded'

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    session_id = models.CharField(
        max_length=100,
        unique=True,
        help_text="Session identifier registered with the provider"
    )
    merchant_id = models.CharField(max_length=50)
    pos_id = models.CharField(max_length=50)
    transaction_id = models.CharField(
        max_length=100,
        blank=True,
        default='',
        help_text="Provider order id, set once the payment is verified"
    )
    amount = models.PositiveIntegerField(help_text="Amount in minor units")
    currency = models.CharField(max_length=3, default='PLN')
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True
    )
    payment_method = models.CharField(max_length=255, blank=True, default='')
    p24_email = models.EmailField(blank=True, default='')
    p24_order_id = models.CharField(max_length=100, blank=True, default='')
    description = models.CharField(max_length=255, blank=True, default='')
    return_url = models.URLField(max_length=500, blank=True, default='')
    status_url = models.URLField(max_length=500, blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    error_code = models.CharField(max_length=50, blank=True, default='')
    error_message = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['order', 'status'], name='payment_order_status_idx'),
        ]

    def __str__(self):
        return f"Payment {self.session_id} ({self.status})"

    @property
    def amount_display(self) -> str:
        return f"{self.amount / 100:.2f} {self.currency}"

    @property
    def is_refundable(self) -> bool:
        return self.status == self.Status.COMPLETED
