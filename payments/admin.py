"""
Django Admin configuration for payments.
"""
from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['id', 'order', 'session_id', 'amount_label', 'status', 'payment_method', 'created_at']
    list_filter = ['status', 'currency', 'created_at']
    search_fields = ['session_id', 'transaction_id', 'p24_email', 'order__id']
    ordering = ['-created_at']
    raw_id_fields = ['order']
    readonly_fields = ['session_id', 'transaction_id', 'amount', 'metadata', 'created_at', 'updated_at']

    def amount_label(self, obj):
        return obj.amount_display
    amount_label.short_description = 'Amount'
