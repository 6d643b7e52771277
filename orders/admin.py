"""
Django Admin configuration for orders.
"""
from django.contrib import admin
from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'status', 'total_price', 'original_total_price', 'item_count', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['id', 'user__username', 'user__email', 'delivery_id']
    ordering = ['-created_at']
    raw_id_fields = ['user']
    readonly_fields = ['original_total_price', 'total_price', 'line_items', 'created_at', 'updated_at']

    def item_count(self, obj):
        return obj.item_count
    item_count.short_description = 'Items'
