"""
Django Admin configuration for banners and pages.
"""
from django.contrib import admin
from .models import Banner, PageContent


@admin.register(Banner)
class BannerAdmin(admin.ModelAdmin):
    list_display = ['id', 'title', 'position', 'device', 'locale', 'sort_order', 'is_active']
    list_filter = ['position', 'device', 'locale', 'is_active']
    search_fields = ['title', 'image_url']
    ordering = ['position', 'sort_order']


@admin.register(PageContent)
class PageContentAdmin(admin.ModelAdmin):
    list_display = ['id', 'slug', 'locale', 'title', 'is_published', 'updated_at']
    list_filter = ['locale', 'is_published']
    search_fields = ['slug', 'title']
