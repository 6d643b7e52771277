"""
Content Models - storefront banners and CMS pages.
"""
from django.db import models


class Banner(models.Model):
    """Image banner placed on a storefront page for one locale and device."""

    class Position(models.TextChoices):
        HOME_TOP = 'home_top', 'Home top'
        CATALOG_SIDEBAR = 'catalog_sidebar', 'Catalog sidebar'
        PROMO = 'promo', 'Promo'

    class Device(models.TextChoices):
        DESKTOP = 'desktop', 'Desktop'
        MOBILE = 'mobile', 'Mobile'

    title = models.CharField(max_length=255, blank=True, default='')
    image_url = models.CharField(max_length=512)
    link_url = models.CharField(max_length=512, blank=True, default='')
    position = models.CharField(max_length=50, choices=Position.choices, db_index=True)
    device = models.CharField(max_length=20, choices=Device.choices, default=Device.DESKTOP)
    locale = models.CharField(max_length=5)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['position', 'sort_order', 'id']
        indexes = [
            models.Index(fields=['position', 'device', 'locale'], name='banner_placement_idx'),
        ]

    def __str__(self):
        return f"{self.title or self.image_url} ({self.position}/{self.device}/{self.locale})"


class PageContent(models.Model):
    """
    Static page (about, contacts, terms...) per locale.

    ``content`` holds the block editor document as JSON.
    """
    slug = models.SlugField(max_length=100)
    locale = models.CharField(max_length=5)
    title = models.CharField(max_length=255)
    content = models.JSONField(default=dict, blank=True)
    is_published = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Page'
        verbose_name_plural = 'Pages'
        ordering = ['slug', 'locale']
        constraints = [
            models.UniqueConstraint(fields=['slug', 'locale'], name='unique_page_slug_locale')
        ]

    def __str__(self):
        return f"{self.slug} [{self.locale}]"
