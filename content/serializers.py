"""
Serializers for banners and pages.
"""
from django.conf import settings
from rest_framework import serializers

from .models import Banner, PageContent


class LocaleValidationMixin:
    def validate_locale(self, value):
        value = value.lower()
        if value not in settings.SUPPORTED_LOCALES:
            raise serializers.ValidationError(
                f"Locale must be one of: {', '.join(settings.SUPPORTED_LOCALES)}"
            )
        return value


class BannerSerializer(LocaleValidationMixin, serializers.ModelSerializer):
    class Meta:
        model = Banner
        fields = [
            'id', 'title', 'image_url', 'link_url', 'position', 'device',
            'locale', 'sort_order', 'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class PageContentSerializer(LocaleValidationMixin, serializers.ModelSerializer):
    class Meta:
        model = PageContent
        fields = ['id', 'slug', 'locale', 'title', 'content', 'is_published', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_content(self, value):
        # Block editor documents are objects with a list of blocks
        if not isinstance(value, dict):
            raise serializers.ValidationError('Content must be a JSON object')
        if 'blocks' in value and not isinstance(value['blocks'], list):
            raise serializers.ValidationError('Content blocks must be a list')
        return value

    def validate(self, attrs):
        slug = attrs.get('slug', getattr(self.instance, 'slug', None))
        locale = attrs.get('locale', getattr(self.instance, 'locale', None))
        duplicates = PageContent.objects.filter(slug=slug, locale=locale)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError(
                {'slug': 'A page with this slug already exists for this locale.'}
            )
        return attrs
