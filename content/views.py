"""
Content API Views.

Implements:
- GET /public/banners/ - Active banners by position, device and locale
- GET /public/pages/{locale}/{slug}/ - Published page
- Admin CRUD for banners and pages
"""
import logging

from django.conf import settings
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import error_response
from core.permissions import IsAdminRole
from .models import Banner, PageContent
from .serializers import BannerSerializer, PageContentSerializer

logger = logging.getLogger(__name__)


def filter_banners(queryset, params):
    for field in ('position', 'device', 'locale'):
        value = params.get(field)
        if value:
            queryset = queryset.filter(**{field: value})
    return queryset


# =============================================================================
# Public Views
# =============================================================================

class PublicBannerListView(generics.ListAPIView):
    """
    GET: Active banners ordered by sort order.

    Query Parameters:
        - position: home_top, catalog_sidebar or promo
        - device: desktop or mobile
        - locale: Storefront locale
    """
    serializer_class = BannerSerializer
    permission_classes = [AllowAny]
    pagination_class = None

    def get_queryset(self):
        queryset = filter_banners(Banner.objects.filter(is_active=True), self.request.query_params)
        return queryset.order_by('sort_order', 'id')


class PublicPageView(APIView):
    """GET: A published page in the given locale."""
    permission_classes = [AllowAny]

    def get(self, request, locale, slug):
        locale = locale.lower()
        if locale not in settings.SUPPORTED_LOCALES:
            return error_response(status.HTTP_400_BAD_REQUEST, 'Invalid locale')

        page = PageContent.objects.filter(slug=slug, locale=locale, is_published=True).first()
        if page is None:
            return error_response(status.HTTP_404_NOT_FOUND, 'Page not found')

        return Response(PageContentSerializer(page).data)


# =============================================================================
# Admin Views
# =============================================================================

class AdminBannerListCreateView(generics.ListCreateAPIView):
    """
    GET: List banners (active and inactive)
    POST: Create a banner
    """
    serializer_class = BannerSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return filter_banners(Banner.objects.all(), self.request.query_params)


class AdminBannerDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Banner.objects.all()
    serializer_class = BannerSerializer
    permission_classes = [IsAdminRole]


class AdminPageListCreateView(generics.ListCreateAPIView):
    """
    GET: List pages

    Query Parameters:
        - locale: Filter by locale
    POST: Create a page
    """
    serializer_class = PageContentSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        queryset = PageContent.objects.all()
        locale = self.request.query_params.get('locale')
        if locale:
            queryset = queryset.filter(locale=locale)
        return queryset.order_by('slug', 'locale')

    def perform_create(self, serializer):
        page = serializer.save()
        logger.info(f"Page {page.slug} [{page.locale}] created by user #{self.request.user.pk}")


class AdminPageDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = PageContent.objects.all()
    serializer_class = PageContentSerializer
    permission_classes = [IsAdminRole]

    def perform_destroy(self, instance):
        logger.info(f"Page {instance.slug} [{instance.locale}] deleted by user #{self.request.user.pk}")
        instance.delete()
