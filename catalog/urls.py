"""
URL routing for catalog API endpoints.
"""
from django.urls import path
from . import views

app_name = 'catalog'

urlpatterns = [
    # Public catalog
    path('public/items/<str:locale>/', views.PublicItemListView.as_view(), name='public-item-list'),
    path('public/items/<str:locale>/<str:article_id>/', views.PublicItemDetailView.as_view(), name='public-item-detail'),
    path('public/home/<str:locale>/', views.HomeTabView.as_view(), name='home-tab'),
    path('public/categories/<str:locale>/', views.PublicCategoryListView.as_view(), name='public-category-list'),
    path('public/category/<str:locale>/<slug:slug>/', views.CategoryItemsView.as_view(), name='category-items'),
    path('public/brands/', views.PublicBrandListView.as_view(), name='public-brand-list'),

    # Search
    path('search/', views.SearchView.as_view(), name='search'),
    path('search/autocomplete/', views.SearchAutocompleteView.as_view(), name='search-autocomplete'),

    # Exchange rates
    path('currency-exchange/', views.CurrencyExchangeListView.as_view(), name='currency-exchange'),

    # Admin: taxonomy
    path('admin/brands/', views.AdminBrandListCreateView.as_view(), name='admin-brand-list'),
    path('admin/brands/<int:pk>/', views.AdminBrandDetailView.as_view(), name='admin-brand-detail'),
    path('admin/categories/', views.AdminCategoryListCreateView.as_view(), name='admin-category-list'),
    path('admin/categories/<int:pk>/', views.AdminCategoryDetailView.as_view(), name='admin-category-detail'),
    path('admin/subcategories/', views.AdminSubcategoryListCreateView.as_view(), name='admin-subcategory-list'),
    path('admin/subcategories/<int:pk>/', views.AdminSubcategoryDetailView.as_view(), name='admin-subcategory-detail'),

    # Admin: warehouses
    path('admin/warehouse-countries/', views.AdminWarehouseCountryListCreateView.as_view(), name='admin-warehouse-country-list'),
    path('admin/warehouse-countries/<int:pk>/', views.AdminWarehouseCountryDetailView.as_view(), name='admin-warehouse-country-detail'),
    path('admin/warehouses/', views.AdminWarehouseListCreateView.as_view(), name='admin-warehouse-list'),
    path('admin/warehouses/<int:pk>/', views.AdminWarehouseDetailView.as_view(), name='admin-warehouse-detail'),

    # Admin: items and offers
    path('admin/items/', views.AdminItemListCreateView.as_view(), name='admin-item-list'),
    path('admin/items/batch-delete/', views.AdminItemBatchDeleteView.as_view(), name='admin-item-batch-delete'),
    path('admin/items/batch-update/', views.AdminItemBatchVisibilityView.as_view(), name='admin-item-batch-update'),
    path('admin/items/bulk-update-prices/', views.AdminItemBulkPriceUpdateView.as_view(), name='admin-item-bulk-update-prices'),
    path('admin/items/export/', views.AdminItemExportView.as_view(), name='admin-item-export'),
    path('admin/items/<str:article_id>/', views.AdminItemDetailView.as_view(), name='admin-item-detail'),
    path('admin/items/<str:article_id>/visibility/', views.AdminItemVisibilityView.as_view(), name='admin-item-visibility'),
    path('admin/item-prices/<int:pk>/', views.AdminItemPriceDetailView.as_view(), name='admin-item-price-detail'),

    # Admin: exchange rates
    path('admin/currency-exchange/', views.AdminCurrencyExchangeView.as_view(), name='admin-currency-exchange'),
]
