"""
URL routing for banner and page endpoints.
"""
from django.urls import path
from . import views

app_name = 'content'

urlpatterns = [
    path('public/banners/', views.PublicBannerListView.as_view(), name='public-banner-list'),
    path('public/pages/<str:locale>/<slug:slug>/', views.PublicPageView.as_view(), name='public-page'),

    path('admin/banners/', views.AdminBannerListCreateView.as_view(), name='admin-banner-list'),
    path('admin/banners/<int:pk>/', views.AdminBannerDetailView.as_view(), name='admin-banner-detail'),
    path('admin/pages/', views.AdminPageListCreateView.as_view(), name='admin-page-list'),
    path('admin/pages/<int:pk>/', views.AdminPageDetailView.as_view(), name='admin-page-detail'),
]
