"""
URL routing for account API endpoints.
"""
from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    path('me/', views.CurrentUserView.as_view(), name='current-user'),
    path('admin/users/', views.AdminUserListView.as_view(), name='admin-user-list'),
    path('admin/users/<int:pk>/', views.AdminUserDetailView.as_view(), name='admin-user-detail'),
    path('admin/discount-levels/', views.AdminDiscountLevelListCreateView.as_view(), name='admin-discount-level-list'),
    path('admin/discount-levels/<int:pk>/', views.AdminDiscountLevelDetailView.as_view(), name='admin-discount-level-detail'),
    path('dashboard/employees/', views.CompanyEmployeeListCreateView.as_view(), name='company-employee-list'),
    path('dashboard/employees/<int:pk>/', views.CompanyEmployeeDetailView.as_view(), name='company-employee-detail'),
    path('user/employees/', views.CompanyEmployeeListCreateView.as_view(), name='user-employee-list'),
    path('user/employees/<int:pk>/', views.CompanyEmployeeDetailView.as_view(), name='user-employee-detail'),
]
