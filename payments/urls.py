"""
URL routing for payment API endpoints.
"""
from django.urls import path
from . import views

app_name = 'payments'

urlpatterns = [
    path('payments/initiate/', views.PaymentInitiateView.as_view(), name='payment-initiate'),
    path('payments/callback/', views.PaymentCallbackView.as_view(), name='payment-callback'),
    path('payments/refund-callback/', views.RefundCallbackView.as_view(), name='refund-callback'),
    path('admin/payments/', views.AdminPaymentListView.as_view(), name='admin-payment-list'),
    path('admin/payments/refund/', views.AdminPaymentRefundView.as_view(), name='admin-payment-refund'),
]
