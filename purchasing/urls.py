"""
URL routing for purchase order API endpoints.
"""
from django.urls import path
from . import views

app_name = 'purchasing'

urlpatterns = [
    path('purchase-orders/', views.PurchaseOrderListCreateView.as_view(), name='order-list'),
    path('purchase-orders/stats/', views.PurchaseOrderStatsView.as_view(), name='order-stats'),
    path('purchase-orders/<int:pk>/', views.PurchaseOrderDetailView.as_view(), name='order-detail'),
    path('purchase-orders/<int:pk>/approve/', views.PurchaseOrderApproveView.as_view(), name='order-approve'),
    path('purchase-orders/<int:pk>/ship/', views.PurchaseOrderShipView.as_view(), name='order-ship'),
    path('purchase-orders/<int:pk>/cancel/', views.PurchaseOrderCancelView.as_view(), name='order-cancel'),
    path('purchase-orders/<int:pk>/receive/', views.PurchaseOrderReceiveView.as_view(), name='order-receive'),
]
