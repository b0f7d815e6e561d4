"""
URL routing for inventory API endpoints.
"""
from django.urls import path
from . import views

app_name = 'inventory'

urlpatterns = [
    # Categories
    path('categories/', views.CategoryListCreateView.as_view(), name='category-list'),
    path('categories/<int:pk>/', views.CategoryDetailView.as_view(), name='category-detail'),

    # Suppliers
    path('suppliers/', views.SupplierListCreateView.as_view(), name='supplier-list'),
    path('suppliers/<int:pk>/', views.SupplierDetailView.as_view(), name='supplier-detail'),

    # Products
    path('products/', views.ProductListCreateView.as_view(), name='product-list'),
    path('products/low-stock/', views.LowStockReportView.as_view(), name='product-low-stock'),
    path('products/autocomplete/', views.ProductAutocompleteView.as_view(), name='product-autocomplete'),
    path('products/export/', views.ProductExportView.as_view(), name='product-export'),
    path('products/<int:pk>/', views.ProductDetailView.as_view(), name='product-detail'),
    path('products/<int:pk>/history/', views.ProductHistoryView.as_view(), name='product-history'),

    # Customers
    path('customers/', views.CustomerListCreateView.as_view(), name='customer-list'),
    path('customers/<int:pk>/', views.CustomerDetailView.as_view(), name='customer-detail'),
    path('customers/<int:pk>/toggle-status/', views.CustomerToggleStatusView.as_view(), name='customer-toggle-status'),

    # Dashboard & reports
    path('dashboard/stats/', views.DashboardStatsView.as_view(), name='dashboard-stats'),
    path('reports/categories/', views.CategoryDistributionView.as_view(), name='report-categories'),
]
