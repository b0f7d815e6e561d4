"""
Inventory API Views with optimized queries.

Implements:
- CRUD operations for Category, Supplier, Product, Customer
- Audited product updates and product history
- Low-stock report, dashboard stats and category distribution
- CSV export of the filtered product list
- Product autocomplete with rate limiting
"""
import csv
import logging

from django.db.models import Count, Q
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import ActorContext
from core.exceptions import ServiceError, error_response
from core.permissions import AdminForDeletes, IsAdminOrManagerForWrites
from core.rate_limiting import rate_limit
from . import services
from .models import Customer, Product, Supplier
from .serializers import (
    CategorySerializer,
    CustomerSerializer,
    ProductHistorySerializer,
    ProductMinimalSerializer,
    ProductSerializer,
    SupplierSerializer,
)
from .stock import low_stock_report

logger = logging.getLogger(__name__)


# =============================================================================
# Category Views
# =============================================================================

class CategoryListCreateView(generics.ListCreateAPIView):
    """
    GET: List all categories with product count and stock value
    POST: Create a new category
    """
    serializer_class = CategorySerializer
    permission_classes = [IsAdminOrManagerForWrites]

    def get_queryset(self):
        return services.categories_with_totals().order_by('name')


class CategoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a category
    PUT/PATCH: Update a category
    DELETE: Delete a category (admins only)
    """
    serializer_class = CategorySerializer
    permission_classes = [AdminForDeletes]

    def get_queryset(self):
        return services.categories_with_totals()


# =============================================================================
# Supplier Views
# =============================================================================

class SupplierListCreateView(generics.ListCreateAPIView):
    """
    GET: List all suppliers with product count
    POST: Create a new supplier
    """
    serializer_class = SupplierSerializer
    permission_classes = [IsAdminOrManagerForWrites]

    def get_queryset(self):
        return Supplier.objects.annotate(product_count=Count('products')).order_by('name')


class SupplierDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a supplier
    PUT/PATCH: Update a supplier
    DELETE: Delete a supplier (admins only)
    """
    serializer_class = SupplierSerializer
    permission_classes = [AdminForDeletes]

    def get_queryset(self):
        return Supplier.objects.annotate(product_count=Count('products'))


# =============================================================================
# Product Views
# =============================================================================

def filter_products(params):
    """Product queryset narrowed by the list query parameters, newest first."""
    queryset = Product.objects.select_related('category', 'supplier')

    keyword = params.get('q', '').strip()
    if keyword:
        queryset = queryset.filter(
            Q(sku__icontains=keyword) |
            Q(name__icontains=keyword) |
            Q(description__icontains=keyword)
        )

    category_id = params.get('category_id')
    if category_id:
        queryset = queryset.filter(category_id=category_id)

    supplier_id = params.get('supplier_id')
    if supplier_id:
        queryset = queryset.filter(supplier_id=supplier_id)

    if params.get('low_stock', '').lower() == 'true':
        queryset = queryset.filter(services.LOW_STOCK)

    return queryset.order_by('-created_at', '-id')


class ProductListCreateView(generics.ListCreateAPIView):
    """
    GET: List products with category and supplier info
    POST: Create a new product

    Query Parameters (GET):
        - q: Keyword matched against sku, name and description
        - category_id: Filter by category
        - supplier_id: Filter by supplier
        - low_stock: Only products at or below their reorder level (true/false)
    """
    serializer_class = ProductSerializer

    def get_queryset(self):
        return filter_products(self.request.query_params)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            product = services.create_product(
                ActorContext.from_request(request), serializer.validated_data
            )
        except ServiceError as e:
            return error_response(e)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)


class ProductDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a product
    PUT/PATCH: Update a product; tracked field changes are audited
    DELETE: Delete a product (admins only)
    """
    serializer_class = ProductSerializer

    def get_queryset(self):
        return Product.objects.select_related('category', 'supplier')

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            product = services.update_product(
                ActorContext.from_request(request), instance.id, serializer.validated_data
            )
        except ServiceError as e:
            return error_response(e)
        product = services.get_product(product.id)
        return Response(ProductSerializer(product).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        try:
            services.delete_product(ActorContext.from_request(request), instance.id)
        except ServiceError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProductHistoryView(generics.ListAPIView):
    """
    GET: Audit trail of a product, newest first.
    """
    serializer_class = ProductHistorySerializer

    def list(self, request, *args, **kwargs):
        try:
            queryset = services.product_history(self.kwargs['pk'])
        except ServiceError as e:
            return error_response(e)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)


PRODUCT_EXPORT_HEADERS = [
    'SKU', 'Name', 'Description', 'Category', 'Supplier', 'Quantity',
    'Reorder Level', 'Price', 'Cost', 'Location', 'Created At', 'Updated At',
]


class ProductExportView(APIView):
    """
    GET: Download the product list as CSV.

    Accepts the same query parameters as the product list.
    """

    def get(self, request):
        products = filter_products(request.query_params)
        filename = f"products-{timezone.localdate().isoformat()}.csv"

        response = HttpResponse(
            content_type='text/csv',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'},
        )
        writer = csv.writer(response)
        writer.writerow(PRODUCT_EXPORT_HEADERS)
        count = 0
        for product in products.iterator():
            writer.writerow([
                product.sku,
                product.name,
                product.description,
                product.category.name if product.category else '',
                product.supplier.name if product.supplier else '',
                product.quantity,
                product.reorder_level,
                product.price,
                product.cost,
                product.location,
                product.created_at.isoformat(),
                product.updated_at.isoformat(),
            ])
            count += 1

        logger.info(f"Exported {count} products to {filename}")
        return response


class LowStockReportView(APIView):
    """
    GET: Products at or below their reorder level, most critical first,
    with stock status and suggested reorder quantity.
    """

    def get(self, request):
        rows = low_stock_report(services.low_stock_products())
        return Response({'count': len(rows), 'results': rows})


class ProductAutocompleteView(APIView):
    """
    GET: Fast prefix matching on sku and name.

    Query Parameters:
        - q: Search query (minimum 2 characters)

    Returns top 10 matching products.
    Rate limited to 30 requests per minute.
    """

    @rate_limit(max_requests=30, window_seconds=60)
    def get(self, request):
        query = request.query_params.get('q', '').strip()

        if len(query) < 2:
            return Response(
                {'error': 'Query must be at least 2 characters'},
                status=status.HTTP_400_BAD_REQUEST
            )

        products = Product.objects.filter(
            Q(sku__istartswith=query) | Q(name__istartswith=query)
        ).order_by('name')[:10]

        return Response(ProductMinimalSerializer(products, many=True).data)


# =============================================================================
# Customer Views
# =============================================================================

class CustomerListCreateView(generics.ListCreateAPIView):
    """
    GET: List customers
    POST: Create a new customer

    Query Parameters (GET):
        - status: active or inactive
    """
    serializer_class = CustomerSerializer
    permission_classes = [IsAdminOrManagerForWrites]

    def get_queryset(self):
        queryset = Customer.objects.all()
        status_filter = self.request.query_params.get('status', '').lower()
        if status_filter in Customer.Status.values:
            queryset = queryset.filter(status=status_filter)
        return queryset.order_by('name')


class CustomerDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    GET: Retrieve a customer
    PUT/PATCH: Update a customer
    DELETE: Delete a customer (admins only)
    """
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    permission_classes = [AdminForDeletes]


class CustomerToggleStatusView(APIView):
    """POST: Flip a customer between active and inactive."""

    def post(self, request, pk):
        try:
            customer = services.toggle_customer_status(ActorContext.from_request(request), pk)
        except ServiceError as e:
            return error_response(e)
        return Response(CustomerSerializer(customer).data)


# =============================================================================
# Dashboard & Reports
# =============================================================================

class DashboardStatsView(APIView):
    """GET: Headline inventory and purchasing figures."""

    def get(self, request):
        stats = services.dashboard_stats()
        stats['total_value'] = str(stats['total_value'])
        return Response(stats)


class CategoryDistributionView(APIView):
    """GET: Product count and stock value per category."""

    def get(self, request):
        rows = services.category_distribution()
        for row in rows:
            row['total_value'] = str(row['total_value'])
        return Response(rows)
