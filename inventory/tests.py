"""
Tests for stock evaluation, audited product changes and inventory reports.

Test Cases:
1. Stock status boundaries and reorder suggestions
2. Severity ordering of the low-stock report
3. Product updates write one history row per changed tracked field
4. Dashboard figures and category distribution
5. Low-stock alert tasks
6. API endpoints and role checks
"""
import csv
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from core.context import ActorContext
from core.exceptions import (
    ActionNotPermittedError,
    InventoryValidationError,
    ResourceNotFoundError,
)
from core.models import Profile
from inventory import services
from inventory.models import Category, Customer, Product, ProductHistory, Supplier
from inventory.stock import (
    STOCK_STATUS_LABELS,
    StockStatus,
    low_stock_report,
    sort_by_severity,
    stock_ratio,
    stock_status,
    suggested_reorder_quantity,
)
from inventory.tasks import notify_low_stock, scan_low_stock
from notifications.models import Notification

User = get_user_model()


def make_user(username, role):
    user = User.objects.create_user(username=username, password='pass1234')
    Profile.objects.create(user=user, role=role)
    return user


class StockEvaluatorTestCase(SimpleTestCase):
    """Pure stock rules, no database."""

    def test_quantity_at_reorder_level_is_low(self):
        for level in (1, 5, 10, 250):
            self.assertEqual(stock_status(level, level), StockStatus.LOW_STOCK)

    def test_zero_quantity_is_out_of_stock(self):
        for level in (0, 1, 10):
            self.assertEqual(stock_status(0, level), StockStatus.OUT_OF_STOCK)

    def test_above_reorder_level_is_in_stock(self):
        self.assertEqual(stock_status(11, 10), StockStatus.IN_STOCK)

    def test_low_stock_suggestion(self):
        """quantity 5, reorder level 10 -> low, suggest max(20 - 5, 10) = 15"""
        self.assertEqual(stock_status(5, 10), StockStatus.LOW_STOCK)
        self.assertEqual(suggested_reorder_quantity(5, 10), 15)

    def test_out_of_stock_suggestion(self):
        """quantity 0, reorder level 10 -> out of stock, suggest 20"""
        self.assertEqual(stock_status(0, 10), StockStatus.OUT_OF_STOCK)
        self.assertEqual(suggested_reorder_quantity(0, 10), 20)

    def test_suggestion_never_below_reorder_level(self):
        for reorder_level in range(0, 30, 3):
            for quantity in range(0, 80, 7):
                self.assertGreaterEqual(
                    suggested_reorder_quantity(quantity, reorder_level), reorder_level
                )

    def test_ratio_with_zero_reorder_level(self):
        self.assertEqual(stock_ratio(5, 0), 0.0)
        self.assertEqual(stock_ratio(5, 10), 0.5)

    def test_labels(self):
        self.assertEqual(StockStatus.OUT_OF_STOCK.label, 'Out of Stock')
        self.assertEqual(StockStatus.LOW_STOCK.label, 'Low Stock')
        self.assertEqual(StockStatus.IN_STOCK.label, 'In Stock')
        self.assertEqual(set(STOCK_STATUS_LABELS), set(StockStatus))

    def test_severity_order(self):
        products = [
            Product(id=1, sku='A', name='A', quantity=8, reorder_level=10),
            Product(id=2, sku='B', name='B', quantity=0, reorder_level=10),
            Product(id=3, sku='C', name='C', quantity=2, reorder_level=10),
        ]
        self.assertEqual([p.sku for p in sort_by_severity(products)], ['B', 'C', 'A'])

    def test_report_skips_healthy_products(self):
        products = [
            Product(id=1, sku='LOW', name='Low', quantity=3, reorder_level=10),
            Product(id=2, sku='OK', name='Ok', quantity=30, reorder_level=10),
        ]
        rows = low_stock_report(products)

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]['sku'], 'LOW')
        self.assertEqual(rows[0]['status'], 'low_stock')
        self.assertEqual(rows[0]['status_label'], 'Low Stock')
        self.assertEqual(rows[0]['suggested_reorder_quantity'], 17)


class ProductServiceTestCase(TestCase):
    """Audited product changes."""

    def setUp(self):
        self.category = Category.objects.create(name='Electronics')
        self.other_category = Category.objects.create(name='Office Supplies')
        self.supplier = Supplier.objects.create(name='TechCorp Industries')
        self.product = Product.objects.create(
            sku='ELEC-001', name='Wireless Mouse', category=self.category,
            supplier=self.supplier, quantity=50, reorder_level=10,
            price=Decimal('15.00'), cost=Decimal('10.00')
        )
        self.manager = make_user('manager', Profile.Role.MANAGER)
        self.staff = make_user('staff', Profile.Role.STAFF)
        self.admin = make_user('admin', Profile.Role.ADMIN)
        self.manager_ctx = ActorContext.for_user(self.manager)

    def test_update_records_changed_tracked_fields(self):
        """
        Given: A product with price 15.00 and quantity 50
        When: Changing price, quantity, name and category
        Then: History rows for price, quantity and category_id; none for name
        """
        services.update_product(self.manager_ctx, self.product.id, {
            'price': Decimal('17.50'),
            'quantity': 45,
            'name': 'Wireless Mouse Pro',
            'category': self.other_category,
        })

        history = {h.field_name: h for h in ProductHistory.objects.filter(product=self.product)}
        self.assertEqual(set(history), {'price', 'quantity', 'category_id'})
        self.assertEqual(history['price'].old_value, '15.00')
        self.assertEqual(history['price'].new_value, '17.50')
        self.assertEqual(history['quantity'].old_value, '50')
        self.assertEqual(history['quantity'].new_value, '45')
        self.assertEqual(history['category_id'].new_value, str(self.other_category.id))
        self.assertTrue(all(h.changed_by == self.manager for h in history.values()))

    def test_unchanged_value_not_recorded(self):
        services.update_product(self.manager_ctx, self.product.id, {
            'price': Decimal('15.00'),
            'reorder_level': 10,
        })
        self.assertFalse(ProductHistory.objects.exists())

    def test_clearing_supplier_recorded(self):
        services.update_product(self.manager_ctx, self.product.id, {'supplier': None})

        entry = ProductHistory.objects.get(field_name='supplier_id')
        self.assertEqual(entry.old_value, str(self.supplier.id))
        self.assertIsNone(entry.new_value)

    def test_staff_cannot_edit(self):
        with self.assertRaises(ActionNotPermittedError):
            services.update_product(
                ActorContext.for_user(self.staff), self.product.id, {'quantity': 1}
            )

    def test_unknown_field_rejected(self):
        with self.assertRaises(InventoryValidationError):
            services.update_product(self.manager_ctx, self.product.id, {'id': 7})

    def test_missing_product(self):
        with self.assertRaises(ResourceNotFoundError):
            services.update_product(self.manager_ctx, 99999, {'quantity': 1})

    def test_duplicate_sku_rejected(self):
        Product.objects.create(sku='ELEC-002', name='Keyboard')
        with self.assertRaises(InventoryValidationError):
            services.update_product(self.manager_ctx, self.product.id, {'sku': 'ELEC-002'})

    def test_dropping_below_reorder_level_queues_alert(self):
        with patch('inventory.tasks.notify_low_stock.delay') as mock_delay:
            with self.captureOnCommitCallbacks(execute=True):
                services.update_product(self.manager_ctx, self.product.id, {'quantity': 4})

        mock_delay.assert_called_once_with(self.product.id)

    def test_staying_in_stock_queues_nothing(self):
        with patch('inventory.tasks.notify_low_stock.delay') as mock_delay:
            with self.captureOnCommitCallbacks(execute=True):
                services.update_product(self.manager_ctx, self.product.id, {'quantity': 40})

        mock_delay.assert_not_called()

    def test_delete_needs_admin(self):
        with self.assertRaises(ActionNotPermittedError):
            services.delete_product(self.manager_ctx, self.product.id)

        services.delete_product(ActorContext.for_user(self.admin), self.product.id)
        self.assertFalse(Product.objects.filter(id=self.product.id).exists())

    def test_toggle_customer_status(self):
        customer = Customer.objects.create(name='Acme Corp')

        customer = services.toggle_customer_status(self.manager_ctx, customer.id)
        self.assertEqual(customer.status, Customer.Status.INACTIVE)

        customer = services.toggle_customer_status(self.manager_ctx, customer.id)
        self.assertTrue(customer.is_active)


class DashboardTestCase(TestCase):
    """Headline figures."""

    def setUp(self):
        self.category = Category.objects.create(name='Electronics')
        Category.objects.create(name='Empty')
        Supplier.objects.create(name='TechCorp Industries')
        Product.objects.create(sku='A', name='A', category=self.category,
                               quantity=10, reorder_level=10, cost=Decimal('2.50'))
        Product.objects.create(sku='B', name='B', category=self.category,
                               quantity=100, reorder_level=10, cost=Decimal('1.00'))
        Product.objects.create(sku='C', name='C', quantity=0, reorder_level=5,
                               cost=Decimal('9.99'))

    def test_dashboard_stats(self):
        stats = services.dashboard_stats()

        self.assertEqual(stats['total_products'], 3)
        self.assertEqual(stats['low_stock_items'], 2)
        self.assertEqual(stats['total_categories'], 2)
        self.assertEqual(stats['total_suppliers'], 1)
        self.assertEqual(stats['total_value'], Decimal('125.00'))
        self.assertEqual(stats['pending_orders'], 0)

    def test_category_distribution(self):
        rows = {row['name']: row for row in services.category_distribution()}

        self.assertEqual(rows['Electronics']['product_count'], 2)
        self.assertEqual(rows['Electronics']['total_value'], Decimal('125.00'))
        self.assertEqual(rows['Empty']['product_count'], 0)
        self.assertEqual(rows['Empty']['total_value'], Decimal('0.00'))


class LowStockTaskTestCase(TestCase):
    """Alert delivery for low-stock products."""

    def setUp(self):
        self.manager = make_user('manager', Profile.Role.MANAGER)
        self.staff = make_user('staff', Profile.Role.STAFF)
        self.product = Product.objects.create(
            sku='ELEC-001', name='Wireless Mouse', quantity=5, reorder_level=10
        )

    def test_alert_sent_to_managers(self):
        result = notify_low_stock(self.product.id)

        self.assertEqual(result['recipients'], 1)
        notification = Notification.objects.get()
        self.assertEqual(notification.user, self.manager)
        self.assertEqual(notification.type, Notification.Type.LOW_STOCK)
        self.assertEqual(notification.reference_id, str(self.product.id))
        self.assertIn('Suggested reorder: 15', notification.message)

    def test_alert_skipped_when_restocked(self):
        Product.objects.filter(id=self.product.id).update(quantity=50)

        result = notify_low_stock(self.product.id)

        self.assertEqual(result['status'], 'skipped')
        self.assertFalse(Notification.objects.exists())

    def test_scan_skips_recently_alerted(self):
        other = Product.objects.create(sku='OFF-001', name='Stapler', quantity=0, reorder_level=5)
        Product.objects.create(sku='OFF-002', name='Paper', quantity=500, reorder_level=5)
        Notification.objects.create(
            user=self.manager, type=Notification.Type.LOW_STOCK, title='Low Stock',
            message='...', reference_id=str(self.product.id), reference_type='product'
        )

        with patch('inventory.tasks.notify_low_stock.delay') as mock_delay:
            result = scan_low_stock()

        self.assertEqual(result['queued'], 1)
        mock_delay.assert_called_once_with(other.id)

    def test_scan_realerts_after_cooldown(self):
        old = Notification.objects.create(
            user=self.manager, type=Notification.Type.LOW_STOCK, title='Low Stock',
            message='...', reference_id=str(self.product.id), reference_type='product'
        )
        Notification.objects.filter(id=old.id).update(
            created_at=timezone.now() - timedelta(days=2)
        )

        with patch('inventory.tasks.notify_low_stock.delay') as mock_delay:
            scan_low_stock()

        mock_delay.assert_called_once_with(self.product.id)


@override_settings(RATE_LIMIT_ENABLED=False)
class InventoryAPITestCase(APITestCase):
    """HTTP surface of the inventory app."""

    def setUp(self):
        self.manager = make_user('manager', Profile.Role.MANAGER)
        self.staff = make_user('staff', Profile.Role.STAFF)
        self.category = Category.objects.create(name='Electronics')
        self.supplier = Supplier.objects.create(name='TechCorp Industries', lead_time=5)
        self.mouse = Product.objects.create(
            sku='ELEC-001', name='Wireless Mouse', category=self.category,
            supplier=self.supplier, quantity=5, reorder_level=10,
            price=Decimal('15.00'), cost=Decimal('10.00')
        )
        self.hub = Product.objects.create(
            sku='ELEC-002', name='USB-C Hub', category=self.category,
            quantity=0, reorder_level=10, price=Decimal('30.00'), cost=Decimal('20.00')
        )
        self.desk = Product.objects.create(
            sku='FURN-001', name='Standing Desk', quantity=40, reorder_level=5,
            price=Decimal('400.00'), cost=Decimal('250.00')
        )
        self.client.force_authenticate(self.manager)

    def test_product_list_low_stock_filter(self):
        response = self.client.get('/api/products/', {'low_stock': 'true'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        skus = {row['sku'] for row in response.data['results']}
        self.assertEqual(skus, {'ELEC-001', 'ELEC-002'})

    def test_product_export_csv(self):
        """
        Given: Three products, two with a supplier or category
        When: Exporting the product list
        Then: A CSV attachment with a header row and one row per product
        """
        response = self.client.get('/api/products/export/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn('attachment; filename="products-', response['Content-Disposition'])

        rows = list(csv.reader(response.content.decode().splitlines()))
        self.assertEqual(rows[0][:3], ['SKU', 'Name', 'Description'])
        self.assertEqual(rows[0][-2:], ['Created At', 'Updated At'])
        by_sku = {row[0]: row for row in rows[1:]}
        self.assertEqual(set(by_sku), {'ELEC-001', 'ELEC-002', 'FURN-001'})
        self.assertEqual(by_sku['ELEC-001'][3:9], [
            'Electronics', 'TechCorp Industries', '5', '10', '15.00', '10.00'
        ])
        self.assertEqual(by_sku['FURN-001'][3:5], ['', ''])

    def test_product_export_applies_list_filters(self):
        response = self.client.get('/api/products/export/', {'low_stock': 'true'})

        rows = list(csv.reader(response.content.decode().splitlines()))
        self.assertEqual({row[0] for row in rows[1:]}, {'ELEC-001', 'ELEC-002'})

    def test_product_detail_has_stock_fields(self):
        response = self.client.get(f'/api/products/{self.mouse.id}/')

        self.assertEqual(response.data['stock_status'], 'low_stock')
        self.assertTrue(response.data['is_low_stock'])
        self.assertEqual(response.data['suggested_reorder_quantity'], 15)
        self.assertEqual(response.data['supplier']['name'], 'TechCorp Industries')

    def test_create_product(self):
        response = self.client.post('/api/products/', {
            'sku': 'NET-001', 'name': 'Router', 'quantity': 20, 'reorder_level': 5,
            'price': '80.00', 'cost': '55.00', 'category_id': self.category.id,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['category']['id'], self.category.id)

    def test_staff_cannot_create_product(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post('/api/products/', {
            'sku': 'NET-001', 'name': 'Router',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_patch_product_writes_history(self):
        response = self.client.patch(
            f'/api/products/{self.desk.id}/', {'quantity': 38}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 38)

        response = self.client.get(f'/api/products/{self.desk.id}/history/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = response.data['results'][0]
        self.assertEqual(entry['field_name'], 'quantity')
        self.assertEqual(entry['old_value'], '40')
        self.assertEqual(entry['new_value'], '38')
        self.assertEqual(entry['changed_by']['id'], self.manager.id)

    def test_history_for_missing_product(self):
        response = self.client.get('/api/products/99999/history/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_low_stock_report_most_critical_first(self):
        response = self.client.get('/api/products/low-stock/')

        self.assertEqual(response.data['count'], 2)
        rows = response.data['results']
        self.assertEqual([row['sku'] for row in rows], ['ELEC-002', 'ELEC-001'])
        self.assertEqual(rows[0]['status'], 'out_of_stock')
        self.assertEqual(rows[0]['suggested_reorder_quantity'], 20)
        self.assertEqual(rows[1]['suggested_reorder_quantity'], 15)

    def test_autocomplete(self):
        response = self.client.get('/api/products/autocomplete/', {'q': 'elec'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({row['sku'] for row in response.data}, {'ELEC-001', 'ELEC-002'})

    def test_autocomplete_short_query(self):
        response = self.client.get('/api/products/autocomplete/', {'q': 'e'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_category_totals(self):
        response = self.client.get(f'/api/categories/{self.category.id}/')

        self.assertEqual(response.data['product_count'], 2)
        self.assertEqual(response.data['total_value'], '50.00')

    def test_category_cannot_parent_itself(self):
        response = self.client.patch(
            f'/api/categories/{self.category.id}/', {'parent_id': self.category.id}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_staff_can_read_but_not_write_suppliers(self):
        self.client.force_authenticate(self.staff)

        response = self.client.get('/api/suppliers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post('/api/suppliers/', {'name': 'New Supplier'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_manager_cannot_delete_supplier(self):
        response = self.client.delete(f'/api/suppliers/{self.supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_toggle(self):
        customer = Customer.objects.create(name='Acme Corp')

        response = self.client.post(f'/api/customers/{customer.id}/toggle-status/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'inactive')

    def test_dashboard_stats(self):
        response = self.client.get('/api/dashboard/stats/')

        self.assertEqual(response.data['total_products'], 3)
        self.assertEqual(response.data['low_stock_items'], 2)
        self.assertEqual(response.data['total_value'], '10050.00')

    def test_category_report(self):
        response = self.client.get('/api/reports/categories/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], 'Electronics')
        self.assertEqual(response.data[0]['total_value'], '50.00')


class SeedDataCommandTestCase(TestCase):

    def test_seed_is_reproducible(self):
        call_command('seed_data', products=12, customers=3, seed=7, stdout=StringIO())

        self.assertEqual(Product.objects.count(), 12)
        self.assertEqual(Customer.objects.count(), 3)
        self.assertTrue(Supplier.objects.filter(name='TechCorp Industries').exists())
        self.assertTrue(all(p.quantity >= 0 for p in Product.objects.all()))
