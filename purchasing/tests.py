"""
Tests for purchase order lifecycle and stock reconciliation.

Test Cases:
1. Order created as pending with exact total
2. Validation of supplier and items
3. Status transitions follow the lifecycle, nothing else
4. Receiving adds stock, partial receipts, bounds on received quantities
5. Receipt rolls back completely on database failure
6. Receipts against the same product never lose an increment
7. Order numbering, notifications and the API surface
"""
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.context import ActorContext
from core.exceptions import (
    ActionNotPermittedError,
    GatewayError,
    InvalidTransitionError,
    OrderValidationError,
    ReceiptValidationError,
    ResourceNotFoundError,
)
from core.models import Profile
from inventory.models import Product, ProductHistory, Supplier
from notifications.models import Notification
from purchasing import services
from purchasing.lifecycle import ALLOWED_TRANSITIONS, STATUS_EVENTS, can_transition
from purchasing.models import OrderSequence, PurchaseOrder, PurchaseOrderItem
from purchasing.numbering import format_order_number, next_order_number
from purchasing.tasks import generate_daily_purchasing_report, notify_order_event

User = get_user_model()
Status = PurchaseOrder.Status


def make_user(username, role):
    user = User.objects.create_user(username=username, password='pass1234')
    Profile.objects.create(user=user, role=role)
    return user


class PurchasingTestMixin:
    """Shared fixtures: one supplier, two products, a manager and a staff user."""

    def setUp(self):
        self.supplier = Supplier.objects.create(name='TechCorp Industries')
        self.product_a = Product.objects.create(
            sku='ELEC-001', name='Wireless Mouse', quantity=5, reorder_level=10,
            cost=Decimal('10.00'), price=Decimal('15.00')
        )
        self.product_b = Product.objects.create(
            sku='OFF-001', name='Stapler', quantity=40, reorder_level=10,
            cost=Decimal('5.50'), price=Decimal('8.00')
        )
        self.manager = make_user('manager', Profile.Role.MANAGER)
        self.staff = make_user('staff', Profile.Role.STAFF)
        self.manager_ctx = ActorContext.for_user(self.manager)
        self.staff_ctx = ActorContext.for_user(self.staff)

    def create_order(self, items=None):
        if items is None:
            items = [
                {'product_id': self.product_a.id, 'quantity': 3, 'unit_cost': Decimal('10.00')},
                {'product_id': self.product_b.id, 'quantity': 2, 'unit_cost': Decimal('5.50')},
            ]
        return services.create_purchase_order(self.manager_ctx, self.supplier.id, items)

    def shipped_order(self, items=None):
        order = self.create_order(items)
        services.approve_purchase_order(self.manager_ctx, order.id)
        services.ship_purchase_order(self.manager_ctx, order.id)
        return order


class PurchaseOrderCreateTestCase(PurchasingTestMixin, TestCase):
    """Order creation: totals, numbering and validation."""

    def test_order_created_pending_with_exact_total(self):
        """
        Given: 3 x 10.00 and 2 x 5.50
        When: Creating the order
        Then: Status is pending and total is 41.00
        """
        order = self.create_order()

        self.assertEqual(order.status, Status.PENDING)
        self.assertEqual(order.total_amount, Decimal('41.00'))
        self.assertEqual(order.items.count(), 2)
        self.assertEqual(order.created_by, self.manager)
        self.assertIsNotNone(order.order_date)
        self.assertIsNone(order.received_date)
        self.assertTrue(order.order_number.startswith('PO-'))

    def test_total_is_not_rounded_per_item(self):
        items = [
            {'product_id': self.product_a.id, 'quantity': 7, 'unit_cost': '0.33'},
            {'product_id': self.product_b.id, 'quantity': 3, 'unit_cost': '1.11'},
        ]
        order = self.create_order(items)

        self.assertEqual(order.total_amount, Decimal('5.64'))  # 2.31 + 3.33

    def test_items_start_unreceived(self):
        order = self.create_order()
        self.assertEqual(
            list(order.items.values_list('received_quantity', flat=True)), [0, 0]
        )

    def test_order_numbers_are_unique(self):
        first = self.create_order()
        second = self.create_order()
        self.assertNotEqual(first.order_number, second.order_number)

    def test_validation_error_empty_items(self):
        with self.assertRaises(OrderValidationError) as context:
            self.create_order([])

        self.assertIn('at least one item', str(context.exception))
        self.assertEqual(PurchaseOrder.objects.count(), 0)

    def test_validation_error_missing_supplier(self):
        with self.assertRaises(OrderValidationError):
            services.create_purchase_order(self.manager_ctx, None, [
                {'product_id': self.product_a.id, 'quantity': 1, 'unit_cost': '1.00'}
            ])

    def test_validation_error_invalid_quantity(self):
        with self.assertRaises(OrderValidationError):
            self.create_order([
                {'product_id': self.product_a.id, 'quantity': 0, 'unit_cost': '1.00'}
            ])

    def test_validation_error_negative_cost(self):
        with self.assertRaises(OrderValidationError):
            self.create_order([
                {'product_id': self.product_a.id, 'quantity': 1, 'unit_cost': '-1.00'}
            ])

    def test_validation_error_quantity_too_large(self):
        with self.assertRaises(OrderValidationError):
            self.create_order([
                {'product_id': self.product_a.id, 'quantity': 10 ** 13, 'unit_cost': '10.00'}
            ])
        self.assertEqual(PurchaseOrder.objects.count(), 0)

    def test_validation_error_total_too_large(self):
        """
        Given: Quantities and costs that each fit their columns
        When: Their total exceeds what total_amount can store
        Then: OrderValidationError and nothing is written
        """
        with self.assertRaises(OrderValidationError) as context:
            self.create_order([
                {'product_id': self.product_a.id, 'quantity': 1000000, 'unit_cost': '9999999.00'}
            ])

        self.assertIn('exceeds', str(context.exception))
        self.assertEqual(PurchaseOrder.objects.count(), 0)
        self.assertEqual(OrderSequence.objects.count(), 0)

    def test_validation_error_sub_cent_cost(self):
        with self.assertRaises(OrderValidationError) as context:
            self.create_order([
                {'product_id': self.product_a.id, 'quantity': 3, 'unit_cost': '0.335'}
            ])

        self.assertIn('2 decimal places', str(context.exception))
        self.assertEqual(PurchaseOrder.objects.count(), 0)

    def test_stored_total_matches_stored_subtotals(self):
        order = self.create_order([
            {'product_id': self.product_a.id, 'quantity': 3, 'unit_cost': '0.35'},
            {'product_id': self.product_b.id, 'quantity': 7, 'unit_cost': Decimal('1.1')},
        ])
        order.refresh_from_db()

        subtotals = sum(item.quantity * item.unit_cost for item in order.items.all())
        self.assertEqual(order.total_amount, subtotals)
        self.assertEqual(order.total_amount, Decimal('8.75'))  # 1.05 + 7.70

    def test_validation_error_duplicate_products(self):
        with self.assertRaises(OrderValidationError) as context:
            self.create_order([
                {'product_id': self.product_a.id, 'quantity': 1, 'unit_cost': '1.00'},
                {'product_id': self.product_a.id, 'quantity': 2, 'unit_cost': '1.00'},
            ])

        self.assertIn('duplicate', str(context.exception).lower())

    def test_unknown_supplier(self):
        with self.assertRaises(ResourceNotFoundError):
            services.create_purchase_order(self.manager_ctx, 99999, [
                {'product_id': self.product_a.id, 'quantity': 1, 'unit_cost': '1.00'}
            ])

    def test_unknown_product(self):
        with self.assertRaises(ResourceNotFoundError) as context:
            self.create_order([{'product_id': 99999, 'quantity': 1, 'unit_cost': '1.00'}])

        self.assertIn('99999', str(context.exception))
        self.assertEqual(PurchaseOrder.objects.count(), 0)

    def test_staff_cannot_create_orders(self):
        with self.assertRaises(ActionNotPermittedError):
            services.create_purchase_order(self.staff_ctx, self.supplier.id, [
                {'product_id': self.product_a.id, 'quantity': 1, 'unit_cost': '1.00'}
            ])

    def test_items_failure_leaves_no_header(self):
        """
        Given: Writing the line items fails
        When: Creating the order
        Then: GatewayError and no order header remains
        """
        with patch.object(PurchaseOrderItem.objects, 'bulk_create',
                          side_effect=DatabaseError('disk full')):
            with self.assertRaises(GatewayError):
                self.create_order()

        self.assertEqual(PurchaseOrder.objects.count(), 0)
        self.assertEqual(PurchaseOrderItem.objects.count(), 0)


class PurchaseOrderTransitionTestCase(PurchasingTestMixin, TestCase):
    """Status changes follow pending -> approved -> shipped -> received, or cancel."""

    def test_approve_then_ship(self):
        order = self.create_order()

        order = services.approve_purchase_order(self.manager_ctx, order.id)
        self.assertEqual(order.status, Status.APPROVED)

        order = services.ship_purchase_order(self.manager_ctx, order.id)
        self.assertEqual(order.status, Status.SHIPPED)

    def test_cancel_pending(self):
        order = self.create_order()
        order = services.cancel_purchase_order(self.manager_ctx, order.id)
        self.assertEqual(order.status, Status.CANCELLED)
        self.assertTrue(order.is_terminal)

    def test_cannot_skip_approval(self):
        order = self.create_order()

        with self.assertRaises(InvalidTransitionError) as context:
            services.ship_purchase_order(self.manager_ctx, order.id)

        self.assertEqual(context.exception.current, Status.PENDING)
        order.refresh_from_db()
        self.assertEqual(order.status, Status.PENDING)

    def test_cannot_cancel_after_approval(self):
        order = self.create_order()
        services.approve_purchase_order(self.manager_ctx, order.id)

        with self.assertRaises(InvalidTransitionError):
            services.cancel_purchase_order(self.manager_ctx, order.id)

    def test_terminal_states_have_no_exit(self):
        order = self.create_order()
        services.cancel_purchase_order(self.manager_ctx, order.id)

        for target in (Status.PENDING, Status.APPROVED, Status.SHIPPED):
            with self.assertRaises(InvalidTransitionError):
                services.transition_purchase_order(self.manager_ctx, order.id, target)

    def test_received_only_through_receive(self):
        order = self.shipped_order()

        with self.assertRaises(InvalidTransitionError):
            services.transition_purchase_order(self.manager_ctx, order.id, Status.RECEIVED)

        order.refresh_from_db()
        self.assertEqual(order.status, Status.SHIPPED)

    def test_unknown_status_rejected(self):
        order = self.create_order()
        with self.assertRaises(InvalidTransitionError):
            services.transition_purchase_order(self.manager_ctx, order.id, 'archived')

    def test_transition_leaves_other_fields_untouched(self):
        order = self.create_order()
        services.approve_purchase_order(self.manager_ctx, order.id)

        fresh = PurchaseOrder.objects.get(id=order.id)
        self.assertEqual(fresh.total_amount, order.total_amount)
        self.assertEqual(fresh.order_number, order.order_number)
        self.assertIsNone(fresh.received_date)

    def test_staff_cannot_approve(self):
        order = self.create_order()
        with self.assertRaises(ActionNotPermittedError):
            services.approve_purchase_order(self.staff_ctx, order.id)

    def test_missing_order(self):
        with self.assertRaises(ResourceNotFoundError):
            services.approve_purchase_order(self.manager_ctx, 99999)

    def test_transition_table_is_closed(self):
        """Only the lifecycle edges are allowed, and every status has an event."""
        expected = {
            (Status.PENDING, Status.APPROVED),
            (Status.PENDING, Status.CANCELLED),
            (Status.APPROVED, Status.SHIPPED),
            (Status.SHIPPED, Status.RECEIVED),
        }
        allowed = {
            (current, target)
            for current in Status for target in Status
            if can_transition(current, target)
        }
        self.assertEqual(allowed, expected)
        self.assertEqual(set(ALLOWED_TRANSITIONS), set(Status))
        self.assertEqual(set(STATUS_EVENTS), set(Status))


class PurchaseOrderReceiveTestCase(PurchasingTestMixin, TestCase):
    """Receiving shipped orders into stock."""

    def test_receive_defaults_to_ordered_quantities(self):
        order = self.shipped_order()

        order = services.receive_purchase_order(self.staff_ctx, order.id)

        self.assertEqual(order.status, Status.RECEIVED)
        self.assertIsNotNone(order.received_date)
        self.product_a.refresh_from_db()
        self.product_b.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 8)   # 5 + 3
        self.assertEqual(self.product_b.quantity, 42)  # 40 + 2

    def test_partial_receipt(self):
        """
        Given: A shipped order of 3 x A and 2 x B
        When: Receiving 3 of A and 1 of B
        Then: Stock rises by 3 and 1, item B records 1 received
        """
        order = self.shipped_order()
        item_a = order.items.get(product=self.product_a)
        item_b = order.items.get(product=self.product_b)

        services.receive_purchase_order(self.staff_ctx, order.id, [
            {'item_id': item_a.id, 'received_quantity': 3},
            {'item_id': item_b.id, 'received_quantity': 1},
        ])

        self.product_a.refresh_from_db()
        self.product_b.refresh_from_db()
        item_b.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 8)
        self.assertEqual(self.product_b.quantity, 41)
        self.assertEqual(item_b.received_quantity, 1)
        self.assertEqual(item_b.quantity, 2)

        order.refresh_from_db()
        self.assertEqual(order.status, Status.RECEIVED)
        self.assertIsNotNone(order.received_date)

    def test_every_item_has_received_quantity(self):
        order = self.shipped_order()
        item_a = order.items.get(product=self.product_a)

        services.receive_purchase_order(self.staff_ctx, order.id, [
            {'item_id': item_a.id, 'received_quantity': 0},
        ])

        received = dict(order.items.values_list('product_id', 'received_quantity'))
        self.assertEqual(received, {self.product_a.id: 0, self.product_b.id: 2})
        self.product_a.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 5)

    def test_over_receipt_rejected(self):
        order = self.shipped_order()
        item_b = order.items.get(product=self.product_b)

        with self.assertRaises(ReceiptValidationError) as context:
            services.receive_purchase_order(self.staff_ctx, order.id, [
                {'item_id': item_b.id, 'received_quantity': 3},
            ])

        self.assertEqual(context.exception.ordered, 2)
        self.product_a.refresh_from_db()
        self.product_b.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 5)
        self.assertEqual(self.product_b.quantity, 40)
        order.refresh_from_db()
        self.assertEqual(order.status, Status.SHIPPED)

    def test_negative_receipt_rejected(self):
        order = self.shipped_order()
        item_a = order.items.get(product=self.product_a)

        with self.assertRaises(ReceiptValidationError):
            services.receive_purchase_order(self.staff_ctx, order.id, [
                {'item_id': item_a.id, 'received_quantity': -1},
            ])

    def test_item_from_other_order_rejected(self):
        order = self.shipped_order()
        other = self.create_order()
        foreign_item = other.items.first()

        with self.assertRaises(ResourceNotFoundError):
            services.receive_purchase_order(self.staff_ctx, order.id, [
                {'item_id': foreign_item.id, 'received_quantity': 1},
            ])

    def test_receive_requires_shipped(self):
        order = self.create_order()
        services.approve_purchase_order(self.manager_ctx, order.id)

        with self.assertRaises(InvalidTransitionError):
            services.receive_purchase_order(self.staff_ctx, order.id)

        self.product_a.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 5)

    def test_second_receive_rejected(self):
        """Receiving the same order twice never adds stock twice."""
        order = self.shipped_order()
        services.receive_purchase_order(self.staff_ctx, order.id)

        with self.assertRaises(InvalidTransitionError):
            services.receive_purchase_order(self.staff_ctx, order.id)

        self.product_a.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 8)

    def test_receipt_is_audited(self):
        order = self.shipped_order()
        services.receive_purchase_order(self.staff_ctx, order.id)

        entry = ProductHistory.objects.get(product=self.product_a, field_name='quantity')
        self.assertEqual(entry.old_value, '5')
        self.assertEqual(entry.new_value, '8')
        self.assertEqual(entry.changed_by, self.staff)

    def test_receipt_rolls_back_on_database_failure(self):
        """
        Given: The audit write for the second product fails
        When: Receiving the order
        Then: GatewayError, and neither product nor order changed
        """
        order = self.shipped_order()
        real_record = services.record_product_change
        calls = []

        def flaky_record(*args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise DatabaseError('connection lost')
            return real_record(*args, **kwargs)

        with patch('purchasing.services.record_product_change', side_effect=flaky_record):
            with self.assertRaises(GatewayError):
                services.receive_purchase_order(self.staff_ctx, order.id)

        self.product_a.refresh_from_db()
        self.product_b.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 5)
        self.assertEqual(self.product_b.quantity, 40)
        order.refresh_from_db()
        self.assertEqual(order.status, Status.SHIPPED)
        self.assertEqual(
            list(order.items.values_list('received_quantity', flat=True)), [0, 0]
        )

    def test_receipts_on_same_product_accumulate(self):
        """
        Given: Stock of 100 and two shipped orders of 10 each
        When: Both orders are received
        Then: Stock is 120, no increment is lost
        """
        Product.objects.filter(id=self.product_a.id).update(quantity=100)
        items = [{'product_id': self.product_a.id, 'quantity': 10, 'unit_cost': '10.00'}]
        first = self.shipped_order(items)
        second = self.shipped_order(items)

        services.receive_purchase_order(self.staff_ctx, first.id)
        services.receive_purchase_order(self.staff_ctx, second.id)

        self.product_a.refresh_from_db()
        self.assertEqual(self.product_a.quantity, 120)

    def test_stale_instance_does_not_overwrite_stock(self):
        """Stock is incremented in the database, not from a stale read."""
        order = self.shipped_order()
        stale = Product.objects.get(id=self.product_a.id)
        Product.objects.filter(id=self.product_a.id).update(quantity=50)

        services.receive_purchase_order(self.staff_ctx, order.id)

        self.product_a.refresh_from_db()
        self.assertEqual(stale.quantity, 5)
        self.assertEqual(self.product_a.quantity, 53)


class OrderNumberingTestCase(TestCase):
    """Sequential per-year order numbers."""

    def test_format(self):
        self.assertEqual(format_order_number(2026, 42), 'PO-2026-00042')

    def test_sequence_per_year(self):
        self.assertEqual(next_order_number(date(2026, 3, 1)), 'PO-2026-00001')
        self.assertEqual(next_order_number(date(2026, 7, 9)), 'PO-2026-00002')
        self.assertEqual(next_order_number(date(2027, 1, 1)), 'PO-2027-00001')
        self.assertEqual(OrderSequence.objects.get(year=2026).last_number, 2)


class OrderNotificationTestCase(PurchasingTestMixin, TestCase):
    """Status change notifications."""

    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_superuser('admin', 'admin@example.com', 'pass1234')

    def test_notification_queued_after_commit(self):
        with patch('purchasing.tasks.notify_order_event.delay') as mock_delay:
            with self.captureOnCommitCallbacks(execute=True):
                order = self.create_order()

        mock_delay.assert_called_once_with(order.id, 'pending')

    def test_nothing_queued_when_creation_fails(self):
        with patch('purchasing.tasks.notify_order_event.delay') as mock_delay:
            with self.captureOnCommitCallbacks(execute=True):
                with self.assertRaises(OrderValidationError):
                    self.create_order([])

        mock_delay.assert_not_called()

    def test_queue_failure_does_not_fail_order(self):
        with patch('purchasing.tasks.notify_order_event.delay',
                   side_effect=ConnectionError('broker down')):
            with self.captureOnCommitCallbacks(execute=True):
                order = self.create_order()

        self.assertTrue(PurchaseOrder.objects.filter(id=order.id).exists())

    def test_notify_order_event_reaches_managers_and_creator(self):
        order = self.create_order()

        result = notify_order_event(order.id, Status.PENDING)

        self.assertEqual(result['status'], 'success')
        self.assertEqual(result['recipients'], 2)  # manager (creator) and admin
        notification = Notification.objects.get(user=self.admin)
        self.assertEqual(notification.type, Notification.Type.ORDER_CREATED)
        self.assertEqual(notification.reference_id, str(order.id))
        self.assertEqual(notification.reference_type, 'purchase_order')
        self.assertIn(order.order_number, notification.message)
        self.assertFalse(Notification.objects.filter(user=self.staff).exists())

    def test_notify_order_event_per_status(self):
        order = self.shipped_order()
        services.receive_purchase_order(self.staff_ctx, order.id)

        notify_order_event(order.id, Status.RECEIVED)

        self.assertTrue(Notification.objects.filter(
            user=self.manager, type=Notification.Type.ORDER_RECEIVED
        ).exists())

    def test_late_event_still_delivered(self):
        """
        Given: An order approved before its creation event was processed
        When: The creation event runs afterwards
        Then: The order_created notification is still sent
        """
        order = self.create_order()
        services.approve_purchase_order(self.manager_ctx, order.id)

        result = notify_order_event(order.id, Status.PENDING)

        self.assertEqual(result['status'], 'success')
        self.assertTrue(Notification.objects.filter(
            user=self.admin, type=Notification.Type.ORDER_CREATED
        ).exists())
        self.assertFalse(Notification.objects.filter(
            type=Notification.Type.ORDER_APPROVED
        ).exists())

    def test_missing_order(self):
        result = notify_order_event(99999, Status.PENDING)
        self.assertEqual(result['status'], 'error')

    def test_daily_report(self):
        stats = generate_daily_purchasing_report()
        self.assertEqual(stats['total_orders'], 0)
        self.assertEqual(stats['ordered_value'], '0.00')


@override_settings(RATE_LIMIT_ENABLED=False)
class PurchaseOrderAPITestCase(PurchasingTestMixin, APITestCase):
    """HTTP surface of the purchasing app."""

    def setUp(self):
        super().setUp()
        self.client.force_authenticate(self.manager)

    def create_payload(self):
        return {
            'supplier_id': self.supplier.id,
            'notes': 'Restock',
            'items': [
                {'product_id': self.product_a.id, 'quantity': 3, 'unit_cost': '10.00'},
                {'product_id': self.product_b.id, 'quantity': 2, 'unit_cost': '5.50'},
            ],
        }

    def test_create_order(self):
        response = self.client.post('/api/purchase-orders/', self.create_payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['total_amount'], '41.00')
        self.assertEqual(len(response.data['items']), 2)
        self.assertEqual(response.data['supplier']['id'], self.supplier.id)

    def test_create_order_empty_items(self):
        payload = self.create_payload()
        payload['items'] = []

        response = self.client.post('/api/purchase-orders/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_order_as_staff_forbidden(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post('/api/purchase-orders/', self.create_payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Permission Denied')

    def test_create_order_unknown_supplier(self):
        payload = self.create_payload()
        payload['supplier_id'] = 99999

        response = self.client.post('/api/purchase-orders/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_order_oversized_quantity_rejected(self):
        payload = self.create_payload()
        payload['items'] = [
            {'product_id': self.product_a.id, 'quantity': 10 ** 13, 'unit_cost': '10.00'}
        ]

        response = self.client.post('/api/purchase-orders/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(PurchaseOrder.objects.count(), 0)
        self.assertEqual(self.client.get('/api/purchase-orders/').status_code, status.HTTP_200_OK)

    def test_create_order_oversized_total_rejected(self):
        payload = self.create_payload()
        payload['items'] = [
            {'product_id': self.product_a.id, 'quantity': 2000000000, 'unit_cost': '9999999999.99'}
        ]

        response = self.client.post('/api/purchase-orders/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Validation Error')
        self.assertEqual(PurchaseOrder.objects.count(), 0)

    def test_list_and_filter(self):
        pending = self.create_order()
        cancelled = self.create_order()
        services.cancel_purchase_order(self.manager_ctx, cancelled.id)

        response = self.client.get('/api/purchase-orders/', {'status': 'pending'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ids = [row['id'] for row in response.data['results']]
        self.assertEqual(ids, [pending.id])
        self.assertEqual(response.data['results'][0]['item_count'], 2)
        self.assertEqual(response.data['results'][0]['supplier_name'], 'TechCorp Industries')

    def test_detail(self):
        order = self.create_order()
        response = self.client.get(f'/api/purchase-orders/{order.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order_number'], order.order_number)
        self.assertEqual(response.data['created_by']['id'], self.manager.id)

    def test_full_lifecycle(self):
        order = self.create_order()

        response = self.client.post(f'/api/purchase-orders/{order.id}/approve/')
        self.assertEqual(response.data['status'], 'approved')

        response = self.client.post(f'/api/purchase-orders/{order.id}/ship/')
        self.assertEqual(response.data['status'], 'shipped')

        item_b = order.items.get(product=self.product_b)
        self.client.force_authenticate(self.staff)
        response = self.client.post(
            f'/api/purchase-orders/{order.id}/receive/',
            {'items': [{'item_id': item_b.id, 'received_quantity': 1}]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'received')
        self.assertIsNotNone(response.data['received_date'])
        self.product_b.refresh_from_db()
        self.assertEqual(self.product_b.quantity, 41)

    def test_invalid_transition_is_conflict(self):
        order = self.create_order()
        response = self.client.post(f'/api/purchase-orders/{order.id}/ship/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Invalid Transition')

    def test_over_receipt_is_bad_request(self):
        order = self.shipped_order()
        item_a = order.items.get(product=self.product_a)

        response = self.client.post(
            f'/api/purchase-orders/{order.id}/receive/',
            {'items': [{'item_id': item_a.id, 'received_quantity': 4}]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_stats(self):
        order = self.shipped_order()
        services.receive_purchase_order(self.staff_ctx, order.id)
        self.create_order()

        response = self.client.get('/api/purchase-orders/stats/')

        self.assertEqual(response.data['total_orders'], 2)
        self.assertEqual(response.data['received_orders'], 1)
        self.assertEqual(response.data['pending_orders'], 1)
        self.assertEqual(response.data['received_value'], '41.00')
        self.assertEqual(response.data['open_value'], '41.00')

    def test_unauthenticated(self):
        self.client.force_authenticate(None)
        response = self.client.get('/api/purchase-orders/')
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


class PurchaseOrderModelTestCase(PurchasingTestMixin, TestCase):
    """Model properties."""

    def test_item_subtotal(self):
        order = self.create_order()
        item = order.items.get(product=self.product_b)
        self.assertEqual(item.subtotal, Decimal('11.00'))

    def test_item_count(self):
        order = self.create_order()
        self.assertEqual(order.item_count, 2)
