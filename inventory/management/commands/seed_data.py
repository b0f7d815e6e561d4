"""
Management command to seed the database with sample data.

Generates:
- categories (Electronics, Office Supplies, Furniture, ...)
- suppliers with ratings and lead times
- products with SKUs, stock levels and reorder levels
- customers

Usage:
    python manage.py seed_data
    python manage.py seed_data --clear  # Clear existing data first
"""
import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from inventory.models import Category, Customer, Product, Supplier

CATEGORIES = [
    ('Electronics', 'Electronic devices and components', 'ELEC'),
    ('Office Supplies', 'Office and stationery items', 'OFF'),
    ('Furniture', 'Office and home furniture', 'FURN'),
    ('Networking', 'Routers, switches and cabling', 'NET'),
    ('Cleaning', 'Janitorial and cleaning supplies', 'CLN'),
    ('Packaging', 'Boxes, tape and shipping materials', 'PKG'),
    ('Safety', 'Protective equipment', 'SAFE'),
    ('Kitchen', 'Break room and kitchen goods', 'KIT'),
]

SUPPLIERS = [
    ('TechCorp Industries', 'John Smith', 'john@techcorp.com', '+1 555-0101', '123 Tech Blvd', '4.8', 5),
    ('Global Supplies Co', 'Sarah Johnson', 'sarah@globalsupplies.com', '+1 555-0102', '456 Commerce St', '4.5', 3),
    ('Office Depot Pro', 'Mike Chen', 'mike@officedepotpro.com', '+1 555-0103', '789 Business Ave', '4.2', 7),
    ('FurniCraft Ltd', 'Emma Wilson', 'emma@furnicraft.com', '+1 555-0104', '12 Timber Rd', '4.0', 14),
    ('NetLink Distribution', 'Raj Patel', 'raj@netlink.com', '+1 555-0105', '88 Fiber Way', '4.6', 4),
]

PRODUCT_TEMPLATES = {
    'Electronics': ['Laptop 14"', 'Wireless Mouse', 'USB-C Hub', 'Monitor 27"', 'Webcam HD', 'Headset'],
    'Office Supplies': ['Notebook Set', 'Ballpoint Pens', 'Stapler', 'Printer Paper A4', 'Sticky Notes'],
    'Furniture': ['Ergonomic Chair', 'Standing Desk', 'Filing Cabinet', 'Bookshelf', 'Desk Lamp'],
    'Networking': ['Router', 'Switch 24-Port', 'Cat6 Cable 10m', 'Access Point'],
    'Cleaning': ['Disinfectant Spray', 'Paper Towels', 'Microfiber Cloths', 'Trash Bags'],
    'Packaging': ['Shipping Box M', 'Packing Tape', 'Bubble Wrap Roll', 'Labels'],
    'Safety': ['Safety Gloves', 'Hard Hat', 'First Aid Kit', 'Safety Glasses'],
    'Kitchen': ['Coffee Beans 1kg', 'Paper Cups', 'Water Filter', 'Tea Assortment'],
}

LOCATIONS = ['Warehouse A', 'Warehouse B', 'Warehouse C', 'Back Office', 'Store Room']

CUSTOMER_NAMES = [
    'Acme Corp', 'Blue Sky Retail', 'Cedar Health', 'Delta Logistics', 'Evergreen Schools',
    'Fusion Labs', 'Granite Builders', 'Harbor Cafe', 'Ironwood Legal', 'Juniper Studios',
]


class Command(BaseCommand):
    help = 'Seed the database with sample categories, suppliers, products and customers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before seeding',
        )
        parser.add_argument(
            '--products',
            type=int,
            default=60,
            help='Number of products to create (default: 60)',
        )
        parser.add_argument(
            '--customers',
            type=int,
            default=10,
            help='Number of customers to create (default: 10)',
        )
        parser.add_argument(
            '--seed',
            type=int,
            default=None,
            help='Random seed for reproducible data',
        )

    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])

        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self._clear_data()

        self.stdout.write('Starting database seeding...')

        with transaction.atomic():
            categories = self._create_categories()
            suppliers = self._create_suppliers()
            self._create_products(options['products'], categories, suppliers)
            self._create_customers(options['customers'])

        self.stdout.write(self.style.SUCCESS('Database seeding completed successfully!'))

    def _clear_data(self):
        """Clear all existing data."""
        from purchasing.models import PurchaseOrder, PurchaseOrderItem
        from notifications.models import Notification

        PurchaseOrderItem.objects.all().delete()
        PurchaseOrder.objects.all().delete()
        Notification.objects.all().delete()
        Product.objects.all().delete()
        Supplier.objects.all().delete()
        Category.objects.all().delete()
        Customer.objects.all().delete()

        self.stdout.write(self.style.WARNING('All existing data cleared.'))

    def _create_categories(self):
        categories = []
        for name, description, _ in CATEGORIES:
            category, created = Category.objects.get_or_create(
                name=name, defaults={'description': description}
            )
            categories.append(category)
            if created:
                self.stdout.write(f'  Created category: {name}')

        self.stdout.write(self.style.SUCCESS(f'Created {len(categories)} categories'))
        return categories

    def _create_suppliers(self):
        suppliers = []
        for name, contact, email, phone, address, rating, lead_time in SUPPLIERS:
            supplier, _ = Supplier.objects.get_or_create(
                name=name,
                defaults={
                    'contact_person': contact,
                    'email': email,
                    'phone': phone,
                    'address': address,
                    'rating': Decimal(rating),
                    'lead_time': lead_time,
                }
            )
            suppliers.append(supplier)

        self.stdout.write(self.style.SUCCESS(f'Created {len(suppliers)} suppliers'))
        return suppliers

    def _create_products(self, count, categories, suppliers):
        prefixes = {name: prefix for name, _, prefix in CATEGORIES}
        existing_skus = set(Product.objects.values_list('sku', flat=True))
        products = []

        self.stdout.write(f'Creating {count} products...')

        for i in range(count):
            category = random.choice(categories)
            base_name = random.choice(PRODUCT_TEMPLATES.get(category.name, ['Item']))
            prefix = prefixes.get(category.name, 'GEN')

            sku = f"{prefix}-{i + 1:03d}"
            if sku in existing_skus:
                continue
            existing_skus.add(sku)

            cost = Decimal(str(round(random.uniform(2, 1500), 2)))
            margin = Decimal(str(round(random.uniform(1.1, 1.6), 2)))
            reorder_level = random.choice([5, 10, 20, 50, 100])
            # Roughly one in five products starts at or below its reorder level
            if random.random() < 0.2:
                quantity = random.randint(0, reorder_level)
            else:
                quantity = random.randint(reorder_level + 1, reorder_level * 5)

            products.append(Product(
                sku=sku,
                name=base_name,
                description=f"{base_name} for everyday business use.",
                category=category,
                supplier=random.choice(suppliers),
                quantity=quantity,
                reorder_level=reorder_level,
                cost=cost,
                price=(cost * margin).quantize(Decimal('0.01')),
                location=random.choice(LOCATIONS),
            ))

        Product.objects.bulk_create(products, ignore_conflicts=True)
        self.stdout.write(self.style.SUCCESS(f'Created {len(products)} products'))
        return products

    def _create_customers(self, count):
        customers = []
        for i in range(count):
            name = CUSTOMER_NAMES[i % len(CUSTOMER_NAMES)]
            if i >= len(CUSTOMER_NAMES):
                name = f"{name} {i // len(CUSTOMER_NAMES) + 1}"
            slug = name.lower().replace(' ', '')
            customers.append(Customer(
                name=name,
                email=f"orders@{slug}.example.com",
                phone=f"+1 555-{1000 + i:04d}",
                status=Customer.Status.ACTIVE if random.random() > 0.15 else Customer.Status.INACTIVE,
                total_orders=random.randint(0, 40),
                total_spent=Decimal(str(round(random.uniform(0, 25000), 2))),
            ))

        Customer.objects.bulk_create(customers)
        self.stdout.write(self.style.SUCCESS(f'Created {len(customers)} customers'))
        return customers
