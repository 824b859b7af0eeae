import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.utils import timezone

from apps.accounts.models import User
from apps.sales.exceptions import OrderError
from apps.sales.models import Category, Customer, Order, OrderItem, Product, Voucher
from apps.sales.services.order_placement import LineItemRequest, place_order, update_order_status


USERS = [
    ('manager', 'manager@orderapp.com', User.Role.MANAGER),
    ('staff1', 'staff@orderapp.com', User.Role.STAFF),
]

CATEGORIES = [
    ('Electronics', 'Electronic devices and gadgets'),
    ('Food & Beverages', 'Food and drinks'),
    ('Clothing', 'Fashion and apparel'),
    ('Beauty & Personal Care', 'Skincare, cosmetics and personal items'),
]

PRODUCTS = [
    ('Smart Phone', 'Electronics', '8999.00', 25),
    ('Bluetooth Speaker', 'Electronics', '2499.00', 40),
    ('Wireless Headphones', 'Electronics', '1999.00', 30),
    ('Dried Mangoes 500g', 'Food & Beverages', '249.00', 120),
    ('Ground Coffee 250g', 'Food & Beverages', '399.00', 80),
    ('Linen Shirt', 'Clothing', '1299.00', 35),
    ('Cotton T-Shirt Pack', 'Clothing', '599.00', 60),
    ('Sunscreen SPF50', 'Beauty & Personal Care', '459.00', 70),
    ('Coconut Oil Soap', 'Beauty & Personal Care', '89.00', 200),
]

CUSTOMERS = [
    ('Alice', 'Johnson', 'alice@example.com', '09170000001'),
    ('Bob', 'Smith', 'bob@example.com', '09170000002'),
    ('Carol', 'White', 'carol@example.com', '09170000003'),
    ('David', 'Brown', 'david@example.com', '09170000004'),
    ('Eva', 'Davis', 'eva@example.com', '09170000005'),
]

VOUCHERS = [
    ('WELCOME10', 'Welcome 10% off', Voucher.DiscountType.PERCENTAGE, '10', None),
    ('SAVE500', 'Save 500', Voucher.DiscountType.FIXED_AMOUNT, '500', 100),
]


class Command(BaseCommand):
    help = 'Seed users, catalog, customers, vouchers and sample orders'

    def add_arguments(self, parser):
        parser.add_argument('--orders', type=int, default=20, help='Number of orders to place')
        parser.add_argument('--clear', action='store_true', help='Clear existing data first')

    def handle(self, *args, **options):
        if options['clear']:
            OrderItem.objects.all().delete()
            Order.objects.all().delete()
            Product.objects.all().delete()
            Category.objects.all().delete()
            Customer.objects.all().delete()
            Voucher.objects.all().delete()
            self.stdout.write(self.style.WARNING('Cleared existing data.'))

        for username, email, role in USERS:
            if not User.objects.filter(username=username).exists():
                User.objects.create_user(username=username, email=email, password='password123', role=role)
        self.stdout.write(f'Users ready: {len(USERS)}')

        categories = {}
        for name, description in CATEGORIES:
            categories[name], _ = Category.objects.get_or_create(name=name, defaults={'description': description})

        products = []
        for name, category, price, stock in PRODUCTS:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={'category': categories[category], 'price': Decimal(price), 'stock_quantity': stock},
            )
            products.append(product)
        self.stdout.write(f'Products ready: {len(products)}')

        customers = []
        for first_name, last_name, email, mobile in CUSTOMERS:
            customer, _ = Customer.objects.get_or_create(
                email=email,
                defaults={'first_name': first_name, 'last_name': last_name, 'mobile': mobile},
            )
            customers.append(customer)

        for code, name, discount_type, value, usage_limit in VOUCHERS:
            Voucher.objects.get_or_create(
                code=code,
                defaults={
                    'name': name,
                    'discount_type': discount_type,
                    'discount_value': Decimal(value),
                    'usage_limit': usage_limit,
                    'expires_at': timezone.now() + timedelta(days=90),
                },
            )
        self.stdout.write(f'Customers ready: {len(customers)} | Vouchers ready: {len(VOUCHERS)}')

        # Orders go through the placement workflow so stock stays consistent
        statuses = ['completed', 'completed', 'processing', 'pending', 'cancelled']
        placed = 0
        for _ in range(options['orders']):
            lines = [
                LineItemRequest(product_id=product.pk, quantity=random.randint(1, 3), unit_price=product.price)
                for product in random.sample(products, random.randint(1, 3))
            ]
            try:
                order = place_order(
                    customer_id=random.choice(customers).pk,
                    items=lines,
                    payment_method=random.choice(['cash', 'card', 'gcash']),
                    voucher_code=random.choice([None, None, None, 'WELCOME10']),
                    notify=False,
                )
            except OrderError as e:
                self.stdout.write(self.style.WARNING(f'Skipped order: {e.message}'))
                continue

            status = random.choice(statuses)
            if status != order.status:
                update_order_status(order.pk, status)
            placed += 1

        self.stdout.write(self.style.SUCCESS(f'Successfully placed {placed} orders.'))
