from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.accounts.models import User
from apps.accounts.tokens import issue_token
from apps.sales.models import Category, Customer, Product, Voucher


@pytest.fixture
def manager(db):
    return User.objects.create_user(
        username='manager', email='manager@orderapp.com', password='password123', role=User.Role.MANAGER,
    )


@pytest.fixture
def staff(db):
    return User.objects.create_user(
        username='staff1', email='staff@orderapp.com', password='password123', role=User.Role.STAFF,
    )


def _client_for(user):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer {}'.format(issue_token(user)))
    return client


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def manager_client(manager):
    return _client_for(manager)


@pytest.fixture
def staff_client(staff):
    return _client_for(staff)


@pytest.fixture
def category(db):
    return Category.objects.create(name='Electronics', description='Devices and gadgets')


@pytest.fixture
def make_product(category):
    def make(name='Bluetooth Speaker', price='100.00', stock=5, **extra):
        return Product.objects.create(
            name=name, price=Decimal(price), stock_quantity=stock, category=category, **extra
        )
    return make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def customer(db):
    return Customer.objects.create(
        first_name='Alice', last_name='Johnson', email='alice@example.com', mobile='09170000001',
    )


@pytest.fixture
def make_voucher(db):
    def make(code='SAVE10', discount_type=Voucher.DiscountType.PERCENTAGE, value='10', **extra):
        return Voucher.objects.create(
            code=code, name=code.title(), discount_type=discount_type, discount_value=Decimal(value), **extra
        )
    return make
