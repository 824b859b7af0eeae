from decimal import Decimal

import pytest
from django.contrib import admin

from apps.sales.admin import CustomerAdmin, OrderAdmin, ProductAdmin
from apps.sales.models import Customer, Order, OrderItem, Product
from apps.sales.services.order_placement import LineItemRequest, place_order, update_order_status

pytestmark = pytest.mark.django_db


@pytest.fixture
def admin_request(rf, manager):
    request = rf.post('/admin/')
    request.user = manager
    return request


def place(customer, product, quantity):
    return place_order(
        customer.pk,
        [LineItemRequest(product_id=product.pk, quantity=quantity, unit_price=Decimal(product.price))],
        payment_method='cash',
        notify=False,
    )


def stock_of(product):
    product.refresh_from_db()
    return product.stock_quantity


def test_order_admin_bulk_delete_restores_stock(admin_request, customer, product):
    place(customer, product, 3)
    cancelled = place(customer, product, 1)
    update_order_status(cancelled.pk, Order.Status.CANCELLED)
    assert stock_of(product) == 2

    OrderAdmin(Order, admin.site).delete_queryset(admin_request, Order.objects.all())

    assert Order.objects.count() == 0
    assert OrderItem.objects.count() == 0
    assert stock_of(product) == 5


def test_order_admin_single_delete_restores_stock(admin_request, customer, product):
    order = place(customer, product, 2)

    OrderAdmin(Order, admin.site).delete_model(admin_request, order)

    assert not Order.objects.filter(pk=order.pk).exists()
    assert stock_of(product) == 5


def test_customer_admin_delete_restores_stock(admin_request, customer, product):
    place(customer, product, 4)

    CustomerAdmin(Customer, admin.site).delete_queryset(admin_request, Customer.objects.filter(pk=customer.pk))

    assert not Customer.objects.filter(pk=customer.pk).exists()
    assert stock_of(product) == 5


def test_product_admin_stock_is_read_only_once_created(admin_request, product):
    product_admin = ProductAdmin(Product, admin.site)
    assert 'stock_quantity' in product_admin.get_readonly_fields(admin_request, product)
    assert 'stock_quantity' not in product_admin.get_readonly_fields(admin_request)
