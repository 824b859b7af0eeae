"""
Order workflow: placement, status changes and line-item edits.

Each public function runs in a single ``transaction.atomic()`` block. Stock
is moved only through ``inventory.reserve_stock`` / ``inventory.release_stock``,
which hold the product row lock until that block commits or rolls back.
"""
import logging
import secrets
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from ..exceptions import InsufficientStock, InvalidOrderStatus, OrderClosed, ReferenceNumberConflict
from ..models import Customer, Order, OrderItem, Product, round_money
from . import inventory, vouchers
from .notifications import send_order_confirmation

logger = logging.getLogger(__name__)

REFERENCE_ATTEMPTS = 2


@dataclass
class LineItemRequest:
    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def total_price(self):
        return round_money(self.quantity * Decimal(self.unit_price))


def generate_reference_number(now=None):
    now = now or timezone.now()
    return "{}-{}-{}".format(
        settings.ORDER_REFERENCE_PREFIX,
        now.strftime('%Y%m%d'),
        secrets.token_hex(4).upper(),
    )


def _check_line(line):
    errors = {}
    if line.quantity is None or line.quantity <= 0:
        errors['quantity'] = 'Quantity must be greater than 0'
    if line.unit_price is None or Decimal(line.unit_price) <= 0:
        errors['unit_price'] = 'Unit price must be greater than 0'
    if errors:
        raise ValidationError(errors)


def _preflight(lines):
    """
    Fail fast before any write when a line asks for more than is on hand.

    Reads without locks; ``inventory.reserve_stock`` repeats the check under
    the row lock when the line item is created.
    """
    for line in lines:
        _check_line(line)
    products = Product.objects.in_bulk([line.product_id for line in lines])
    for line in lines:
        product = products.get(int(line.product_id))
        if product is None:
            raise Product.DoesNotExist("Product {} not found".format(line.product_id))
        if line.quantity > product.stock_quantity:
            raise InsufficientStock(product, line.quantity)


def _insert_draft(order):
    """Save a draft order under a fresh reference number, retrying once on collision."""
    for attempt in range(1, REFERENCE_ATTEMPTS + 1):
        order.reference_number = generate_reference_number()
        try:
            with transaction.atomic():
                order.save(force_insert=True)
            return order
        except IntegrityError:
            if not Order.objects.filter(reference_number=order.reference_number).exists():
                raise
            logger.warning("REFERENCE COLLISION — %s (attempt %d)", order.reference_number, attempt)
    raise ReferenceNumberConflict()


def _reserve_lines(lines):
    """
    Reserve stock for every line, locking product rows in ascending id order.

    A fixed lock order keeps two orders naming the same products in
    different orders from deadlocking. Lines for the same product are
    reserved together. Returns the locked products by id.
    """
    wanted = defaultdict(int)
    for line in lines:
        wanted[int(line.product_id)] += line.quantity
    return {
        product_id: inventory.reserve_stock(product_id, wanted[product_id])
        for product_id in sorted(wanted)
    }


def place_order(customer_id, items, payment_method, voucher_code=None, order_type=Order.Type.ONLINE,
                shipping_method='', delivery_address='', delivery_notes='', delivery_date_preference=None,
                notify=True):
    """
    Create an order with its line items, all or nothing.

    ``items`` is a list of ``LineItemRequest``; their unit prices are used
    as given. Raises ``InsufficientStock``, ``VoucherInvalid``,
    ``ReferenceNumberConflict``, ``ValidationError`` or ``DoesNotExist``;
    on any of them nothing is written. The voucher, when given, is counted
    as used in the same transaction, and the confirmation e-mail goes out
    only after commit.
    """
    if not items:
        raise ValidationError({'items': 'At least one item is required'})

    with transaction.atomic():
        customer = Customer.objects.get(pk=customer_id)

        # Step 1 — stock preflight
        _preflight(items)

        # Step 2 — subtotal from caller prices
        subtotal = sum((line.total_price for line in items), Decimal('0.00'))

        # Step 3 — voucher
        voucher = None
        discount = Decimal('0.00')
        if voucher_code:
            voucher = vouchers.claim_voucher(voucher_code)
            discount = voucher.calculate_discount(subtotal)

        # Step 4 — draft order
        order = _insert_draft(Order(
            customer=customer,
            voucher=voucher,
            status=Order.Status.PENDING,
            subtotal=subtotal,
            discount_amount=discount,
            total=subtotal - discount,
            order_type=order_type or Order.Type.ONLINE,
            shipping_method=shipping_method or '',
            payment_method=payment_method,
            delivery_address=delivery_address or '',
            delivery_notes=delivery_notes or '',
            delivery_date_preference=delivery_date_preference,
        ))

        # Step 5 — locked stock check per product in id order, then the line items
        products = _reserve_lines(items)
        line_items = [
            OrderItem.objects.create(
                order=order,
                product=products[int(line.product_id)],
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            for line in items
        ]

        # Step 6 — totals from what was actually persisted
        order.finalize(line_items)

        # Step 7 — voucher use becomes durable together with the order
        if voucher is not None:
            vouchers.consume_voucher(voucher)

        if notify:
            order_id = order.pk
            transaction.on_commit(lambda: send_order_confirmation(order_id))

    logger.info(
        "ORDER PLACED — ref: %s | customer: %s | items: %d | subtotal: %s | discount: %s | total: %s",
        order.reference_number, customer.pk, len(line_items), order.subtotal, order.discount_amount, order.total,
    )
    return order


def update_order_status(order_id, status):
    """
    Move an order to ``status``.

    Entering ``cancelled`` from any other status puts every line item's
    quantity back on its product, once. A cancelled order stays cancelled:
    moving it to any other status raises ``OrderClosed``.
    """
    if status not in Order.Status.values:
        raise InvalidOrderStatus(status)

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id)
        previous = order.status
        if order.is_cancelled and status != Order.Status.CANCELLED:
            raise OrderClosed()
        order.status = status
        order.save(update_fields=['status', 'updated_at'])

        if status == Order.Status.CANCELLED and previous != Order.Status.CANCELLED:
            for item in order.items.order_by('product_id'):
                inventory.release_stock(item.product_id, item.quantity)
            logger.info("ORDER CANCELLED — ref: %s | stock restored for %d item(s)",
                        order.reference_number, order.items.count())

    logger.info("ORDER STATUS — ref: %s | %s -> %s", order.reference_number, previous, status)
    return order


def add_order_item(order_id, product_id, quantity):
    """Add a line to an existing order at the product's current price."""
    if quantity is None or quantity <= 0:
        raise ValidationError({'quantity': 'Quantity must be greater than 0'})

    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id)
        if order.is_cancelled:
            raise OrderClosed()

        product = inventory.reserve_stock(product_id, quantity)
        item = OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=product.price,
        )
        order.finalize(order.items.all())

    logger.info("ORDER ITEM ADDED — ref: %s | product: %s | qty: %d", order.reference_number, product.pk, quantity)
    return item


def remove_order_item(item_id):
    with transaction.atomic():
        item = OrderItem.objects.get(pk=item_id)
        order = Order.objects.select_for_update().get(pk=item.order_id)
        # a cancelled order already gave its stock back
        if not order.is_cancelled:
            inventory.release_stock(item.product_id, item.quantity)
        item.delete()
        order.finalize(order.items.all())

    logger.info("ORDER ITEM REMOVED — ref: %s | item: %s", order.reference_number, item_id)
    return order


def delete_order(order_id):
    with transaction.atomic():
        order = Order.objects.select_for_update().get(pk=order_id)
        if not order.is_cancelled:
            for item in order.items.order_by('product_id'):
                inventory.release_stock(item.product_id, item.quantity)
        reference = order.reference_number
        order.delete()

    logger.info("ORDER DELETED — ref: %s", reference)


def delete_customer(customer_id):
    """Delete a customer, going through ``delete_order`` for each order so stock comes back."""
    with transaction.atomic():
        customer = Customer.objects.get(pk=customer_id)
        for order_id in list(customer.orders.values_list('pk', flat=True)):
            delete_order(order_id)
        customer.delete()

    logger.info("CUSTOMER DELETED — id: %s", customer_id)
