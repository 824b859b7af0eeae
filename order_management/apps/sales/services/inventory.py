"""
Stock adjustment on product rows.

Every change goes through ``lock_for_update`` so the read, the check and the
write happen while this transaction holds the row lock. A second transaction
touching the same product waits for the lock and then sees the committed
quantity, never a stale read.
"""
import logging

from django.db import transaction
from django.db.transaction import TransactionManagementError

from ..exceptions import InsufficientStock
from ..models import Product

logger = logging.getLogger(__name__)


def lock_for_update(product_id):
    """
    Return the product row locked with SELECT ... FOR UPDATE.

    Must run inside ``transaction.atomic()``. The lock is released when the
    enclosing transaction ends.
    """
    if transaction.get_autocommit():
        # SQLite would silently skip the lock, so check on every backend
        raise TransactionManagementError("Stock can only be locked inside a transaction")
    return Product.objects.select_for_update().get(pk=product_id)


def reserve_stock(product_id, quantity):
    product = lock_for_update(product_id)
    if product.stock_quantity < quantity:
        logger.warning(
            "STOCK SHORT — product: %s | available: %d | requested: %d",
            product.pk, product.stock_quantity, quantity,
        )
        raise InsufficientStock(product, quantity)

    product.stock_quantity -= quantity
    product.save(update_fields=['stock_quantity', 'updated_at'])
    logger.debug("STOCK RESERVED — product: %s | qty: %d | left: %d", product.pk, quantity, product.stock_quantity)
    return product


def release_stock(product_id, quantity):
    product = lock_for_update(product_id)
    product.stock_quantity += quantity
    product.save(update_fields=['stock_quantity', 'updated_at'])
    logger.debug("STOCK RELEASED — product: %s | qty: %d | now: %d", product.pk, quantity, product.stock_quantity)
    return product
