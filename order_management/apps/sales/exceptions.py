class OrderError(Exception):
    """Base class for order workflow failures that abort the transaction."""

    default_message = 'Order could not be processed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InsufficientStock(OrderError):

    def __init__(self, product, requested):
        self.product = product
        self.available = product.stock_quantity
        self.requested = requested
        super().__init__(
            "Insufficient stock for {}. Available: {}, Requested: {}".format(
                product.name, self.available, requested,
            )
        )


class VoucherInvalid(OrderError):
    default_message = 'Voucher not found or invalid'


class ReferenceNumberConflict(OrderError):
    default_message = 'Could not allocate a unique order reference number'


class OrderClosed(OrderError):
    default_message = 'Order is cancelled and can no longer be changed'


class InvalidOrderStatus(OrderError):

    def __init__(self, status):
        self.status = status
        super().__init__("Invalid order status: {}".format(status))
