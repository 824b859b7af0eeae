from decimal import Decimal, ROUND_HALF_UP

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

CENT = Decimal('0.01')
MIN_PRICE = [MinValueValidator(CENT)]


def round_money(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


class Category(models.Model):
    """Product categories."""

    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales_category'
        ordering = ['name']
        verbose_name_plural = 'categories'

    def __str__(self):
        return self.name


class Product(models.Model):
    """Products available for sale."""

    class Type(models.TextChoices):
        PHYSICAL = 'physical', 'Physical'
        DIGITAL = 'digital', 'Digital'

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=MIN_PRICE)
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name='products')
    product_type = models.CharField(max_length=20, choices=Type.choices, default=Type.PHYSICAL)
    photo_url = models.CharField(max_length=500, blank=True, default='')
    # only changed through apps.sales.services.inventory once the product exists
    stock_quantity = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales_product'
        ordering = ['name']
        indexes = [
            models.Index(fields=['name'], name='sales_product_name_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(price__gt=0), name='sales_product_price_positive'),
            models.CheckConstraint(condition=models.Q(stock_quantity__gte=0), name='sales_product_stock_non_negative'),
        ]

    def __str__(self):
        return self.name


class Customer(models.Model):
    """People who place orders."""

    first_name = models.CharField(max_length=150)
    last_name = models.CharField(max_length=150)
    email = models.EmailField(unique=True)
    mobile = models.CharField(max_length=30)
    address_text = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales_customer'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return '{} {}'.format(self.first_name, self.last_name)


class Voucher(models.Model):
    """Discount codes redeemable on orders."""

    class DiscountType(models.TextChoices):
        PERCENTAGE = 'percentage', 'Percentage'
        FIXED_AMOUNT = 'fixed_amount', 'Fixed amount'

    code = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, validators=MIN_PRICE)
    expires_at = models.DateTimeField(null=True, blank=True)
    active = models.BooleanField(default=True)
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    usage_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales_voucher'
        ordering = ['name']
        indexes = [
            models.Index(fields=['active', 'expires_at'], name='sales_voucher_available_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(discount_value__gt=0), name='sales_voucher_value_positive'),
        ]

    def __str__(self):
        return self.code

    @staticmethod
    def normalize_code(code):
        return (code or '').strip().upper()

    def save(self, *args, **kwargs):
        self.code = self.normalize_code(self.code)
        super().save(*args, **kwargs)

    def is_expired(self, now=None):
        if self.expires_at is None:
            return False
        return self.expires_at < (now or timezone.now())

    def is_valid_for_use(self, now=None):
        if not self.active or self.is_expired(now):
            return False
        if self.usage_limit is None:
            return True
        return self.usage_count < self.usage_limit

    def calculate_discount(self, subtotal, now=None):
        """
        Discount granted on ``subtotal``.

        Percentage vouchers take ``value`` percent of the subtotal; fixed
        vouchers never exceed the subtotal, so an order total cannot go
        negative. Unusable vouchers and unknown types give nothing.
        """
        if not self.is_valid_for_use(now):
            return Decimal('0.00')
        return self.discount_on(subtotal)

    def discount_on(self, subtotal):
        """Discount on ``subtotal`` by type alone, for orders that already used this voucher."""
        subtotal = Decimal(subtotal)
        if self.discount_type == self.DiscountType.PERCENTAGE:
            return round_money(subtotal * self.discount_value / 100)
        if self.discount_type == self.DiscountType.FIXED_AMOUNT:
            return round_money(min(self.discount_value, subtotal))
        return Decimal('0.00')


class Order(models.Model):
    """Customer purchase orders."""

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        PROCESSING = 'processing', 'Processing'
        SHIPPED = 'shipped', 'Shipped'
        COMPLETED = 'completed', 'Completed'
        CANCELLED = 'cancelled', 'Cancelled'

    class Type(models.TextChoices):
        ONLINE = 'online', 'Online'
        IN_STORE = 'in_store', 'In store'

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='orders')
    voucher = models.ForeignKey(Voucher, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    reference_number = models.CharField(max_length=32, unique=True, editable=False)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    order_type = models.CharField(max_length=20, choices=Type.choices, default=Type.ONLINE)
    shipping_method = models.CharField(max_length=100, blank=True, default='')
    payment_method = models.CharField(max_length=100)
    delivery_address = models.TextField(blank=True, default='')
    delivery_notes = models.TextField(blank=True, default='')
    delivery_date_preference = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sales_order'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='sales_order_status_idx'),
            models.Index(fields=['created_at'], name='sales_order_created_at_idx'),
            models.Index(fields=['status', 'created_at'], name='sales_order_status_created_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(discount_amount__gte=0), name='sales_order_discount_non_negative'),
            models.CheckConstraint(condition=models.Q(total__gte=0), name='sales_order_total_non_negative'),
        ]

    def __str__(self):
        return "Order {} - {}".format(self.reference_number, self.customer)

    @property
    def is_cancelled(self):
        return self.status == self.Status.CANCELLED

    def finalize(self, line_items):
        """
        Compute subtotal, discount and total from the persisted line items and save them.

        The discount follows the order's voucher by type without re-checking
        usability, since the order already counted its use. Without a voucher
        (never set, or deleted since) the stored discount is kept. Either way
        it never exceeds the subtotal.
        """
        self.subtotal = sum((item.total_price for item in line_items), Decimal('0.00'))
        if self.voucher_id is not None:
            self.discount_amount = self.voucher.discount_on(self.subtotal)
        self.discount_amount = min(self.discount_amount, self.subtotal)
        self.total = self.subtotal - self.discount_amount
        self.save(update_fields=['subtotal', 'discount_amount', 'total', 'updated_at'])
        return self


class OrderItem(models.Model):
    """Individual line items inside an order."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, validators=MIN_PRICE)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'sales_order_item'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name='sales_order_item_quantity_positive'),
            models.CheckConstraint(condition=models.Q(unit_price__gt=0), name='sales_order_item_price_positive'),
        ]

    def __str__(self):
        return f"{self.product.name} x{self.quantity}"

    def save(self, *args, **kwargs):
        self.total_price = round_money(self.quantity * Decimal(self.unit_price))
        super().save(*args, **kwargs)
