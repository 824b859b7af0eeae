from rest_framework import serializers

from .models import CENT, Category, Customer, Order, OrderItem, Product, Voucher
from .services.order_placement import LineItemRequest


class CategorySerializer(serializers.ModelSerializer):
    product_count = serializers.IntegerField(source='products.count', read_only=True)

    class Meta:
        model = Category
        fields = ('id', 'name', 'description', 'product_count', 'created_at', 'updated_at')


class ProductSerializer(serializers.ModelSerializer):
    category = CategorySerializer(read_only=True)
    category_id = serializers.PrimaryKeyRelatedField(
        source='category', queryset=Category.objects.all(), write_only=True,
    )

    class Meta:
        model = Product
        fields = (
            'id', 'name', 'description', 'price', 'category', 'category_id', 'product_type',
            'photo_url', 'stock_quantity', 'created_at', 'updated_at',
        )


class CustomerSerializer(serializers.ModelSerializer):

    class Meta:
        model = Customer
        fields = (
            'id', 'first_name', 'last_name', 'full_name', 'email', 'mobile', 'address_text',
            'created_at', 'updated_at',
        )
        read_only_fields = ('full_name',)


class VoucherSerializer(serializers.ModelSerializer):
    valid_for_use = serializers.BooleanField(source='is_valid_for_use', read_only=True)

    class Meta:
        model = Voucher
        fields = (
            'id', 'code', 'name', 'discount_type', 'discount_value', 'expires_at', 'active',
            'usage_limit', 'usage_count', 'valid_for_use', 'created_at', 'updated_at',
        )
        read_only_fields = ('usage_count',)

    def validate_code(self, value):
        code = Voucher.normalize_code(value)
        if not code:
            raise serializers.ValidationError('Code is required')
        duplicates = Voucher.objects.filter(code__iexact=code)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError('Code has already been taken')
        return code


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = OrderItem
        fields = ('id', 'product_id', 'product_name', 'quantity', 'unit_price', 'total_price')


class OrderSerializer(serializers.ModelSerializer):
    customer = CustomerSerializer(read_only=True)
    voucher = VoucherSerializer(read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = (
            'id', 'reference_number', 'status', 'customer', 'voucher', 'items', 'subtotal',
            'discount_amount', 'total', 'order_type', 'shipping_method', 'payment_method',
            'delivery_address', 'delivery_notes', 'delivery_date_preference', 'created_at', 'updated_at',
        )
        read_only_fields = fields


class OrderItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=CENT)


class CreateOrderSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.CharField(max_length=100)
    order_type = serializers.ChoiceField(choices=Order.Type.choices, default=Order.Type.ONLINE)
    shipping_method = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    voucher_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    delivery_address = serializers.CharField(required=False, allow_blank=True, default='')
    delivery_notes = serializers.CharField(required=False, allow_blank=True, default='')
    delivery_date_preference = serializers.DateTimeField(required=False, allow_null=True)

    def placement_kwargs(self):
        data = dict(self.validated_data)
        data['items'] = [
            LineItemRequest(product_id=i['product_id'], quantity=i['quantity'], unit_price=i['unit_price'])
            for i in data['items']
        ]
        return data


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.Status.choices)


class AddOrderItemSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1)


class ValidateVoucherSerializer(serializers.Serializer):
    code = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
