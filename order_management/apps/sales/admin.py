from django.contrib import admin
from .models import Category, Customer, Order, OrderItem, Product, Voucher
from .services import order_placement


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'quantity', 'unit_price', 'total_price')
    can_delete = False

    def has_add_permission(self, request, obj=None):
        # line items move stock; they are added through the order API
        return False


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_at')
    search_fields = ('name',)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'price', 'product_type', 'stock_quantity', 'created_at')
    list_filter = ('category', 'product_type')
    search_fields = ('name',)

    def get_readonly_fields(self, request, obj=None):
        # stock on an existing product only moves through the locked API paths
        if obj is not None:
            return ('stock_quantity',)
        return ()


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'email', 'mobile', 'created_at')
    search_fields = ('first_name', 'last_name', 'email', 'mobile')

    def delete_model(self, request, obj):
        order_placement.delete_customer(obj.pk)

    def delete_queryset(self, request, queryset):
        for customer_id in list(queryset.values_list('pk', flat=True)):
            order_placement.delete_customer(customer_id)


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ('code', 'name', 'discount_type', 'discount_value', 'active', 'usage_count', 'usage_limit', 'expires_at')
    list_filter = ('active', 'discount_type')
    search_fields = ('code', 'name')
    readonly_fields = ('usage_count',)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('reference_number', 'customer', 'total', 'status', 'created_at')
    list_filter = ('status', 'created_at')
    search_fields = ('reference_number', 'customer__first_name', 'customer__last_name', 'customer__email')
    readonly_fields = ('reference_number', 'status', 'subtotal', 'discount_amount', 'total', 'voucher')
    inlines = [OrderItemInline]

    def delete_model(self, request, obj):
        order_placement.delete_order(obj.pk)

    def delete_queryset(self, request, queryset):
        for order_id in list(queryset.values_list('pk', flat=True)):
            order_placement.delete_order(order_id)
