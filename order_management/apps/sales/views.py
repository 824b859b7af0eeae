import logging

from django.db import transaction
from django.db.models import Q
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsManager, IsManagerOrReadOnly
from .models import Category, Customer, Order, Product, Voucher
from .serializers import (
    AddOrderItemSerializer,
    CategorySerializer,
    CreateOrderSerializer,
    CustomerSerializer,
    OrderItemSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    ProductSerializer,
    ValidateVoucherSerializer,
    VoucherSerializer,
)
from .services import inventory, order_placement, vouchers

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────
#  Catalog
# ─────────────────────────────────────────
class ProductListView(generics.ListCreateAPIView):
    serializer_class = ProductSerializer
    permission_classes = [IsManagerOrReadOnly]

    def get_queryset(self):
        products = Product.objects.select_related('category')
        category_id = self.request.query_params.get('category_id')
        search = self.request.query_params.get('search')
        if category_id:
            products = products.filter(category_id=category_id)
        if search:
            products = products.filter(name__icontains=search)
        return products


class ProductDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Product.objects.select_related('category')
    serializer_class = ProductSerializer
    permission_classes = [IsManagerOrReadOnly]

    def perform_update(self, serializer):
        # save onto the locked row; the instance from get_object() may hold stale stock
        with transaction.atomic():
            serializer.instance = inventory.lock_for_update(serializer.instance.pk)
            serializer.save()
        logger.info("PRODUCT UPDATED — id: %s | fields: %s", serializer.instance.pk, sorted(serializer.validated_data))


class CategoryListView(generics.ListCreateAPIView):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsManagerOrReadOnly]


class CategoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [IsManagerOrReadOnly]

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        if category.products.exists():
            return Response(
                {'error': 'Cannot delete category with existing products. Please move or delete all products first.'},
                status=status.HTTP_409_CONFLICT,
            )
        category.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# ─────────────────────────────────────────
#  Customers
# ─────────────────────────────────────────
class CustomerListView(generics.ListCreateAPIView):
    serializer_class = CustomerSerializer

    def get_queryset(self):
        customers = Customer.objects.all()
        search = self.request.query_params.get('search')
        if search:
            customers = customers.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(email__icontains=search)
                | Q(mobile__icontains=search)
            )
        return customers


class CustomerDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Customer.objects.all()
    serializer_class = CustomerSerializer
    permission_classes = [IsManagerOrReadOnly]

    def perform_destroy(self, instance):
        order_placement.delete_customer(instance.pk)


# ─────────────────────────────────────────
#  Orders
# ─────────────────────────────────────────
def _order_queryset():
    return Order.objects.select_related('customer', 'voucher').prefetch_related('items__product')


class OrderListView(APIView):

    def get(self, request):
        orders = _order_queryset()
        order_status = request.query_params.get('status')
        if order_status:
            orders = orders.filter(status=order_status)
        return Response(OrderSerializer(orders, many=True).data)

    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        logger.info("REQUEST  — createOrder | user: %s | items: %d",
                    request.user.username, len(serializer.validated_data['items']))

        order = order_placement.place_order(**serializer.placement_kwargs())
        return Response(OrderSerializer(_order_queryset().get(pk=order.pk)).data, status=status.HTTP_201_CREATED)


class OrderDetailView(APIView):

    def get_permissions(self):
        if self.request.method == 'DELETE':
            return [IsManager()]
        return [IsAuthenticated()]

    def get(self, request, pk):
        return Response(OrderSerializer(_order_queryset().get(pk=pk)).data)

    def delete(self, request, pk):
        order_placement.delete_order(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class OrderStatusView(APIView):
    permission_classes = [IsManager]

    def post(self, request, pk):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = order_placement.update_order_status(pk, serializer.validated_data['status'])
        return Response(OrderSerializer(_order_queryset().get(pk=order.pk)).data)


class OrderItemListView(APIView):
    permission_classes = [IsManager]

    def post(self, request, pk):
        serializer = AddOrderItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = order_placement.add_order_item(
            pk,
            serializer.validated_data['product_id'],
            serializer.validated_data['quantity'],
        )
        return Response(OrderItemSerializer(item).data, status=status.HTTP_201_CREATED)


class OrderItemDetailView(APIView):
    permission_classes = [IsManager]

    def delete(self, request, pk):
        order = order_placement.remove_order_item(pk)
        return Response(OrderSerializer(_order_queryset().get(pk=order.pk)).data)


# ─────────────────────────────────────────
#  Vouchers
# ─────────────────────────────────────────
class VoucherListView(generics.ListCreateAPIView):
    serializer_class = VoucherSerializer
    permission_classes = [IsManagerOrReadOnly]

    def get_queryset(self):
        active_only = self.request.query_params.get('active_only', 'true').lower() not in ('false', '0', 'no')
        return vouchers.available_vouchers() if active_only else Voucher.objects.all()


class VoucherDetailView(generics.RetrieveUpdateDestroyAPIView):
    queryset = Voucher.objects.all()
    serializer_class = VoucherSerializer
    permission_classes = [IsManagerOrReadOnly]


class ValidateVoucherView(APIView):

    def get(self, request):
        serializer = ValidateVoucherSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        result = vouchers.validate_voucher(serializer.validated_data['code'], serializer.validated_data['subtotal'])
        if result is None:
            return Response({'voucher': None, 'discount': None})
        voucher, discount = result
        return Response({'voucher': VoucherSerializer(voucher).data, 'discount': str(discount)})
