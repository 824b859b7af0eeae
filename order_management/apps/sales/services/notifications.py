import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

from ..models import Order

logger = logging.getLogger(__name__)


def send_order_confirmation(order_id):
    """
    E-mail the customer a summary of a placed order.

    Best effort: any failure is logged and swallowed, the order stands.
    """
    try:
        order = (
            Order.objects
            .select_related('customer', 'voucher')
            .prefetch_related('items__product')
            .get(pk=order_id)
        )
        body = render_to_string('sales/order_confirmation.txt', {
            'order': order,
            'customer': order.customer,
            'items': order.items.all(),
        })
        send_mail(
            subject="Order Confirmation - {}".format(order.reference_number),
            message=body,
            from_email=settings.ORDER_CONFIRMATION_FROM_EMAIL,
            recipient_list=[order.customer.email],
        )
        logger.info("CONFIRMATION SENT — order: %s | to: %s", order.reference_number, order.customer.email)
    except Exception as e:
        logger.exception("Failed to send order confirmation for order %s: %s", order_id, str(e))
