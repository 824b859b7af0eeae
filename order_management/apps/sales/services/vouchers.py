import logging

from django.db.models import Q
from django.utils import timezone

from ..exceptions import VoucherInvalid
from ..models import Voucher

logger = logging.getLogger(__name__)


def available_vouchers(now=None):
    """Active vouchers that have not expired (usage caps are not filtered here)."""
    now = now or timezone.now()
    return Voucher.objects.filter(active=True).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))


def find_voucher(code):
    code = Voucher.normalize_code(code)
    if not code:
        return None
    return Voucher.objects.filter(code=code).first()


def validate_voucher(code, subtotal):
    """Return ``(voucher, discount)`` for a usable code, or ``None``."""
    voucher = find_voucher(code)
    if voucher is None or not voucher.is_valid_for_use():
        return None
    return voucher, voucher.calculate_discount(subtotal)


def claim_voucher(code):
    """
    Lock the voucher row for the rest of the transaction and check it is usable.

    Holding the lock until commit keeps two orders from both taking the last
    use of a capped voucher.
    """
    code = Voucher.normalize_code(code)
    voucher = Voucher.objects.select_for_update().filter(code=code).first() if code else None
    if voucher is None or not voucher.is_valid_for_use():
        logger.warning("VOUCHER REJECTED — code: %s", code or '<empty>')
        raise VoucherInvalid()
    return voucher


def consume_voucher(voucher):
    """Count one use of a voucher claimed in the current transaction."""
    voucher.usage_count += 1
    voucher.save(update_fields=['usage_count', 'updated_at'])
    logger.info("VOUCHER USED — code: %s | uses: %d/%s", voucher.code, voucher.usage_count, voucher.usage_limit or '∞')
    return voucher
