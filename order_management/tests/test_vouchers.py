from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.sales.exceptions import VoucherInvalid
from apps.sales.models import Voucher
from apps.sales.services import vouchers

pytestmark = pytest.mark.django_db


def test_code_is_stored_stripped_and_upper_case(make_voucher):
    voucher = make_voucher(code='  save10 ')
    assert voucher.code == 'SAVE10'
    assert vouchers.find_voucher('Save10').pk == voucher.pk


def test_usable_when_active_unexpired_and_under_limit(make_voucher):
    voucher = make_voucher(usage_limit=2, usage_count=1, expires_at=timezone.now() + timedelta(days=1))
    assert voucher.is_valid_for_use()


@pytest.mark.parametrize('changes', [
    {'active': False},
    {'expires_at': timezone.now() - timedelta(minutes=1)},
    {'usage_limit': 1, 'usage_count': 1},
    {'usage_limit': 0},
])
def test_not_usable(make_voucher, changes):
    voucher = make_voucher(**changes)
    assert not voucher.is_valid_for_use()
    assert voucher.calculate_discount(Decimal('100.00')) == Decimal('0.00')


def test_no_usage_limit_means_unlimited(make_voucher):
    voucher = make_voucher(usage_count=10_000)
    assert voucher.is_valid_for_use()


def test_percentage_discount_rounds_to_cents(make_voucher):
    voucher = make_voucher(value='15')
    assert voucher.calculate_discount(Decimal('33.33')) == Decimal('5.00')
    assert voucher.calculate_discount(Decimal('99.99')) == Decimal('15.00')


def test_fixed_discount_never_exceeds_subtotal(make_voucher):
    voucher = make_voucher(code='SAVE500', discount_type=Voucher.DiscountType.FIXED_AMOUNT, value='500')
    assert voucher.calculate_discount(Decimal('300')) == Decimal('300.00')
    assert voucher.calculate_discount(Decimal('1200.50')) == Decimal('500.00')


def test_unknown_discount_type_gives_nothing(make_voucher):
    voucher = make_voucher()
    voucher.discount_type = 'buy_one_get_one'
    assert voucher.calculate_discount(Decimal('100')) == Decimal('0.00')


def test_validate_voucher_returns_discount_for_usable_code(make_voucher):
    make_voucher(code='WELCOME10')
    voucher, discount = vouchers.validate_voucher('welcome10', Decimal('250.00'))
    assert voucher.code == 'WELCOME10'
    assert discount == Decimal('25.00')


def test_validate_voucher_returns_none_for_unknown_or_exhausted(make_voucher):
    make_voucher(code='ONCE', usage_limit=1, usage_count=1)
    assert vouchers.validate_voucher('ONCE', Decimal('10')) is None
    assert vouchers.validate_voucher('MISSING', Decimal('10')) is None


def test_claim_voucher_rejects_exhausted_code(make_voucher):
    make_voucher(code='ONCE', usage_limit=1, usage_count=1)
    with pytest.raises(VoucherInvalid):
        vouchers.claim_voucher('once')


def test_consume_voucher_counts_one_use(make_voucher):
    voucher = make_voucher(usage_limit=3)
    vouchers.consume_voucher(vouchers.claim_voucher(voucher.code))
    voucher.refresh_from_db()
    assert voucher.usage_count == 1


def test_available_vouchers_excludes_inactive_and_expired(make_voucher):
    make_voucher(code='LIVE')
    make_voucher(code='OFF', active=False)
    make_voucher(code='OLD', expires_at=timezone.now() - timedelta(days=1))
    assert [v.code for v in vouchers.available_vouchers()] == ['LIVE']
