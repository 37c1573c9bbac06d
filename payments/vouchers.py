import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from .exceptions import InvalidVoucher
from .pricing import Discount, compute_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Voucher:
    code: str
    discount_type: str
    discount_value: Decimal
    min_purchase: Decimal | None = None
    max_usage: int | None = None
    used_count: int = 0
    is_active: bool = True
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    description: str = ''

    def to_discount(self):
        return Discount.voucher(
            code=self.code,
            discount_type=self.discount_type,
            value=self.discount_value,
            min_purchase=self.min_purchase,
        )


class VoucherCatalog:
    """In-memory view over the studio's voucher master data."""

    def __init__(self, vouchers=()):
        self._vouchers = {}
        for voucher in vouchers:
            self._vouchers[voucher.code.upper()] = voucher

    @classmethod
    def from_records(cls, records):
        from .serializers import VoucherSerializer

        serializer = VoucherSerializer(data=list(records), many=True)
        serializer.is_valid(raise_exception=True)
        return cls(serializer.save())

    def __len__(self):
        return len(self._vouchers)

    def __contains__(self, code):
        return bool(code) and code.upper() in self._vouchers

    def get(self, code):
        if not code:
            return None
        return self._vouchers.get(code.strip().upper())

    def resolve(self, code, now=None):
        """
        Look up ``code`` and check it can be used at ``now``.

        Raises InvalidVoucher when the code is unknown, inactive, outside its
        validity window or exhausted. The minimum purchase gate is checked
        later by ``compute_total`` against the actual subtotal.
        """
        voucher = self.get(code)
        if voucher is None:
            raise InvalidVoucher(code, 'voucher not found')
        if not voucher.is_active:
            raise InvalidVoucher(voucher.code, 'voucher is no longer active')

        now = now or timezone.now()
        if voucher.valid_from and now < voucher.valid_from:
            raise InvalidVoucher(voucher.code, 'voucher is not valid yet')
        if voucher.valid_until and now > voucher.valid_until:
            raise InvalidVoucher(voucher.code, 'voucher has expired')
        if voucher.max_usage and voucher.used_count >= voucher.max_usage:
            raise InvalidVoucher(voucher.code, 'voucher usage limit reached')

        return voucher.to_discount()


def quote_with_voucher(package_price, add_ons, code, catalog, now=None):
    """
    Price an order with the voucher ``code`` from ``catalog``.

    A voucher that cannot be used leaves the discount at zero and reports the
    reason in ``voucher_error``.
    """
    try:
        discount = catalog.resolve(code, now=now)
    except InvalidVoucher as e:
        logger.warning("Rejected voucher %s: %s", code, e.reason)
        return replace(compute_total(package_price, add_ons), voucher_error=str(e))

    breakdown = compute_total(package_price, add_ons, discount)
    if breakdown.voucher_error:
        logger.warning("Rejected voucher %s: %s", discount.code, breakdown.voucher_error)
    return breakdown
