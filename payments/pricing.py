"""
Price computation for bookings.

All amounts are ``Decimal`` values rounded half-up to
``settings.CURRENCY_DECIMAL_PLACES``. Missing numeric fields count as zero so a
price breakdown can always be rendered; rejecting malformed input is the job of
the serializers in ``payments.serializers``.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

from .constants import DiscountKind, DiscountType

ZERO = Decimal('0')
HUNDRED = Decimal('100')


def to_amount(value):
    if value is None or value == '':
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_amount(value):
    exponent = Decimal(1).scaleb(-settings.CURRENCY_DECIMAL_PLACES)
    return to_amount(value).quantize(exponent, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class AddOnTemplate:
    id: str
    name: str
    default_price: Decimal


@dataclass(frozen=True)
class AddOnLineItem:
    name: str
    quantity: int = 1
    unit_price: Decimal = ZERO
    template_id: str | None = None

    @classmethod
    def from_template(cls, template, quantity=1):
        return cls(
            name=template.name,
            quantity=quantity,
            unit_price=to_amount(template.default_price),
            template_id=template.id,
        )

    @classmethod
    def custom(cls, name, quantity, unit_price):
        return cls(name=name, quantity=quantity, unit_price=to_amount(unit_price))

    @property
    def is_custom(self):
        return self.template_id is None

    @property
    def subtotal(self):
        return to_amount(self.quantity) * to_amount(self.unit_price)


@dataclass(frozen=True)
class Discount:
    """A voucher or manual discount; at most one applies to a booking."""

    kind: str
    discount_type: str
    value: Decimal
    code: str = ''
    min_purchase: Decimal | None = None
    reason: str = ''

    @classmethod
    def voucher(cls, code, discount_type, value, min_purchase=None):
        return cls(
            kind=DiscountKind.VOUCHER,
            discount_type=DiscountType(discount_type),
            value=to_amount(value),
            code=code.upper(),
            min_purchase=None if min_purchase is None else to_amount(min_purchase),
        )

    @classmethod
    def manual(cls, discount_type, value, reason=''):
        return cls(
            kind=DiscountKind.MANUAL,
            discount_type=DiscountType(discount_type),
            value=to_amount(value),
            reason=reason,
        )

    @property
    def is_voucher(self):
        return self.kind == DiscountKind.VOUCHER


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    add_ons_total: Decimal
    discount_amount: Decimal
    total: Decimal
    voucher_error: str | None = None


def sum_add_ons(add_ons):
    return sum((item.subtotal for item in add_ons or ()), ZERO)


def discount_amount_for(subtotal, discount):
    """
    Resolve the money value of ``discount`` against ``subtotal``.

    Returns ``(amount, voucher_error)``. A voucher whose minimum purchase is not
    met resolves to zero together with an error message; it is never applied
    partially.
    """
    if discount is None:
        return ZERO, None

    if discount.is_voucher and discount.min_purchase is not None and subtotal < discount.min_purchase:
        return ZERO, (
            f"Voucher {discount.code} requires a minimum purchase of "
            f"{quantize_amount(discount.min_purchase)}"
        )

    value = to_amount(discount.value)
    if discount.discount_type == DiscountType.PERCENTAGE:
        amount = subtotal * value / HUNDRED
    else:
        amount = value

    return max(ZERO, amount), None


def compute_total(package_price, add_ons=(), discount=None):
    add_ons_total = sum_add_ons(add_ons)
    subtotal = to_amount(package_price) + add_ons_total
    discount_amount, voucher_error = discount_amount_for(subtotal, discount)
    discount_amount = quantize_amount(discount_amount)
    subtotal = quantize_amount(subtotal)

    return PriceBreakdown(
        subtotal=subtotal,
        add_ons_total=quantize_amount(add_ons_total),
        discount_amount=discount_amount,
        total=max(ZERO, subtotal - discount_amount),
        voucher_error=voucher_error,
    )
