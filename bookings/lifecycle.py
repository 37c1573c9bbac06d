"""
Booking mutations.

Every function takes a Booking record and returns a new one; nothing here
persists anything. ``now`` defaults to the current time and can be injected.
"""
import logging
from dataclasses import dataclass, replace

from django.utils import timezone

from payments.constants import PaymentStatus
from payments.pricing import PriceBreakdown, compute_total, to_amount
from payments.status import payment_change_warning, recompute_payment_status

from .constants import BookingStatus, UNRESTRICTED_ROLES
from .exceptions import InvalidTransition, PhotoLinkRequired
from .identifiers import generate_booking_code, generate_public_slug
from .records import Booking
from .transitions import ensure_transition_allowed, normalize_role

logger = logging.getLogger(__name__)

UNSET = object()


@dataclass(frozen=True)
class PricingUpdate:
    booking: Booking
    breakdown: PriceBreakdown
    warning: str | None = None


def create_booking(session_date, package_name, package_price, start_time=None, end_time=None,
                   add_ons=(), discount=None, sequence=1, now=None, **extra):
    if start_time and end_time and end_time <= start_time:
        raise ValueError("End time must be after start time")

    now = now or timezone.now()
    add_ons = tuple(add_ons)
    breakdown = compute_total(package_price, add_ons, discount)

    booking = Booking(
        code=generate_booking_code(timezone.localdate(now), sequence),
        public_slug=generate_public_slug(),
        session_date=session_date,
        start_time=start_time,
        end_time=end_time,
        package_name=package_name,
        package_price=to_amount(package_price),
        add_ons=add_ons,
        discount=discount,
        total_amount=breakdown.total,
        status=BookingStatus.BOOKED,
        payment_status=PaymentStatus.UNPAID,
        created_at=now,
        **extra,
    )
    logger.info("Booking %s created for %s (total %s)", booking.code, session_date, booking.total_amount)
    return booking


def change_status(booking, target, role, photo_link=None, now=None):
    target = BookingStatus(target)
    ensure_transition_allowed(booking.status, target, role)
    if target == booking.status:
        return booking

    now = now or timezone.now()
    changes = {'status': target}

    if target == BookingStatus.PHOTOS_DELIVERED:
        link = photo_link or booking.photo_link
        if not link:
            raise PhotoLinkRequired(booking.status, target, role)
        changes.update(photo_link=link, delivered_at=now)
    elif target == BookingStatus.CLOSED:
        changes['closed_at'] = now
    elif target == BookingStatus.CANCELLED:
        changes['cancelled_at'] = now

    logger.info("Booking %s status %s -> %s by %s", booking.code, booking.status, target, role)
    return replace(booking, **changes)


def cancel_booking(booking, role, now=None):
    if booking.is_cancelled:
        raise InvalidTransition(
            booking.status, BookingStatus.CANCELLED, role,
            message=f"Booking {booking.code} is already cancelled",
        )
    return change_status(booking, BookingStatus.CANCELLED, role, now=now)


def record_payment(booking, payment_status, role, now=None):
    """
    Set the payment status of a booking.

    Only owners and admins record payments. Marking a BOOKED booking as paid
    also moves it to PAID.
    """
    payment_status = PaymentStatus(payment_status)
    if normalize_role(role) not in UNRESTRICTED_ROLES:
        logger.warning("Rejected payment update on %s for role %s", booking.code, role)
        raise InvalidTransition(
            booking.payment_status, payment_status, role,
            message=f"Role {role} cannot update payment status",
        )

    now = now or timezone.now()
    changes = {'payment_status': payment_status}

    if payment_status == PaymentStatus.PAID:
        changes['paid_at'] = booking.paid_at or now
        if booking.status == BookingStatus.BOOKED:
            changes['status'] = BookingStatus.PAID
    elif payment_status == PaymentStatus.UNPAID:
        changes['paid_at'] = None

    logger.info(
        "Booking %s payment %s -> %s by %s", booking.code, booking.payment_status, payment_status, role
    )
    return replace(booking, **changes)


def update_pricing(booking, add_ons=UNSET, discount=UNSET):
    add_ons = booking.add_ons if add_ons is UNSET else tuple(add_ons)
    discount = booking.discount if discount is UNSET else discount

    old_total = booking.total_amount
    breakdown = compute_total(booking.package_price, add_ons, discount)
    payment_status = recompute_payment_status(booking.payment_status, old_total, breakdown.total)
    warning = payment_change_warning(booking.payment_status, old_total, breakdown.total)

    if breakdown.total != old_total:
        logger.info("Booking %s total %s -> %s", booking.code, old_total, breakdown.total)

    updated = replace(
        booking,
        add_ons=add_ons,
        discount=discount,
        total_amount=breakdown.total,
        payment_status=payment_status,
    )
    return PricingUpdate(booking=updated, breakdown=breakdown, warning=warning)


def add_add_on(booking, item):
    return update_pricing(booking, add_ons=booking.add_ons + (item,))


def remove_add_on(booking, index):
    add_ons = list(booking.add_ons)
    del add_ons[index]
    return update_pricing(booking, add_ons=add_ons)


def update_photo_link(booking, photo_link):
    photo_link = (photo_link or '').strip() or None
    return replace(booking, photo_link=photo_link)
