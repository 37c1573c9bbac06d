"""
Print order progress.

Staff see all seven print statuses. Customers see four steps: the statuses
between sending photos to the vendor and packaging collapse into a single
"Printing in Progress" step.
"""
import logging
from dataclasses import dataclass, replace

from django.utils import timezone

from .constants import (
    BOOKING_FLOW,
    BookingStatus,
    PRINT_FLOW,
    PRINT_STEP_LABELS,
    PrintOrderStatus,
    StepState,
)
from .exceptions import PrintOrderError
from .records import PrintOrder, TimelineStep

logger = logging.getLogger(__name__)

PRINT_ORDER_FIELDS = {
    'selected_photos',
    'vendor_name',
    'vendor_notes',
    'shipping_address',
    'courier',
    'tracking_number',
}

PRINT_STEP_ICONS = {
    PrintOrderStatus.WAITING_CLIENT_SELECTION: 'users',
    PrintOrderStatus.SENT_TO_VENDOR: 'send',
    PrintOrderStatus.PRINTING_IN_PROGRESS: 'printer',
    PrintOrderStatus.PRINT_RECEIVED: 'inbox',
    PrintOrderStatus.PACKAGING: 'box',
    PrintOrderStatus.SHIPPED: 'truck',
    PrintOrderStatus.COMPLETED: 'check-circle',
}

VISIBLE_TO_CUSTOMER_STATUSES = {BookingStatus.PHOTOS_DELIVERED, BookingStatus.CLOSED}


@dataclass(frozen=True)
class ExternalPrintStep:
    key: str
    label: str
    icon: str


EXTERNAL_PRINT_STEPS = [
    ExternalPrintStep('print_selection', 'Photo Selection', 'users'),
    ExternalPrintStep('print_printing', 'Printing in Progress', 'printer'),
    ExternalPrintStep('print_shipped', 'Shipped', 'truck'),
    ExternalPrintStep('print_completed', 'Order Completed', 'check-circle'),
]

# Internal print status -> index into EXTERNAL_PRINT_STEPS
EXTERNAL_PRINT_STEP_INDEX = {
    PrintOrderStatus.WAITING_CLIENT_SELECTION: 0,
    PrintOrderStatus.SENT_TO_VENDOR: 1,
    PrintOrderStatus.PRINTING_IN_PROGRESS: 1,
    PrintOrderStatus.PRINT_RECEIVED: 1,
    PrintOrderStatus.PACKAGING: 1,
    PrintOrderStatus.SHIPPED: 2,
    PrintOrderStatus.COMPLETED: 3,
}


def step_state(index, current_index):
    if index < current_index:
        return StepState.COMPLETED
    if index == current_index:
        return StepState.CURRENT
    return StepState.UPCOMING


def print_status_index(status):
    return PRINT_FLOW.index(PrintOrderStatus(status))


def external_print_index(status):
    return EXTERNAL_PRINT_STEP_INDEX[PrintOrderStatus(status)]


def external_print_step(status):
    return EXTERNAL_PRINT_STEPS[external_print_index(status)]


def is_print_order_visible(booking_status):
    """Whether customers get to see print progress for a booking in this status."""
    return BookingStatus(booking_status) in VISIBLE_TO_CUSTOMER_STATUSES


def can_start_print_order(booking):
    if booking.print_order is not None or booking.is_cancelled:
        return False
    return BOOKING_FLOW.index(booking.status) >= BOOKING_FLOW.index(BookingStatus.PHOTOS_DELIVERED)


def internal_print_steps(print_order):
    current_index = print_status_index(print_order.status)
    steps = []
    for index, status in enumerate(PRINT_FLOW):
        date = None
        if status == PrintOrderStatus.SHIPPED:
            date = print_order.shipped_at
        elif status == PrintOrderStatus.COMPLETED:
            date = print_order.completed_at
        steps.append(TimelineStep(
            key=status.value.lower(),
            label=PRINT_STEP_LABELS[status],
            icon=PRINT_STEP_ICONS[status],
            state=step_state(index, current_index),
            date=date,
            is_print_step=True,
        ))
    return steps


def external_print_steps(print_order):
    current_index = external_print_index(print_order.status)
    dates = {
        'print_shipped': print_order.shipped_at,
        'print_completed': print_order.completed_at,
    }
    return [
        TimelineStep(
            key=step.key,
            label=step.label,
            icon=step.icon,
            state=step_state(index, current_index),
            date=dates.get(step.key),
            is_print_step=True,
        )
        for index, step in enumerate(EXTERNAL_PRINT_STEPS)
    ]


def start_print_order(booking, now=None, **fields):
    if booking.print_order is not None:
        raise PrintOrderError(f"Booking {booking.code} already has a print order")
    if not can_start_print_order(booking):
        raise PrintOrderError(
            f"Booking {booking.code} is {booking.status}; print orders start once photos are delivered"
        )
    _check_fields(fields)

    print_order = PrintOrder(created_at=now or timezone.now(), **fields)
    logger.info("Print order created for booking %s", booking.code)
    return replace(booking, print_order=print_order)


def update_print_order(booking, status=None, now=None, **fields):
    """
    Apply a staff update to the booking's print order.

    Any print status may be set. Shipping stamps ``shipped_at``; completing the
    print order stamps ``completed_at`` and closes the booking. Print orders of
    cancelled bookings are frozen.
    """
    print_order = booking.print_order
    if print_order is None:
        raise PrintOrderError(f"Booking {booking.code} has no print order")
    if booking.is_cancelled:
        raise PrintOrderError(f"Booking {booking.code} is cancelled; its print order cannot be updated")
    _check_fields(fields)

    now = now or timezone.now()
    changes = dict(fields)

    if status is not None:
        status = PrintOrderStatus(status)
        changes['status'] = status
        if status == PrintOrderStatus.SHIPPED:
            changes['shipped_at'] = now
        elif status == PrintOrderStatus.COMPLETED:
            changes['completed_at'] = now
        if status != print_order.status:
            logger.info(
                "Print order for booking %s: %s -> %s", booking.code, print_order.status, status
            )

    tracking_number = fields.get('tracking_number')
    if tracking_number and tracking_number != print_order.tracking_number:
        logger.info("Tracking number %s added for booking %s", tracking_number, booking.code)

    booking = replace(booking, print_order=replace(print_order, **changes))
    if status == PrintOrderStatus.COMPLETED and booking.status != BookingStatus.CLOSED:
        booking = replace(booking, status=BookingStatus.CLOSED, closed_at=now)
        logger.info("Booking %s closed after print order completed", booking.code)
    return booking


def delete_print_order(booking, confirm=False):
    if booking.print_order is None:
        raise PrintOrderError(f"Booking {booking.code} has no print order")
    if not confirm:
        raise PrintOrderError("Deleting a print order cannot be undone; pass confirm=True")

    logger.info("Print order for booking %s cancelled", booking.code)
    return replace(booking, print_order=None)


def _check_fields(fields):
    unknown = set(fields) - PRINT_ORDER_FIELDS
    if unknown:
        raise PrintOrderError(f"Unknown print order fields: {', '.join(sorted(unknown))}")
