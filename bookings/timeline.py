from .constants import BOOKING_FLOW, BookingStatus, StepState
from .print_orders import external_print_steps, is_print_order_visible, step_state
from .records import TimelineStep

BOOKING_STEPS = [
    ('booked', 'Booked', 'calendar-check'),
    ('paid', 'Payment Confirmed', 'credit-card'),
    ('shoot', 'Shoot Done', 'camera'),
    ('delivered', 'Photos Delivered', 'image'),
    ('closed', 'Closed', 'check-circle'),
]


def _milestone_dates(booking, current_index):
    def reached(status):
        return current_index >= BOOKING_FLOW.index(status)

    return {
        'booked': booking.created_at,
        'paid': booking.paid_at,
        'shoot': booking.session_date if reached(BookingStatus.SHOOT_DONE) else None,
        'delivered': booking.delivered_at if reached(BookingStatus.PHOTOS_DELIVERED) else None,
        'closed': booking.closed_at if reached(BookingStatus.CLOSED) else None,
    }


def project_timeline(booking, print_order=None):
    """
    Ordered progress steps for a booking, as shown on the dashboard and on the
    public status page.

    Each booking step is completed, current or upcoming by comparing its
    position with the booking status. A cancelled booking has no position in
    the flow, so all of its steps are upcoming.

    When a print order is visible, the four customer-facing print steps take
    the place of the final "Closed" step, and every booking step before them
    counts as completed.
    """
    print_order = print_order or booking.print_order

    if booking.is_cancelled:
        current_index = -1
    else:
        current_index = BOOKING_FLOW.index(BookingStatus(booking.status))

    dates = _milestone_dates(booking, current_index)
    show_print = print_order is not None and is_print_order_visible(booking.status)

    # With print steps shown, the booking's progress continues in the print order.
    step_index = len(BOOKING_STEPS) - 1 if show_print else current_index

    def state_for(index):
        if current_index < 0:
            return StepState.UPCOMING
        return step_state(index, step_index)

    steps = []
    for index, (key, label, icon) in enumerate(BOOKING_STEPS):
        if key == 'closed' and show_print:
            break
        steps.append(TimelineStep(
            key=key,
            label=label,
            icon=icon,
            state=state_for(index),
            date=dates[key],
        ))

    if show_print:
        steps.extend(external_print_steps(print_order))

    return steps


def current_step(steps):
    for step in steps:
        if step.state == StepState.CURRENT:
            return step
    return None
