from .constants import PaymentStatus
from .pricing import to_amount


def recompute_payment_status(previous, old_total, new_total):
    """
    Payment status after a pricing change.

    A fully paid booking whose total grows is only partially paid from then
    on. Every other combination keeps the previous status.
    """
    previous = PaymentStatus(previous)
    if previous == PaymentStatus.PAID and to_amount(new_total) > to_amount(old_total):
        return PaymentStatus.PARTIALLY_PAID
    return previous


def payment_change_warning(previous, old_total, new_total):
    if PaymentStatus(previous) != PaymentStatus.PAID:
        return None

    old_total, new_total = to_amount(old_total), to_amount(new_total)
    if new_total > old_total:
        return (
            f"Booking was fully paid; total increased from {old_total} to {new_total}. "
            f"Payment status changed to {PaymentStatus.PARTIALLY_PAID.label}."
        )
    if new_total < old_total:
        return (
            f"Booking was fully paid; total decreased from {old_total} to {new_total}. "
            "The difference may need to be refunded."
        )
    return None
