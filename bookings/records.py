from dataclasses import dataclass
import datetime as dt
from decimal import Decimal

from payments.constants import PaymentStatus
from payments.pricing import AddOnLineItem, Discount, ZERO

from .constants import BookingStatus, PrintOrderStatus


@dataclass(frozen=True)
class PrintOrder:
    status: str = PrintOrderStatus.WAITING_CLIENT_SELECTION
    selected_photos: str = ''
    vendor_name: str = ''
    vendor_notes: str = ''
    shipping_address: str = ''
    courier: str = ''
    tracking_number: str = ''
    created_at: dt.datetime | None = None
    shipped_at: dt.datetime | None = None
    completed_at: dt.datetime | None = None


@dataclass(frozen=True)
class Booking:
    code: str
    session_date: dt.date
    public_slug: str = ''
    id: str | None = None
    start_time: dt.datetime | None = None
    end_time: dt.datetime | None = None
    package_name: str = ''
    package_price: Decimal = ZERO
    add_ons: tuple[AddOnLineItem, ...] = ()
    discount: Discount | None = None
    total_amount: Decimal = ZERO
    status: str = BookingStatus.BOOKED
    payment_status: str = PaymentStatus.UNPAID
    photo_link: str | None = None
    print_order: PrintOrder | None = None
    created_at: dt.datetime | None = None
    paid_at: dt.datetime | None = None
    delivered_at: dt.datetime | None = None
    closed_at: dt.datetime | None = None
    cancelled_at: dt.datetime | None = None

    def __str__(self):
        return f"{self.code} - {self.package_name} - {self.status}"

    @property
    def duration_minutes(self):
        if not self.start_time or not self.end_time:
            return 0
        return round((self.end_time - self.start_time).total_seconds() / 60)

    @property
    def is_cancelled(self):
        return self.status == BookingStatus.CANCELLED


@dataclass(frozen=True)
class TimelineStep:
    key: str
    label: str
    icon: str
    state: str
    date: dt.date | None = None
    is_print_step: bool = False
