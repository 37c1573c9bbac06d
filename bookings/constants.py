from django.db import models


class BookingStatus(models.TextChoices):
    BOOKED = 'BOOKED', 'Booked'
    PAID = 'PAID', 'Paid'
    SHOOT_DONE = 'SHOOT_DONE', 'Shoot Done'
    PHOTOS_DELIVERED = 'PHOTOS_DELIVERED', 'Photos Delivered'
    CLOSED = 'CLOSED', 'Closed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class PrintOrderStatus(models.TextChoices):
    WAITING_CLIENT_SELECTION = 'WAITING_CLIENT_SELECTION', 'Waiting Client Selection'
    SENT_TO_VENDOR = 'SENT_TO_VENDOR', 'Sent to Vendor'
    PRINTING_IN_PROGRESS = 'PRINTING_IN_PROGRESS', 'Printing in Progress'
    PRINT_RECEIVED = 'PRINT_RECEIVED', 'Print Received'
    PACKAGING = 'PACKAGING', 'Packaging'
    SHIPPED = 'SHIPPED', 'Shipped'
    COMPLETED = 'COMPLETED', 'Completed'


class ActorRole(models.TextChoices):
    OWNER = 'OWNER', 'Owner'
    ADMIN = 'ADMIN', 'Admin'
    PHOTOGRAPHER = 'PHOTOGRAPHER', 'Photographer'
    PACKAGING_STAFF = 'PACKAGING_STAFF', 'Packaging'


class StepState(models.TextChoices):
    COMPLETED = 'completed', 'Completed'
    CURRENT = 'current', 'Current'
    UPCOMING = 'upcoming', 'Upcoming'


# Canonical booking progression; CANCELLED sits outside it.
BOOKING_FLOW = [
    BookingStatus.BOOKED,
    BookingStatus.PAID,
    BookingStatus.SHOOT_DONE,
    BookingStatus.PHOTOS_DELIVERED,
    BookingStatus.CLOSED,
]

PRINT_FLOW = [
    PrintOrderStatus.WAITING_CLIENT_SELECTION,
    PrintOrderStatus.SENT_TO_VENDOR,
    PrintOrderStatus.PRINTING_IN_PROGRESS,
    PrintOrderStatus.PRINT_RECEIVED,
    PrintOrderStatus.PACKAGING,
    PrintOrderStatus.SHIPPED,
    PrintOrderStatus.COMPLETED,
]

PRINT_STEP_LABELS = {
    PrintOrderStatus.WAITING_CLIENT_SELECTION: 'Selection',
    PrintOrderStatus.SENT_TO_VENDOR: 'Vendor',
    PrintOrderStatus.PRINTING_IN_PROGRESS: 'Printing',
    PrintOrderStatus.PRINT_RECEIVED: 'Received',
    PrintOrderStatus.PACKAGING: 'Packing',
    PrintOrderStatus.SHIPPED: 'Shipped',
    PrintOrderStatus.COMPLETED: 'Done',
}

UNRESTRICTED_ROLES = {ActorRole.OWNER, ActorRole.ADMIN}

# Targets a restricted role may move a booking to, besides leaving it as is.
ROLE_STATUS_TARGETS = {
    ActorRole.PHOTOGRAPHER: {BookingStatus.SHOOT_DONE, BookingStatus.PHOTOS_DELIVERED},
    ActorRole.PACKAGING_STAFF: {BookingStatus.PHOTOS_DELIVERED},
}

# Statuses in which a role may not change anything at all.
ROLE_LOCKED_STATUSES = {
    ActorRole.PHOTOGRAPHER: {BookingStatus.PAID},
}
