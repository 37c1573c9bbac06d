from django.core.management.base import BaseCommand, CommandError

from bookings.constants import BookingStatus
from bookings.transitions import get_available_options


class Command(BaseCommand):
    help = 'List the statuses a role may select for a booking in the given status'

    def add_arguments(self, parser):
        parser.add_argument('status', help='Current booking status, e.g. PAID')
        parser.add_argument('role', help='Acting role, e.g. PHOTOGRAPHER')

    def handle(self, *args, **options):
        status = options['status'].strip().upper()
        role = options['role'].strip().upper()
        if status not in BookingStatus.values:
            raise CommandError(f"Unknown booking status '{options['status']}'")

        for option in get_available_options(status, role):
            marker = '*' if option == status else ' '
            self.stdout.write(f'{marker} {option}')
