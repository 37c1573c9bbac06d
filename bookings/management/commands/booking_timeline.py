import json
import sys

from django.core.management.base import BaseCommand, CommandError
from rest_framework.renderers import JSONRenderer

from bookings.print_orders import internal_print_steps
from bookings.serializers import BookingSnapshotSerializer, TimelineStepSerializer
from bookings.timeline import project_timeline


def load_snapshot(path):
    try:
        if path == '-':
            return json.load(sys.stdin)
        with open(path) as f:
            return json.load(f)
    except OSError as e:
        raise CommandError(f'Cannot read {path}: {e}')
    except json.JSONDecodeError as e:
        raise CommandError(f'{path} is not valid JSON: {e}')


def format_step(number, step):
    line = f'{number}. [{step.state}] {step.label}'
    if step.date:
        line += f' ({step.date.isoformat()})'
    return line


class Command(BaseCommand):
    help = 'Print the progress timeline of a booking snapshot'

    def add_arguments(self, parser):
        parser.add_argument('snapshot', help='Path to the booking snapshot JSON, or - to read stdin')
        parser.add_argument('--internal', action='store_true', help='Also print the staff print order steps')
        parser.add_argument('--json', action='store_true', help='Print the steps as JSON')

    def handle(self, *args, **options):
        serializer = BookingSnapshotSerializer(data=load_snapshot(options['snapshot']))
        if not serializer.is_valid():
            raise CommandError(f'Invalid booking snapshot: {json.dumps(serializer.errors)}')
        booking = serializer.save()

        steps = project_timeline(booking)
        print_steps = []
        if options['internal'] and booking.print_order is not None:
            print_steps = internal_print_steps(booking.print_order)

        if options['json']:
            data = {
                'code': booking.code,
                'status': booking.status,
                'steps': TimelineStepSerializer(steps, many=True).data,
            }
            if options['internal']:
                data['print_steps'] = TimelineStepSerializer(print_steps, many=True).data
            self.stdout.write(JSONRenderer().render(data).decode())
            return

        self.stdout.write(str(booking))
        if booking.is_cancelled:
            self.stdout.write(self.style.WARNING('Order Cancelled'))
        for number, step in enumerate(steps, start=1):
            self.stdout.write(format_step(number, step))

        if print_steps:
            self.stdout.write('Print order:')
            for number, step in enumerate(print_steps, start=1):
                self.stdout.write(format_step(number, step))
