from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from io import StringIO
import json
import os
import tempfile

from payments.constants import DiscountType, PaymentStatus
from payments.pricing import AddOnLineItem, Discount

from .constants import ActorRole, BOOKING_FLOW, BookingStatus, PRINT_FLOW, PrintOrderStatus, StepState
from .exceptions import InvalidTransition, PhotoLinkRequired, PrintOrderError
from .identifiers import SLUG_ALPHABET, generate_booking_code, generate_public_slug
from .lifecycle import (
    add_add_on,
    cancel_booking,
    change_status,
    create_booking,
    record_payment,
    remove_add_on,
    update_photo_link,
    update_pricing,
)
from .print_orders import (
    EXTERNAL_PRINT_STEPS,
    delete_print_order,
    external_print_index,
    external_print_step,
    internal_print_steps,
    is_print_order_visible,
    start_print_order,
    update_print_order,
)
from .records import Booking, PrintOrder
from .serializers import BookingSnapshotSerializer
from .timeline import current_step, project_timeline
from .transitions import can_change_status, ensure_transition_allowed, get_available_options, is_transition_allowed

NOW = datetime(2026, 2, 1, 3, 0, tzinfo=timezone.utc)
ALL_ROLES = list(ActorRole) + ['GUEST']


def make_booking(**kwargs):
    defaults = {
        'code': 'YJS-20260201-001',
        'session_date': date(2026, 2, 10),
        'package_name': 'Family Session',
        'package_price': Decimal('500000'),
        'total_amount': Decimal('500000'),
        'created_at': NOW,
    }
    defaults.update(kwargs)
    return Booking(**defaults)


class TransitionRulesTest(SimpleTestCase):
    def test_owner_and_admin_may_make_any_change(self):
        for role in (ActorRole.OWNER, ActorRole.ADMIN):
            for current in BookingStatus:
                for target in BookingStatus:
                    self.assertTrue(is_transition_allowed(current, target, role), (role, current, target))

    def test_options_always_contain_current_status(self):
        for role in ALL_ROLES:
            for current in BookingStatus:
                self.assertIn(current, get_available_options(current, role))

    def test_owner_gets_every_status_in_canonical_order(self):
        options = get_available_options(BookingStatus.BOOKED, ActorRole.OWNER)

        self.assertEqual(options, BOOKING_FLOW + [BookingStatus.CANCELLED])

    def test_photographer_is_locked_on_paid_bookings(self):
        self.assertEqual(get_available_options(BookingStatus.PAID, ActorRole.PHOTOGRAPHER), [BookingStatus.PAID])
        self.assertFalse(can_change_status(BookingStatus.PAID, ActorRole.PHOTOGRAPHER))

    def test_photographer_moves_to_shoot_and_delivery(self):
        options = get_available_options(BookingStatus.BOOKED, ActorRole.PHOTOGRAPHER)

        self.assertEqual(options, [
            BookingStatus.BOOKED,
            BookingStatus.SHOOT_DONE,
            BookingStatus.PHOTOS_DELIVERED,
        ])
        self.assertFalse(is_transition_allowed(BookingStatus.SHOOT_DONE, BookingStatus.CLOSED, 'PHOTOGRAPHER'))

    def test_packaging_staff_may_only_deliver(self):
        for current in BookingStatus:
            self.assertTrue(
                is_transition_allowed(current, BookingStatus.PHOTOS_DELIVERED, ActorRole.PACKAGING_STAFF)
            )
            for target in BookingStatus:
                if target not in (current, BookingStatus.PHOTOS_DELIVERED):
                    self.assertFalse(is_transition_allowed(current, target, ActorRole.PACKAGING_STAFF))

    def test_unknown_role_may_only_keep_status(self):
        self.assertEqual(get_available_options(BookingStatus.SHOOT_DONE, 'GUEST'), [BookingStatus.SHOOT_DONE])
        self.assertEqual(get_available_options(BookingStatus.SHOOT_DONE, None), [BookingStatus.SHOOT_DONE])

    def test_unknown_status_is_rejected(self):
        with self.assertRaises(ValueError):
            is_transition_allowed('ARCHIVED', BookingStatus.CLOSED, ActorRole.OWNER)
        with self.assertRaises(ValueError):
            get_available_options('archived', ActorRole.OWNER)

    def test_ensure_transition_allowed_raises(self):
        with self.assertLogs('bookings.transitions', level='WARNING'):
            with self.assertRaises(InvalidTransition) as ctx:
                ensure_transition_allowed(BookingStatus.PAID, BookingStatus.SHOOT_DONE, ActorRole.PHOTOGRAPHER)

        self.assertEqual(ctx.exception.current, BookingStatus.PAID)
        self.assertEqual(ctx.exception.target, BookingStatus.SHOOT_DONE)
        self.assertEqual(ctx.exception.role, ActorRole.PHOTOGRAPHER)


class PrintOrderStepsTest(SimpleTestCase):
    def test_external_mapping_is_total_and_monotonic(self):
        indexes = [external_print_index(status) for status in PRINT_FLOW]

        self.assertEqual(len(indexes), len(PrintOrderStatus))
        self.assertEqual(indexes, sorted(indexes))
        self.assertEqual(indexes[0], 0)
        self.assertEqual(indexes[-1], len(EXTERNAL_PRINT_STEPS) - 1)

    def test_external_labels(self):
        self.assertEqual(external_print_step(PrintOrderStatus.WAITING_CLIENT_SELECTION).label, 'Photo Selection')
        for status in (
            PrintOrderStatus.SENT_TO_VENDOR,
            PrintOrderStatus.PRINTING_IN_PROGRESS,
            PrintOrderStatus.PRINT_RECEIVED,
            PrintOrderStatus.PACKAGING,
        ):
            self.assertEqual(external_print_step(status).label, 'Printing in Progress')
        self.assertEqual(external_print_step('SHIPPED').label, 'Shipped')
        self.assertEqual(external_print_step('COMPLETED').label, 'Order Completed')

    def test_internal_steps(self):
        steps = internal_print_steps(PrintOrder(status=PrintOrderStatus.PACKAGING))

        self.assertEqual(len(steps), 7)
        self.assertEqual([step.state for step in steps], [StepState.COMPLETED] * 4 + [
            StepState.CURRENT, StepState.UPCOMING, StepState.UPCOMING,
        ])
        self.assertEqual(steps[4].key, 'packaging')
        self.assertTrue(all(step.is_print_step for step in steps))

    def test_visibility(self):
        self.assertTrue(is_print_order_visible(BookingStatus.PHOTOS_DELIVERED))
        self.assertTrue(is_print_order_visible(BookingStatus.CLOSED))
        self.assertFalse(is_print_order_visible(BookingStatus.SHOOT_DONE))
        self.assertFalse(is_print_order_visible(BookingStatus.CANCELLED))


class PrintOrderLifecycleTest(SimpleTestCase):
    def setUp(self):
        self.booking = make_booking(status=BookingStatus.PHOTOS_DELIVERED, photo_link='https://drive.example/abc')

    def test_start_print_order(self):
        booking = start_print_order(self.booking, now=NOW, vendor_name='Lab Jaya')

        self.assertEqual(booking.print_order.status, PrintOrderStatus.WAITING_CLIENT_SELECTION)
        self.assertEqual(booking.print_order.vendor_name, 'Lab Jaya')
        self.assertEqual(booking.print_order.created_at, NOW)
        self.assertIsNone(self.booking.print_order)

    def test_cannot_start_before_delivery_or_twice(self):
        for status in (BookingStatus.BOOKED, BookingStatus.PAID, BookingStatus.SHOOT_DONE, BookingStatus.CANCELLED):
            with self.assertRaises(PrintOrderError):
                start_print_order(make_booking(status=status), now=NOW)

        booking = start_print_order(self.booking, now=NOW)
        with self.assertRaises(PrintOrderError):
            start_print_order(booking, now=NOW)

    def test_unknown_fields_are_rejected(self):
        with self.assertRaises(PrintOrderError):
            start_print_order(self.booking, now=NOW, colour='red')

    def test_shipping_stamps_date(self):
        booking = start_print_order(self.booking, now=NOW)
        shipped_at = NOW + timedelta(days=5)

        booking = update_print_order(
            booking, status=PrintOrderStatus.SHIPPED, now=shipped_at, courier='JNE', tracking_number='JNE123'
        )

        self.assertEqual(booking.print_order.status, PrintOrderStatus.SHIPPED)
        self.assertEqual(booking.print_order.shipped_at, shipped_at)
        self.assertEqual(booking.print_order.tracking_number, 'JNE123')
        self.assertEqual(booking.status, BookingStatus.PHOTOS_DELIVERED)

    def test_completing_closes_booking(self):
        booking = start_print_order(self.booking, now=NOW)
        done_at = NOW + timedelta(days=9)

        booking = update_print_order(booking, status='COMPLETED', now=done_at)

        self.assertEqual(booking.print_order.completed_at, done_at)
        self.assertEqual(booking.status, BookingStatus.CLOSED)
        self.assertEqual(booking.closed_at, done_at)

    def test_update_without_print_order(self):
        with self.assertRaises(PrintOrderError):
            update_print_order(self.booking, status=PrintOrderStatus.SHIPPED)

    def test_cancelled_booking_print_order_is_frozen(self):
        booking = cancel_booking(start_print_order(self.booking, now=NOW), ActorRole.OWNER, now=NOW)

        for status in (PrintOrderStatus.COMPLETED, PrintOrderStatus.SHIPPED):
            with self.assertRaises(PrintOrderError):
                update_print_order(booking, status=status, now=NOW)
        self.assertEqual(booking.status, BookingStatus.CANCELLED)
        self.assertEqual(booking.print_order.status, PrintOrderStatus.WAITING_CLIENT_SELECTION)

    def test_delete_requires_confirmation(self):
        booking = start_print_order(self.booking, now=NOW)

        with self.assertRaises(PrintOrderError):
            delete_print_order(booking)
        self.assertIsNone(delete_print_order(booking, confirm=True).print_order)


class TimelineTest(SimpleTestCase):
    def test_five_steps_without_print_order(self):
        steps = project_timeline(make_booking(status=BookingStatus.PAID, paid_at=NOW))

        self.assertEqual([step.key for step in steps], ['booked', 'paid', 'shoot', 'delivered', 'closed'])
        self.assertEqual([step.state for step in steps], [
            StepState.COMPLETED, StepState.CURRENT, StepState.UPCOMING, StepState.UPCOMING, StepState.UPCOMING,
        ])
        self.assertEqual(steps[0].date, NOW)
        self.assertEqual(steps[1].date, NOW)
        self.assertIsNone(steps[2].date)
        self.assertEqual(current_step(steps).key, 'paid')

    def test_eight_steps_with_print_order(self):
        for status in (BookingStatus.PHOTOS_DELIVERED, BookingStatus.CLOSED):
            booking = make_booking(status=status, print_order=PrintOrder())
            steps = project_timeline(booking)

            self.assertEqual(len(steps), 8)
            self.assertNotIn('closed', [step.key for step in steps])

    def test_printing_in_progress(self):
        booking = make_booking(
            status=BookingStatus.PHOTOS_DELIVERED,
            print_order=PrintOrder(status=PrintOrderStatus.PRINTING_IN_PROGRESS),
        )

        steps = {step.key: step for step in project_timeline(booking)}

        self.assertEqual(steps['print_selection'].state, StepState.COMPLETED)
        self.assertEqual(steps['print_printing'].state, StepState.CURRENT)
        self.assertEqual(steps['print_printing'].label, 'Printing in Progress')
        self.assertEqual(steps['print_shipped'].state, StepState.UPCOMING)
        self.assertEqual(steps['print_completed'].state, StepState.UPCOMING)
        self.assertEqual(steps['delivered'].state, StepState.COMPLETED)
        self.assertEqual(steps['shoot'].date, date(2026, 2, 10))
        self.assertEqual(current_step(list(steps.values())).key, 'print_printing')

    def test_print_order_passed_explicitly(self):
        booking = make_booking(status=BookingStatus.PHOTOS_DELIVERED)

        self.assertEqual(len(project_timeline(booking)), 5)
        self.assertEqual(len(project_timeline(booking, PrintOrder())), 8)

    def test_shipped_and_completed_dates(self):
        shipped_at = NOW + timedelta(days=3)
        booking = make_booking(
            status=BookingStatus.PHOTOS_DELIVERED,
            print_order=PrintOrder(status=PrintOrderStatus.SHIPPED, shipped_at=shipped_at),
        )

        steps = {step.key: step for step in project_timeline(booking)}

        self.assertEqual(steps['print_shipped'].date, shipped_at)
        self.assertEqual(steps['print_shipped'].state, StepState.CURRENT)
        self.assertIsNone(steps['print_completed'].date)

    def test_cancelled_booking_has_no_progress(self):
        booking = make_booking(status=BookingStatus.CANCELLED, print_order=PrintOrder())

        steps = project_timeline(booking)

        self.assertEqual(len(steps), 5)
        self.assertTrue(all(step.state == StepState.UPCOMING for step in steps))
        self.assertIsNone(current_step(steps))


class BookingLifecycleTest(SimpleTestCase):
    def setUp(self):
        self.prints = AddOnLineItem.custom('Extra print', 2, 50000)

    def test_create_booking(self):
        booking = create_booking(
            date(2026, 2, 10), 'Family Session', 500000,
            add_ons=[self.prints],
            discount=Discount.voucher('SAVE10', DiscountType.PERCENTAGE, 10),
            sequence=1,
            now=NOW,
        )

        self.assertEqual(booking.code, 'YJS-20260201-001')
        self.assertEqual(len(booking.public_slug), 8)
        self.assertEqual(booking.status, BookingStatus.BOOKED)
        self.assertEqual(booking.payment_status, PaymentStatus.UNPAID)
        self.assertEqual(booking.total_amount, Decimal('540000'))
        self.assertEqual(booking.created_at, NOW)

    def test_create_booking_checks_session_window(self):
        start = datetime(2026, 2, 10, 3, 0, tzinfo=timezone.utc)

        with self.assertRaises(ValueError):
            create_booking(date(2026, 2, 10), 'Family Session', 500000, start_time=start, end_time=start, now=NOW)

    def test_duration_is_derived(self):
        start = datetime(2026, 2, 10, 3, 0, tzinfo=timezone.utc)
        booking = make_booking(start_time=start, end_time=start + timedelta(minutes=90))

        self.assertEqual(booking.duration_minutes, 90)
        self.assertEqual(make_booking().duration_minutes, 0)

    def test_photographer_marks_shoot_done(self):
        booking = change_status(make_booking(), BookingStatus.SHOOT_DONE, ActorRole.PHOTOGRAPHER, now=NOW)

        self.assertEqual(booking.status, BookingStatus.SHOOT_DONE)

    def test_photographer_cannot_change_paid_booking(self):
        booking = make_booking(status=BookingStatus.PAID)

        with self.assertLogs('bookings.transitions', level='WARNING'):
            with self.assertRaises(InvalidTransition):
                change_status(booking, BookingStatus.SHOOT_DONE, ActorRole.PHOTOGRAPHER)

    def test_delivery_requires_photo_link(self):
        booking = make_booking(status=BookingStatus.SHOOT_DONE)

        with self.assertRaises(PhotoLinkRequired):
            change_status(booking, BookingStatus.PHOTOS_DELIVERED, ActorRole.PACKAGING_STAFF, now=NOW)

        delivered = change_status(
            booking, BookingStatus.PHOTOS_DELIVERED, ActorRole.PACKAGING_STAFF,
            photo_link='https://drive.example/abc', now=NOW,
        )
        self.assertEqual(delivered.photo_link, 'https://drive.example/abc')
        self.assertEqual(delivered.delivered_at, NOW)

    def test_existing_photo_link_is_used_for_delivery(self):
        booking = make_booking(status=BookingStatus.SHOOT_DONE, photo_link='https://drive.example/abc')

        delivered = change_status(booking, 'PHOTOS_DELIVERED', 'PHOTOGRAPHER', now=NOW)

        self.assertEqual(delivered.status, BookingStatus.PHOTOS_DELIVERED)

    def test_closing_stamps_date(self):
        booking = make_booking(status=BookingStatus.PHOTOS_DELIVERED)

        closed = change_status(booking, BookingStatus.CLOSED, ActorRole.ADMIN, now=NOW)

        self.assertEqual(closed.closed_at, NOW)

    def test_same_status_is_a_no_op(self):
        booking = make_booking(status=BookingStatus.PAID)

        self.assertIs(change_status(booking, BookingStatus.PAID, 'GUEST'), booking)

    def test_cancel_booking(self):
        for status in BOOKING_FLOW:
            cancelled = cancel_booking(make_booking(status=status), ActorRole.OWNER, now=NOW)

            self.assertEqual(cancelled.status, BookingStatus.CANCELLED)
            self.assertEqual(cancelled.cancelled_at, NOW)

    def test_cancel_twice_or_without_permission(self):
        cancelled = make_booking(status=BookingStatus.CANCELLED)
        with self.assertRaises(InvalidTransition):
            cancel_booking(cancelled, ActorRole.OWNER)

        with self.assertLogs('bookings.transitions', level='WARNING'):
            with self.assertRaises(InvalidTransition):
                cancel_booking(make_booking(), ActorRole.PHOTOGRAPHER)

    def test_record_payment_moves_booked_to_paid(self):
        booking = record_payment(make_booking(), PaymentStatus.PAID, ActorRole.ADMIN, now=NOW)

        self.assertEqual(booking.payment_status, PaymentStatus.PAID)
        self.assertEqual(booking.status, BookingStatus.PAID)
        self.assertEqual(booking.paid_at, NOW)

        booking = record_payment(booking, PaymentStatus.UNPAID, ActorRole.OWNER, now=NOW)
        self.assertIsNone(booking.paid_at)
        self.assertEqual(booking.status, BookingStatus.PAID)

    def test_record_payment_requires_owner_or_admin(self):
        with self.assertLogs('bookings.lifecycle', level='WARNING'):
            with self.assertRaises(InvalidTransition):
                record_payment(make_booking(), PaymentStatus.PAID, ActorRole.PHOTOGRAPHER)

    def test_adding_add_on_to_paid_booking(self):
        booking = make_booking(status=BookingStatus.PAID, payment_status=PaymentStatus.PAID)

        update = add_add_on(booking, self.prints)

        self.assertEqual(update.booking.total_amount, Decimal('600000'))
        self.assertEqual(update.breakdown.add_ons_total, Decimal('100000'))
        self.assertEqual(update.booking.payment_status, PaymentStatus.PARTIALLY_PAID)
        self.assertIn('Partially Paid', update.warning)

    def test_removing_add_on_keeps_paid(self):
        booking = make_booking(
            add_ons=(self.prints,),
            total_amount=Decimal('600000'),
            payment_status=PaymentStatus.PAID,
        )

        update = remove_add_on(booking, 0)

        self.assertEqual(update.booking.add_ons, ())
        self.assertEqual(update.booking.total_amount, Decimal('500000'))
        self.assertEqual(update.booking.payment_status, PaymentStatus.PAID)
        self.assertIn('refunded', update.warning)

    def test_discount_update_on_unpaid_booking(self):
        discount = Discount.manual(DiscountType.FIXED, 50000, reason='Referral')

        update = update_pricing(make_booking(), discount=discount)

        self.assertEqual(update.booking.total_amount, Decimal('450000'))
        self.assertEqual(update.booking.discount, discount)
        self.assertEqual(update.booking.payment_status, PaymentStatus.UNPAID)
        self.assertIsNone(update.warning)

    def test_update_photo_link(self):
        booking = update_photo_link(make_booking(), ' https://drive.example/abc ')
        self.assertEqual(booking.photo_link, 'https://drive.example/abc')

        self.assertIsNone(update_photo_link(booking, '   ').photo_link)


class IdentifierTest(SimpleTestCase):
    @override_settings(BOOKING_CODE_PREFIX='ABC')
    def test_booking_code_format(self):
        self.assertEqual(generate_booking_code(date(2026, 2, 1), 12), 'ABC-20260201-012')

    def test_sequence_starts_at_one(self):
        with self.assertRaises(ValueError):
            generate_booking_code(date(2026, 2, 1), 0)

    @override_settings(PUBLIC_SLUG_LENGTH=12)
    def test_public_slug(self):
        slug = generate_public_slug()

        self.assertEqual(len(slug), 12)
        self.assertTrue(set(slug) <= set(SLUG_ALPHABET))


class BookingSnapshotSerializerTest(SimpleTestCase):
    def setUp(self):
        self.data = {
            'code': 'YJS-20260201-001',
            'status': 'PHOTOS_DELIVERED',
            'payment_status': 'PAID',
            'session_date': '2026-02-10',
            'start_time': '2026-02-10T10:00:00+07:00',
            'end_time': '2026-02-10T11:30:00+07:00',
            'package_name': 'Family Session',
            'package_price': '500000',
            'add_ons': [{'name': 'Extra print', 'quantity': 2, 'unit_price': '50000'}],
            'discount': {'kind': 'VOUCHER', 'discount_type': 'PERCENTAGE', 'value': '10', 'code': 'save10'},
            'photo_link': 'https://drive.example/abc',
            'print_order': {'status': 'PRINTING_IN_PROGRESS', 'vendor_name': 'Lab Jaya'},
            'created_at': '2026-02-01T10:00:00+07:00',
        }

    def test_save_builds_booking(self):
        serializer = BookingSnapshotSerializer(data=self.data)
        self.assertTrue(serializer.is_valid(), serializer.errors)

        booking = serializer.save()

        self.assertIsInstance(booking, Booking)
        self.assertEqual(booking.status, BookingStatus.PHOTOS_DELIVERED)
        self.assertEqual(booking.total_amount, Decimal('540000'))
        self.assertEqual(booking.discount.code, 'SAVE10')
        self.assertIsInstance(booking.print_order, PrintOrder)
        self.assertEqual(booking.print_order.status, PrintOrderStatus.PRINTING_IN_PROGRESS)
        self.assertEqual(booking.duration_minutes, 90)

    def test_unknown_status_is_rejected(self):
        self.data['status'] = 'ARCHIVED'
        serializer = BookingSnapshotSerializer(data=self.data)

        self.assertFalse(serializer.is_valid())
        self.assertIn('status', serializer.errors)

    def test_end_time_must_follow_start_time(self):
        self.data['end_time'] = self.data['start_time']
        serializer = BookingSnapshotSerializer(data=self.data)

        self.assertFalse(serializer.is_valid())
        self.assertIn('end_time', serializer.errors)

    def test_print_order_before_delivery_is_rejected(self):
        self.data['status'] = 'SHOOT_DONE'
        serializer = BookingSnapshotSerializer(data=self.data)

        self.assertFalse(serializer.is_valid())
        self.assertIn('print_order', serializer.errors)

    def test_stored_total_is_kept(self):
        self.data['total_amount'] = '600000'
        serializer = BookingSnapshotSerializer(data=self.data)
        self.assertTrue(serializer.is_valid(), serializer.errors)

        self.assertEqual(serializer.save().total_amount, Decimal('600000'))


class BookingCommandTest(SimpleTestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp_dir = tmp.name
        self.snapshot = {
            'code': 'YJS-20260201-001',
            'status': 'PHOTOS_DELIVERED',
            'session_date': '2026-02-10',
            'package_price': '500000',
            'photo_link': 'https://drive.example/abc',
            'print_order': {'status': 'PRINTING_IN_PROGRESS'},
        }

    def write_snapshot(self, data):
        path = os.path.join(self.tmp_dir, 'snapshot.json')
        with open(path, 'w') as f:
            json.dump(data, f)
        return path

    def run_command(self, name, *args):
        out = StringIO()
        call_command(name, *args, stdout=out)
        return out.getvalue()

    def test_timeline(self):
        out = self.run_command('booking_timeline', self.write_snapshot(self.snapshot))

        lines = out.splitlines()
        self.assertIn('4. [completed] Photos Delivered', lines)
        self.assertIn('5. [completed] Photo Selection', lines)
        self.assertIn('6. [current] Printing in Progress', lines)
        self.assertIn('8. [upcoming] Order Completed', lines)

    def test_timeline_with_internal_print_steps(self):
        out = self.run_command('booking_timeline', self.write_snapshot(self.snapshot), '--internal')

        lines = out.splitlines()
        self.assertIn('Print order:', lines)
        self.assertIn('3. [current] Printing', lines)
        self.assertIn('7. [upcoming] Done', lines)

    def test_timeline_as_json(self):
        out = self.run_command('booking_timeline', self.write_snapshot(self.snapshot), '--json')

        data = json.loads(out)
        self.assertEqual(data['code'], 'YJS-20260201-001')
        self.assertEqual(len(data['steps']), 8)
        self.assertEqual(data['steps'][2]['date'], '2026-02-10')
        self.assertEqual(data['steps'][5]['state'], 'current')

    def test_cancelled_booking(self):
        self.snapshot['status'] = 'CANCELLED'

        out = self.run_command('booking_timeline', self.write_snapshot(self.snapshot))

        self.assertIn('Order Cancelled', out)
        self.assertNotIn('[current]', out)

    def test_invalid_snapshot(self):
        self.snapshot['status'] = 'ARCHIVED'

        with self.assertRaises(CommandError):
            self.run_command('booking_timeline', self.write_snapshot(self.snapshot))

    def test_options(self):
        out = self.run_command('booking_options', 'paid', 'photographer')

        self.assertEqual(out.splitlines(), ['* PAID'])

    def test_options_for_owner(self):
        out = self.run_command('booking_options', 'BOOKED', 'OWNER')

        self.assertEqual(len(out.splitlines()), 6)
        self.assertEqual(out.splitlines()[0], '* BOOKED')

    def test_options_unknown_status(self):
        with self.assertRaises(CommandError):
            self.run_command('booking_options', 'ARCHIVED', 'OWNER')
