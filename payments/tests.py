from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings
from rest_framework import serializers
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
import json
import os
import tempfile

from .constants import DiscountKind, DiscountType, PaymentStatus
from .exceptions import InvalidVoucher
from .pricing import AddOnLineItem, AddOnTemplate, Discount, compute_total, quantize_amount
from .serializers import (
    AddOnLineItemSerializer,
    DiscountSerializer,
    QuoteRequestSerializer,
    VoucherSerializer,
)
from .status import payment_change_warning, recompute_payment_status
from .vouchers import Voucher, VoucherCatalog, quote_with_voucher

NOW = datetime(2026, 6, 1, 10, 0, tzinfo=timezone.utc)

VOUCHER_RECORDS = [
    {'code': 'save10', 'discount_type': 'percentage', 'discount_value': '10'},
    {'code': 'OLD', 'discount_type': 'FIXED', 'discount_value': '50000', 'is_active': False},
    {'code': 'LATE', 'discount_type': 'FIXED', 'discount_value': '50000', 'valid_until': '2026-01-01T00:00:00Z'},
    {'code': 'SOON', 'discount_type': 'FIXED', 'discount_value': '50000', 'valid_from': '2027-01-01T00:00:00Z'},
    {'code': 'USED', 'discount_type': 'FIXED', 'discount_value': '50000', 'max_usage': 5, 'used_count': 5},
    {'code': 'BIG', 'discount_type': 'FIXED', 'discount_value': '100000', 'min_purchase': '1000000'},
]


class ComputeTotalTest(SimpleTestCase):
    def setUp(self):
        self.prints = AddOnLineItem.custom('Extra print', 2, 50000)

    def test_percentage_voucher_on_package_with_add_ons(self):
        discount = Discount.voucher('SAVE10', DiscountType.PERCENTAGE, 10)

        breakdown = compute_total(500000, [self.prints], discount)

        self.assertEqual(breakdown.subtotal, Decimal('600000'))
        self.assertEqual(breakdown.add_ons_total, Decimal('100000'))
        self.assertEqual(breakdown.discount_amount, Decimal('60000'))
        self.assertEqual(breakdown.total, Decimal('540000'))
        self.assertIsNone(breakdown.voucher_error)

    def test_manual_discount_larger_than_subtotal_floors_at_zero(self):
        discount = Discount.manual(DiscountType.FIXED, 100000, reason='Loyal client')

        breakdown = compute_total(0, [], discount)

        self.assertEqual(breakdown.subtotal, Decimal('0'))
        self.assertEqual(breakdown.total, Decimal('0'))

    def test_total_never_negative(self):
        discounts = [
            None,
            Discount.manual(DiscountType.FIXED, 0),
            Discount.manual(DiscountType.FIXED, 10 ** 9),
            Discount.manual(DiscountType.PERCENTAGE, 100),
            Discount.voucher('X', DiscountType.FIXED, 750000),
        ]
        for package_price in (0, 1, 250000, 500000):
            for discount in discounts:
                breakdown = compute_total(package_price, [self.prints], discount)
                self.assertGreaterEqual(breakdown.total, 0)

    def test_no_add_ons_and_missing_numbers_count_as_zero(self):
        breakdown = compute_total(None)

        self.assertEqual(breakdown.add_ons_total, Decimal('0'))
        self.assertEqual(breakdown.total, Decimal('0'))

    def test_manual_percentage_discount(self):
        discount = Discount.manual(DiscountType.PERCENTAGE, 25)

        breakdown = compute_total(400000, [], discount)

        self.assertEqual(breakdown.discount_amount, Decimal('100000'))
        self.assertEqual(breakdown.total, Decimal('300000'))

    def test_voucher_below_minimum_purchase_is_rejected(self):
        discount = Discount.voucher('big', DiscountType.FIXED, 100000, min_purchase=1000000)

        breakdown = compute_total(500000, [self.prints], discount)

        self.assertEqual(breakdown.discount_amount, Decimal('0'))
        self.assertEqual(breakdown.total, Decimal('600000'))
        self.assertIn('BIG', breakdown.voucher_error)
        self.assertIn('minimum purchase', breakdown.voucher_error)

    def test_voucher_at_minimum_purchase_applies(self):
        discount = Discount.voucher('BIG', DiscountType.FIXED, 100000, min_purchase=600000)

        breakdown = compute_total(500000, [self.prints], discount)

        self.assertEqual(breakdown.total, Decimal('500000'))
        self.assertIsNone(breakdown.voucher_error)

    def test_amounts_round_half_up(self):
        discount = Discount.manual(DiscountType.PERCENTAGE, 10)

        breakdown = compute_total(5, [], discount)

        self.assertEqual(breakdown.discount_amount, Decimal('1'))
        self.assertEqual(breakdown.total, Decimal('4'))

    @override_settings(CURRENCY_DECIMAL_PLACES=2)
    def test_decimal_places_follow_settings(self):
        self.assertEqual(quantize_amount('10.005'), Decimal('10.01'))

    def test_add_on_from_template(self):
        template = AddOnTemplate(id='tpl-1', name='Extra hour', default_price=Decimal('150000'))

        item = AddOnLineItem.from_template(template, quantity=3)

        self.assertEqual(item.template_id, 'tpl-1')
        self.assertFalse(item.is_custom)
        self.assertEqual(item.subtotal, Decimal('450000'))
        self.assertTrue(self.prints.is_custom)


class VoucherCatalogTest(SimpleTestCase):
    def setUp(self):
        self.catalog = VoucherCatalog.from_records(VOUCHER_RECORDS)
        self.prints = [AddOnLineItem.custom('Extra print', 2, 50000)]

    def test_codes_are_case_insensitive(self):
        self.assertEqual(len(self.catalog), 6)
        self.assertIn('SAVE10', self.catalog)
        self.assertNotIn('', self.catalog)
        self.assertEqual(self.catalog.get(' Save10 ').code, 'SAVE10')

    def test_resolve_returns_voucher_discount(self):
        discount = self.catalog.resolve('save10', now=NOW)

        self.assertEqual(discount.kind, DiscountKind.VOUCHER)
        self.assertEqual(discount.discount_type, DiscountType.PERCENTAGE)
        self.assertEqual(discount.code, 'SAVE10')

    def test_resolve_rejects_unusable_vouchers(self):
        cases = {
            'NOPE': 'voucher not found',
            'OLD': 'voucher is no longer active',
            'LATE': 'voucher has expired',
            'SOON': 'voucher is not valid yet',
            'USED': 'voucher usage limit reached',
        }
        for code, reason in cases.items():
            with self.assertRaises(InvalidVoucher) as ctx:
                self.catalog.resolve(code, now=NOW)
            self.assertEqual(ctx.exception.reason, reason)

    def test_quote_with_voucher(self):
        breakdown = quote_with_voucher(500000, self.prints, 'save10', self.catalog, now=NOW)

        self.assertEqual(breakdown.discount_amount, Decimal('60000'))
        self.assertEqual(breakdown.total, Decimal('540000'))

    def test_quote_with_unknown_voucher_has_zero_discount(self):
        with self.assertLogs('payments.vouchers', level='WARNING'):
            breakdown = quote_with_voucher(500000, self.prints, 'NOPE', self.catalog, now=NOW)

        self.assertEqual(breakdown.discount_amount, Decimal('0'))
        self.assertEqual(breakdown.total, Decimal('600000'))
        self.assertEqual(breakdown.voucher_error, 'Invalid voucher NOPE: voucher not found')

    def test_quote_with_voucher_below_minimum_purchase(self):
        with self.assertLogs('payments.vouchers', level='WARNING'):
            breakdown = quote_with_voucher(500000, self.prints, 'BIG', self.catalog, now=NOW)

        self.assertEqual(breakdown.total, Decimal('600000'))
        self.assertIn('minimum purchase', breakdown.voucher_error)

    def test_invalid_records_are_rejected(self):
        records = [{'code': 'HALF', 'discount_type': 'PERCENTAGE', 'discount_value': '150'}]

        with self.assertRaises(serializers.ValidationError):
            VoucherCatalog.from_records(records)

    def test_voucher_to_discount(self):
        voucher = Voucher(code='FLAT', discount_type=DiscountType.FIXED, discount_value=Decimal('25000'))

        discount = voucher.to_discount()

        self.assertTrue(discount.is_voucher)
        self.assertEqual(discount.value, Decimal('25000'))


class PaymentStatusTest(SimpleTestCase):
    def test_paid_booking_becomes_partially_paid_when_total_grows(self):
        status = recompute_payment_status(PaymentStatus.PAID, 500000, 600000)

        self.assertEqual(status, PaymentStatus.PARTIALLY_PAID)

    def test_paid_booking_stays_paid_when_total_shrinks(self):
        self.assertEqual(recompute_payment_status('PAID', 600000, 500000), PaymentStatus.PAID)

    def test_other_statuses_are_unchanged(self):
        for previous in (PaymentStatus.UNPAID, PaymentStatus.PARTIALLY_PAID):
            self.assertEqual(recompute_payment_status(previous, 500000, 600000), previous)
            self.assertEqual(recompute_payment_status(previous, 600000, 500000), previous)

    def test_warning_only_for_paid_bookings_with_changed_total(self):
        self.assertIsNone(payment_change_warning(PaymentStatus.UNPAID, 500000, 600000))
        self.assertIsNone(payment_change_warning(PaymentStatus.PAID, 500000, 500000))
        self.assertIn('Partially Paid', payment_change_warning(PaymentStatus.PAID, 500000, 600000))
        self.assertIn('refunded', payment_change_warning(PaymentStatus.PAID, 600000, 500000))

    def test_unknown_status_is_rejected(self):
        with self.assertRaises(ValueError):
            recompute_payment_status('REFUNDED', 1, 2)


class PaymentSerializerTest(SimpleTestCase):
    def test_add_on_quantity_must_be_positive(self):
        serializer = AddOnLineItemSerializer(data={'name': 'Frame', 'quantity': 0, 'unit_price': '10000'})

        self.assertFalse(serializer.is_valid())
        self.assertIn('quantity', serializer.errors)

    def test_add_on_save_returns_line_item(self):
        serializer = AddOnLineItemSerializer(data={'name': 'Frame', 'quantity': 2, 'unit_price': '10000'})
        self.assertTrue(serializer.is_valid(), serializer.errors)

        item = serializer.save()

        self.assertIsInstance(item, AddOnLineItem)
        self.assertEqual(item.subtotal, Decimal('20000'))

    def test_voucher_discount_needs_code(self):
        serializer = DiscountSerializer(data={'kind': 'VOUCHER', 'discount_type': 'FIXED', 'value': '1000'})

        self.assertFalse(serializer.is_valid())
        self.assertIn('code', serializer.errors)

    def test_percentage_discount_capped_at_hundred(self):
        serializer = DiscountSerializer(data={'kind': 'MANUAL', 'discount_type': 'PERCENTAGE', 'value': '120'})

        self.assertFalse(serializer.is_valid())
        self.assertIn('value', serializer.errors)

    def test_manual_discount_save(self):
        serializer = DiscountSerializer(data={
            'kind': 'manual',
            'discount_type': 'fixed',
            'value': '100000',
            'reason': 'Returning client',
        })
        self.assertTrue(serializer.is_valid(), serializer.errors)

        discount = serializer.save()

        self.assertEqual(discount.kind, DiscountKind.MANUAL)
        self.assertEqual(discount.reason, 'Returning client')

    def test_unknown_discount_type_is_rejected(self):
        serializer = DiscountSerializer(data={'kind': 'MANUAL', 'discount_type': 'BOGO', 'value': '1'})

        self.assertFalse(serializer.is_valid())
        self.assertIn('discount_type', serializer.errors)

    def test_voucher_validity_window(self):
        serializer = VoucherSerializer(data={
            'code': 'WINDOW',
            'discount_type': 'FIXED',
            'discount_value': '1000',
            'valid_from': '2026-02-01T00:00:00Z',
            'valid_until': '2026-01-01T00:00:00Z',
        })

        self.assertFalse(serializer.is_valid())
        self.assertIn('valid_until', serializer.errors)

    def test_quote_rejects_discount_and_voucher_together(self):
        serializer = QuoteRequestSerializer(data={
            'package_price': '500000',
            'discount': {'kind': 'MANUAL', 'discount_type': 'FIXED', 'value': '1000'},
            'voucher_code': 'SAVE10',
        })

        self.assertFalse(serializer.is_valid())
        self.assertIn('non_field_errors', serializer.errors)


class BookingQuoteCommandTest(SimpleTestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp_dir = tmp.name

    def write_json(self, name, data):
        path = os.path.join(self.tmp_dir, name)
        with open(path, 'w') as f:
            json.dump(data, f)
        return path

    def run_command(self, *args):
        out, err = StringIO(), StringIO()
        call_command('booking_quote', *args, stdout=out, stderr=err)
        return out.getvalue(), err.getvalue()

    def test_quote_with_manual_discount(self):
        path = self.write_json('quote.json', {
            'package_price': 0,
            'discount': {'kind': 'MANUAL', 'discount_type': 'FIXED', 'value': 100000},
        })

        out, _ = self.run_command(path)

        self.assertIn('Total: IDR 0', out)

    def test_quote_with_voucher_as_json(self):
        quote = self.write_json('quote.json', {
            'package_price': 500000,
            'add_ons': [{'name': 'Extra print', 'quantity': 2, 'unit_price': 50000}],
            'voucher_code': 'save10',
        })
        vouchers = self.write_json('vouchers.json', VOUCHER_RECORDS[:1])

        out, _ = self.run_command(quote, '--vouchers', vouchers, '--json')

        data = json.loads(out)
        self.assertEqual(data['subtotal'], 600000)
        self.assertEqual(data['discount_amount'], 60000)
        self.assertEqual(data['total'], 540000)
        self.assertIsNone(data['voucher_error'])

    def test_voucher_error_is_reported(self):
        quote = self.write_json('quote.json', {'package_price': 500000, 'voucher_code': 'NOPE'})
        vouchers = self.write_json('vouchers.json', VOUCHER_RECORDS)

        with self.assertLogs('payments.vouchers', level='WARNING'):
            out, err = self.run_command(quote, '--vouchers', vouchers)

        self.assertIn('Total: IDR 500000', out)
        self.assertIn('voucher not found', err)

    def test_voucher_code_needs_catalog(self):
        quote = self.write_json('quote.json', {'package_price': 500000, 'voucher_code': 'SAVE10'})

        with self.assertRaises(CommandError):
            self.run_command(quote)

    def test_invalid_quote(self):
        quote = self.write_json('quote.json', {'package_price': -1})

        with self.assertRaises(CommandError):
            self.run_command(quote)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            self.run_command(os.path.join(self.tmp_dir, 'missing.json'))
