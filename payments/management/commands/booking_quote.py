import json
import sys

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from rest_framework import serializers
from rest_framework.renderers import JSONRenderer

from payments.pricing import AddOnLineItem, compute_total
from payments.serializers import DiscountSerializer, PriceBreakdownSerializer, QuoteRequestSerializer
from payments.vouchers import VoucherCatalog, quote_with_voucher


def load_json(path):
    try:
        if path == '-':
            return json.load(sys.stdin)
        with open(path) as f:
            return json.load(f)
    except OSError as e:
        raise CommandError(f'Cannot read {path}: {e}')
    except json.JSONDecodeError as e:
        raise CommandError(f'{path} is not valid JSON: {e}')


class Command(BaseCommand):
    help = 'Price a booking quote (package, add-ons and discount or voucher code) from a JSON file'

    def add_arguments(self, parser):
        parser.add_argument('quote', help='Path to the quote JSON, or - to read stdin')
        parser.add_argument('--vouchers', help='Path to a JSON list of voucher records')
        parser.add_argument('--json', action='store_true', help='Print the breakdown as JSON')

    def handle(self, *args, **options):
        serializer = QuoteRequestSerializer(data=load_json(options['quote']))
        if not serializer.is_valid():
            raise CommandError(f'Invalid quote: {json.dumps(serializer.errors)}')
        quote = serializer.validated_data

        add_ons = [AddOnLineItem(**item) for item in quote.get('add_ons', [])]

        if quote['voucher_code']:
            if not options['vouchers']:
                raise CommandError('--vouchers is required to apply a voucher code')
            try:
                catalog = VoucherCatalog.from_records(load_json(options['vouchers']))
            except serializers.ValidationError as e:
                raise CommandError(f'Invalid voucher catalog: {json.dumps(e.detail)}')
            breakdown = quote_with_voucher(quote['package_price'], add_ons, quote['voucher_code'], catalog)
        else:
            discount_data = quote.get('discount')
            discount = DiscountSerializer().create(discount_data) if discount_data else None
            breakdown = compute_total(quote['package_price'], add_ons, discount)

        if options['json']:
            data = PriceBreakdownSerializer(breakdown).data
            self.stdout.write(JSONRenderer().render(data).decode())
            return

        currency = settings.STUDIO_CURRENCY
        self.stdout.write(f'Subtotal: {currency} {breakdown.subtotal}')
        self.stdout.write(f'Add-ons: {currency} {breakdown.add_ons_total}')
        self.stdout.write(f'Discount: {currency} {breakdown.discount_amount}')
        self.stdout.write(f'Total: {currency} {breakdown.total}')
        if breakdown.voucher_error:
            self.stderr.write(breakdown.voucher_error)
