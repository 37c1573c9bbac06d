from decimal import Decimal

from rest_framework import serializers

from payments.constants import PaymentStatus
from payments.pricing import AddOnLineItem, compute_total
from payments.serializers import AddOnLineItemSerializer, DiscountSerializer, amount_field

from .constants import BOOKING_FLOW, BookingStatus, PrintOrderStatus
from .records import Booking, PrintOrder


class PrintOrderSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=PrintOrderStatus.choices, default=PrintOrderStatus.WAITING_CLIENT_SELECTION
    )
    selected_photos = serializers.CharField(allow_blank=True, default='')
    vendor_name = serializers.CharField(max_length=255, allow_blank=True, default='')
    vendor_notes = serializers.CharField(allow_blank=True, default='')
    shipping_address = serializers.CharField(allow_blank=True, default='')
    courier = serializers.CharField(max_length=100, allow_blank=True, default='')
    tracking_number = serializers.CharField(max_length=100, allow_blank=True, default='')
    created_at = serializers.DateTimeField(allow_null=True, default=None)
    shipped_at = serializers.DateTimeField(allow_null=True, default=None)
    completed_at = serializers.DateTimeField(allow_null=True, default=None)

    def create(self, validated_data):
        return PrintOrder(**validated_data)


class BookingSnapshotSerializer(serializers.Serializer):
    """
    Validates a booking snapshot handed over by the API layer and builds the
    immutable Booking record the lifecycle functions work on.

    Unknown status strings and malformed amounts are rejected here.
    """
    id = serializers.CharField(allow_null=True, default=None)
    code = serializers.CharField(max_length=50)
    public_slug = serializers.CharField(max_length=50, allow_blank=True, default='')
    status = serializers.ChoiceField(choices=BookingStatus.choices, default=BookingStatus.BOOKED)
    payment_status = serializers.ChoiceField(choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)
    session_date = serializers.DateField()
    start_time = serializers.DateTimeField(allow_null=True, default=None)
    end_time = serializers.DateTimeField(allow_null=True, default=None)
    duration_minutes = serializers.IntegerField(read_only=True)
    package_name = serializers.CharField(max_length=255, allow_blank=True, default='')
    package_price = amount_field(min_value=Decimal('0'), default=Decimal('0'))
    add_ons = AddOnLineItemSerializer(many=True, required=False)
    discount = DiscountSerializer(allow_null=True, required=False)
    total_amount = amount_field(min_value=Decimal('0'), allow_null=True, required=False)
    photo_link = serializers.CharField(allow_null=True, allow_blank=True, default=None)
    print_order = PrintOrderSerializer(allow_null=True, required=False)
    created_at = serializers.DateTimeField(allow_null=True, default=None)
    paid_at = serializers.DateTimeField(allow_null=True, default=None)
    delivered_at = serializers.DateTimeField(allow_null=True, default=None)
    closed_at = serializers.DateTimeField(allow_null=True, default=None)
    cancelled_at = serializers.DateTimeField(allow_null=True, default=None)

    def validate(self, attrs):
        start_time, end_time = attrs.get('start_time'), attrs.get('end_time')
        if start_time and end_time and end_time <= start_time:
            raise serializers.ValidationError({'end_time': 'End time must be after start time.'})

        status = attrs['status']
        if attrs.get('print_order') and status != BookingStatus.CANCELLED:
            if BOOKING_FLOW.index(status) < BOOKING_FLOW.index(BookingStatus.PHOTOS_DELIVERED):
                raise serializers.ValidationError(
                    {'print_order': 'A print order cannot exist before photos are delivered.'}
                )
        return attrs

    def create(self, validated_data):
        add_ons = tuple(AddOnLineItem(**item) for item in validated_data.pop('add_ons', []))

        discount_data = validated_data.pop('discount', None)
        discount = DiscountSerializer().create(discount_data) if discount_data else None

        print_order_data = validated_data.pop('print_order', None)
        print_order = PrintOrderSerializer().create(print_order_data) if print_order_data else None

        total_amount = validated_data.pop('total_amount', None)
        if total_amount is None:
            total_amount = compute_total(validated_data['package_price'], add_ons, discount).total

        return Booking(
            add_ons=add_ons,
            discount=discount,
            print_order=print_order,
            total_amount=total_amount,
            **validated_data,
        )


class TimelineStepSerializer(serializers.Serializer):
    key = serializers.CharField(read_only=True)
    label = serializers.CharField(read_only=True)
    icon = serializers.CharField(read_only=True)
    state = serializers.CharField(read_only=True)
    date = serializers.SerializerMethodField()
    is_print_step = serializers.BooleanField(read_only=True)

    def get_date(self, step):
        return step.date.isoformat() if step.date else None
