from decimal import Decimal

from rest_framework import serializers

from .constants import DiscountKind, DiscountType
from .pricing import AddOnLineItem, Discount
from .vouchers import Voucher


class UpperCaseChoiceField(serializers.ChoiceField):
    def to_internal_value(self, data):
        if isinstance(data, str):
            data = data.strip().upper()
        return super().to_internal_value(data)


def amount_field(**kwargs):
    return serializers.DecimalField(max_digits=16, decimal_places=2, **kwargs)


class AddOnLineItemSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = amount_field(min_value=Decimal('0'))
    template_id = serializers.CharField(allow_null=True, allow_blank=True, default=None)
    subtotal = amount_field(read_only=True)

    def create(self, validated_data):
        return AddOnLineItem(**validated_data)


class DiscountSerializer(serializers.Serializer):
    kind = UpperCaseChoiceField(choices=DiscountKind.choices)
    discount_type = UpperCaseChoiceField(choices=DiscountType.choices)
    value = amount_field(min_value=Decimal('0'))
    code = serializers.CharField(max_length=50, allow_blank=True, default='')
    min_purchase = amount_field(min_value=Decimal('0'), allow_null=True, default=None)
    reason = serializers.CharField(allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['kind'] == DiscountKind.VOUCHER and not attrs['code']:
            raise serializers.ValidationError({'code': 'Voucher discounts need a voucher code.'})
        if attrs['discount_type'] == DiscountType.PERCENTAGE and attrs['value'] > 100:
            raise serializers.ValidationError({'value': 'Percentage discount cannot exceed 100%.'})
        return attrs

    def create(self, validated_data):
        if validated_data['kind'] == DiscountKind.VOUCHER:
            return Discount.voucher(
                code=validated_data['code'],
                discount_type=validated_data['discount_type'],
                value=validated_data['value'],
                min_purchase=validated_data['min_purchase'],
            )
        return Discount.manual(
            discount_type=validated_data['discount_type'],
            value=validated_data['value'],
            reason=validated_data['reason'],
        )


class VoucherSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    description = serializers.CharField(allow_blank=True, default='')
    discount_type = UpperCaseChoiceField(choices=DiscountType.choices)
    discount_value = amount_field(min_value=Decimal('0.01'))
    min_purchase = amount_field(min_value=Decimal('0'), allow_null=True, default=None)
    max_usage = serializers.IntegerField(min_value=1, allow_null=True, default=None)
    used_count = serializers.IntegerField(min_value=0, default=0)
    is_active = serializers.BooleanField(default=True)
    valid_from = serializers.DateTimeField(allow_null=True, default=None)
    valid_until = serializers.DateTimeField(allow_null=True, default=None)

    def validate_code(self, value):
        return value.strip().upper()

    def validate(self, attrs):
        if attrs['discount_type'] == DiscountType.PERCENTAGE and attrs['discount_value'] > 100:
            raise serializers.ValidationError({'discount_value': 'Percentage discount cannot exceed 100%.'})
        if attrs['valid_from'] and attrs['valid_until'] and attrs['valid_until'] <= attrs['valid_from']:
            raise serializers.ValidationError({'valid_until': 'valid_until must be after valid_from.'})
        return attrs

    def create(self, validated_data):
        return Voucher(**validated_data)


class PriceBreakdownSerializer(serializers.Serializer):
    subtotal = amount_field(read_only=True)
    add_ons_total = amount_field(read_only=True)
    discount_amount = amount_field(read_only=True)
    total = amount_field(read_only=True)
    voucher_error = serializers.CharField(read_only=True, allow_null=True)


class QuoteRequestSerializer(serializers.Serializer):
    package_price = amount_field(min_value=Decimal('0'), default=Decimal('0'))
    add_ons = AddOnLineItemSerializer(many=True, required=False)
    discount = DiscountSerializer(allow_null=True, required=False)
    voucher_code = serializers.CharField(max_length=50, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs.get('discount') and attrs['voucher_code']:
            raise serializers.ValidationError('Use either a voucher code or a discount, not both.')
        return attrs
