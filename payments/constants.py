from django.db import models


class PaymentStatus(models.TextChoices):
    UNPAID = 'UNPAID', 'Unpaid'
    PARTIALLY_PAID = 'PARTIALLY_PAID', 'Partially Paid'
    PAID = 'PAID', 'Paid'


class DiscountKind(models.TextChoices):
    VOUCHER = 'VOUCHER', 'Voucher'
    MANUAL = 'MANUAL', 'Manual'


class DiscountType(models.TextChoices):
    FIXED = 'FIXED', 'Fixed'
    PERCENTAGE = 'PERCENTAGE', 'Percentage'
