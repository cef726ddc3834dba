"""
Serializers for the orders bounded context.
Validate a posted draft before it is replayed into an OrderDraft.
"""

from rest_framework import serializers

from apps.exchange.domain.models import FOREIGN_CURRENCIES, Currency
from apps.orders.domain.models import DiscountType, PaymentMethod, SaleType

CURRENCY_CHOICES = [c.value for c in Currency]


class DiscountInputSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=[t.value for t in DiscountType], default=DiscountType.AMOUNT.value)
    value = serializers.DecimalField(max_digits=18, decimal_places=6)
    currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, default=Currency.BS.value)


class ReferencedAttributesSerializer(serializers.Serializer):
    attribute = serializers.CharField(help_text="ProductRef attribute id or title")
    product_id = serializers.CharField()
    selections = serializers.DictField(required=False, default=dict)


class OrderLineInputSerializer(serializers.Serializer):
    catalog_product_id = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    selected_attributes = serializers.DictField(
        required=False,
        allow_null=True,
        default=None,
        help_text="{attribute id or title: value | [values] | number}; omit to use the product defaults",
    )
    referenced_attributes = ReferencedAttributesSerializer(many=True, required=False, default=list)
    discount = DiscountInputSerializer(required=False, allow_null=True, default=None)
    markup = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, default=0)
    observations = serializers.CharField(required=False, allow_blank=True, default="")


class ServiceChargeSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(default=False)
    cost = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, default=0)


class DeliveryServicesSerializer(serializers.Serializer):
    express = ServiceChargeSerializer(required=False)
    haulage = ServiceChargeSerializer(required=False)
    assembly = ServiceChargeSerializer(required=False)


class PaymentDetailsSerializer(serializers.Serializer):
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    bank = serializers.CharField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    account = serializers.CharField(required=False, allow_blank=True, default="")
    email = serializers.CharField(required=False, allow_blank=True, default="")
    exchange_rate_used = serializers.DecimalField(
        max_digits=18, decimal_places=6, required=False, allow_null=True, default=None
    )
    cash_received = serializers.DecimalField(
        max_digits=18, decimal_places=2, required=False, allow_null=True, default=None
    )

    def validate_exchange_rate_used(self, value):
        if value is not None and value <= 0:
            raise serializers.ValidationError("The exchange rate must be greater than zero.")
        return value


class PaymentInputSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=[m.value for m in PaymentMethod])
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    currency = serializers.ChoiceField(choices=CURRENCY_CHOICES, default=Currency.BS.value)
    date = serializers.DateField(required=False, allow_null=True, default=None)
    details = PaymentDetailsSerializer(required=False, default=dict)

    def validate(self, attrs):
        method = PaymentMethod(attrs["method"])
        if method.is_digital_wallet and attrs["currency"] != Currency.USD.value:
            raise serializers.ValidationError(
                {"currency": f"{method.value} payments are always in USD."}
            )
        return attrs


class SnapshotRateInputSerializer(serializers.Serializer):
    rate = serializers.DecimalField(max_digits=18, decimal_places=6)
    effective_date = serializers.DateField()

    def validate_rate(self, value):
        if value <= 0:
            raise serializers.ValidationError("The exchange rate must be greater than zero.")
        return value


class OrderDraftSerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False, allow_null=True, default=None)
    exchange_rate_snapshot = serializers.DictField(
        child=SnapshotRateInputSerializer(),
        required=False,
        allow_null=True,
        default=None,
        help_text="Snapshot already captured on the order; omit to resolve it from recorded rates",
    )
    sale_type = serializers.ChoiceField(choices=[s.value for s in SaleType], default=SaleType.LAYAWAY.value)
    display_currencies = serializers.ListField(
        child=serializers.ChoiceField(choices=CURRENCY_CHOICES),
        required=False,
        default=list,
    )
    lines = OrderLineInputSerializer(many=True, required=False, default=list)
    general_discount = DiscountInputSerializer(required=False, allow_null=True, default=None)
    delivery_services = DeliveryServicesSerializer(required=False, default=dict)
    payments = PaymentInputSerializer(many=True, required=False, default=list)
    observations = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_exchange_rate_snapshot(self, value):
        if not value:
            return value
        allowed = {c.value for c in FOREIGN_CURRENCIES}
        unknown = set(value) - allowed
        if unknown:
            raise serializers.ValidationError(
                f"Rates can only be given for {', '.join(sorted(allowed))}; got {', '.join(sorted(unknown))}."
            )
        return value
