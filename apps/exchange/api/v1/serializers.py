"""
Serializers for the exchange bounded context.
Handles validation and transformation between API and ORM layers.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.exchange.infrastructure.persistence.models import ExchangeRate, ForeignCurrency


class ExchangeRateSerializer(serializers.ModelSerializer):
    currency = serializers.ChoiceField(choices=ForeignCurrency.choices)
    effective_date = serializers.DateField(required=False)

    class Meta:
        model = ExchangeRate
        fields = [
            "id",
            "currency",
            "rate",
            "effective_date",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "is_active", "created_at", "updated_at"]

    def validate_rate(self, value: Decimal) -> Decimal:
        if value <= 0:
            raise serializers.ValidationError("The exchange rate must be greater than zero.")
        return value


class SnapshotRateSerializer(serializers.Serializer):
    currency = serializers.CharField()
    rate = serializers.DecimalField(max_digits=18, decimal_places=6, allow_null=True)
    effective_date = serializers.DateField(allow_null=True)
    available = serializers.BooleanField()


class SnapshotSerializer(serializers.Serializer):
    as_of = serializers.DateField()
    rates = SnapshotRateSerializer(many=True)
