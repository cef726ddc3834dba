"""
ViewSets for the exchange API v1.
Rates are recorded through the repository so that only one rate per
currency stays active.
"""

from dataclasses import asdict
from datetime import date, datetime

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.exchange.api.v1.serializers import ExchangeRateSerializer, SnapshotSerializer
from apps.exchange.application.dto import SnapshotDTO
from apps.exchange.domain.models import Currency
from apps.exchange.domain.services import ExchangeRateService
from apps.exchange.infrastructure.persistence.models import ExchangeRate
from apps.exchange.infrastructure.persistence.repositories import ExchangeRateRepository


@extend_schema(tags=['Rates'])
class ExchangeRateViewSet(
    mixins.CreateModelMixin,
    viewsets.ReadOnlyModelViewSet,
):

    queryset = ExchangeRate.objects.all()
    serializer_class = ExchangeRateSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        currency = self.request.query_params.get('currency')
        if currency:
            queryset = queryset.filter(currency=currency.upper())
        if self.request.query_params.get('active') == 'true':
            queryset = queryset.filter(is_active=True)
        return queryset

    def perform_create(self, serializer):
        data = serializer.validated_data
        serializer.instance = ExchangeRateRepository.set_rate(
            Currency(data['currency']),
            data['rate'],
            data.get('effective_date'),
        )

    @extend_schema(
        parameters=[
            OpenApiParameter("as_of", OpenApiTypes.DATE, description="Order date (YYYY-MM-DD, defaults to today)"),
        ],
        responses=SnapshotSerializer,
        description="Resolve the rate snapshot an order created on `as_of` would be priced with"
    )
    @action(detail=False, methods=['get'], url_path='current')
    def current(self, request):
        """
        Resolve the snapshot for a date.

        Query params:
        - as_of: Date YYYY-MM-DD (optional)

        Returns:
        One entry per foreign currency; unavailable currencies have a null rate.
        """
        as_of_str = request.query_params.get('as_of')
        as_of = date.today()
        if as_of_str:
            try:
                as_of = datetime.strptime(as_of_str, "%Y-%m-%d").date()
            except ValueError:
                return Response(
                    {"error": "Invalid date format. Use YYYY-MM-DD"},
                    status=status.HTTP_400_BAD_REQUEST
                )

        snapshot = ExchangeRateService.resolve_rates(
            as_of,
            ExchangeRateRepository.load_domain_rates(),
        )
        dto = SnapshotDTO.from_snapshot(as_of, snapshot)
        return Response(SnapshotSerializer(asdict(dto)).data)
