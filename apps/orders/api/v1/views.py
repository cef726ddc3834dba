"""
ViewSets for the orders API v1.
A posted draft is replayed into an OrderDraft against the stored catalog
and recorded rates; nothing is persisted.
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiResponse

from apps.exchange.infrastructure.persistence.repositories import ExchangeRateRepository
from apps.orders.api.v1.serializers import OrderDraftSerializer
from apps.orders.application.draft import OrderDraft
from apps.orders.domain.exceptions import OrderValidationError, ProductNotFoundError
from apps.orders.infrastructure.persistence.repositories import CatalogRepository

logger = logging.getLogger(__name__)


@extend_schema(tags=['Orders'])
class OrderQuoteViewSet(viewsets.ViewSet):

    serializer_class = OrderDraftSerializer

    def _assemble(self, request):
        serializer = OrderDraftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return OrderDraft.assemble(
            serializer.validated_data,
            CatalogRepository.load_catalog(),
            ExchangeRateRepository.load_domain_rates(),
        )

    @extend_schema(
        request=OrderDraftSerializer,
        responses={200: OpenApiResponse(description="Totals, line breakdown, projections and payment summary")},
        description="Price a draft order without finalizing it"
    )
    @action(detail=False, methods=['post'], url_path='quote')
    def quote(self, request):
        """
        Price a draft.

        Payment mismatches are reported in `payment_summary` and
        `validation_errors` but never block a quote.
        """
        try:
            draft = self._assemble(request)
        except ProductNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(draft.quote().to_dict())

    @extend_schema(
        request=OrderDraftSerializer,
        responses={
            201: OpenApiResponse(description="Frozen order"),
            400: OpenApiResponse(description="The order cannot be finalized"),
        },
        description="Finalize a draft order and return the frozen snapshot"
    )
    @action(detail=False, methods=['post'], url_path='freeze')
    def freeze(self, request):
        try:
            draft = self._assemble(request)
        except ProductNotFoundError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            frozen = draft.freeze()
        except OrderValidationError as e:
            logger.info("Order rejected: %s", e)
            return Response(
                {"error": "The order cannot be finalized", "errors": e.errors},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response(frozen.to_dict(), status=status.HTTP_201_CREATED)
