from decimal import Decimal
from datetime import date

from apps.exchange.application.dto import RateSyncResultDTO, SnapshotDTO
from apps.exchange.domain.models import Currency, ExchangeRateSnapshot, SnapshotRate


class TestSnapshotDTO:

    def test_from_snapshot_lists_every_foreign_currency(self):
        snapshot = ExchangeRateSnapshot(rates={
            Currency.USD: SnapshotRate(Decimal("36.50"), date(2024, 5, 20)),
        })

        dto = SnapshotDTO.from_snapshot(date(2024, 5, 21), snapshot)

        assert dto.as_of == date(2024, 5, 21)
        assert [r.currency for r in dto.rates] == ["USD", "EUR"]
        usd, eur = dto.rates
        assert usd.rate == Decimal("36.50")
        assert usd.available is True
        assert eur.rate is None
        assert eur.effective_date is None
        assert eur.available is False


class TestRateSyncResultDTO:

    def test_to_dict(self):
        dto = RateSyncResultDTO(
            success=True,
            rates_synced=1,
            currencies_processed=["USD", "EUR"],
            errors=["No rate fetched for EUR on 2024-05-21"],
            providers_used=["MockProvider"],
        )

        assert dto.to_dict() == {
            "success": True,
            "rates_synced": 1,
            "currencies_processed": ["USD", "EUR"],
            "errors": ["No rate fetched for EUR on 2024-05-21"],
            "providers_used": ["MockProvider"],
        }

    def test_defaults(self):
        dto = RateSyncResultDTO(success=False, rates_synced=0, currencies_processed=[])

        assert dto.errors == []
        assert dto.providers_used == []
