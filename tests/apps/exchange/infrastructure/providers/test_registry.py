from apps.exchange.infrastructure.providers.dolar_api import DolarApiProvider
from apps.exchange.infrastructure.providers.mock import MockProvider
from apps.exchange.infrastructure.providers.registry import (
    PROVIDER_REGISTRY,
    get_configured_providers,
    get_provider_instance,
)


class TestProviderRegistry:
    """Tests for provider registry functions."""

    def test_provider_registry_contains_providers(self):
        """
        Test that PROVIDER_REGISTRY contains expected providers.
        """
        assert "mock" in PROVIDER_REGISTRY
        assert "dolar_api" in PROVIDER_REGISTRY

    def test_get_provider_instance_mock(self):
        instance = get_provider_instance("mock")

        assert isinstance(instance, MockProvider)

    def test_get_provider_instance_dolar_api(self):
        instance = get_provider_instance("dolar_api")

        assert isinstance(instance, DolarApiProvider)

    def test_get_provider_instance_invalid(self):
        """
        Test that get_provider_instance returns None for invalid provider name.
        """
        assert get_provider_instance("invalid_provider") is None

    def test_get_configured_providers_keeps_order(self, settings):
        """
        Test that providers are instantiated in the configured fallback order.
        """
        settings.EXCHANGE_RATE_PROVIDERS = ["mock", "dolar_api"]

        providers = get_configured_providers()

        assert [type(p) for p in providers] == [MockProvider, DolarApiProvider]

    def test_get_configured_providers_skips_unknown(self, settings):
        settings.EXCHANGE_RATE_PROVIDERS = ["nope", "mock"]

        providers = get_configured_providers()

        assert len(providers) == 1
        assert isinstance(providers[0], MockProvider)

    def test_get_configured_providers_empty(self, settings):
        settings.EXCHANGE_RATE_PROVIDERS = []

        assert get_configured_providers() == []
