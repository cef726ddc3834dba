"""
Django Admin configuration for Exchange app.
Rates added through the admin go through the repository so previous
rates of the same currency are deactivated.
"""

from django.contrib import admin
from django.utils.html import format_html

from apps.exchange.domain.models import Currency
from apps.exchange.infrastructure.persistence.models import ExchangeRate
from apps.exchange.infrastructure.persistence.repositories import ExchangeRateRepository


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    """Admin interface for ExchangeRate model."""

    list_display = (
        'currency',
        'rate',
        'effective_date',
        'get_status',
        'created_at'
    )
    list_filter = ('currency', 'is_active', 'effective_date')
    search_fields = ('currency',)
    readonly_fields = ('id', 'is_active', 'created_at', 'updated_at')
    date_hierarchy = 'effective_date'
    ordering = ('-effective_date', '-created_at')
    actions = ['deactivate_rates']

    fieldsets = (
        ('Exchange Rate', {
            'fields': ('currency', 'rate', 'effective_date', 'is_active')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_status(self, obj):
        """Display status with colored indicator."""
        if obj.is_active:
            return format_html(
                '<span style="color: green; font-weight: bold;">● Active</span>'
            )
        return format_html(
            '<span style="color: red;">○ Inactive</span>'
        )
    get_status.short_description = 'Status'

    def save_model(self, request, obj, form, change):
        if change:
            super().save_model(request, obj, form, change)
            return
        created = ExchangeRateRepository.set_rate(
            Currency(obj.currency),
            obj.rate,
            obj.effective_date,
        )
        obj.pk = created.pk
        obj.is_active = created.is_active
        obj.created_at = created.created_at
        obj.updated_at = created.updated_at

    @admin.action(description='Deactivate selected rates')
    def deactivate_rates(self, request, queryset):
        """Bulk action to deactivate rates."""
        updated = queryset.update(is_active=False)
        self.message_user(
            request,
            f'{updated} rate(s) deactivated successfully.'
        )
