from datetime import date
from django.core.management.base import BaseCommand, CommandError

from apps.exchange.application.tasks import sync_exchange_rates


class Command(BaseCommand):
    help = 'Record the official USD and EUR rates for a day'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            dest='valuation_date',
            type=str,
            default=None,
            help='Date in YYYY-MM-DD format (defaults to today)'
        )
        parser.add_argument(
            '--force',
            action='store_true',
            help='Record a new rate even if one is already active for that day'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Execute synchronously instead of using Celery task queue'
        )

    def handle(self, **options):
        valuation_date_str = options['valuation_date']
        force = options['force']
        sync_mode = options['sync']

        if valuation_date_str:
            try:
                date.fromisoformat(valuation_date_str)
            except ValueError:
                raise CommandError('Invalid date format. Use YYYY-MM-DD')

        self.stdout.write(
            self.style.SUCCESS(
                f'Syncing exchange rates for {valuation_date_str or date.today().isoformat()}...'
            )
        )

        if sync_mode:
            self.stdout.write('Running in synchronous mode...')
            result = sync_exchange_rates(valuation_date_str, force)

            if result['success']:
                self.stdout.write(
                    self.style.SUCCESS(
                        f"Successfully recorded {result['rates_synced']} rates"
                    )
                )
                if result.get('errors'):
                    self.stdout.write(
                        self.style.WARNING(
                            f"Errors: {len(result['errors'])}"
                        )
                    )
            else:
                message = result.get('message') or '; '.join(result.get('errors', [])) or 'Unknown error'
                raise CommandError(f"Failed: {message}")
        else:
            self.stdout.write('Dispatching Celery task...')
            task = sync_exchange_rates.delay(valuation_date_str, force)

            self.stdout.write(
                self.style.SUCCESS(
                    f'Task dispatched with ID: {task.id}'
                )
            )
            self.stdout.write(
                'Use "celery -A core inspect active" to check task status'
            )
