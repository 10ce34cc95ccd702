"""
Management command to seed the price table.

Usage:
    python manage.py seed_prices
    python manage.py seed_prices --overwrite
    python manage.py seed_prices --dry-run
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from fatoura.models import Price
from fatoura.services.prices import SEED_PRICES


class Command(BaseCommand):
    """Seed essential prices command."""

    help = 'Installs the essential option and service prices'

    def add_arguments(self, parser):
        parser.add_argument(
            '--overwrite',
            action='store_true',
            help='Reset existing keys to their seeded value',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would change without writing',
        )

    def handle(self, *args, **options):
        existing = Price.objects.in_bulk([entry.key for entry in SEED_PRICES])
        missing = [e for e in SEED_PRICES if e.key not in existing]
        changed = [
            e for e in SEED_PRICES
            if e.key in existing and existing[e.key].value != e.value
        ] if options['overwrite'] else []

        if options['dry_run']:
            self.stdout.write(f'{len(missing)} price(s) would be created, {len(changed)} reset')
            return

        with transaction.atomic():
            Price.objects.bulk_create([
                Price(key=e.key, value=e.value, description=e.description) for e in missing
            ])
            for entry in changed:
                price = existing[entry.key]
                price.value = entry.value
                price.description = entry.description or price.description
                price.save(update_fields=['value', 'description', 'updated_at'])

        self.stdout.write(
            self.style.SUCCESS(f'{len(missing)} price(s) created, {len(changed)} reset')
        )
