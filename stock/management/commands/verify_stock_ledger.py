"""
Stock — Management Command: verify_stock_ledger

Compares every product's current_stock with the sum of its ledger
movements and lists the products that disagree.

Usage::

    python manage.py verify_stock_ledger
    python manage.py verify_stock_ledger --sku CAB-2.5-100

Exits with status 1 when a mismatch is found.

@file stock/management/commands/verify_stock_ledger.py
"""

from django.core.management.base import BaseCommand, CommandError

from inventory.models import Product
from stock.services import StockService


class Command(BaseCommand):
    help = 'Check that cached product stock matches the stock ledger.'

    def add_arguments(self, parser):
        parser.add_argument('--sku', action='append', default=[], help='Limit the check to these SKUs.')

    def handle(self, *args, **options):
        product_ids = None
        if options['sku']:
            product_ids = list(
                Product.objects.filter(sku__in=options['sku']).values_list('pk', flat=True),
            )

        mismatches = StockService.verify_ledger(product_ids)
        for row in mismatches:
            self.stdout.write(
                f'  {row["sku"]}: current_stock={row["current_stock"]} '
                f'ledger={row["ledger_balance"]}',
            )

        if mismatches:
            raise CommandError(f'{len(mismatches)} product(s) disagree with the stock ledger.')

        self.stdout.write(self.style.SUCCESS('Stock ledger consistent.'))
