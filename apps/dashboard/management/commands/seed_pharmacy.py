"""
Django management command to seed the terminal with demo data.

This command loads a small demo inventory and two past sales into the
terminal session and saves them through the persistence gateway.

Usage:
    python manage.py seed_pharmacy
    python manage.py seed_pharmacy --clear
"""
from datetime import date, timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.medicines.domain import Medicine
from apps.sales.domain import Sale, SaleItem
from apps.terminal.utils import get_terminal_session


class Command(BaseCommand):
    help = 'Seeds the pharmacy terminal with demo medicines and sales'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Replace existing inventory and sale history instead of refusing to overwrite them',
        )

    def handle(self, *args, **options):
        session = get_terminal_session()
        if (len(session.ledger) or session.history) and not options['clear']:
            raise CommandError('Terminal already holds data; pass --clear to replace it.')

        self.stdout.write('Creating medicines...')
        medicines = self.create_medicines()
        self.stdout.write('Creating sales...')
        sales = self.create_sales()

        session.reset(medicines=medicines, sales=sales)
        if not session.flush():
            raise CommandError(f'Could not save seeded data: {session.persistence_warning}')

        self.stdout.write(self.style.SUCCESS(
            f'[SUCCESS] Seeded {len(medicines)} medicines and {len(sales)} sales.'
        ))

    def create_medicines(self):
        medicines_data = [
            ('1', 'Paracetamol 500mg', 'Painkillers', 'BAT-001', date(2026, 12, 31), 250, '5.50', 50, 'HealthPlus'),
            ('2', 'Amoxicillin 250mg', 'Antibiotics', 'BAT-002', date(2025, 8, 15), 120, '12.00', 30, 'GlobalPharma'),
            ('3', 'Vitamin C 1000mg', 'Vitamins', 'BAT-003', date(2024, 11, 20), 45, '8.75', 50, 'NutriSafe'),
            ('4', 'Ibuprofen 400mg', 'Painkillers', 'BAT-004', date(2027, 2, 10), 15, '7.20', 20, 'HealthPlus'),
        ]
        medicines = []
        for medicine_id, name, category, batch, expiry, quantity, price, threshold, manufacturer in medicines_data:
            medicines.append(Medicine(
                id=medicine_id,
                name=name,
                category=category,
                batch_number=batch,
                expiry_date=expiry,
                quantity=quantity,
                price=Decimal(price),
                low_stock_threshold=threshold,
                manufacturer=manufacturer,
            ))
            self.stdout.write(self.style.SUCCESS(f'  [OK] {name}'))
        return medicines

    def create_sales(self):
        now = timezone.now()
        return [
            Sale(
                id='INV-102501',
                timestamp=now - timedelta(days=1),
                items=[SaleItem(medicine_id='1', name='Paracetamol', quantity=2, price_at_sale=Decimal('5.50'))],
                total_amount=Decimal('11.00'),
                customer_name='Ahmed Ali',
            ),
            Sale(
                id='INV-102502',
                timestamp=now,
                items=[SaleItem(medicine_id='2', name='Amoxicillin', quantity=10, price_at_sale=Decimal('12.00'))],
                total_amount=Decimal('120.00'),
                customer_name='Zoya Khan',
            ),
        ]
