"""
Management command to publish camp days in the session catalog.

    python manage.py seed_session_dates summer 2026-07-06 2026-07-10 --skip-weekends
    python manage.py seed_session_dates easter 2026-04-02 2026-04-02 --half 1200 --full 2000

Rates default to CAMP_DEFAULT_HALF_DAY_RATE / CAMP_DEFAULT_FULL_DAY_RATE.
"""

from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError

from bookings.catalog import as_date, seed_session_dates
from bookings.models import CampType
from core.exceptions import ValidationError


class Command(BaseCommand):
    help = 'Create or re-activate SessionDate rows for a camp over a date range'

    def add_arguments(self, parser):
        parser.add_argument('camp_type', choices=CampType.values)
        parser.add_argument('start', help='First day (YYYY-MM-DD)')
        parser.add_argument('end', help='Last day, inclusive (YYYY-MM-DD)')
        parser.add_argument('--half', default=None, help='Half-day rate')
        parser.add_argument('--full', default=None, help='Full-day rate')
        parser.add_argument(
            '--skip-weekends',
            action='store_true',
            help='Leave Saturdays and Sundays out of the range',
        )

    def handle(self, *args, **options):
        try:
            start = as_date(options['start'])
            end = as_date(options['end'])
        except ValidationError as exc:
            raise CommandError(exc.message)
        if end < start:
            raise CommandError('End date is before start date.')

        days = []
        day = start
        while day <= end:
            if not (options['skip_weekends'] and day.weekday() >= 5):
                days.append(day)
            day += timedelta(days=1)

        try:
            rows = seed_session_dates(
                options['camp_type'], days, half_rate=options['half'], full_rate=options['full'],
            )
        except ValidationError as exc:
            raise CommandError(exc.message)

        for row in rows:
            self.stdout.write(f'  {row.date.isoformat()}: half {row.half_day_rate}, full {row.full_day_rate}')
        self.stdout.write(
            self.style.SUCCESS(f'Published {len(rows)} day(s) for {options["camp_type"]}.')
        )
