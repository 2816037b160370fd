# bookings/migrations/0001_initial.py
#
# SessionDate catalog, Registration and its Children.

import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

CAMP_TYPE_CHOICES = [
    ('easter', 'Easter Camp'),
    ('summer', 'Summer Camp'),
    ('end-year', 'End Year Camp'),
    ('mid-term-1', 'Mid-Term Camp 1'),
    ('mid-term-2', 'Mid-Term Camp 2'),
    ('mid-term-3', 'Mid-Term Camp 3'),
    ('mid-term-october', 'Mid-Term Camp – October'),
    ('mid-term-feb-march', 'Mid-Term Camp – Feb/March'),
    ('day-camps', 'Day Camps'),
    ('little-forest', 'Little Forest'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SessionDate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('camp_type', models.CharField(choices=CAMP_TYPE_CHOICES, max_length=30)),
                ('date', models.DateField()),
                ('half_day_rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('full_day_rate', models.DecimalField(decimal_places=2, max_digits=10)),
                ('is_active', models.BooleanField(
                    default=True,
                    help_text='Inactive dates disappear from the catalog used for pricing.',
                )),
            ],
            options={
                'verbose_name': 'Session Date',
                'verbose_name_plural': 'Session Dates',
                'ordering': ['camp_type', 'date'],
                'constraints': [
                    models.UniqueConstraint(fields=('camp_type', 'date'), name='unique_session_date_per_camp'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Registration',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('registration_number', models.CharField(
                    editable=False,
                    help_text='Human-facing reference quoted by guardians and staff.',
                    max_length=32,
                    unique=True,
                )),
                ('camp_type', models.CharField(choices=CAMP_TYPE_CHOICES, max_length=30)),
                ('parent_name', models.CharField(max_length=200)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(max_length=40)),
                ('emergency_contact', models.CharField(blank=True, max_length=200)),
                ('total_amount', models.DecimalField(
                    decimal_places=2,
                    help_text='Sum of the children prices, fixed at creation.',
                    max_digits=10,
                )),
                ('amount_paid', models.DecimalField(
                    decimal_places=2,
                    default=Decimal('0'),
                    help_text='Amount received so far, as recorded by payment reconciliation.',
                    max_digits=10,
                )),
                ('payment_status', models.CharField(
                    choices=[('unpaid', 'Unpaid'), ('partial', 'Partially paid'), ('paid', 'Paid')],
                    default='unpaid',
                    max_length=20,
                )),
                ('payment_method', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('card', 'Card'),
                        ('mobile_money', 'Mobile Money'),
                        ('cash_on_site', 'Cash on site'),
                    ],
                    default='pending',
                    max_length=20,
                )),
                ('payment_reference', models.CharField(blank=True, max_length=100)),
                ('registration_type', models.CharField(
                    choices=[
                        ('online_only', 'Online (pay later)'),
                        ('online_paid', 'Online (paid)'),
                        ('ground_registration', 'Ground registration'),
                    ],
                    default='online_only',
                    max_length=30,
                )),
                ('identity_token', models.CharField(
                    editable=False,
                    help_text='Opaque check-in token printed as a QR code.',
                    max_length=255,
                    unique=True,
                )),
                ('consent_given', models.BooleanField(default=False)),
                ('status', models.CharField(
                    choices=[('active', 'Active'), ('cancelled', 'Cancelled'), ('completed', 'Completed')],
                    default='active',
                    max_length=20,
                )),
                ('admin_notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(
                    blank=True,
                    help_text='Staff member who took a ground registration (empty for online).',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='created_registrations',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Registration',
                'verbose_name_plural': 'Registrations',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Child',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('position', models.PositiveSmallIntegerField(default=0)),
                ('child_name', models.CharField(max_length=200)),
                ('date_of_birth', models.DateField()),
                ('age_range', models.CharField(blank=True, max_length=50)),
                ('special_needs', models.TextField(blank=True)),
                ('session_types', models.JSONField(default=dict)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('registration', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='children',
                    to='bookings.registration',
                )),
            ],
            options={
                'verbose_name': 'Child',
                'verbose_name_plural': 'Children',
                'ordering': ['registration', 'position'],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('registration', 'child_name'),
                        name='unique_child_name_per_registration',
                    ),
                ],
            },
        ),
    ]
