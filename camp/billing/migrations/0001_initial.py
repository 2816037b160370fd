# billing/migrations/0001_initial.py
#
# BillingActionItem; at most one pending item per (registration, child).

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
        ('bookings', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BillingActionItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('registration_type', models.CharField(
                    default='camp',
                    help_text='Which kind of booking raised the item.',
                    max_length=30,
                )),
                ('child_name', models.CharField(max_length=200)),
                ('parent_name', models.CharField(max_length=200)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=40)),
                ('action_type', models.CharField(
                    choices=[
                        ('invoice_needed', 'Invoice needed'),
                        ('receipt_needed', 'Receipt needed'),
                        ('payment_followup', 'Payment follow-up'),
                    ],
                    default='invoice_needed',
                    max_length=30,
                )),
                ('amount_due', models.DecimalField(decimal_places=2, max_digits=10)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=10)),
                ('camp_type', models.CharField(blank=True, choices=CAMP_TYPE_CHOICES, max_length=30)),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('in_progress', 'In progress'),
                        ('completed', 'Completed'),
                        ('cancelled', 'Cancelled'),
                    ],
                    default='pending',
                    max_length=20,
                )),
                ('notes', models.TextField(blank=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('completed_by', models.ForeignKey(
                    blank=True,
                    help_text='Billing staff member who resolved the item.',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='completed_billing_items',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('registration', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='billing_items',
                    to='bookings.registration',
                )),
            ],
            options={
                'verbose_name': 'Billing Action Item',
                'verbose_name_plural': 'Billing Action Items',
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('status', 'pending')),
                        fields=('registration', 'child_name'),
                        name='unique_pending_billing_item_per_child',
                    ),
                ],
            },
        ),
    ]
