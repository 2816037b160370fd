# communications/migrations/0001_initial.py
#
# NotificationLog audit trail.

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('bookings', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='NotificationLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notification_type', models.CharField(
                    choices=[
                        ('billing_alert', 'Billing Alert'),
                        ('registration_confirmation', 'Registration Confirmation'),
                        ('custom', 'Custom Message'),
                    ],
                    default='billing_alert',
                    max_length=30,
                )),
                ('channel', models.CharField(
                    choices=[('email', 'Email'), ('sms', 'SMS')],
                    default='email',
                    max_length=10,
                )),
                ('recipients', models.TextField(
                    blank=True,
                    help_text='Comma-separated addresses the message was sent to.',
                )),
                ('subject', models.CharField(blank=True, max_length=255)),
                ('body_preview', models.TextField(
                    blank=True,
                    help_text='First 500 characters of the message body (for the audit log).',
                )),
                ('sent_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('success', models.BooleanField(
                    default=True,
                    help_text='False if the send attempt failed (e.g. SMTP error).',
                )),
                ('error_message', models.TextField(blank=True)),
                ('registration', models.ForeignKey(
                    blank=True,
                    help_text='The registration this message is about (if applicable).',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='notifications',
                    to='bookings.registration',
                )),
            ],
            options={
                'verbose_name': 'Notification Log',
                'verbose_name_plural': 'Notification Logs',
                'ordering': ['-sent_at'],
            },
        ),
    ]
