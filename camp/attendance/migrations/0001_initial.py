# attendance/migrations/0001_initial.py
#
# AttendanceRecord with its one-row-per-child-per-day constraint.

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('bookings', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AttendanceRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('child_name', models.CharField(max_length=200)),
                ('attendance_date', models.DateField(default=django.utils.timezone.localdate)),
                ('check_in_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('check_out_time', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('marked_by', models.ForeignKey(
                    help_text='Staff member who checked the child in.',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='marked_attendance',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('registration', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='attendance_records',
                    to='bookings.registration',
                )),
            ],
            options={
                'verbose_name': 'Attendance Record',
                'verbose_name_plural': 'Attendance Records',
                'ordering': ['-attendance_date', 'check_in_time'],
                'constraints': [
                    models.UniqueConstraint(
                        fields=('registration', 'child_name', 'attendance_date'),
                        name='unique_daily_attendance_per_child',
                    ),
                ],
            },
        ),
    ]
