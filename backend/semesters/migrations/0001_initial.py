import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('preferences', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Semester',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('academic_year', models.PositiveIntegerField(help_text='Starting calendar year, e.g. 2025 for 2025-26')),
                ('semester_type', models.CharField(choices=[('1', 'Odd'), ('2', 'Even'), ('3', 'Summer')], max_length=1)),
                ('start_date', models.DateTimeField(blank=True, null=True)),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('allocation_deadline', models.DateTimeField(blank=True, null=True)),
                ('allocation_status', models.CharField(choices=[('notStarted', 'Not started'), ('formCollection', 'Form collection'), ('inAllocation', 'In allocation'), ('completed', 'Completed')], default='notStarted', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('dca_convener_at_start', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('form', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='semester', to='preferences.form')),
                ('hod_at_start', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-academic_year', '-semester_type'],
                'unique_together': {('academic_year', 'semester_type')},
            },
        ),
    ]
