import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('users', '0001_initial'),
        ('courses', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='FormTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='form_templates', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='TemplateField',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('label', models.CharField(max_length=255)),
                ('type', models.CharField(choices=[('TEACHING_ALLOCATION', 'Teaching allocation'), ('PREFERENCE', 'Preference')], max_length=32)),
                ('is_required', models.BooleanField(default=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('preference_count', models.PositiveSmallIntegerField(blank=True, help_text='Number of ranked choices; PREFERENCE fields only', null=True)),
                ('preference_type', models.CharField(blank=True, choices=[('LECTURE', 'Lecture'), ('TUTORIAL', 'Tutorial'), ('PRACTICAL', 'Practical')], help_text='Section type the ranking is for; PREFERENCE fields only', max_length=16, null=True)),
                ('group', models.ForeignKey(blank=True, help_text='Restrict choices to this course group', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='template_fields', to='courses.coursegroup')),
                ('template', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='fields', to='preferences.formtemplate')),
                ('viewable_by_role', models.ForeignKey(blank=True, help_text='Only holders of this role see the field', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='users.role')),
            ],
            options={
                'ordering': ['template', 'order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Form',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('published_date', models.DateTimeField(blank=True, null=True)),
                ('allocation_deadline', models.DateTimeField(blank=True, null=True)),
                ('email_msg_id', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('published_to_role', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='users.role')),
                ('template', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='forms', to='preferences.formtemplate')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='FormResponse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('preference', models.PositiveSmallIntegerField(blank=True, help_text='1 = most preferred', null=True)),
                ('taken_consecutively', models.BooleanField(default=False)),
                ('teaching_allocation', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('submitted_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('course', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='preference_responses', to='courses.course')),
                ('form', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='responses', to='preferences.form')),
                ('submitted_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='form_responses', to=settings.AUTH_USER_MODEL)),
                ('template_field', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='responses', to='preferences.templatefield')),
            ],
            options={
                'ordering': ['form', 'submitted_by', 'template_field', 'preference'],
                'indexes': [models.Index(fields=['form', 'course'], name='response_form_course_idx')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('preference__isnull', False)), fields=('form', 'submitted_by', 'template_field', 'preference'), name='uniq_response_rank_slot')],
            },
        ),
    ]
