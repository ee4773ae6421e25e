import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Course',
            fields=[
                ('code', models.CharField(help_text='Unique course code (e.g., CS F211)', max_length=32, primary_key=True, serialize=False)),
                ('name', models.CharField(help_text='Full name of the course', max_length=255)),
                ('lecture_units', models.PositiveIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('practical_units', models.PositiveIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('total_units', models.PositiveIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ('offered_as', models.CharField(choices=[('CDC', 'Compulsory Discipline Course'), ('DEL', 'Discipline Elective'), ('HEL', 'Humanities Elective')], default='CDC', max_length=3)),
                ('offered_to', models.CharField(choices=[('FD', 'First Degree'), ('HD', 'Higher Degree'), ('PhD', 'PhD')], default='FD', max_length=3)),
                ('offered_also_by', models.JSONField(blank=True, default=list, help_text='Other department codes offering this course')),
                ('marked_for_allocation', models.BooleanField(default=False)),
                ('fetched_from_ttd', models.BooleanField(default=False, help_text='True when the row came from the timetable system sync')),
                ('timetable_course_id', models.IntegerField(blank=True, help_text='Course id in the timetable system; required for pushing', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Course',
                'verbose_name_plural': 'Courses',
                'db_table': 'courses',
                'ordering': ['code'],
            },
        ),
        migrations.CreateModel(
            name='CourseGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100, unique=True)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('courses', models.ManyToManyField(blank=True, related_name='groups', to='courses.course')),
            ],
            options={
                'db_table': 'course_groups',
                'ordering': ['name'],
            },
        ),
    ]
