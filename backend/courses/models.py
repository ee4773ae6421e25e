#courses/models.py
from django.db import models
from django.core.validators import MinValueValidator


class SectionType(models.TextChoices):
    LECTURE = "LECTURE", "Lecture"
    TUTORIAL = "TUTORIAL", "Tutorial"
    PRACTICAL = "PRACTICAL", "Practical"


class OfferedAs(models.TextChoices):
    CDC = "CDC", "Compulsory Discipline Course"
    DEL = "DEL", "Discipline Elective"
    HEL = "HEL", "Humanities Elective"


class DegreeType(models.TextChoices):
    FD = "FD", "First Degree"
    HD = "HD", "Higher Degree"
    PHD = "PhD", "PhD"


class Course(models.Model):
    """
    A course the department offers. ``code`` is the full code including the
    department prefix, e.g. ``CS F211``.
    """
    code = models.CharField(
        max_length=32,
        primary_key=True,
        help_text="Unique course code (e.g., CS F211)"
    )
    name = models.CharField(max_length=255, help_text="Full name of the course")
    lecture_units = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    practical_units = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    total_units = models.PositiveIntegerField(default=0, validators=[MinValueValidator(0)])
    offered_as = models.CharField(max_length=3, choices=OfferedAs.choices, default=OfferedAs.CDC)
    offered_to = models.CharField(max_length=3, choices=DegreeType.choices, default=DegreeType.FD)
    offered_also_by = models.JSONField(
        default=list,
        blank=True,
        help_text="Other department codes offering this course"
    )
    marked_for_allocation = models.BooleanField(default=False)
    fetched_from_ttd = models.BooleanField(
        default=False,
        help_text="True when the row came from the timetable system sync"
    )
    timetable_course_id = models.IntegerField(
        null=True,
        blank=True,
        help_text="Course id in the timetable system; required for pushing"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'courses'
        ordering = ['code']
        verbose_name = 'Course'
        verbose_name_plural = 'Courses'

    def __str__(self):
        return f"{self.code} - {self.name}"

    def clean(self):
        if self.code:
            self.code = " ".join(self.code.upper().split())

    @property
    def is_multi_department(self):
        return bool(self.offered_also_by)

    def units_for(self, section_type):
        """Units one section of ``section_type`` is worth. Tutorials count as 1."""
        if section_type == SectionType.LECTURE:
            return self.lecture_units or 0
        if section_type == SectionType.PRACTICAL:
            return self.practical_units or 0
        return 1


class CourseGroup(models.Model):
    """Named set of courses a preference field can be restricted to."""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    courses = models.ManyToManyField(Course, related_name='groups', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'course_groups'
        ordering = ['name']

    def __str__(self):
        return self.name
