#allocation/models.py
from django.conf import settings
from django.db import models

from courses.models import SectionType


class MasterAllocation(models.Model):
    """
    A course's allocation for one semester. Owns the course's sections for
    the term; ``ic`` is the instructor-in-charge.
    """
    semester = models.ForeignKey(
        "semesters.Semester",
        on_delete=models.CASCADE,
        related_name="master_allocations",
    )
    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        related_name="master_allocations",
    )
    ic = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ic_allocations",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("semester", "course")
        ordering = ["course"]

    def __str__(self):
        return f"{self.course_id} ({self.semester_id})"


class AllocationSection(models.Model):
    """
    One lecture, tutorial or practical section. Its number (L1, T2, ...) is
    derived from creation order among same-type siblings and never stored.
    """
    master = models.ForeignKey(MasterAllocation, on_delete=models.CASCADE, related_name="sections")
    type = models.CharField(max_length=16, choices=SectionType.choices)
    timetable_room_id = models.CharField(max_length=64, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["master", "type", "created_at", "id"]

    def __str__(self):
        return f"{self.master.course_id} {self.type} #{self.pk}"


class SectionInstructor(models.Model):
    section = models.ForeignKey(AllocationSection, on_delete=models.CASCADE, related_name="instructors")
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="allocation_sections",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        # guards against assigning the same instructor twice
        unique_together = ("section", "instructor")
        ordering = ["section", "created_at", "id"]

    def __str__(self):
        return f"{self.section} -> {self.instructor_id}"
