from django.conf import settings
from django.db import models


class SemesterType(models.TextChoices):
    ODD = "1", "Odd"
    EVEN = "2", "Even"
    SUMMER = "3", "Summer"


class AllocationStatus(models.TextChoices):
    NOT_STARTED = "notStarted", "Not started"
    FORM_COLLECTION = "formCollection", "Form collection"
    IN_ALLOCATION = "inAllocation", "In allocation"
    COMPLETED = "completed", "Completed"


# Strictly forward; each state has exactly one successor.
LIFECYCLE = [
    AllocationStatus.NOT_STARTED,
    AllocationStatus.FORM_COLLECTION,
    AllocationStatus.IN_ALLOCATION,
    AllocationStatus.COMPLETED,
]


class Semester(models.Model):
    academic_year = models.PositiveIntegerField(help_text="Starting calendar year, e.g. 2025 for 2025-26")
    semester_type = models.CharField(max_length=1, choices=SemesterType.choices)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    allocation_deadline = models.DateTimeField(null=True, blank=True)
    allocation_status = models.CharField(
        max_length=20,
        choices=AllocationStatus.choices,
        default=AllocationStatus.NOT_STARTED,
    )
    form = models.OneToOneField(
        "preferences.Form",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="semester",
    )
    hod_at_start = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    dca_convener_at_start = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-academic_year", "-semester_type"]
        unique_together = ("academic_year", "semester_type")

    def __str__(self):
        return f"{self.academic_year}-{self.academic_year + 1} {self.get_semester_type_display()} ({self.allocation_status})"

    def can_advance_to(self, target):
        current = LIFECYCLE.index(self.allocation_status)
        return LIFECYCLE.index(target) == current + 1
