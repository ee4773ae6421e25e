from django.conf import settings
from django.db import models


class HandoutStatus(models.TextChoices):
    NOT_SUBMITTED = "notsubmitted", "Not submitted"
    PENDING = "pending", "Pending review"
    APPROVED = "approved", "Approved"
    REVISION = "revision", "Revision requested"


class CourseHandoutRequest(models.Model):
    """Handout the IC owes for a course once allocation has completed."""
    semester = models.ForeignKey("semesters.Semester", on_delete=models.CASCADE, related_name="handout_requests")
    course = models.ForeignKey("courses.Course", on_delete=models.CASCADE, related_name="handout_requests")
    ic = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="handout_requests",
    )
    status = models.CharField(max_length=20, choices=HandoutStatus.choices, default=HandoutStatus.NOT_SUBMITTED)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("semester", "course")
        ordering = ["semester", "course"]

    def __str__(self):
        return f"{self.course_id} ({self.semester_id}) -> {self.ic_id or 'no IC'}"
