from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from courses.models import SectionType


class FieldType(models.TextChoices):
    TEACHING_ALLOCATION = "TEACHING_ALLOCATION", "Teaching allocation"
    PREFERENCE = "PREFERENCE", "Preference"


class FormTemplate(models.Model):
    """Reusable, ordered list of fields a preference form is built from."""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="form_templates",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.name


class TemplateField(models.Model):
    template = models.ForeignKey(FormTemplate, on_delete=models.CASCADE, related_name="fields")
    label = models.CharField(max_length=255)
    type = models.CharField(max_length=32, choices=FieldType.choices)
    is_required = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0)
    preference_count = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text="Number of ranked choices; PREFERENCE fields only",
    )
    preference_type = models.CharField(
        max_length=16,
        choices=SectionType.choices,
        null=True,
        blank=True,
        help_text="Section type the ranking is for; PREFERENCE fields only",
    )
    group = models.ForeignKey(
        "courses.CourseGroup",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="template_fields",
        help_text="Restrict choices to this course group",
    )
    viewable_by_role = models.ForeignKey(
        "users.Role",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Only holders of this role see the field",
    )

    class Meta:
        ordering = ["template", "order", "id"]

    def __str__(self):
        return f"{self.label} ({self.type})"


class Form(models.Model):
    """A template instantiated for one semester's preference collection."""
    template = models.ForeignKey(FormTemplate, on_delete=models.PROTECT, related_name="forms")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    published_to_role = models.ForeignKey(
        "users.Role",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    published_date = models.DateTimeField(null=True, blank=True)
    allocation_deadline = models.DateTimeField(null=True, blank=True)
    email_msg_id = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    @property
    def is_published(self):
        return self.published_date is not None

    def is_past_deadline(self, now=None):
        if self.allocation_deadline is None:
            return False
        return (now or timezone.now()) > self.allocation_deadline


class FormResponse(models.Model):
    """
    One row per (submitter, field, rank slot). Preference rows carry a course
    and a rank; teaching-allocation rows carry only the percentage.
    """
    form = models.ForeignKey(Form, on_delete=models.CASCADE, related_name="responses")
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="form_responses",
    )
    template_field = models.ForeignKey(TemplateField, on_delete=models.CASCADE, related_name="responses")
    course = models.ForeignKey(
        "courses.Course",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="preference_responses",
    )
    preference = models.PositiveSmallIntegerField(null=True, blank=True, help_text="1 = most preferred")
    taken_consecutively = models.BooleanField(default=False)
    teaching_allocation = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    submitted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["form", "submitted_by", "template_field", "preference"]
        constraints = [
            models.UniqueConstraint(
                fields=["form", "submitted_by", "template_field", "preference"],
                condition=Q(preference__isnull=False),
                name="uniq_response_rank_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["form", "course"], name="response_form_course_idx"),
        ]

    def __str__(self):
        if self.teaching_allocation is not None:
            return f"{self.submitted_by_id}: {self.teaching_allocation}%"
        return f"{self.submitted_by_id}: #{self.preference} {self.course_id}"
