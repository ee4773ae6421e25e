from django.conf import settings
from django.db import models
from django.utils import timezone


class Todo(models.Model):
    """
    Action item on a user's dashboard. Closed by emitting the matching
    ``completion_event`` for its module.
    """
    module = models.CharField(max_length=64)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="todos")
    link = models.CharField(max_length=255, blank=True)
    completion_event = models.CharField(max_length=255)
    deadline = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["completed", "deadline", "-created_at"]
        indexes = [models.Index(fields=["module", "completion_event"], name="todo_module_event_idx")]

    def __str__(self):
        return f"{self.assigned_to_id}: {self.title}"


class Notification(models.Model):
    module = models.CharField(max_length=64)
    title = models.CharField(max_length=255)
    content = models.TextField(blank=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    link = models.CharField(max_length=255, blank=True)
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user_id}: {self.title}"
