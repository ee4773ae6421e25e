"""
Todos, in-app notifications and departmental mail.
"""
import logging
from email.utils import make_msgid

from django.conf import settings
from django.core.mail import EmailMessage
from django.utils import timezone

from erp.exceptions import ExternalSystemError

from .models import Notification, Todo

logger = logging.getLogger(__name__)

ALLOCATION_MODULE = "Course Allocation"


def create_todos(items):
    """``items`` are dicts of Todo field values; returns the created rows."""
    todos = Todo.objects.bulk_create([Todo(**item) for item in items])
    logger.debug("Created %d todo(s)", len(todos))
    return todos


def create_notifications(items):
    notifications = Notification.objects.bulk_create([Notification(**item) for item in items])
    logger.debug("Created %d notification(s)", len(notifications))
    return notifications


def complete_todo(module, completion_event):
    """Close every open todo of ``module`` waiting on ``completion_event``."""
    return Todo.objects.filter(
        module=module,
        completion_event=completion_event,
        completed=False,
    ).update(completed=True, completed_at=timezone.now())


def _message_domain():
    email = settings.DEPARTMENT_EMAIL or ""
    return email.split("@", 1)[1] if "@" in email else None


def send_department_email(subject, body, bcc, in_reply_to=None):
    """
    Mail the department address with every recipient blind-copied. Returns
    the Message-ID so later mails can be threaded under it.
    """
    message_id = make_msgid(domain=_message_domain())
    headers = {"Message-ID": message_id}
    if in_reply_to:
        headers["In-Reply-To"] = in_reply_to
        headers["References"] = in_reply_to

    msg = EmailMessage(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[settings.DEPARTMENT_EMAIL],
        bcc=list(bcc),
        headers=headers,
    )
    try:
        msg.send(fail_silently=False)
    except OSError as e:
        logger.error("Department mail '%s' failed: %s", subject, e)
        raise ExternalSystemError(f"Could not send email: {e}")

    logger.info("Department mail '%s' sent to %d recipient(s)", subject, len(msg.bcc))
    return message_id
