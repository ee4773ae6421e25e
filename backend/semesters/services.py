"""
Semester lifecycle: notStarted -> formCollection -> inAllocation -> completed.

Every transition locks and re-reads the latest semester inside the write
transaction so concurrent requests cannot both advance it.
"""
import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from allocation.services import allocation_status
from courses.models import Course, DegreeType
from erp.exceptions import ConflictError, InvalidStateError, NotFoundError, PreconditionError
from handouts.services import create_handout_requests
from notifications.services import (
    ALLOCATION_MODULE, create_notifications, create_todos, send_department_email,
)
from preferences.services import eligible_users, get_form, not_responded, responders, submission_event
from users.models import Role, User

from .models import AllocationStatus, Semester
from .repository import resolve

logger = logging.getLogger(__name__)

PUBLISH_SUBJECT = "Teaching Allocation Submission For the Upcoming Semester"
REMIND_SUBJECT = "REMINDER: Teaching Allocation Submission For the Upcoming Semester"
REMIND_BODY = (
    "This is a reminder to the previous mail regarding submission of course preferences "
    "for the upcoming semester. Please submit your preferences before the deadline."
)
TODO_TITLE = "Course Preference Submission Reminder"
TODO_TEXT = "Submit your course preferences for the upcoming semester"


def _role_holder(role_name):
    return (
        User.objects.filter(userroles__role__role_name=role_name, userroles__is_active=True, deactivated=False)
        .order_by("-userroles__assigned_at")
        .first()
    )


def _latest_matching(semester_id, repository):
    """Lock the latest semester and make sure it is the one being acted on."""
    semester = resolve(repository).latest_or_raise(for_update=True)
    if str(semester.pk) != str(semester_id):
        if not Semester.objects.filter(pk=semester_id).exists():
            raise NotFoundError(f"Semester {semester_id} not found.")
        raise InvalidStateError("Only the latest semester can change state.")
    return semester


def _form_link(form_id):
    return f"{settings.FRONTEND_URL.rstrip('/')}/allocation/forms/{form_id}/submit"


def _notify(recipients, form, actor):
    link = _form_link(form.pk)
    create_todos([
        {
            "module": ALLOCATION_MODULE,
            "title": TODO_TITLE,
            "description": TODO_TEXT,
            "assigned_to": user,
            "link": link,
            "completion_event": submission_event(user.email),
            "deadline": form.allocation_deadline,
            "created_by": actor,
        }
        for user in recipients
    ])
    create_notifications([
        {
            "module": ALLOCATION_MODULE,
            "title": TODO_TITLE,
            "content": TODO_TEXT,
            "user": user,
            "link": link,
        }
        for user in recipients
    ])


def list_semesters():
    return Semester.objects.select_related("form", "hod_at_start", "dca_convener_at_start")


def create_semester(academic_year, semester_type, start_date=None, end_date=None, repository=None):
    """
    Open a new semester. The previous latest semester must have completed and
    the new one must sort after it.
    """
    with transaction.atomic():
        if Semester.objects.filter(academic_year=academic_year, semester_type=semester_type).exists():
            raise ConflictError(f"Semester {academic_year}/{semester_type} already exists.")

        latest = resolve(repository).latest(for_update=True)
        if latest is not None:
            if latest.allocation_status != AllocationStatus.COMPLETED:
                raise InvalidStateError("The latest semester has not completed allocation yet.")
            if (academic_year, str(semester_type)) < (latest.academic_year, latest.semester_type):
                raise PreconditionError("A new semester must come after the latest one.")

        try:
            with transaction.atomic():
                semester = Semester.objects.create(
                    academic_year=academic_year,
                    semester_type=semester_type,
                    start_date=start_date,
                    end_date=end_date,
                    hod_at_start=_role_holder("HoD"),
                    dca_convener_at_start=_role_holder("DCA Convener"),
                )
        except IntegrityError:
            raise ConflictError(f"Semester {academic_year}/{semester_type} already exists.")

    logger.info("Semester %s created", semester)
    return semester


def link_form(semester_id, form_id, repository=None):
    with transaction.atomic():
        semester = _latest_matching(semester_id, repository)
        if semester.allocation_status != AllocationStatus.NOT_STARTED:
            raise InvalidStateError("A form can only be linked before preference collection starts.")
        form = get_form(form_id)
        if Semester.objects.filter(form=form).exclude(pk=semester.pk).exists():
            raise ConflictError("This form is already linked to another semester.")
        semester.form = form
        semester.save(update_fields=["form", "updated_at"])

    logger.info("Form %s linked to semester %s", form.pk, semester)
    return semester


def publish_form(semester_id, deadline, email_body, actor=None, role_id=None, repository=None, now=None):
    """
    notStarted -> formCollection. Opens the linked form until ``deadline``,
    creates a todo and a notification per eligible user and mails them all
    in blind copy; the mail's Message-ID is kept for threaded reminders.
    """
    now = now or timezone.now()
    with transaction.atomic():
        semester = _latest_matching(semester_id, repository)
        if semester.form_id is None:
            raise PreconditionError("A form must be linked before it can be published.")
        if not semester.can_advance_to(AllocationStatus.FORM_COLLECTION):
            raise PreconditionError("The form has already been published.")
        if deadline <= now:
            raise PreconditionError("Deadline must be in the future.")

        form = semester.form
        if role_id is not None:
            try:
                form.published_to_role = Role.objects.get(pk=role_id)
            except Role.DoesNotExist:
                raise NotFoundError(f"Role {role_id} not found.")
        form.published_date = now
        form.allocation_deadline = deadline

        recipients = list(eligible_users(form))
        _notify(recipients, form, actor)
        form.email_msg_id = send_department_email(
            PUBLISH_SUBJECT, email_body, [u.email for u in recipients]
        )
        form.save()

        semester.allocation_deadline = deadline
        semester.allocation_status = AllocationStatus.FORM_COLLECTION
        semester.save(update_fields=["allocation_deadline", "allocation_status", "updated_at"])

    logger.info("Semester %s: form published to %d user(s)", semester, len(recipients))
    return semester


def end_form(semester_id, repository=None, now=None):
    """formCollection -> inAllocation. Closes the form; responses are kept."""
    with transaction.atomic():
        semester = _latest_matching(semester_id, repository)
        if semester.form_id is None:
            raise PreconditionError("No form is linked to this semester.")
        if not semester.can_advance_to(AllocationStatus.IN_ALLOCATION):
            raise InvalidStateError("Preference collection is not running.")

        form = semester.form
        form.allocation_deadline = now or timezone.now()
        form.save(update_fields=["allocation_deadline", "updated_at"])

        semester.allocation_status = AllocationStatus.IN_ALLOCATION
        semester.save(update_fields=["allocation_status", "updated_at"])

    logger.info("Semester %s: form closed, allocation started", semester)
    return semester


def end_allocation(semester_id, repository=None):
    """inAllocation -> completed. Emits a handout request per non-PhD course."""
    with transaction.atomic():
        semester = _latest_matching(semester_id, repository)
        if semester.form_id is None:
            raise PreconditionError("No form is linked to this semester.")
        if not semester.can_advance_to(AllocationStatus.COMPLETED):
            raise InvalidStateError("Allocation is not running.")

        semester.allocation_status = AllocationStatus.COMPLETED
        semester.save(update_fields=["allocation_status", "updated_at"])
        requests_made = create_handout_requests(semester)

    logger.info("Semester %s completed, %d handout request(s)", semester, len(requests_made))
    return semester


def remind(actor=None, repository=None):
    """Re-notify eligible users who have not responded yet; returns them."""
    semester = resolve(repository).latest_or_raise()
    if semester.form_id is None or not semester.form.is_published:
        raise PreconditionError("Form not published yet")
    if semester.allocation_status != AllocationStatus.FORM_COLLECTION:
        raise InvalidStateError("Preference collection is not running.")

    form = semester.form
    recipients = list(not_responded(form))
    if not recipients:
        logger.info("Reminder skipped, everyone has responded")
        return recipients

    with transaction.atomic():
        _notify(recipients, form, actor)
        send_department_email(
            REMIND_SUBJECT,
            REMIND_BODY,
            [u.email for u in recipients],
            in_reply_to=form.email_msg_id or None,
        )

    logger.info("Reminder sent to %d user(s)", len(recipients))
    return recipients


def allocation_stats_by_degree(semester):
    """Status counts of marked courses per degree the course is offered to."""
    keys = {"Not Started": "notStarted", "Pending": "pending", "Allocated": "completed"}
    stats = {degree: {"notStarted": 0, "pending": 0, "completed": 0} for degree in DegreeType.values}
    degree_of = dict(Course.objects.filter(marked_for_allocation=True).values_list("code", "offered_to"))
    for code, status in allocation_status(semester).items():
        degree = degree_of.get(code)
        if degree is not None:
            stats[degree][keys[status]] += 1
    return stats


def get_latest_semester(minimal=False, stats=False, repository=None):
    """
    Latest semester with, unless ``minimal``, the distinct responders of its
    form. ``stats`` adds the not-responded list during form collection or
    per-degree allocation counts during allocation.
    """
    if minimal and stats:
        raise ValidationError(
            "Response information cannot be included when minimal semester information is requested"
        )
    semester = resolve(repository).latest_or_raise()
    result = {"semester": semester}
    if minimal:
        return result

    result["responders"] = responders(semester.form) if semester.form_id else []
    if stats and semester.form_id:
        if semester.allocation_status == AllocationStatus.FORM_COLLECTION:
            result["not_responded"] = list(not_responded(semester.form))
        elif semester.allocation_status == AllocationStatus.IN_ALLOCATION:
            result["allocation_stats"] = allocation_stats_by_degree(semester)
    return result
