"""
Preference form engine: who may answer a form, which fields they see, how a
response is validated and stored, and how stored preferences are ranked.
"""
import logging
from collections import defaultdict

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from courses.models import Course
from erp.exceptions import ConflictError, ForbiddenError, InvalidStateError, NotFoundError
from notifications.services import ALLOCATION_MODULE, complete_todo
from semesters.models import AllocationStatus, Semester
from users.models import PhdType, User, UserType
from users.permissions import ALLOCATION_WRITE, FORM_VIEW, has_capability

from .answers import PreferenceAnswer, parse_answer, response_values
from .models import FieldType, Form, FormResponse, FormTemplate, TemplateField

logger = logging.getLogger(__name__)


def submission_event(email):
    return f"preference submission by {email}"


# ---- builder -----------------------------------------------------------------

@transaction.atomic
def create_template(name, description, fields, actor=None):
    template = FormTemplate.objects.create(name=name, description=description or "", created_by=actor)
    for index, values in enumerate(fields):
        TemplateField.objects.create(template=template, order=values.pop("order", index), **values)
    logger.info("Form template '%s' created with %d field(s)", name, len(fields))
    return template


def create_form(template_id, title, description="", actor=None):
    try:
        template = FormTemplate.objects.get(pk=template_id)
    except FormTemplate.DoesNotExist:
        raise NotFoundError(f"Template {template_id} not found.")
    return Form.objects.create(template=template, title=title, description=description or "", created_by=actor)


def get_form(form_id):
    try:
        return Form.objects.select_related("template", "published_to_role").get(pk=form_id)
    except (Form.DoesNotExist, ValueError):
        raise NotFoundError("Form not found")


# ---- eligibility -------------------------------------------------------------

def eligible_users(form=None):
    """
    Users expected to answer ``form``: holders of the role it was published
    to (all faculty and PhD scholars when it names none), never deactivated
    accounts, and PhD scholars only when full-time.
    """
    qs = User.objects.filter(deactivated=False)
    if form is not None and form.published_to_role_id:
        qs = qs.filter(userroles__role_id=form.published_to_role_id, userroles__is_active=True)
    else:
        qs = qs.filter(type__in=[UserType.FACULTY, UserType.PHD])
    qs = qs.filter(~Q(type=UserType.PHD) | Q(phd__phd_type=PhdType.FULL_TIME))
    return qs.select_related("faculty", "phd").distinct().order_by("type", "email")


def responders(form):
    """Distinct submitters of ``form``, faculty before everyone else."""
    users = User.objects.filter(form_responses__form=form).select_related("faculty", "phd").distinct()
    return sorted(users, key=lambda u: (u.type != UserType.FACULTY, u.email))


def not_responded(form):
    return eligible_users(form).exclude(pk__in=FormResponse.objects.filter(form=form).values("submitted_by"))


# ---- visibility --------------------------------------------------------------

def can_preview(user):
    return has_capability(user, ALLOCATION_WRITE) or has_capability(user, FORM_VIEW)


def _field_visible(field, user, role_ids):
    if field.viewable_by_role_id and field.viewable_by_role_id not in role_ids:
        return False
    # teaching allocation is a faculty-only question
    if field.type == FieldType.TEACHING_ALLOCATION and user.type != UserType.FACULTY:
        return False
    return True


def visible_fields(template, user, preview=False):
    """
    Fields of ``template`` shown to ``user``. Reviewers may ask for a preview,
    which shows every field regardless of role or user type.
    """
    fields = list(template.fields.select_related("group", "viewable_by_role"))
    if preview:
        if not can_preview(user):
            raise ForbiddenError("You cannot preview this form.")
        return fields
    role_ids = user.get_role_ids()
    visible = [f for f in fields if _field_visible(f, user, role_ids)]
    if not visible:
        raise ForbiddenError("None of this form's fields are visible to you.")
    return visible


# ---- responses ---------------------------------------------------------------

def _validate_answers(answers, fields, visible_ids):
    by_field = defaultdict(list)
    for answer in answers:
        by_field[answer.field_id].append(answer)

    for field_id in visible_ids:
        field = fields[field_id]
        if field.is_required and not by_field.get(field_id):
            raise ValidationError({"response": f"Field '{field.label}' is required."})

    codes = {a.course_code for a in answers if isinstance(a, PreferenceAnswer)}
    known = set(Course.objects.filter(code__in=codes).values_list("code", flat=True))
    if codes - known:
        raise NotFoundError(f"Unknown course(s): {', '.join(sorted(codes - known))}")

    for field_id, items in by_field.items():
        field = fields[field_id]
        if field.type == FieldType.TEACHING_ALLOCATION:
            if len(items) != 1:
                raise ValidationError({"response": f"Field '{field.label}' takes a single value."})
        elif field.type == FieldType.PREFERENCE:
            ranks = sorted(a.preference for a in items)
            if ranks != list(range(1, len(ranks) + 1)):
                raise ValidationError({"response": f"Preferences for '{field.label}' must be unique and start at 1."})
            if field.preference_count and len(items) > field.preference_count:
                raise ValidationError(
                    {"response": f"'{field.label}' allows at most {field.preference_count} preferences."}
                )
            if len({a.course_code for a in items}) != len(items):
                raise ValidationError({"response": f"A course can be ranked only once in '{field.label}'."})
            if field.group_id:
                allowed = set(field.group.courses.values_list("code", flat=True))
                outside = sorted(a.course_code for a in items if a.course_code not in allowed)
                if outside:
                    raise ValidationError(
                        {"response": f"{', '.join(outside)} not in group '{field.group.name}'."}
                    )
        else:
            raise ValueError(f"Unhandled field type: {field.type}")


def register_response(form_id, user, items, now=None):
    """
    Store ``user``'s single response to a published form. The whole payload
    is validated first; rows are written in one transaction together with
    completing the user's submission todo.
    """
    now = now or timezone.now()
    form = get_form(form_id)

    if not form.is_published:
        raise InvalidStateError("Form not published")
    if form.published_to_role_id and form.published_to_role_id not in user.get_role_ids():
        raise ForbiddenError("You do not have permission to submit this form")
    if FormResponse.objects.filter(form=form, submitted_by=user).exists():
        raise ConflictError("You have already submitted a response for this form")

    semester = Semester.objects.filter(form=form).first()
    if (
        semester is not None
        and semester.allocation_status != AllocationStatus.FORM_COLLECTION
        and form.is_past_deadline(now)
    ):
        raise InvalidStateError("Form Deadline is Over")

    if not items:
        raise ValidationError({"response": "Response is empty."})

    fields = {f.pk: f for f in form.template.fields.select_related("group")}
    visible_ids = {f.pk for f in visible_fields(form.template, user)}
    answers = []
    for raw in items:
        try:
            field = fields.get(int(raw.get("template_field")))
        except (TypeError, ValueError):
            field = None
        if field is None:
            raise NotFoundError(f"Field {raw.get('template_field')} is not part of this form.")
        if field.pk not in visible_ids:
            raise ForbiddenError(f"Field '{field.label}' is not visible to you.")
        answers.append(parse_answer(raw, field))

    _validate_answers(answers, fields, visible_ids)

    try:
        with transaction.atomic():
            FormResponse.objects.bulk_create([
                FormResponse(form=form, submitted_by=user, submitted_at=now, **response_values(a))
                for a in answers
            ])
            complete_todo(ALLOCATION_MODULE, submission_event(user.email))
    except IntegrityError:
        raise ConflictError("You have already submitted a response for this form")

    logger.info("Form %s: %d answer(s) registered for %s", form.pk, len(answers), user.email)
    return answers


def user_response(form, user):
    return list(
        FormResponse.objects.filter(form=form, submitted_by=user)
        .select_related("template_field", "course")
        .order_by("template_field__order", "preference")
    )


def grouped_responses(form):
    """Every response row of ``form`` grouped per submitter."""
    rows = (
        FormResponse.objects.filter(form=form)
        .select_related("submitted_by__faculty", "submitted_by__phd", "template_field", "course")
        .order_by("submitted_by__email", "template_field__order", "preference")
    )
    grouped = {}
    for row in rows:
        entry = grouped.setdefault(row.submitted_by.email, {
            "submitted_by": row.submitted_by,
            "submitted_at": row.submitted_at,
            "rows": [],
        })
        entry["rows"].append(row)
    return list(grouped.values())


# ---- rankings ----------------------------------------------------------------

def preference_rows(form, course_code, section_type):
    """
    Preference rows for (course, section type), best rank first. Ties on rank
    keep submission order.
    """
    if form is None:
        return []
    return list(
        FormResponse.objects.filter(
            form=form,
            course_id=course_code,
            template_field__type=FieldType.PREFERENCE,
            template_field__preference_type=section_type,
            teaching_allocation__isnull=True,
            preference__isnull=False,
        )
        .select_related("submitted_by__faculty", "submitted_by__phd")
        .order_by("preference", "submitted_at", "id")
    )


def preference_ranks(form, course_code, section_type):
    """email -> (preference, taken_consecutively); a submitter's best rank wins."""
    ranks = {}
    for row in preference_rows(form, course_code, section_type):
        ranks.setdefault(row.submitted_by.email, (row.preference, row.taken_consecutively))
    return ranks


def other_preferences(form, course_code, section_type, exclude_email):
    """Peers' stated preferences for the pair, without ``exclude_email``'s own."""
    exclude_email = (exclude_email or "").lower()
    return [
        row for row in preference_rows(form, course_code, section_type)
        if row.submitted_by.email != exclude_email
    ]


def teaching_allocations(form):
    """email -> declared teaching allocation percentage."""
    rows = FormResponse.objects.filter(form=form, teaching_allocation__isnull=False).select_related("submitted_by")
    return {row.submitted_by.email: row.teaching_allocation for row in rows}

