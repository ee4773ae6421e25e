"""
Allocation of instructors to course sections for the latest semester.

Statuses, loads and section numbers are never stored; they are derived from
the current rows through ``allocation.engine`` on every read. Writes are only
accepted while the latest semester is in allocation.
"""
import logging
from collections import defaultdict

from django.db import IntegrityError, transaction
from django.db.models import Count

from courses.models import Course, SectionType
from erp.exceptions import ConflictError, InvalidStateError, NotFoundError, PreconditionError
from preferences.services import eligible_users, preference_ranks
from semesters.models import AllocationStatus
from semesters.repository import resolve
from users.models import User, UserType

from . import engine
from .models import AllocationSection, MasterAllocation, SectionInstructor

logger = logging.getLogger(__name__)

INSTRUCTOR_TYPES = (UserType.FACULTY, UserType.PHD)


# ---- lookups -----------------------------------------------------------------

def _course(code):
    try:
        return Course.objects.get(pk=" ".join(str(code).upper().split()))
    except Course.DoesNotExist:
        raise NotFoundError(f"Course {code} not found.")


def _instructor(email):
    try:
        user = User.objects.select_related("faculty", "phd").get(email=(email or "").strip().lower())
    except User.DoesNotExist:
        raise NotFoundError(f"User {email} not found.")
    if user.type not in INSTRUCTOR_TYPES:
        raise PreconditionError(f"{user.email} is not an instructor.")
    return user


def _section_type(value):
    if value not in SectionType.values:
        raise PreconditionError(f"Unknown section type '{value}'.")
    return value


def _writable_semester(repository):
    """Lock the latest semester; it must be in allocation."""
    semester = resolve(repository).latest_or_raise(for_update=True)
    if semester.allocation_status != AllocationStatus.IN_ALLOCATION:
        raise InvalidStateError("Allocation is not running for the latest semester.")
    return semester


def _master(semester, master_id):
    try:
        return MasterAllocation.objects.select_related("course").get(pk=master_id, semester=semester)
    except (MasterAllocation.DoesNotExist, ValueError):
        raise NotFoundError(f"Allocation {master_id} not found.")


def _section(semester, section_id):
    try:
        return AllocationSection.objects.select_related("master__course").get(
            pk=section_id, master__semester=semester
        )
    except (AllocationSection.DoesNotExist, ValueError):
        raise NotFoundError(f"Section {section_id} not found.")


# ---- derived state -----------------------------------------------------------

def allocation_status(semester=None, repository=None):
    """course code -> status for every known course in ``semester``."""
    semester = semester or resolve(repository).latest_or_raise()
    counts = defaultdict(list)
    sections = (
        AllocationSection.objects.filter(master__semester=semester)
        .annotate(n=Count("instructors"))
        .values_list("master__course_id", "n")
    )
    for code, n in sections:
        counts[code].append(n)
    return {
        code: engine.course_status(counts.get(code, []))
        for code in Course.objects.values_list("code", flat=True)
    }


def _load_table(semester, instructor=None):
    """(email, section type) -> load earned in ``semester``."""
    sections = AllocationSection.objects.filter(master__semester=semester)
    if instructor is not None:
        sections = sections.filter(
            pk__in=SectionInstructor.objects.filter(instructor=instructor).values("section_id")
        )
    sections = sections.select_related("master__course").prefetch_related("instructors__instructor")

    table = defaultdict(float)
    for section in sections:
        members = [si.instructor for si in section.instructors.all()]
        faculty = sum(1 for m in members if m.type == UserType.FACULTY)
        units = engine.units_for_section(section.master.course, section.type)
        for member in members:
            if instructor is not None and member.pk != instructor.pk:
                continue
            table[(member.email, section.type)] += engine.section_contribution(
                units, faculty, member.type == UserType.FACULTY
            )
    return table


def credit_load(email, section_type=None, repository=None):
    """Load of one instructor in the latest semester, optionally for one section type."""
    semester = resolve(repository).latest_or_raise()
    instructor = _instructor(email)
    if section_type is not None:
        _section_type(section_type)
    table = _load_table(semester, instructor)
    return sum(
        load for (_, kind), load in table.items()
        if section_type is None or kind == section_type
    )


def instructor_candidates(course_code, section_type, user_type=None, section_id=None, repository=None):
    """
    Eligible instructors for a (course, section type), ranked by their stated
    preference. Instructors already on ``section_id`` are left out; that
    section must belong to the same course and section type.
    """
    semester = resolve(repository).latest_or_raise()
    course = _course(course_code)
    _section_type(section_type)

    candidates = eligible_users(semester.form)
    if user_type:
        candidates = candidates.filter(type=user_type)

    exclude = ()
    if section_id is not None:
        section = _section(semester, section_id)
        if section.master.course_id != course.code or section.type != section_type:
            raise NotFoundError(f"Section {section_id} not found.")
        exclude = section.instructors.values_list("instructor__email", flat=True)

    ranks = preference_ranks(semester.form, course.code, section_type)
    loads = defaultdict(float)
    for (email, _), load in _load_table(semester).items():
        loads[email] += load

    return [
        {
            "email": user.email,
            "name": user.display_name,
            "type": user.type,
            "preference": preference,
            "taken_consecutively": consecutive,
            "credit_load": round(loads.get(user.email, 0.0), 2),
        }
        for user, preference, consecutive in engine.rank_candidates(list(candidates), ranks, exclude)
    ]


def _section_payload(section, ordinals):
    master = section.master
    return {
        "id": section.pk,
        "type": section.type,
        "number": engine.section_label(section.type, ordinals[section.pk]),
        "timetable_room_id": section.timetable_room_id,
        "created_at": section.created_at,
        "instructors": [
            {"email": si.instructor.email, "name": si.instructor.display_name, "type": si.instructor.type}
            for si in section.instructors.all()
        ],
        "course": {
            "code": master.course.code,
            "name": master.course.name,
            "lecture_units": master.course.lecture_units,
            "practical_units": master.course.practical_units,
        },
        "semester": {
            "id": master.semester_id,
            "academic_year": master.semester.academic_year,
            "semester_type": master.semester.semester_type,
        },
        "ic": master.ic.display_name if master.ic else None,
    }


def instructor_details(email, repository=None):
    """
    Every section ``email`` teaches, grouped by section type, split into the
    latest semester and everything before it. With no semester at all every
    section counts as past; the view stays readable between cycles.
    """
    instructor = _instructor(email)
    latest = resolve(repository).latest()

    sections = list(
        AllocationSection.objects.filter(instructors__instructor=instructor)
        .select_related("master__course", "master__semester", "master__ic__faculty", "master__ic__phd")
        .prefetch_related("instructors__instructor__faculty", "instructors__instructor__phd")
        .order_by("created_at", "id")
    )
    siblings = AllocationSection.objects.filter(
        master_id__in={s.master_id for s in sections}
    ).only("id", "master_id", "type", "created_at")
    ordinals = engine.section_ordinals(siblings)

    details = {
        "current_allocation": {t: [] for t in SectionType.values},
        "past_allocation": {t: [] for t in SectionType.values},
    }
    for section in sections:
        current = latest is not None and section.master.semester_id == latest.pk
        bucket = details["current_allocation" if current else "past_allocation"]
        bucket[section.type].append(_section_payload(section, ordinals))
    return details


def list_allocations(repository=None):
    """The latest semester's masters with numbered sections and their instructors."""
    semester = resolve(repository).latest_or_raise()
    masters = list(
        MasterAllocation.objects.filter(semester=semester)
        .select_related("course", "semester", "ic__faculty", "ic__phd")
        .prefetch_related("sections__instructors__instructor__faculty", "sections__instructors__instructor__phd")
    )
    ordinals = engine.section_ordinals(s for m in masters for s in m.sections.all())
    statuses = allocation_status(semester)
    type_order = {t: i for i, t in enumerate(SectionType.values)}

    out = []
    for master in masters:
        sections = sorted(master.sections.all(), key=lambda s: (type_order[s.type], s.created_at, s.pk))
        out.append({
            "id": master.pk,
            "course_code": master.course_id,
            "course_name": master.course.name,
            "status": statuses.get(master.course_id, engine.NOT_STARTED),
            "ic": {"email": master.ic.email, "name": master.ic.display_name} if master.ic else None,
            "sections": [_section_payload(s, ordinals) for s in sections],
        })
    return out


def load_matrix(repository=None):
    """Course x section-type load rows against faculty columns, plus totals."""
    semester = resolve(repository).latest_or_raise()
    sections = (
        AllocationSection.objects.filter(master__semester=semester)
        .select_related("master__course")
        .prefetch_related("instructors__instructor")
    )
    facts = []
    assigned = set()
    for section in sections:
        members = tuple((si.instructor.email, si.instructor.type) for si in section.instructors.all())
        assigned.update(email for email, kind in members if kind == UserType.FACULTY)
        facts.append(engine.SectionFacts(
            course_code=section.master.course_id,
            course_name=section.master.course.name,
            section_type=section.type,
            units=engine.units_for_section(section.master.course, section.type),
            instructors=members,
        ))

    faculty = User.objects.filter(type=UserType.FACULTY).select_related("faculty").order_by("email")
    columns = [u for u in faculty if not u.deactivated or u.email in assigned]
    matrix = engine.load_matrix(facts, [u.email for u in columns])
    matrix["columns"] = [{"email": u.email, "name": u.display_name} for u in columns]
    return matrix


# ---- mutations ---------------------------------------------------------------

def _assign(section, instructor):
    try:
        with transaction.atomic():
            return SectionInstructor.objects.create(section=section, instructor=instructor)
    except IntegrityError:
        raise ConflictError(f"{instructor.email} is already assigned to this section.")


def create_master(course_code, ic_email=None, sections=(), repository=None):
    """
    Start allocating a course: the master row, its instructor-in-charge and
    any initial sections with their instructors, all or nothing.
    """
    with transaction.atomic():
        semester = _writable_semester(repository)
        course = _course(course_code)
        ic = _instructor(ic_email) if ic_email else None
        try:
            with transaction.atomic():
                master = MasterAllocation.objects.create(semester=semester, course=course, ic=ic)
        except IntegrityError:
            raise ConflictError(f"{course.code} is already being allocated this semester.")

        for initial in sections:
            section = AllocationSection.objects.create(master=master, type=_section_type(initial.get("type")))
            for email in initial.get("instructors", []):
                _assign(section, _instructor(email))

    logger.info("Allocation for %s started in %s", course.code, semester)
    return master


def delete_master(master_id, repository=None):
    with transaction.atomic():
        semester = _writable_semester(repository)
        master = _master(semester, master_id)
        master.delete()
    logger.info("Allocation for %s removed", master.course_id)


def add_section(master_id, section_type, repository=None):
    with transaction.atomic():
        semester = _writable_semester(repository)
        master = _master(semester, master_id)
        section = AllocationSection.objects.create(master=master, type=_section_type(section_type))
    logger.info("Section %s added to %s", section.pk, master.course_id)
    return section


def remove_section(section_id, repository=None):
    with transaction.atomic():
        semester = _writable_semester(repository)
        section = _section(semester, section_id)
        section.delete()
    logger.info("Section %s removed from %s", section_id, section.master.course_id)


def assign_instructor(section_id, email, repository=None):
    with transaction.atomic():
        semester = _writable_semester(repository)
        section = _section(semester, section_id)
        instructor = _instructor(email)
        row = _assign(section, instructor)
    logger.info("%s assigned to section %s of %s", instructor.email, section.pk, section.master.course_id)
    return row


def dismiss_instructor(section_id, email, repository=None):
    with transaction.atomic():
        semester = _writable_semester(repository)
        section = _section(semester, section_id)
        instructor = _instructor(email)
        deleted, _ = SectionInstructor.objects.filter(section=section, instructor=instructor).delete()
        if not deleted:
            raise NotFoundError(f"{instructor.email} is not assigned to this section.")
    logger.info("%s dismissed from section %s of %s", instructor.email, section.pk, section.master.course_id)


def set_ic(master_id, email=None, repository=None):
    with transaction.atomic():
        semester = _writable_semester(repository)
        master = _master(semester, master_id)
        master.ic = _instructor(email) if email else None
        master.save(update_fields=["ic"])
    return master


def set_room(section_id, room_id=None, repository=None):
    with transaction.atomic():
        semester = _writable_semester(repository)
        section = _section(semester, section_id)
        section.timetable_room_id = room_id or None
        section.save(update_fields=["timetable_room_id"])
    return section
