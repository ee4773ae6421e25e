"""
Course catalogue operations: creation, marking for allocation and the pull
from the timetable system.
"""
import logging

import requests
from django.conf import settings
from django.db import IntegrityError, transaction

from erp.exceptions import ConflictError, ExternalSystemError, InvalidStateError, NotFoundError, PreconditionError
from semesters.models import AllocationStatus
from semesters.repository import resolve

from .models import Course, DegreeType, OfferedAs

logger = logging.getLogger(__name__)


def create_course(data):
    """Insert a course; an existing code is a conflict."""
    code = " ".join(str(data["code"]).upper().split())
    try:
        with transaction.atomic():
            return Course.objects.create(**{**data, "code": code})
    except IntegrityError:
        raise ConflictError(f"Course {code} already exists.")


def mark_courses(course_codes, repository=None):
    """
    Toggle ``marked_for_allocation`` on each course. Only legal while the
    latest semester is exactly ``notStarted``; nothing changes otherwise.
    """
    codes = list(dict.fromkeys(" ".join(str(c).upper().split()) for c in course_codes))
    if not codes:
        raise PreconditionError("No course codes given.")

    with transaction.atomic():
        semester = resolve(repository).latest_or_raise(for_update=True)
        if semester.allocation_status != AllocationStatus.NOT_STARTED:
            raise InvalidStateError("Allocation has started, you cannot mark courses now")

        courses = list(Course.objects.select_for_update().filter(code__in=codes))
        missing = set(codes) - {c.code for c in courses}
        if missing:
            raise NotFoundError(f"Unknown course(s): {', '.join(sorted(missing))}")

        for course in courses:
            course.marked_for_allocation = not course.marked_for_allocation
            course.save(update_fields=["marked_for_allocation", "updated_at"])

    logger.info("Toggled allocation mark on %d course(s)", len(courses))
    return sorted(courses, key=lambda c: c.code)


def _offered_as(value):
    if value == "C":
        return OfferedAs.CDC
    if value == "H":
        return OfferedAs.HEL
    return OfferedAs.DEL


def _course_from_ttd(row, department):
    offered_to = row.get("offeredTo")
    if offered_to not in DegreeType.values:
        offered_to = DegreeType.FD
    return {
        "code": f"{row['deptCode']} {row['courseCode']}",
        "name": row.get("name") or "",
        "lecture_units": int(row.get("lectureUnits") or 0),
        "practical_units": int(row.get("labUnits") or 0),
        "total_units": int(row.get("totalUnits") or 0),
        "offered_as": _offered_as(row.get("offeredAs")),
        "offered_to": offered_to,
        "offered_also_by": [d for d in (row.get("offeredBy") or []) if d != department],
        "timetable_course_id": row.get("id"),
    }


def sync_courses(semester_type, session=None):
    """
    Pull the department's courses for ``semester_type`` ("1", "2" or "3") from
    the timetable system and upsert them by code. Returns (created, updated).
    """
    try:
        parsed = int(semester_type)
    except (TypeError, ValueError):
        raise PreconditionError("Semester number is required.")
    if parsed < 1 or parsed > 3:
        raise PreconditionError("Semester number must be between 1 and 3.")

    department = settings.DEPARTMENT_NAME
    url = f"{settings.TTD_API_URL}/{parsed}/courses"
    http = session or requests
    try:
        resp = http.get(url, params={"deptCode": department}, timeout=settings.TTD_TIMEOUT)
        resp.raise_for_status()
        rows = resp.json()
    except requests.RequestException as e:
        logger.error("Timetable course fetch failed: %s", e)
        raise ExternalSystemError(f"Could not fetch courses from the timetable system: {e}")

    created = updated = 0
    with transaction.atomic():
        for row in rows:
            values = _course_from_ttd(row, department)
            code = values.pop("code")
            _, was_created = Course.objects.update_or_create(
                code=code,
                defaults={**values, "fetched_from_ttd": True},
            )
            if was_created:
                created += 1
            else:
                updated += 1

    logger.info("Synced courses from timetable system: %d created, %d updated", created, updated)
    return created, updated
