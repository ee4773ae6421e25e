"""
Push the latest semester's allocation to the timetable system (TTD).

The caller's OAuth identity token is verified before anything is built or
sent; it is then forwarded to TTD as ``X-Api-Token``. Courses are pushed
concurrently and each one succeeds or fails on its own.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

import jwt
import requests
from django.conf import settings

from courses.models import SectionType
from erp.exceptions import ExternalSystemError, ForbiddenError
from semesters.repository import resolve

from . import engine
from .models import MasterAllocation

logger = logging.getLogger(__name__)


def verify_identity_token(id_token):
    """Check signature, audience and issuer of ``id_token``; returns its claims."""
    try:
        signing_key = jwt.PyJWKClient(settings.OAUTH_JWKS_URL).get_signing_key_from_jwt(id_token)
        return jwt.decode(
            id_token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.OAUTH_CLIENT_ID,
            issuer=settings.OAUTH_ISSUER,
        )
    except jwt.PyJWTError as exc:
        logger.warning("Identity token rejected: %s", exc)
        raise ExternalSystemError("Invalid token")


def _course_payload(master):
    type_order = {t: i for i, t in enumerate(SectionType.values)}
    sections = sorted(master.sections.all(), key=lambda s: (type_order[s.type], s.created_at, s.pk))
    ordinals = engine.section_ordinals(sections)
    return {
        "id": master.course.timetable_course_id,
        "active": True,
        "sections": [
            {
                "section": engine.section_label(s.type, ordinals[s.pk]),
                "instructors": [si.instructor.external_id for si in s.instructors.all()],
            }
            for s in sections
        ],
        "preferredRooms": [s.timetable_room_id for s in sections if s.timetable_room_id],
        "ic": master.ic.external_id if master.ic else None,
    }


def build_push_payload(semester, send_multi_department=False):
    """
    (course code, payload) per course to push. Courses without a timetable id
    are skipped, as are multi-department ones unless ``send_multi_department``.
    """
    masters = (
        MasterAllocation.objects.filter(semester=semester, course__timetable_course_id__isnull=False)
        .select_related("course", "ic__faculty", "ic__phd")
        .prefetch_related("sections__instructors__instructor__faculty", "sections__instructors__instructor__phd")
    )
    return [
        (master.course_id, _course_payload(master))
        for master in masters
        if send_multi_department or not master.course.is_multi_department
    ]


def _put(http, url, payload, id_token, course_code):
    try:
        response = http.put(
            url,
            json=payload,
            headers={"X-Api-Token": id_token},
            timeout=settings.TTD_TIMEOUT,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        status = getattr(getattr(exc, "response", None), "status_code", None)
        logger.warning("Push of %s failed: %s", course_code, exc)
        return {"course_code": course_code, "ok": False, "status": status, "error": str(exc)}
    logger.info("Pushed %s (%s)", course_code, response.status_code)
    return {"course_code": course_code, "ok": True, "status": response.status_code, "error": None}


def push_to_timetable(send_multi_department, id_token, session=None, repository=None):
    """
    Verify ``id_token``, then PUT every eligible course of the latest semester
    to TTD. Returns one outcome per course; failures do not stop the others.
    """
    if settings.IS_STAGING:
        raise ForbiddenError("Operation not allowed in staging environment")

    verify_identity_token(id_token)
    semester = resolve(repository).latest_or_raise()
    payloads = build_push_payload(semester, send_multi_department)
    if not payloads:
        logger.info("Nothing to push for %s", semester)
        return []

    http = session or requests
    base = settings.TTD_API_URL.rstrip("/")
    with ThreadPoolExecutor(max_workers=max(1, settings.TTD_PUSH_WORKERS)) as pool:
        futures = [
            pool.submit(
                _put, http, f"{base}/{semester.semester_type}/courses/ims/{payload['id']}",
                payload, id_token, code,
            )
            for code, payload in payloads
        ]
        results = [f.result() for f in futures]

    failed = sum(1 for r in results if not r["ok"])
    logger.info("Push to TTD finished: %d course(s), %d failed", len(results), failed)
    return results
