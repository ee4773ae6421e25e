import logging

from allocation.models import MasterAllocation
from courses.models import DegreeType

from .models import CourseHandoutRequest

logger = logging.getLogger(__name__)


def create_handout_requests(semester):
    """One request per master allocation whose course is not a PhD course."""
    masters = (
        MasterAllocation.objects.filter(semester=semester)
        .exclude(course__offered_to=DegreeType.PHD)
        .select_related("course", "ic")
    )
    created = []
    for master in masters:
        handout, was_created = CourseHandoutRequest.objects.get_or_create(
            semester=semester,
            course=master.course,
            defaults={"ic": master.ic},
        )
        if was_created:
            created.append(handout)
    logger.info("Semester %s: %d handout request(s) created", semester.pk, len(created))
    return created
