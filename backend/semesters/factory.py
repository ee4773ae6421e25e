"""
Factory classes for semester test data.
"""
import factory
from factory.django import DjangoModelFactory
from semesters.models import AllocationStatus, Semester, SemesterType


class SemesterFactory(DjangoModelFactory):
    """Latest-looking semester; pass ``allocation_status`` and ``form`` as needed."""

    class Meta:
        model = Semester

    academic_year = factory.Sequence(lambda n: 2030 + n)
    semester_type = SemesterType.ODD
    allocation_status = AllocationStatus.NOT_STARTED
    form = None
