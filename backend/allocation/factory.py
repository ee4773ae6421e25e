"""
Factory classes for allocation test data.
"""
import factory
from factory.django import DjangoModelFactory
from allocation.models import AllocationSection, MasterAllocation, SectionInstructor
from courses.factory import CourseFactory
from courses.models import SectionType
from semesters.factory import SemesterFactory


class MasterAllocationFactory(DjangoModelFactory):
    class Meta:
        model = MasterAllocation

    semester = factory.SubFactory(SemesterFactory)
    course = factory.SubFactory(CourseFactory)
    ic = None


class AllocationSectionFactory(DjangoModelFactory):
    class Meta:
        model = AllocationSection

    master = factory.SubFactory(MasterAllocationFactory)
    type = SectionType.LECTURE


class SectionInstructorFactory(DjangoModelFactory):
    class Meta:
        model = SectionInstructor

    section = factory.SubFactory(AllocationSectionFactory)
