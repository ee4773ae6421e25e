"""
Factory classes for course catalogue test data.
"""
import factory
from factory.django import DjangoModelFactory
from courses.models import Course, CourseGroup, DegreeType, OfferedAs


class CourseFactory(DjangoModelFactory):
    """Single-department FD course; 3 lecture units, 1 practical unit."""

    class Meta:
        model = Course
        django_get_or_create = ('code',)

    code = factory.Sequence(lambda n: f"CS H{n:03d}")
    name = factory.Faker('catch_phrase')
    lecture_units = 3
    practical_units = 1
    total_units = factory.LazyAttribute(lambda o: o.lecture_units + o.practical_units)
    offered_as = OfferedAs.CDC
    offered_to = DegreeType.FD
    offered_also_by = factory.LazyFunction(list)
    marked_for_allocation = True
    timetable_course_id = factory.Sequence(lambda n: 1000 + n)


class CourseGroupFactory(DjangoModelFactory):
    class Meta:
        model = CourseGroup
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"Group {n}")
    description = factory.Faker('sentence', nb_words=5)

    @factory.post_generation
    def courses(self, create, extracted, **kwargs):
        if create and extracted:
            self.courses.add(*extracted)
