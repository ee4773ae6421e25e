"""
Test the allocation services against the database.
"""
from django.test import TestCase

from allocation import services
from allocation.engine import ALLOCATED, NOT_STARTED, PENDING
from allocation.factory import AllocationSectionFactory, MasterAllocationFactory, SectionInstructorFactory
from allocation.models import AllocationSection, MasterAllocation, SectionInstructor
from courses.factory import CourseFactory
from courses.models import SectionType
from erp.exceptions import (
    ConflictError, InvalidStateError, NoActiveAllocationError, NotFoundError, PreconditionError,
)
from preferences.factory import FormResponseFactory, PreferenceFieldFactory, PublishedFormFactory
from semesters.factory import SemesterFactory
from semesters.models import AllocationStatus, Semester
from semesters.repository import SemesterRepository
from users.factory import FacultyUserFactory, PhdUserFactory, UserFactory
from users.models import PhdType


class AllocationTestMixin:
    """Latest semester in allocation with a published form and a 4-unit course."""

    def make_semester(self):
        self.form = PublishedFormFactory()
        self.semester = SemesterFactory(
            academic_year=2030,
            allocation_status=AllocationStatus.IN_ALLOCATION,
            form=self.form,
        )
        self.course = CourseFactory(code='CS F211', name='Data Structures', lecture_units=4, practical_units=2)


class AllocationStatusTestCase(AllocationTestMixin, TestCase):
    """Test cases for allocation_status."""

    def setUp(self):
        """Set up test data."""
        self.make_semester()
        self.a = FacultyUserFactory()
        self.b = FacultyUserFactory()

    def test_no_semester_raises(self):
        """Without any semester there is no active allocation."""
        self.semester.delete()
        with self.assertRaises(NoActiveAllocationError):
            services.allocation_status()

    def test_course_without_master_is_not_started(self):
        other = CourseFactory()
        self.assertEqual(services.allocation_status()[other.code], NOT_STARTED)

    def test_master_without_sections_is_not_started(self):
        MasterAllocationFactory(semester=self.semester, course=self.course)
        self.assertEqual(services.allocation_status()[self.course.code], NOT_STARTED)

    def test_status_follows_assignments(self):
        """Not Started -> Pending -> Allocated -> Pending -> Allocated as sections change."""
        master = services.create_master(
            self.course.code,
            sections=[{'type': SectionType.LECTURE}, {'type': SectionType.LECTURE}],
        )
        s1, s2 = master.sections.order_by('created_at', 'id')
        self.assertEqual(services.allocation_status()[self.course.code], NOT_STARTED)

        services.assign_instructor(s1.pk, self.a.email)
        self.assertEqual(services.allocation_status()[self.course.code], PENDING)

        services.assign_instructor(s2.pk, self.b.email)
        self.assertEqual(services.allocation_status()[self.course.code], ALLOCATED)

        services.dismiss_instructor(s2.pk, self.b.email)
        self.assertEqual(services.allocation_status()[self.course.code], PENDING)

        services.remove_section(s2.pk)
        self.assertEqual(services.allocation_status()[self.course.code], ALLOCATED)

    def test_status_is_per_semester(self):
        """Allocations of an older semester do not count for the latest one."""
        old = SemesterFactory(academic_year=2029, allocation_status=AllocationStatus.COMPLETED)
        section = AllocationSectionFactory(master=MasterAllocationFactory(semester=old, course=self.course))
        SectionInstructorFactory(section=section, instructor=self.a)
        self.assertEqual(services.allocation_status()[self.course.code], NOT_STARTED)
        self.assertEqual(services.allocation_status(old)[self.course.code], ALLOCATED)


class CreditLoadTestCase(AllocationTestMixin, TestCase):
    """Test cases for credit_load."""

    def setUp(self):
        """Set up test data."""
        self.make_semester()
        self.a = FacultyUserFactory()
        self.b = FacultyUserFactory()
        self.c = PhdUserFactory()
        self.master = MasterAllocationFactory(semester=self.semester, course=self.course)
        self.lecture = AllocationSectionFactory(master=self.master, type=SectionType.LECTURE)
        services.assign_instructor(self.lecture.pk, self.a.email)
        services.assign_instructor(self.lecture.pk, self.b.email)

    def test_units_are_split_among_faculty(self):
        """A 4-unit lecture shared by two faculty gives each of them 2."""
        self.assertEqual(services.credit_load(self.a.email, SectionType.LECTURE), 2.0)
        self.assertEqual(services.credit_load(self.b.email, SectionType.LECTURE), 2.0)

    def test_phd_instructor_does_not_dilute(self):
        """Adding a PhD scholar leaves the faculty split untouched and earns them nothing."""
        services.assign_instructor(self.lecture.pk, self.c.email)
        self.assertEqual(services.credit_load(self.a.email, SectionType.LECTURE), 2.0)
        self.assertEqual(services.credit_load(self.b.email, SectionType.LECTURE), 2.0)
        self.assertEqual(services.credit_load(self.c.email), 0.0)

    def test_load_is_additive_over_section_types(self):
        """The total equals the sum of the per-type loads."""
        practical = AllocationSectionFactory(master=self.master, type=SectionType.PRACTICAL)
        tutorial = AllocationSectionFactory(master=self.master, type=SectionType.TUTORIAL)
        services.assign_instructor(practical.pk, self.a.email)
        services.assign_instructor(tutorial.pk, self.a.email)

        per_type = [services.credit_load(self.a.email, t) for t in SectionType.values]
        self.assertEqual(per_type, [2.0, 1.0, 2.0])
        self.assertEqual(services.credit_load(self.a.email), sum(per_type))

    def test_unknown_instructor(self):
        with self.assertRaises(NotFoundError):
            services.credit_load('nobody@example.edu')

    def test_staff_is_not_an_instructor(self):
        staff = UserFactory()
        with self.assertRaises(PreconditionError):
            services.credit_load(staff.email)


class MutationTestCase(AllocationTestMixin, TestCase):
    """Test cases for the allocation mutations."""

    def setUp(self):
        """Set up test data."""
        self.make_semester()
        self.a = FacultyUserFactory()
        self.master = services.create_master(
            self.course.code,
            ic_email=self.a.email,
            sections=[{'type': SectionType.LECTURE, 'instructors': [self.a.email]}],
        )
        self.section = self.master.sections.get()

    def test_create_master_with_initial_sections(self):
        self.assertEqual(self.master.ic, self.a)
        self.assertTrue(SectionInstructor.objects.filter(section=self.section, instructor=self.a).exists())

    def test_course_is_allocated_once_per_semester(self):
        with self.assertRaises(ConflictError):
            services.create_master(self.course.code)

    def test_failed_create_leaves_nothing_behind(self):
        """An unknown instructor rolls back the whole master."""
        other = CourseFactory()
        with self.assertRaises(NotFoundError):
            services.create_master(other.code, sections=[{'type': 'LECTURE', 'instructors': ['ghost@example.edu']}])
        self.assertFalse(MasterAllocation.objects.filter(course=other).exists())

    def test_double_assignment_is_a_conflict(self):
        """Assigning an instructor already on the section fails and adds no row."""
        with self.assertRaises(ConflictError):
            services.assign_instructor(self.section.pk, self.a.email)
        self.assertEqual(SectionInstructor.objects.filter(section=self.section).count(), 1)

    def test_dismiss_unassigned_instructor(self):
        other = FacultyUserFactory()
        with self.assertRaises(NotFoundError):
            services.dismiss_instructor(self.section.pk, other.email)

    def test_set_ic_and_room(self):
        services.set_ic(self.master.pk, None)
        services.set_room(self.section.pk, 'F102')
        self.master.refresh_from_db()
        self.section.refresh_from_db()
        self.assertIsNone(self.master.ic)
        self.assertEqual(self.section.timetable_room_id, 'F102')

    def test_unknown_master(self):
        with self.assertRaises(NotFoundError):
            services.add_section(999999, SectionType.LECTURE)

    def test_section_of_older_semester_is_not_found(self):
        old = SemesterFactory(academic_year=2020, allocation_status=AllocationStatus.COMPLETED)
        stale = AllocationSectionFactory(master=MasterAllocationFactory(semester=old, course=self.course))
        with self.assertRaises(NotFoundError):
            services.remove_section(stale.pk)

    def test_mutations_need_allocation_phase(self):
        """Nothing can be changed outside inAllocation."""
        self.semester.allocation_status = AllocationStatus.COMPLETED
        self.semester.save()
        with self.assertRaises(InvalidStateError):
            services.add_section(self.master.pk, SectionType.TUTORIAL)
        with self.assertRaises(InvalidStateError):
            services.dismiss_instructor(self.section.pk, self.a.email)
        self.assertEqual(AllocationSection.objects.filter(master=self.master).count(), 1)

    def test_delete_master(self):
        services.delete_master(self.master.pk)
        self.assertFalse(MasterAllocation.objects.filter(pk=self.master.pk).exists())
        self.assertFalse(AllocationSection.objects.filter(pk=self.section.pk).exists())


class CandidatesTestCase(AllocationTestMixin, TestCase):
    """Test cases for instructor_candidates."""

    def setUp(self):
        """Set up test data."""
        self.make_semester()
        self.field = PreferenceFieldFactory(template=self.form.template, preference_type=SectionType.LECTURE)
        self.a = FacultyUserFactory(email='a@example.edu')
        self.b = FacultyUserFactory(email='b@example.edu')
        self.c = FacultyUserFactory(email='c@example.edu')
        self.p = PhdUserFactory(email='p@example.edu')
        PhdUserFactory(email='part@example.edu', profile__phd_type=PhdType.PART_TIME)
        FacultyUserFactory(email='gone@example.edu', deactivated=True)

        for user, rank in ((self.b, 2), (self.c, 1)):
            FormResponseFactory(
                form=self.form, submitted_by=user, template_field=self.field,
                course=self.course, preference=rank,
            )

    def emails(self, **kwargs):
        return [c['email'] for c in services.instructor_candidates(self.course.code, SectionType.LECTURE, **kwargs)]

    def test_ranked_candidates_come_first(self):
        """Preference order first, then the remaining eligible users in their usual order."""
        self.assertEqual(self.emails(), ['c@example.edu', 'b@example.edu', 'a@example.edu', 'p@example.edu'])

    def test_ranking_is_stable_across_calls(self):
        self.assertEqual(self.emails(), self.emails())

    def test_filter_by_user_type(self):
        self.assertEqual(self.emails(user_type='phd'), ['p@example.edu'])

    def test_other_section_type_is_unranked(self):
        emails = [c['email'] for c in services.instructor_candidates(self.course.code, SectionType.TUTORIAL)]
        self.assertEqual(emails, ['a@example.edu', 'b@example.edu', 'c@example.edu', 'p@example.edu'])

    def test_section_members_are_excluded(self):
        section = AllocationSectionFactory(master=MasterAllocationFactory(semester=self.semester, course=self.course))
        services.assign_instructor(section.pk, self.c.email)
        self.assertEqual(self.emails(section_id=section.pk), ['b@example.edu', 'a@example.edu', 'p@example.edu'])

    def test_section_of_another_course_or_type_is_not_found(self):
        other = CourseFactory(code='CS F212')
        foreign = AllocationSectionFactory(master=MasterAllocationFactory(semester=self.semester, course=other))
        tutorial = AllocationSectionFactory(
            master=MasterAllocationFactory(semester=self.semester, course=self.course), type=SectionType.TUTORIAL,
        )
        for section in (foreign, tutorial):
            with self.subTest(section=section.pk):
                with self.assertRaises(NotFoundError):
                    self.emails(section_id=section.pk)

    def test_candidates_carry_preference_and_load(self):
        top = services.instructor_candidates(self.course.code, SectionType.LECTURE)[0]
        self.assertEqual(top['preference'], 1)
        self.assertEqual(top['credit_load'], 0)

    def test_unknown_course(self):
        with self.assertRaises(NotFoundError):
            services.instructor_candidates('XX F000', SectionType.LECTURE)


class ReadModelTestCase(AllocationTestMixin, TestCase):
    """Test cases for list_allocations, instructor_details and load_matrix."""

    def setUp(self):
        """Set up test data."""
        self.make_semester()
        self.a = FacultyUserFactory(email='a@example.edu')
        self.master = MasterAllocationFactory(semester=self.semester, course=self.course, ic=self.a)
        self.l1 = AllocationSectionFactory(master=self.master, type=SectionType.LECTURE)
        self.t1 = AllocationSectionFactory(master=self.master, type=SectionType.TUTORIAL)
        self.l2 = AllocationSectionFactory(master=self.master, type=SectionType.LECTURE)
        SectionInstructorFactory(section=self.l2, instructor=self.a)

    def test_list_numbers_sections(self):
        """Sections come back lecture-first with per-type numbers."""
        [entry] = services.list_allocations()
        self.assertEqual([s['number'] for s in entry['sections']], ['L1', 'L2', 'T1'])
        self.assertEqual(entry['status'], PENDING)
        self.assertEqual(entry['ic']['email'], 'a@example.edu')

    def test_removing_a_section_renumbers_siblings(self):
        services.remove_section(self.l1.pk)
        [entry] = services.list_allocations()
        self.assertEqual([s['number'] for s in entry['sections']], ['L1', 'T1'])

    def test_instructor_details_split_past_and_current(self):
        old = SemesterFactory(academic_year=2029, allocation_status=AllocationStatus.COMPLETED)
        past = AllocationSectionFactory(
            master=MasterAllocationFactory(semester=old, course=self.course), type=SectionType.PRACTICAL,
        )
        SectionInstructorFactory(section=past, instructor=self.a)

        details = services.instructor_details(self.a.email)
        current = details['current_allocation'][SectionType.LECTURE]
        self.assertEqual([s['number'] for s in current], ['L2'])
        self.assertEqual(current[0]['course']['code'], self.course.code)
        self.assertEqual(details['past_allocation'][SectionType.PRACTICAL][0]['semester']['id'], old.pk)
        self.assertEqual(details['past_allocation'][SectionType.LECTURE], [])

    def test_instructor_details_without_semester_is_all_past(self):
        details = services.instructor_details(
            self.a.email, repository=SemesterRepository(Semester.objects.none()),
        )
        self.assertEqual(details['current_allocation'][SectionType.LECTURE], [])
        self.assertEqual([s['number'] for s in details['past_allocation'][SectionType.LECTURE]], ['L2'])

    def test_matrix(self):
        matrix = services.load_matrix()
        self.assertEqual([c['email'] for c in matrix['columns']], ['a@example.edu'])
        lecture = next(r for r in matrix['rows'] if r['section_type'] == SectionType.LECTURE)
        self.assertEqual((lecture['allocated'], lecture['pending']), (1, 1))
        self.assertEqual(lecture['cells'], [4.0])
        self.assertEqual(matrix['totals'], [4.0])
