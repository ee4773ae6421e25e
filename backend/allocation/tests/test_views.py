"""
Test views for the allocation app.
"""
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from allocation.export import XLSX_MIME
from allocation.factory import AllocationSectionFactory, MasterAllocationFactory
from courses.factory import CourseFactory
from courses.models import SectionType
from semesters.factory import SemesterFactory
from semesters.models import AllocationStatus
from users.factory import FacultyUserFactory, UserFactory, grant
from users.permissions import ALLOCATION_VIEW, ALLOCATION_WRITE


class AllocationViewsTestCase(APITestCase):
    """Test cases for the allocation endpoints."""

    def setUp(self):
        """Set up test data."""
        self.semester = SemesterFactory(academic_year=2030, allocation_status=AllocationStatus.IN_ALLOCATION)
        self.course = CourseFactory(code='CS F211', lecture_units=3)
        self.master = MasterAllocationFactory(semester=self.semester, course=self.course)
        self.section = AllocationSectionFactory(master=self.master, type=SectionType.LECTURE)

        self.dca = UserFactory(email='dca@example.edu')
        grant(self.dca, ALLOCATION_VIEW, ALLOCATION_WRITE, role_name='DCA Member')
        self.faculty = FacultyUserFactory(email='prof@example.edu')

    def test_requires_authentication(self):
        response = self.client.get(reverse('allocation:list'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_faculty_cannot_assign(self):
        """Writes need allocation:write."""
        self.client.force_authenticate(self.faculty)
        response = self.client.post(
            reverse('allocation:section_instructors', args=[self.section.pk]),
            {'email': self.faculty.email},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_assign_then_reassign_conflicts(self):
        """The second identical assignment is a 409 with kind 'conflict'."""
        self.client.force_authenticate(self.dca)
        url = reverse('allocation:section_instructors', args=[self.section.pk])

        first = self.client.post(url, {'email': self.faculty.email}, format='json')
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)

        second = self.client.post(url, {'email': self.faculty.email}, format='json')
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data['kind'], 'conflict')

    def test_status_and_credit_load(self):
        self.client.force_authenticate(self.dca)
        self.client.post(
            reverse('allocation:section_instructors', args=[self.section.pk]),
            {'email': self.faculty.email},
            format='json',
        )
        response = self.client.get(reverse('allocation:status'))
        self.assertEqual(response.data['CS F211'], 'Allocated')

        response = self.client.get(reverse('allocation:credit_load'), {'email': self.faculty.email})
        self.assertEqual(response.data['credit_load'], 3.0)

    def test_add_section_outside_allocation_is_409(self):
        self.semester.allocation_status = AllocationStatus.COMPLETED
        self.semester.save()
        self.client.force_authenticate(self.dca)
        response = self.client.post(
            reverse('allocation:add_section', args=[self.master.pk]), {'type': 'TUTORIAL'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'invalid_state')

    def test_instructor_reads_own_details_only(self):
        """Anyone may read their own sections; other people's need allocation:view."""
        self.client.force_authenticate(self.faculty)
        own = self.client.get(reverse('allocation:instructor_details', args=[self.faculty.email]))
        self.assertEqual(own.status_code, status.HTTP_200_OK)

        other = FacultyUserFactory()
        response = self.client.get(reverse('allocation:instructor_details', args=[other.email]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['kind'], 'forbidden')

    def test_matrix_export_is_xlsx(self):
        self.client.force_authenticate(self.dca)
        response = self.client.get(reverse('allocation:matrix_export'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], XLSX_MIME)
        # xlsx files are zip archives
        self.assertTrue(response.content.startswith(b'PK'))

    def test_no_semester_is_404(self):
        self.semester.delete()
        self.client.force_authenticate(self.dca)
        response = self.client.get(reverse('allocation:list'))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['kind'], 'no_active_allocation')
