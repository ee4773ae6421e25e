"""
Test views and commands for the courses app.
"""
import os
import tempfile
from unittest.mock import patch

from django.core.management import call_command
from django.core.management.base import CommandError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from courses.factory import CourseFactory
from courses.models import Course
from semesters.factory import SemesterFactory
from semesters.models import AllocationStatus
from users.factory import FacultyUserFactory, UserFactory, grant
from users.permissions import ALLOCATION_VIEW, COURSES_SYNC, COURSES_WRITE


class CourseViewsTestCase(APITestCase):
    """Test cases for the course endpoints."""

    def setUp(self):
        """Set up test data."""
        self.semester = SemesterFactory(academic_year=2030)
        self.admin = UserFactory()
        grant(self.admin, ALLOCATION_VIEW, COURSES_WRITE, COURSES_SYNC)
        CourseFactory(code='CS F211', marked_for_allocation=True)
        CourseFactory(code='CS F212', marked_for_allocation=False)

    def test_list_marked(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse('courses:list'), {'marked': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['code'] for c in response.data], ['CS F211'])

    def test_create_and_duplicate(self):
        self.client.force_authenticate(self.admin)
        payload = {'code': 'cs g513', 'name': 'Network Security', 'lecture_units': 3, 'offered_to': 'HD'}
        response = self.client.post(reverse('courses:list'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'CS G513')

        response = self.client.post(reverse('courses:list'), payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_mark_after_start_is_409(self):
        self.semester.allocation_status = AllocationStatus.FORM_COLLECTION
        self.semester.save()
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('courses:mark'), {'course_codes': ['CS F212']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'invalid_state')

    def test_mark(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('courses:mark'), {'course_codes': ['CS F212']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data[0]['marked_for_allocation'])

    def test_faculty_cannot_mark(self):
        self.client.force_authenticate(FacultyUserFactory())
        response = self.client.post(reverse('courses:mark'), {'course_codes': ['CS F212']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    @patch('courses.views.sync_courses', return_value=(2, 1))
    def test_sync(self, mock_sync):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('courses:sync', args=['1']))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual((response.data['created'], response.data['updated']), (2, 1))
        mock_sync.assert_called_once_with('1')

    def test_groups(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            reverse('courses:groups'), {'name': 'Systems', 'courses': ['CS F211']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['courses'], ['CS F211'])


class SeedCoursesCommandTestCase(APITestCase):
    """Test cases for the seed_courses management command."""

    def write_csv(self, text):
        handle, path = tempfile.mkstemp(suffix='.csv')
        with os.fdopen(handle, 'w') as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_seed_from_csv(self):
        path = self.write_csv(
            'code,name,lecture_units,practical_units,offered_as,offered_to,offered_also_by\n'
            'cs f211,Data Structures,3,1,CDC,FD,\n'
            'CS F301,Principles of Programming Languages,3,,DEL,FD,EEE;MATH\n'
        )
        call_command('seed_courses', path)
        self.assertEqual(Course.objects.count(), 2)
        ppl = Course.objects.get(code='CS F301')
        self.assertEqual(ppl.practical_units, 0)
        self.assertEqual(ppl.offered_also_by, ['EEE', 'MATH'])

    def test_dry_run_writes_nothing(self):
        path = self.write_csv('code,name\nCS F211,Data Structures\n')
        call_command('seed_courses', path, '--dry-run')
        self.assertFalse(Course.objects.exists())

    def test_missing_columns(self):
        path = self.write_csv('code\nCS F211\n')
        with self.assertRaises(CommandError):
            call_command('seed_courses', path)
