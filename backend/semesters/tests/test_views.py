"""
Test views for the semesters app.
"""
from datetime import timedelta

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from preferences.factory import FormFactory
from semesters.factory import SemesterFactory
from semesters.models import AllocationStatus
from users.factory import FacultyUserFactory, UserFactory, grant
from users.permissions import ALLOCATION_VIEW, FORM_PUBLISH, SEMESTER_WRITE


class SemesterViewsTestCase(APITestCase):
    """Test cases for the semester endpoints."""

    def setUp(self):
        """Set up test data."""
        self.semester = SemesterFactory(academic_year=2030)
        self.convener = UserFactory(email='convener@example.edu')
        grant(self.convener, ALLOCATION_VIEW, SEMESTER_WRITE, FORM_PUBLISH, role_name='DCA Convener')
        self.faculty = FacultyUserFactory()

    def test_latest_is_open_to_any_user(self):
        self.client.force_authenticate(self.faculty)
        response = self.client.get(reverse('semesters:latest'), {'minimal': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['semester']['id'], self.semester.pk)
        self.assertNotIn('responders', response.data)

    def test_minimal_with_stats_is_400(self):
        self.client.force_authenticate(self.faculty)
        response = self.client.get(reverse('semesters:latest'), {'minimal': 'true', 'stats': 'true'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_requires_semester_write(self):
        self.client.force_authenticate(self.faculty)
        response = self.client.post(reverse('semesters:list'), {'academic_year': 2031, 'semester_type': '1'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_while_latest_running_is_409(self):
        self.client.force_authenticate(self.convener)
        response = self.client.post(reverse('semesters:list'), {'academic_year': 2031, 'semester_type': '1'})
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'invalid_state')

    def test_link_and_publish(self):
        """Linking and publishing moves the semester into form collection."""
        form = FormFactory()
        self.client.force_authenticate(self.convener)

        response = self.client.post(
            reverse('semesters:link_form', args=[self.semester.pk]), {'form_id': form.pk}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(
            reverse('semesters:publish', args=[self.semester.pk]),
            {
                'allocation_deadline': (timezone.now() + timedelta(days=3)).isoformat(),
                'email_body': 'Please send your preferences.',
            },
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['allocation_status'], AllocationStatus.FORM_COLLECTION)
        self.assertEqual(len(mail.outbox), 1)

    def test_end_form_without_form_is_400(self):
        self.client.force_authenticate(self.convener)
        response = self.client.post(reverse('semesters:end_form', args=[self.semester.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'precondition_failed')
