"""
Test views for the users app.
"""
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from users.factory import FacultyUserFactory, PhdUserFactory, StaffUserFactory, UserFactory, grant
from users.permissions import ALLOCATION_VIEW


class LoginViewTestCase(APITestCase):
    """Test cases for LoginView."""

    def setUp(self):
        """Set up test data."""
        self.url = reverse('users:login')
        self.user = FacultyUserFactory(email='prof@example.edu', password='testpass123')

    def test_login_returns_tokens(self):
        response = self.client.post(self.url, {'email': 'PROF@example.edu', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data['tokens'])
        self.assertEqual(response.data['user']['email'], 'prof@example.edu')

    def test_wrong_password(self):
        response = self.client.post(self.url, {'email': 'prof@example.edu', 'password': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_deactivated_user(self):
        self.user.deactivated = True
        self.user.save()
        response = self.client.post(self.url, {'email': 'prof@example.edu', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_token_authenticates(self):
        response = self.client.post(self.url, {'email': 'prof@example.edu', 'password': 'testpass123'})
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['tokens']['access']}")
        response = self.client.get(reverse('users:me'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['permissions'], [])


class ProfileAndDirectoryTestCase(APITestCase):
    """Test cases for the profile and instructor directory."""

    def setUp(self):
        """Set up test data."""
        self.viewer = UserFactory()
        grant(self.viewer, ALLOCATION_VIEW)
        self.faculty = FacultyUserFactory(email='prof@example.edu')
        self.phd = PhdUserFactory(email='scholar@example.edu')
        FacultyUserFactory(email='gone@example.edu', deactivated=True)

    def test_me_lists_capabilities(self):
        self.client.force_authenticate(self.viewer)
        response = self.client.get(reverse('users:me'))
        self.assertEqual(response.data['permissions'], [ALLOCATION_VIEW])

    def test_instructors(self):
        self.client.force_authenticate(self.viewer)
        response = self.client.get(reverse('users:instructors'))
        self.assertEqual([u['email'] for u in response.data], ['prof@example.edu', 'scholar@example.edu'])

        response = self.client.get(reverse('users:instructors'), {'type': 'phd'})
        self.assertEqual([u['external_id'] for u in response.data], [self.phd.external_id])

    def test_instructors_need_allocation_view(self):
        self.client.force_authenticate(self.faculty)
        response = self.client.get(reverse('users:instructors'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class UserRolesViewTestCase(APITestCase):
    """Test cases for role assignment by staff."""

    def setUp(self):
        """Set up test data."""
        self.staff = StaffUserFactory()
        self.user = FacultyUserFactory()
        self.url = reverse('users:user_roles', args=[self.user.pk])
        self.user.assign_role('Faculty')

    def test_assign_and_remove(self):
        self.client.force_authenticate(self.staff)
        UserFactory().assign_role('HoD')

        response = self.client.post(self.url, {'role_name': 'HoD'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(sorted(response.data['roles']), ['Faculty', 'HoD'])

        response = self.client.delete(self.url, {'role_name': 'HoD'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(self.user.has_role('HoD'))

    def test_unknown_role(self):
        self.client.force_authenticate(self.staff)
        response = self.client.post(self.url, {'role_name': 'Wizard'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_non_staff_forbidden(self):
        self.client.force_authenticate(self.user)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
