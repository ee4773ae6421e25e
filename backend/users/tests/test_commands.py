"""
Test management commands for the users app.
"""
import os
import tempfile

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from users.factory import UserFactory
from users.models import Permission, RolePermission
from users.permissions import ALLOCATION_VIEW, ALLOCATION_WRITE, has_capability


class SeedPermissionCommandTestCase(TestCase):
    """Test cases for seed_permission."""

    def write_csv(self, text):
        handle, path = tempfile.mkstemp(suffix='.csv')
        with os.fdopen(handle, 'w') as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def test_bundled_matrix(self):
        """The shipped matrix gives the HoD every allocation capability."""
        call_command('seed_permission')
        hod = UserFactory()
        hod.assign_role('HoD')
        self.assertTrue(has_capability(hod, ALLOCATION_WRITE))
        self.assertTrue(has_capability(hod, ALLOCATION_VIEW))

    def test_reseeding_removes_stale_grants(self):
        first = self.write_csv(
            'permission_key,Reviewer,description\n'
            'allocation:view,TRUE,View\n'
            'allocation:write,TRUE,Write\n'
        )
        second = self.write_csv(
            'permission_key,Reviewer,description\n'
            'allocation:view,TRUE,View\n'
            'allocation:write,FALSE,Write\n'
        )
        call_command('seed_permission', file=first)
        call_command('seed_permission', file=second)
        call_command('seed_permission', file=second)

        keys = RolePermission.objects.filter(role__role_name='Reviewer').values_list(
            'permission__permission_key', flat=True
        )
        self.assertEqual(list(keys), ['allocation:view'])
        self.assertEqual(Permission.objects.count(), 2)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('seed_permission', file='/nonexistent/permissions.csv')


class AssignRoleCommandTestCase(TestCase):
    """Test cases for assign_role."""

    def setUp(self):
        """Set up test data."""
        self.user = UserFactory(email='prof@example.edu')
        self.user.assign_role('Faculty')
        self.user.remove_role('Faculty')

    def test_assign_and_remove(self):
        call_command('assign_role', 'Prof@example.edu', 'Faculty')
        self.assertTrue(self.user.has_role('Faculty'))
        call_command('assign_role', 'prof@example.edu', 'Faculty', '--remove')
        self.assertFalse(self.user.has_role('Faculty'))

    def test_unknown_user(self):
        with self.assertRaises(CommandError):
            call_command('assign_role', 'nobody@example.edu', 'Faculty')

    def test_unknown_role(self):
        with self.assertRaises(CommandError):
            call_command('assign_role', 'prof@example.edu', 'Wizard')
