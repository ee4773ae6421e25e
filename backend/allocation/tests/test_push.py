"""
Test the push to the timetable system.
"""
from unittest.mock import MagicMock, patch

import jwt
import requests
from django.test import TestCase, override_settings

from allocation.factory import AllocationSectionFactory, MasterAllocationFactory, SectionInstructorFactory
from allocation.push import build_push_payload, push_to_timetable
from courses.factory import CourseFactory
from courses.models import SectionType
from erp.exceptions import ExternalSystemError, ForbiddenError
from semesters.factory import SemesterFactory
from semesters.models import AllocationStatus, SemesterType
from users.factory import FacultyUserFactory, PhdUserFactory


@override_settings(TTD_API_URL='http://ttd.test/api', IS_STAGING=False, TTD_PUSH_WORKERS=2)
class PushTestCase(TestCase):
    """Test cases for build_push_payload and push_to_timetable."""

    def setUp(self):
        """Set up test data."""
        self.semester = SemesterFactory(
            academic_year=2030,
            semester_type=SemesterType.EVEN,
            allocation_status=AllocationStatus.COMPLETED,
        )
        self.faculty = FacultyUserFactory(profile__psrn='PSRN0042')
        self.phd = PhdUserFactory(profile__erp_id='ERP0007')

        self.course = CourseFactory(code='CS F211', timetable_course_id=11)
        master = MasterAllocationFactory(semester=self.semester, course=self.course, ic=self.faculty)
        l1 = AllocationSectionFactory(master=master, type=SectionType.LECTURE, timetable_room_id='F101')
        t1 = AllocationSectionFactory(master=master, type=SectionType.TUTORIAL)
        l2 = AllocationSectionFactory(master=master, type=SectionType.LECTURE, timetable_room_id='F102')
        SectionInstructorFactory(section=l1, instructor=self.faculty)
        SectionInstructorFactory(section=l2, instructor=self.phd)
        SectionInstructorFactory(section=t1, instructor=self.phd)

        multi = CourseFactory(code='CS F212', timetable_course_id=12, offered_also_by=['EEE'])
        MasterAllocationFactory(semester=self.semester, course=multi)
        untracked = CourseFactory(code='CS F213', timetable_course_id=None)
        MasterAllocationFactory(semester=self.semester, course=untracked)

    def test_payload_shape(self):
        """Sections are labelled per type and instructors sent by PSRN or ERP id."""
        [(code, payload)] = build_push_payload(self.semester)
        self.assertEqual(code, 'CS F211')
        self.assertEqual(payload['id'], 11)
        self.assertTrue(payload['active'])
        self.assertEqual(payload['sections'], [
            {'section': 'L1', 'instructors': ['PSRN0042']},
            {'section': 'L2', 'instructors': ['ERP0007']},
            {'section': 'T1', 'instructors': ['ERP0007']},
        ])
        self.assertEqual(payload['preferredRooms'], ['F101', 'F102'])
        self.assertEqual(payload['ic'], 'PSRN0042')

    def test_multi_department_courses_are_opt_in(self):
        codes = [code for code, _ in build_push_payload(self.semester, send_multi_department=True)]
        self.assertEqual(sorted(codes), ['CS F211', 'CS F212'])

    @patch('allocation.push.jwt.decode')
    @patch('allocation.push.jwt.PyJWKClient')
    def test_push_puts_each_course(self, mock_jwks, mock_decode):
        """Every course is PUT with the caller's token in X-Api-Token."""
        mock_decode.return_value = {'email': 'dca@example.edu'}
        session = MagicMock()
        session.put.return_value = MagicMock(status_code=200)

        results = push_to_timetable(True, 'id-token', session=session)

        self.assertEqual(sorted(r['course_code'] for r in results), ['CS F211', 'CS F212'])
        self.assertTrue(all(r['ok'] for r in results))
        urls = sorted(c.args[0] for c in session.put.call_args_list)
        self.assertEqual(urls, [
            'http://ttd.test/api/2/courses/ims/11',
            'http://ttd.test/api/2/courses/ims/12',
        ])
        for call in session.put.call_args_list:
            self.assertEqual(call.kwargs['headers'], {'X-Api-Token': 'id-token'})

    @patch('allocation.push.requests.put')
    @patch('allocation.push.jwt.decode')
    @patch('allocation.push.jwt.PyJWKClient')
    def test_push_without_session_uses_requests(self, mock_jwks, mock_decode, mock_put):
        mock_decode.return_value = {'email': 'dca@example.edu'}
        mock_put.return_value = MagicMock(status_code=200)

        results = push_to_timetable(False, 'id-token')

        self.assertEqual([r['course_code'] for r in results], ['CS F211'])
        mock_put.assert_called_once()
        self.assertEqual(mock_put.call_args.args[0], 'http://ttd.test/api/2/courses/ims/11')

    @patch('allocation.push.jwt.decode')
    @patch('allocation.push.jwt.PyJWKClient')
    def test_one_failure_does_not_stop_others(self, mock_jwks, mock_decode):
        """A failing course is reported while the rest still go through."""
        ok = MagicMock(status_code=200)

        def put(url, **kwargs):
            if url.endswith('/12'):
                raise requests.ConnectionError('timetable down')
            return ok

        session = MagicMock()
        session.put.side_effect = put

        results = {r['course_code']: r for r in push_to_timetable(True, 'id-token', session=session)}
        self.assertTrue(results['CS F211']['ok'])
        self.assertFalse(results['CS F212']['ok'])
        self.assertIn('timetable down', results['CS F212']['error'])

    @patch('allocation.push.jwt.decode', side_effect=jwt.InvalidAudienceError('wrong audience'))
    @patch('allocation.push.jwt.PyJWKClient')
    def test_bad_token_aborts_before_any_call(self, mock_jwks, mock_decode):
        session = MagicMock()
        with self.assertRaises(ExternalSystemError):
            push_to_timetable(False, 'forged', session=session)
        session.put.assert_not_called()

    @override_settings(IS_STAGING=True)
    @patch('allocation.push.jwt.PyJWKClient')
    def test_staging_is_forbidden(self, mock_jwks):
        with self.assertRaises(ForbiddenError):
            push_to_timetable(False, 'id-token', session=MagicMock())
        mock_jwks.assert_not_called()
