"""
Test the error kinds added by the exception handler.
"""
from django.test import SimpleTestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError

from erp.exceptions import (
    ConflictError, ExternalSystemError, ForbiddenError, InvalidStateError, NoActiveAllocationError,
    NotFoundError, PreconditionError, erp_exception_handler,
)


class ExceptionHandlerTestCase(SimpleTestCase):
    """Test cases for erp_exception_handler."""

    def test_kind_and_status_per_error(self):
        cases = [
            (NoActiveAllocationError(), status.HTTP_404_NOT_FOUND, 'no_active_allocation'),
            (InvalidStateError(), status.HTTP_409_CONFLICT, 'invalid_state'),
            (PreconditionError(), status.HTTP_400_BAD_REQUEST, 'precondition_failed'),
            (NotFoundError('Course X not found'), status.HTTP_404_NOT_FOUND, 'not_found'),
            (ForbiddenError(), status.HTTP_403_FORBIDDEN, 'forbidden'),
            (ConflictError(), status.HTTP_409_CONFLICT, 'conflict'),
            (ExternalSystemError(), status.HTTP_502_BAD_GATEWAY, 'external_system_error'),
        ]
        for exc, code, kind in cases:
            with self.subTest(kind=kind):
                response = erp_exception_handler(exc, {})
                self.assertEqual(response.status_code, code)
                self.assertEqual(response.data['kind'], kind)

    def test_detail_is_kept(self):
        response = erp_exception_handler(NotFoundError('Course X not found'), {})
        self.assertEqual(response.data['detail'], 'Course X not found')

    def test_field_errors_are_invalid(self):
        response = erp_exception_handler(ValidationError({'email': ['Required.']}), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['kind'], 'invalid')
        self.assertEqual(response.data['email'], ['Required.'])

    def test_list_errors_are_wrapped(self):
        response = erp_exception_handler(ValidationError(['Bad payload.']), {})
        self.assertEqual(response.data, {'detail': ['Bad payload.'], 'kind': 'invalid'})

    def test_unhandled_exception_passes_through(self):
        self.assertIsNone(erp_exception_handler(ValueError('boom'), {}))
