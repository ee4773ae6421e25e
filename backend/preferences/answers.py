"""
Typed answers for the two field kinds a form template can hold.

Every consumer dispatches on the answer class and raises on anything it does
not know, so adding a third kind fails loudly instead of being skipped.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from rest_framework.exceptions import ValidationError

from .models import FieldType


@dataclass(frozen=True)
class PreferenceAnswer:
    field_id: int
    course_code: str
    preference: int
    taken_consecutively: bool = False


@dataclass(frozen=True)
class TeachingAllocationAnswer:
    field_id: int
    teaching_allocation: Decimal


def parse_answer(raw, field):
    """Build the answer matching ``field.type`` from one raw response item."""
    if field.type == FieldType.PREFERENCE:
        code = raw.get("course_code")
        preference = raw.get("preference")
        if not code or preference is None:
            raise ValidationError({"response": f"Field '{field.label}' needs course_code and preference."})
        try:
            preference = int(preference)
        except (TypeError, ValueError):
            raise ValidationError({"response": f"Preference for '{field.label}' must be an integer."})
        return PreferenceAnswer(
            field_id=field.pk,
            course_code=" ".join(str(code).upper().split()),
            preference=preference,
            taken_consecutively=bool(raw.get("taken_consecutively", False)),
        )
    if field.type == FieldType.TEACHING_ALLOCATION:
        try:
            value = Decimal(str(raw.get("teaching_allocation")))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError({"response": f"Field '{field.label}' needs a numeric teaching_allocation."})
        if value < 0 or value > 100:
            raise ValidationError({"response": "Teaching allocation must be between 0 and 100."})
        return TeachingAllocationAnswer(field_id=field.pk, teaching_allocation=value)
    raise ValueError(f"Unhandled field type: {field.type}")


def response_values(answer):
    """Column values a FormResponse row stores for ``answer``."""
    if isinstance(answer, PreferenceAnswer):
        return {
            "template_field_id": answer.field_id,
            "course_id": answer.course_code,
            "preference": answer.preference,
            "taken_consecutively": answer.taken_consecutively,
        }
    if isinstance(answer, TeachingAllocationAnswer):
        return {
            "template_field_id": answer.field_id,
            "teaching_allocation": answer.teaching_allocation,
        }
    raise TypeError(f"Unhandled answer type: {type(answer).__name__}")
