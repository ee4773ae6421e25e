"""
Factory classes for form templates, forms and responses.
"""
from datetime import timedelta

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory
from courses.models import SectionType
from preferences.models import FieldType, Form, FormResponse, FormTemplate, TemplateField


class FormTemplateFactory(DjangoModelFactory):
    class Meta:
        model = FormTemplate

    name = factory.Sequence(lambda n: f"Preference template {n}")
    description = factory.Faker('sentence', nb_words=8)


class PreferenceFieldFactory(DjangoModelFactory):
    """Ranked lecture preferences, up to three choices."""

    class Meta:
        model = TemplateField

    template = factory.SubFactory(FormTemplateFactory)
    label = factory.Sequence(lambda n: f"Lecture preferences {n}")
    type = FieldType.PREFERENCE
    is_required = False
    order = factory.Sequence(lambda n: n)
    preference_count = 3
    preference_type = SectionType.LECTURE


class TeachingAllocationFieldFactory(DjangoModelFactory):
    class Meta:
        model = TemplateField

    template = factory.SubFactory(FormTemplateFactory)
    label = 'Teaching allocation (%)'
    type = FieldType.TEACHING_ALLOCATION
    is_required = False
    order = factory.Sequence(lambda n: n)


class FormFactory(DjangoModelFactory):
    class Meta:
        model = Form

    template = factory.SubFactory(FormTemplateFactory)
    title = factory.Sequence(lambda n: f"Course preferences {n}")


class PublishedFormFactory(FormFactory):
    published_date = factory.LazyFunction(timezone.now)
    allocation_deadline = factory.LazyFunction(lambda: timezone.now() + timedelta(days=7))


class FormResponseFactory(DjangoModelFactory):
    """Preference row; set ``form``, ``submitted_by``, ``template_field`` and ``course``."""

    class Meta:
        model = FormResponse

    preference = 1
    taken_consecutively = False
