# backend/preferences/views.py
import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from erp.exceptions import NotFoundError
from users.permissions import ALLOCATION_VIEW, BUILDER_WRITE, FORM_VIEW, capability
from . import services
from .models import Form, FormResponse, FormTemplate
from .serializers import (
    CreateFormSerializer,
    FormDetailSerializer,
    FormResponseSerializer,
    FormSerializer,
    FormTemplateSerializer,
    GroupedResponseSerializer,
    PeerPreferenceQuerySerializer,
    PeerPreferenceSerializer,
    ResponseSubmitSerializer,
)

logger = logging.getLogger(__name__)


def _flag(request, name):
    return request.query_params.get(name, "").lower() in ("1", "true", "yes")


class TemplateListCreateView(APIView):
    """
    GET  every form template with its fields
    POST build a new template from an ordered field list
    """

    def get_permissions(self):
        key = BUILDER_WRITE if self.request.method == "POST" else FORM_VIEW
        return [capability(key)()]

    def get(self, request):
        qs = FormTemplate.objects.prefetch_related("fields__group__courses")
        return Response(FormTemplateSerializer(qs, many=True).data)

    @extend_schema(request=FormTemplateSerializer, responses={201: FormTemplateSerializer})
    def post(self, request):
        s = FormTemplateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        template = services.create_template(
            s.validated_data["name"],
            s.validated_data.get("description", ""),
            [dict(f) for f in s.validated_data["fields"]],
            actor=request.user,
        )
        return Response(FormTemplateSerializer(template).data, status=status.HTTP_201_CREATED)


class TemplateDetailView(APIView):
    permission_classes = [capability(FORM_VIEW)]

    def get(self, request, template_id):
        try:
            template = FormTemplate.objects.prefetch_related("fields__group__courses").get(pk=template_id)
        except FormTemplate.DoesNotExist:
            raise NotFoundError(f"Template {template_id} not found.")
        return Response(FormTemplateSerializer(template).data)


class FormListCreateView(APIView):
    """
    GET  every form
    POST instantiate a form from a template
    """

    def get_permissions(self):
        key = BUILDER_WRITE if self.request.method == "POST" else FORM_VIEW
        return [capability(key)()]

    def get(self, request):
        qs = Form.objects.select_related("template", "published_to_role")
        return Response(FormSerializer(qs, many=True).data)

    @extend_schema(request=CreateFormSerializer, responses={201: FormSerializer})
    def post(self, request):
        s = CreateFormSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        form = services.create_form(actor=request.user, **s.validated_data)
        return Response(FormSerializer(form).data, status=status.HTTP_201_CREATED)


class FormDetailView(APIView):
    """
    A form with the fields the caller may see. ``?preview=true`` shows every
    field to reviewers; ``?check_response=true`` reports whether the caller
    has already answered.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter("preview", bool, required=False),
            OpenApiParameter("check_response", bool, required=False),
        ],
        responses={200: FormDetailSerializer},
    )
    def get(self, request, form_id):
        form = services.get_form(form_id)
        fields = services.visible_fields(form.template, request.user, preview=_flag(request, "preview"))
        context = {"visible_fields": fields, "already_responded": None}
        if _flag(request, "check_response"):
            context["already_responded"] = FormResponse.objects.filter(
                form=form, submitted_by=request.user
            ).exists()
        return Response(FormDetailSerializer(form, context=context).data)


class FormResponseView(APIView):
    """
    GET  the caller's own response
    POST submit the caller's single response
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, form_id):
        form = services.get_form(form_id)
        rows = services.user_response(form, request.user)
        return Response(FormResponseSerializer(rows, many=True).data)

    @extend_schema(request=ResponseSubmitSerializer, responses={201: dict})
    def post(self, request, form_id):
        s = ResponseSubmitSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        answers = services.register_response(form_id, request.user, s.validated_data["response"])
        return Response(
            {"detail": "Response submitted.", "answers": len(answers)},
            status=status.HTTP_201_CREATED,
        )


class FormResponsesView(APIView):
    """Every response to a form, grouped per submitter."""
    permission_classes = [capability(FORM_VIEW)]

    @extend_schema(responses={200: GroupedResponseSerializer(many=True)})
    def get(self, request, form_id):
        form = services.get_form(form_id)
        return Response(GroupedResponseSerializer(services.grouped_responses(form), many=True).data)


class PeerPreferencesView(APIView):
    """Other instructors' stated preferences for one course and section type."""
    permission_classes = [capability(ALLOCATION_VIEW)]

    @extend_schema(
        parameters=[
            OpenApiParameter("course_code", str, required=True),
            OpenApiParameter("section_type", str, required=True),
            OpenApiParameter("exclude", str, required=False),
        ],
        responses={200: PeerPreferenceSerializer(many=True)},
    )
    def get(self, request, form_id):
        q = PeerPreferenceQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        form = services.get_form(form_id)
        rows = services.other_preferences(
            form,
            " ".join(q.validated_data["course_code"].upper().split()),
            q.validated_data["section_type"],
            request.query_params.get("exclude") or request.user.email,
        )
        return Response(PeerPreferenceSerializer(rows, many=True).data)


class TeachingAllocationsView(APIView):
    permission_classes = [capability(ALLOCATION_VIEW)]

    def get(self, request, form_id):
        form = services.get_form(form_id)
        return Response({email: str(value) for email, value in services.teaching_allocations(form).items()})
