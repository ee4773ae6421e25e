# backend/semesters/views.py
import logging

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import ALLOCATION_VIEW, FORM_PUBLISH, SEMESTER_WRITE, capability
from users.serializers import InstructorSerializer
from . import services
from .serializers import (
    CreateSemesterSerializer,
    LatestSemesterQuerySerializer,
    LatestSemesterSerializer,
    LinkFormSerializer,
    PublishFormSerializer,
    SemesterSerializer,
)

logger = logging.getLogger(__name__)


class SemesterListCreateView(APIView):
    """
    GET  every semester, newest first
    POST open a new semester once the latest one has completed
    """

    def get_permissions(self):
        key = SEMESTER_WRITE if self.request.method == "POST" else ALLOCATION_VIEW
        return [capability(key)()]

    def get(self, request):
        return Response(SemesterSerializer(services.list_semesters(), many=True).data)

    @extend_schema(request=CreateSemesterSerializer, responses={201: SemesterSerializer})
    def post(self, request):
        s = CreateSemesterSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        semester = services.create_semester(**s.validated_data)
        return Response(SemesterSerializer(semester).data, status=status.HTTP_201_CREATED)


class LatestSemesterView(APIView):
    """
    The semester every allocation operation acts on. Readable by any signed-in
    user so the portal can show the current phase.
    """
    permission_classes = [IsAuthenticated]

    @extend_schema(
        parameters=[
            OpenApiParameter("minimal", bool, required=False),
            OpenApiParameter("stats", bool, required=False),
        ],
        responses={200: LatestSemesterSerializer},
    )
    def get(self, request):
        q = LatestSemesterQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        data = services.get_latest_semester(**q.validated_data)
        return Response(LatestSemesterSerializer(data).data)


class LinkFormView(APIView):
    permission_classes = [capability(SEMESTER_WRITE)]

    @extend_schema(request=LinkFormSerializer, responses={200: SemesterSerializer})
    def post(self, request, semester_id):
        s = LinkFormSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        semester = services.link_form(semester_id, s.validated_data["form_id"])
        return Response(SemesterSerializer(semester).data)


class PublishFormView(APIView):
    permission_classes = [capability(FORM_PUBLISH)]

    @extend_schema(request=PublishFormSerializer, responses={200: SemesterSerializer})
    def post(self, request, semester_id):
        s = PublishFormSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        semester = services.publish_form(
            semester_id,
            s.validated_data["allocation_deadline"],
            s.validated_data["email_body"],
            actor=request.user,
            role_id=s.validated_data.get("role_id"),
        )
        logger.info("Form publish requested by %s", request.user.email)
        return Response(SemesterSerializer(semester).data)


class EndFormView(APIView):
    permission_classes = [capability(SEMESTER_WRITE)]

    @extend_schema(request=None, responses={200: SemesterSerializer})
    def post(self, request, semester_id):
        semester = services.end_form(semester_id)
        return Response(SemesterSerializer(semester).data)


class EndAllocationView(APIView):
    permission_classes = [capability(SEMESTER_WRITE)]

    @extend_schema(request=None, responses={200: SemesterSerializer})
    def post(self, request, semester_id):
        semester = services.end_allocation(semester_id)
        return Response(SemesterSerializer(semester).data)


class RemindView(APIView):
    permission_classes = [capability(FORM_PUBLISH)]

    @extend_schema(request=None, responses={200: InstructorSerializer(many=True)})
    def post(self, request):
        reminded = services.remind(actor=request.user)
        if not reminded:
            return Response({"detail": "Everyone has already responded.", "reminded": []})
        return Response({
            "detail": f"Reminder sent to {len(reminded)} user(s).",
            "reminded": InstructorSerializer(reminded, many=True).data,
        })
