# backend/allocation/views.py
import logging

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import ALLOCATION_VIEW, ALLOCATION_WRITE, capability, require_capability
from . import export, services
from .push import push_to_timetable
from .serializers import (
    AddSectionSerializer,
    CandidateQuerySerializer,
    CreateMasterSerializer,
    CreditLoadQuerySerializer,
    InstructorEmailSerializer,
    MasterAllocationSerializer,
    PushSerializer,
    SectionSerializer,
    SetICSerializer,
    SetRoomSerializer,
)

logger = logging.getLogger(__name__)


class ReadWriteCapabilityMixin:
    """GET needs allocation:view, anything else allocation:write."""

    def get_permissions(self):
        key = ALLOCATION_VIEW if self.request.method == "GET" else ALLOCATION_WRITE
        return [capability(key)()]


class AllocationListCreateView(ReadWriteCapabilityMixin, APIView):
    """
    GET  every master allocation of the latest semester with numbered sections
    POST start allocating a course (optionally with IC and initial sections)
    """

    def get(self, request):
        return Response(services.list_allocations())

    @extend_schema(request=CreateMasterSerializer, responses={201: MasterAllocationSerializer})
    def post(self, request):
        s = CreateMasterSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        master = services.create_master(
            s.validated_data["course_code"],
            ic_email=s.validated_data.get("ic_email") or None,
            sections=s.validated_data["sections"],
        )
        return Response(MasterAllocationSerializer(master).data, status=status.HTTP_201_CREATED)


class MasterDetailView(APIView):
    permission_classes = [capability(ALLOCATION_WRITE)]

    def delete(self, request, master_id):
        services.delete_master(master_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MasterICView(APIView):
    permission_classes = [capability(ALLOCATION_WRITE)]

    @extend_schema(request=SetICSerializer, responses={200: MasterAllocationSerializer})
    def put(self, request, master_id):
        s = SetICSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        master = services.set_ic(master_id, s.validated_data.get("email"))
        return Response(MasterAllocationSerializer(master).data)


class SectionCreateView(APIView):
    permission_classes = [capability(ALLOCATION_WRITE)]

    @extend_schema(request=AddSectionSerializer, responses={201: SectionSerializer})
    def post(self, request, master_id):
        s = AddSectionSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        section = services.add_section(master_id, s.validated_data["type"])
        return Response(SectionSerializer(section).data, status=status.HTTP_201_CREATED)


class SectionDetailView(APIView):
    permission_classes = [capability(ALLOCATION_WRITE)]

    def delete(self, request, section_id):
        services.remove_section(section_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class SectionRoomView(APIView):
    permission_classes = [capability(ALLOCATION_WRITE)]

    @extend_schema(request=SetRoomSerializer, responses={200: SectionSerializer})
    def put(self, request, section_id):
        s = SetRoomSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        section = services.set_room(section_id, s.validated_data.get("room_id"))
        return Response(SectionSerializer(section).data)


class SectionInstructorView(APIView):
    """
    POST   assign an instructor to the section
    DELETE dismiss them (``email`` in the body)
    """
    permission_classes = [capability(ALLOCATION_WRITE)]

    @extend_schema(request=InstructorEmailSerializer, responses={201: dict})
    def post(self, request, section_id):
        s = InstructorEmailSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        services.assign_instructor(section_id, s.validated_data["email"])
        logger.info("Assignment by %s", request.user.email)
        return Response({"detail": "Instructor assigned."}, status=status.HTTP_201_CREATED)

    @extend_schema(request=InstructorEmailSerializer, responses={200: dict})
    def delete(self, request, section_id):
        s = InstructorEmailSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        services.dismiss_instructor(section_id, s.validated_data["email"])
        logger.info("Dismissal by %s", request.user.email)
        return Response({"detail": "Instructor dismissed."})


class AllocationStatusView(APIView):
    permission_classes = [capability(ALLOCATION_VIEW)]

    def get(self, request):
        return Response(services.allocation_status())


class CreditLoadView(APIView):
    permission_classes = [capability(ALLOCATION_VIEW)]

    @extend_schema(parameters=[
        OpenApiParameter("email", str, required=True),
        OpenApiParameter("section_type", str, required=False),
    ])
    def get(self, request):
        s = CreditLoadQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        load = services.credit_load(s.validated_data["email"], s.validated_data.get("section_type"))
        return Response({"email": s.validated_data["email"], "credit_load": round(load, 2)})


class CandidatesView(APIView):
    permission_classes = [capability(ALLOCATION_VIEW)]

    @extend_schema(parameters=[
        OpenApiParameter("course_code", str, required=True),
        OpenApiParameter("section_type", str, required=True),
        OpenApiParameter("user_type", str, required=False),
        OpenApiParameter("section_id", int, required=False),
    ])
    def get(self, request):
        s = CandidateQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        return Response(services.instructor_candidates(
            data["course_code"],
            data["section_type"],
            user_type=data.get("user_type"),
            section_id=data.get("section_id"),
        ))


class InstructorDetailsView(APIView):
    """An instructor's sections. Anyone may read their own; others need allocation:view."""

    def get(self, request, email):
        if email.strip().lower() != request.user.email:
            require_capability(request.user, ALLOCATION_VIEW)
        return Response(services.instructor_details(email))


class LoadMatrixView(APIView):
    permission_classes = [capability(ALLOCATION_VIEW)]

    def get(self, request):
        return Response(services.load_matrix())


class LoadMatrixExportView(APIView):
    permission_classes = [capability(ALLOCATION_VIEW)]

    @extend_schema(responses={(200, export.XLSX_MIME): OpenApiTypes.BINARY})
    def get(self, request):
        content = export.matrix_workbook(services.load_matrix())
        response = HttpResponse(content, content_type=export.XLSX_MIME)
        response["Content-Disposition"] = 'attachment; filename="credit_load.xlsx"'
        return response


class PushToTimetableView(APIView):
    permission_classes = [capability(ALLOCATION_WRITE)]

    @extend_schema(request=PushSerializer, responses={200: dict})
    def post(self, request):
        s = PushSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        results = push_to_timetable(
            s.validated_data["send_multi_department_courses"],
            s.validated_data["id_token"],
        )
        failed = [r for r in results if not r["ok"]]
        logger.info("TTD push requested by %s", request.user.email)
        return Response({
            "detail": "Courses pushed successfully." if not failed else "Some courses could not be pushed.",
            "results": results,
        })
