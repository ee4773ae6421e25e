# backend/courses/views.py
import logging

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import ALLOCATION_VIEW, COURSES_SYNC, COURSES_WRITE, capability
from .models import Course, CourseGroup
from .serializers import CourseSerializer, CourseGroupSerializer, MarkCoursesSerializer
from .services import create_course, mark_courses, sync_courses

logger = logging.getLogger(__name__)


class CourseListCreateView(APIView):
    """
    GET  every course; ``?marked=true`` narrows to courses marked for allocation
    POST create a course by hand
    """

    def get_permissions(self):
        key = COURSES_WRITE if self.request.method == "POST" else ALLOCATION_VIEW
        return [capability(key)()]

    def get(self, request):
        qs = Course.objects.all()
        marked = request.query_params.get("marked")
        if marked is not None:
            qs = qs.filter(marked_for_allocation=marked.lower() in ("1", "true", "yes"))
        return Response(CourseSerializer(qs, many=True).data)

    @extend_schema(request=CourseSerializer, responses={201: CourseSerializer})
    def post(self, request):
        s = CourseSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        course = create_course(s.validated_data)
        logger.info("Course %s created by %s", course.code, request.user.email)
        return Response(CourseSerializer(course).data, status=status.HTTP_201_CREATED)


class MarkCoursesView(APIView):
    permission_classes = [capability(COURSES_WRITE)]

    @extend_schema(request=MarkCoursesSerializer, responses={200: CourseSerializer(many=True)})
    def post(self, request):
        s = MarkCoursesSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        courses = mark_courses(s.validated_data["course_codes"])
        return Response(CourseSerializer(courses, many=True).data)


class SyncCoursesView(APIView):
    permission_classes = [capability(COURSES_SYNC)]

    @extend_schema(request=None, responses={200: dict})
    def post(self, request, semester):
        created, updated = sync_courses(semester)
        return Response({
            "detail": "Courses synced successfully.",
            "created": created,
            "updated": updated,
        })


class CourseGroupListCreateView(generics.ListCreateAPIView):
    serializer_class = CourseGroupSerializer
    queryset = CourseGroup.objects.prefetch_related("courses")

    def get_permissions(self):
        key = COURSES_WRITE if self.request.method == "POST" else ALLOCATION_VIEW
        return [capability(key)()]
