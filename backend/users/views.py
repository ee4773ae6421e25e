# backend/users/views.py
import logging

from django.contrib.auth import authenticate
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema, OpenApiExample
from rest_framework import generics, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User, Role, Permission, UserRoles, UserType
from .permissions import ALLOCATION_VIEW, capability
from .serializers import (
    UserSerializer, InstructorSerializer, RoleSerializer, PermissionSerializer,
    UserRolesSerializer, RoleAssignmentSerializer, LoginSerializer,
)

logger = logging.getLogger(__name__)


class IsStaff(IsAuthenticated):
    def has_permission(self, request, view):
        return super().has_permission(request, view) and request.user.is_staff


class LoginView(generics.CreateAPIView):
    permission_classes = [AllowAny]
    serializer_class = LoginSerializer

    @extend_schema(
        request=LoginSerializer,
        responses={200: dict},
        examples=[OpenApiExample('Login', value={'email': 'hod@example.edu', 'password': 'abcabc'})],
    )
    def create(self, request, *args, **kwargs):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        user = authenticate(
            request,
            email=s.validated_data["email"].lower(),
            password=s.validated_data["password"],
        )
        if not user or user.deactivated:
            return Response({"detail": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)

        refresh = RefreshToken.for_user(user)
        logger.info("Login: %s", user.email)
        return Response({
            "user": UserSerializer(user).data,
            "tokens": {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
            },
        }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_view(request):
    from django.contrib.auth import logout as django_logout
    django_logout(request)
    return Response(status=204)


class UserProfileView(APIView):
    """The signed-in user with roles and granted capability keys."""

    @extend_schema(responses={200: UserSerializer})
    def get(self, request):
        user = request.user
        data = UserSerializer(user).data
        if user.is_staff:
            data["permissions"] = list(Permission.objects.values_list("permission_key", flat=True))
        else:
            data["permissions"] = list(
                Permission.objects.filter(
                    rolepermission__role__userroles__user=user,
                    rolepermission__role__userroles__is_active=True,
                ).distinct().values_list("permission_key", flat=True)
            )
        return Response(data)


class InstructorListView(APIView):
    """Active faculty and PhD scholars, optionally filtered by ``type``."""
    permission_classes = [capability(ALLOCATION_VIEW)]

    def get(self, request):
        qs = (
            User.objects.filter(type__in=[UserType.FACULTY, UserType.PHD], deactivated=False)
            .select_related("faculty", "phd")
            .order_by("type", "email")
        )
        kind = request.query_params.get("type")
        if kind:
            qs = qs.filter(type=kind)
        return Response(InstructorSerializer(qs, many=True).data)


class RoleListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsStaff]
    serializer_class = RoleSerializer
    queryset = Role.objects.all().order_by("role_name")


class PermissionListCreateView(generics.ListCreateAPIView):
    permission_classes = [IsStaff]
    serializer_class = PermissionSerializer
    queryset = Permission.objects.all().order_by("permission_key")


class UserRolesView(APIView):
    """
    GET    list every role assignment for the user
    POST   {role_name} adds an active role (roles are additive)
    DELETE {role_name} disables it
    """
    permission_classes = [IsStaff]

    def get(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        rows = UserRoles.objects.filter(user=user).select_related("role").order_by("-assigned_at")
        return Response(UserRolesSerializer(rows, many=True).data)

    @extend_schema(request=RoleAssignmentSerializer)
    def post(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        s = RoleAssignmentSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        user.assign_role(s.validated_data["role_name"])
        logger.info("Role %s assigned to %s by %s", s.validated_data["role_name"], user.email, request.user.email)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=RoleAssignmentSerializer)
    def delete(self, request, user_id):
        user = get_object_or_404(User, pk=user_id)
        s = RoleAssignmentSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        if not user.remove_role(s.validated_data["role_name"]):
            return Response({"detail": "Role not assigned to user."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)
