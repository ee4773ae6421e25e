#backend/users/urls.py
from django.urls import path
from . import views
from rest_framework_simplejwt.views import TokenRefreshView

app_name = 'users'

urlpatterns = [
    # =====================================================
    # AUTHENTICATION
    # =====================================================
    path('login/', views.LoginView.as_view(), name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # =====================================================
    # PROFILE / DIRECTORY
    # =====================================================
    path('me/', views.UserProfileView.as_view(), name='me'),
    path('instructors/', views.InstructorListView.as_view(), name='instructors'),

    # =====================================================
    # RBAC (staff only)
    # =====================================================
    path('roles/', views.RoleListCreateView.as_view(), name='roles'),
    path('permissions/', views.PermissionListCreateView.as_view(), name='permissions'),
    path('user-roles/<int:user_id>/', views.UserRolesView.as_view(), name='user_roles'),
]
