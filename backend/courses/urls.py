# backend/courses/urls.py
from django.urls import path
from .views import (
    CourseListCreateView,
    MarkCoursesView,
    SyncCoursesView,
    CourseGroupListCreateView,
)

app_name = "courses"

urlpatterns = [
    path("", CourseListCreateView.as_view(), name="list"),
    path("mark/", MarkCoursesView.as_view(), name="mark"),
    path("sync/<str:semester>/", SyncCoursesView.as_view(), name="sync"),
    path("groups/", CourseGroupListCreateView.as_view(), name="groups"),
]
