# backend/semesters/urls.py
from django.urls import path
from .views import (
    SemesterListCreateView,
    LatestSemesterView,
    LinkFormView,
    PublishFormView,
    EndFormView,
    EndAllocationView,
    RemindView,
)

app_name = "semesters"

urlpatterns = [
    path("", SemesterListCreateView.as_view(), name="list"),
    path("latest/", LatestSemesterView.as_view(), name="latest"),
    path("remind/", RemindView.as_view(), name="remind"),
    path("<int:semester_id>/link-form/", LinkFormView.as_view(), name="link_form"),
    path("<int:semester_id>/publish/", PublishFormView.as_view(), name="publish"),
    path("<int:semester_id>/end-form/", EndFormView.as_view(), name="end_form"),
    path("<int:semester_id>/end-allocation/", EndAllocationView.as_view(), name="end_allocation"),
]
