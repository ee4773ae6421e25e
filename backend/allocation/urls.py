# backend/allocation/urls.py
from django.urls import path
from . import views

app_name = "allocation"

urlpatterns = [
    path("", views.AllocationListCreateView.as_view(), name="list"),
    path("<int:master_id>/", views.MasterDetailView.as_view(), name="master"),
    path("<int:master_id>/ic/", views.MasterICView.as_view(), name="set_ic"),
    path("<int:master_id>/sections/", views.SectionCreateView.as_view(), name="add_section"),
    path("sections/<int:section_id>/", views.SectionDetailView.as_view(), name="section"),
    path("sections/<int:section_id>/room/", views.SectionRoomView.as_view(), name="set_room"),
    path("sections/<int:section_id>/instructors/", views.SectionInstructorView.as_view(), name="section_instructors"),

    path("status/", views.AllocationStatusView.as_view(), name="status"),
    path("credit-load/", views.CreditLoadView.as_view(), name="credit_load"),
    path("candidates/", views.CandidatesView.as_view(), name="candidates"),
    path("instructors/<str:email>/", views.InstructorDetailsView.as_view(), name="instructor_details"),
    path("matrix/", views.LoadMatrixView.as_view(), name="matrix"),
    path("matrix/export/", views.LoadMatrixExportView.as_view(), name="matrix_export"),
    path("push/", views.PushToTimetableView.as_view(), name="push"),
]
