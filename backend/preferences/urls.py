from django.urls import path
from . import views

app_name = "preferences"

urlpatterns = [
    path("templates/", views.TemplateListCreateView.as_view(), name="templates"),
    path("templates/<int:template_id>/", views.TemplateDetailView.as_view(), name="template_detail"),
    path("forms/", views.FormListCreateView.as_view(), name="forms"),
    path("forms/<int:form_id>/", views.FormDetailView.as_view(), name="form_detail"),
    path("forms/<int:form_id>/response/", views.FormResponseView.as_view(), name="form_response"),
    path("forms/<int:form_id>/responses/", views.FormResponsesView.as_view(), name="form_responses"),
    path("forms/<int:form_id>/peer-preferences/", views.PeerPreferencesView.as_view(), name="peer_preferences"),
    path(
        "forms/<int:form_id>/teaching-allocations/",
        views.TeachingAllocationsView.as_view(),
        name="teaching_allocations",
    ),
]
