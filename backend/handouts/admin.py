from django.contrib import admin
from .models import CourseHandoutRequest


@admin.register(CourseHandoutRequest)
class CourseHandoutRequestAdmin(admin.ModelAdmin):
    list_display = ['course', 'ic', 'semester', 'status', 'created_at']
    list_filter = ['status', 'semester']
    search_fields = ['course__code', 'ic__email']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('course', 'ic', 'semester')
