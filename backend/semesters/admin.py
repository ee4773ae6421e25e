from django.contrib import admin
from .models import Semester


@admin.register(Semester)
class SemesterAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'academic_year', 'semester_type', 'allocation_status', 'allocation_deadline', 'form']
    list_filter = ['allocation_status', 'semester_type']
    search_fields = ['academic_year']
    readonly_fields = ['hod_at_start', 'dca_convener_at_start', 'created_at', 'updated_at']

    fieldsets = (
        (None, {
            'fields': ('academic_year', 'semester_type', 'start_date', 'end_date')
        }),
        ('Allocation', {
            'fields': ('allocation_status', 'allocation_deadline', 'form')
        }),
        ('Office holders at start', {
            'fields': ('hod_at_start', 'dca_convener_at_start'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('form', 'hod_at_start', 'dca_convener_at_start')
