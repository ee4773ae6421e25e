from django.contrib import admin
from .models import Course, CourseGroup


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'lecture_units', 'practical_units', 'offered_as', 'offered_to',
                    'marked_for_allocation', 'fetched_from_ttd']
    list_filter = ['offered_as', 'offered_to', 'marked_for_allocation', 'fetched_from_ttd']
    search_fields = ['code', 'name']
    ordering = ['code']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('code', 'name', 'offered_as', 'offered_to', 'offered_also_by')
        }),
        ('Units', {
            'fields': ('lecture_units', 'practical_units', 'total_units')
        }),
        ('Allocation', {
            'fields': ('marked_for_allocation', 'fetched_from_ttd', 'timetable_course_id')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(CourseGroup)
class CourseGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'created_at']
    search_fields = ['name']
    filter_horizontal = ['courses']
