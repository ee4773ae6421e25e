from django.contrib import admin
from .models import MasterAllocation, AllocationSection, SectionInstructor


class SectionInstructorInline(admin.TabularInline):
    model = SectionInstructor
    extra = 0
    autocomplete_fields = ['instructor']


class AllocationSectionInline(admin.TabularInline):
    model = AllocationSection
    extra = 0
    fields = ['type', 'timetable_room_id', 'created_at']
    readonly_fields = ['created_at']
    show_change_link = True


@admin.register(MasterAllocation)
class MasterAllocationAdmin(admin.ModelAdmin):
    list_display = ['course', 'semester', 'ic', 'created_at']
    list_filter = ['semester']
    search_fields = ['course__code', 'course__name', 'ic__email']
    inlines = [AllocationSectionInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('course', 'semester', 'ic')


@admin.register(AllocationSection)
class AllocationSectionAdmin(admin.ModelAdmin):
    list_display = ['master', 'type', 'timetable_room_id', 'created_at']
    list_filter = ['type', 'master__semester']
    search_fields = ['master__course__code']
    inlines = [SectionInstructorInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('master__course')
