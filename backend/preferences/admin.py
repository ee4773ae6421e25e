from django.contrib import admin
from .models import FormTemplate, TemplateField, Form, FormResponse


class TemplateFieldInline(admin.TabularInline):
    model = TemplateField
    extra = 0
    fields = ['order', 'label', 'type', 'is_required', 'preference_count', 'preference_type', 'group', 'viewable_by_role']


@admin.register(FormTemplate)
class FormTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_by', 'created_at']
    search_fields = ['name']
    inlines = [TemplateFieldInline]


@admin.register(Form)
class FormAdmin(admin.ModelAdmin):
    list_display = ['title', 'template', 'published_to_role', 'published_date', 'allocation_deadline']
    list_filter = ['published_to_role']
    search_fields = ['title']
    readonly_fields = ['email_msg_id', 'created_at', 'updated_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('template', 'published_to_role')


@admin.register(FormResponse)
class FormResponseAdmin(admin.ModelAdmin):
    list_display = ['form', 'submitted_by', 'template_field', 'course', 'preference', 'teaching_allocation', 'submitted_at']
    list_filter = ['form', 'template_field__type']
    search_fields = ['submitted_by__email', 'course__code']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('form', 'submitted_by', 'template_field', 'course')
