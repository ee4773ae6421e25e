from django.contrib import admin
from .models import Todo, Notification


@admin.register(Todo)
class TodoAdmin(admin.ModelAdmin):
    list_display = ['title', 'module', 'assigned_to', 'deadline', 'completed', 'created_at']
    list_filter = ['module', 'completed']
    search_fields = ['title', 'assigned_to__email', 'completion_event']
    readonly_fields = ['created_at', 'completed_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('assigned_to')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'module', 'user', 'read', 'created_at']
    list_filter = ['module', 'read']
    search_fields = ['title', 'user__email']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('user')
