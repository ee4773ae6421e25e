from django.apps import AppConfig
from django.contrib import admin


class ErpConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "erp"
    verbose_name = "Department ERP"

    def ready(self) -> None:
        """Configure admin site when the app is ready"""
        from django.conf import settings

        admin.site.site_header = getattr(
            settings, "ADMIN_SITE_HEADER", "Department ERP Administration"
        )
        admin.site.site_title = getattr(
            settings, "ADMIN_SITE_TITLE", "Department ERP Admin"
        )
        admin.site.index_title = getattr(
            settings, "ADMIN_INDEX_TITLE", "Course Allocation"
        )
