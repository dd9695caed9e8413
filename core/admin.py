from django.contrib import admin

from .models import Menu


@admin.register(Menu)
class MenuAdmin(admin.ModelAdmin):
    list_display = ("label", "path", "type", "sidebar", "order", "is_enabled", "linked_extension")
    list_filter = ("type", "is_enabled")
    list_editable = ("order", "is_enabled")
    search_fields = ("label", "path")
    readonly_fields = ("created_at", "updated_at")
    fields = ("label", "path", "icon", "type", "sidebar", "order", "is_enabled", "description", "created_at", "updated_at")

    @admin.display(description="Extension")
    def linked_extension(self, obj):
        extension = getattr(obj, "extension", None)
        return extension.name if extension else "-"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("sidebar", "extension")
