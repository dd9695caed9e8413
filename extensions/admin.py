from django import forms
from django.contrib import admin, messages

from core.widgets import EasyMDETextarea, VueSourceTextarea

from .models import Extension
from .validation import ExtensionCompileError


class ExtensionAdminForm(forms.ModelForm):
    class Meta:
        model = Extension
        fields = ("name", "type", "description", "version", "is_enabled", "menu", "code")
        widgets = {
            "code": VueSourceTextarea(),
            "description": EasyMDETextarea(),
        }


@admin.register(Extension)
class ExtensionAdmin(admin.ModelAdmin):
    form = ExtensionAdminForm
    list_display = ("name", "extension_id", "type", "version", "is_enabled", "menu", "updated_at", "updated_by")
    list_filter = ("type", "is_enabled")
    search_fields = ("name", "extension_id", "description")
    readonly_fields = (
        "extension_id",
        "checksum",
        "compiled_at",
        "compile_warnings",
        "created_at",
        "created_by",
        "updated_at",
        "updated_by",
    )
    fieldsets = (
        (None, {"fields": ("name", "extension_id", "type", "menu", "version", "is_enabled", "description")}),
        ("Source", {"fields": ("code", "compile_warnings", "checksum", "compiled_at")}),
        ("Audit", {"fields": ("created_at", "created_by", "updated_at", "updated_by")}),
    )
    actions = ("enable_extensions", "disable_extensions", "recompile_extensions")

    @admin.display(description="Warnings")
    def compile_warnings(self, obj):
        warnings = (obj.compiled or {}).get("warnings") or []
        return "; ".join(warnings) or "-"

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)

    def _set_enabled(self, request, queryset, enabled: bool) -> int:
        count = 0
        for extension in queryset:
            if extension.is_enabled == enabled:
                continue
            extension.is_enabled = enabled
            extension.updated_by = request.user
            extension.save(update_fields=["is_enabled", "updated_by", "updated_at"])
            count += 1
        return count

    @admin.action(description="Enable selected extensions")
    def enable_extensions(self, request, queryset):
        count = self._set_enabled(request, queryset, True)
        messages.success(request, f"Enabled {count} extension(s).")

    @admin.action(description="Disable selected extensions")
    def disable_extensions(self, request, queryset):
        count = self._set_enabled(request, queryset, False)
        messages.success(request, f"Disabled {count} extension(s).")

    @admin.action(description="Recompile selected extensions")
    def recompile_extensions(self, request, queryset):
        compiled = 0
        for extension in queryset:
            try:
                extension.recompile()
            except ExtensionCompileError as exc:
                messages.error(request, f"{extension.name}: {exc}")
                continue
            compiled += 1
        messages.success(request, f"Recompiled {compiled} extension(s).")
