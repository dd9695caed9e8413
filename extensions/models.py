import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .validation import (
    TYPE_PAGE,
    TYPE_WIDGET,
    ExtensionCompileError,
    compile_source,
    validate_extension,
)


def generate_extension_id() -> str:
    return f"extension_{uuid.uuid4().hex[:12]}"


DEFAULT_CODE = """<template>
  <div class="p-4">
    <h1>{{ title }}</h1>
  </div>
</template>

<script setup>
const title = ref('Hello from my extension')
</script>
"""


class Extension(models.Model):
    TYPE_PAGE = TYPE_PAGE
    TYPE_WIDGET = TYPE_WIDGET
    TYPE_CHOICES = [
        (TYPE_PAGE, "Page"),
        (TYPE_WIDGET, "Widget"),
    ]

    name = models.CharField(max_length=255)
    extension_id = models.CharField(
        max_length=64, unique=True, default=generate_extension_id, editable=False
    )
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_PAGE)
    description = models.TextField(blank=True, default="")
    version = models.CharField(max_length=64, default="1.0.0")
    is_enabled = models.BooleanField(default=True)
    code = models.TextField(default=DEFAULT_CODE)
    menu = models.OneToOneField(
        "core.Menu",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="extension",
    )
    compiled = models.JSONField(default=dict, blank=True, editable=False)
    checksum = models.CharField(max_length=64, blank=True, default="", editable=False)
    compiled_at = models.DateTimeField(null=True, blank=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        ordering = ["name", "pk"]

    def __str__(self):
        return f"{self.name} ({self.get_type_display()})"

    @property
    def is_page(self) -> bool:
        return self.type == self.TYPE_PAGE

    @property
    def is_widget(self) -> bool:
        return self.type == self.TYPE_WIDGET

    def clean(self):
        super().clean()
        result = validate_extension(
            name=self.name,
            type=self.type,
            version=self.version,
            code=self.code,
            has_menu=self.menu_id is not None,
            extension_id=self.extension_id,
        )
        if not result.is_valid:
            raise ValidationError(result.errors_by_field())

    def compile(self) -> dict:
        """Recompile the stored source into ``compiled``.

        Raises ExtensionCompileError and leaves the previous output untouched
        when the source does not parse.
        """
        result = compile_source(self.code, extension_id=self.extension_id)
        if not result.is_valid:
            raise ExtensionCompileError(result)
        self.compiled = result.descriptor
        self.checksum = result.descriptor["checksum"]
        self.compiled_at = timezone.now()
        return self.compiled

    def recompile(self) -> dict:
        """Compile the stored source and persist only the compiled output."""
        compiled = self.compile()
        super().save(update_fields=["compiled", "checksum", "compiled_at", "updated_at"])
        return compiled

    def save(self, *args, **kwargs):
        update_fields = kwargs.get("update_fields")
        if update_fields is None:
            self.compile()
        elif "code" in update_fields:
            self.compile()
            kwargs["update_fields"] = set(update_fields) | {"compiled", "checksum", "compiled_at"}
        super().save(*args, **kwargs)
