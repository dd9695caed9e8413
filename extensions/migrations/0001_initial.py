import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import extensions.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Extension",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "extension_id",
                    models.CharField(
                        default=extensions.models.generate_extension_id,
                        editable=False,
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "type",
                    models.CharField(
                        choices=[("page", "Page"), ("widget", "Widget")],
                        default="page",
                        max_length=16,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("version", models.CharField(default="1.0.0", max_length=64)),
                ("is_enabled", models.BooleanField(default=True)),
                ("code", models.TextField(default=extensions.models.DEFAULT_CODE)),
                ("compiled", models.JSONField(blank=True, default=dict, editable=False)),
                ("checksum", models.CharField(blank=True, default="", editable=False, max_length=64)),
                ("compiled_at", models.DateTimeField(blank=True, editable=False, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "menu",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="extension",
                        to="core.menu",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["name", "pk"],
            },
        ),
    ]
