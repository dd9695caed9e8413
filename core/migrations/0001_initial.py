import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Menu",
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
                ("label", models.CharField(max_length=255)),
                ("path", models.CharField(max_length=255, unique=True)),
                ("icon", models.CharField(blank=True, default="lucide:circle", max_length=100)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("mini_sidebar", "Mini sidebar"),
                            ("menu", "Menu"),
                            ("dropdown_menu", "Dropdown menu"),
                        ],
                        default="menu",
                        max_length=32,
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                ("order", models.PositiveIntegerField(default=0)),
                ("is_enabled", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "sidebar",
                    models.ForeignKey(
                        blank=True,
                        limit_choices_to={"type": "mini_sidebar"},
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="items",
                        to="core.menu",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "pk"],
            },
        ),
    ]
