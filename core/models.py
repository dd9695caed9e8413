import re

from django.core.exceptions import ValidationError
from django.db import models

RESERVED_PATH_PREFIXES = ("/admin", "/api", "/static", "/media")

_MULTI_SLASH_RE = re.compile(r"/{2,}")


class Menu(models.Model):
    TYPE_MINI_SIDEBAR = "mini_sidebar"
    TYPE_MENU = "menu"
    TYPE_DROPDOWN_MENU = "dropdown_menu"
    TYPE_CHOICES = [
        (TYPE_MINI_SIDEBAR, "Mini sidebar"),
        (TYPE_MENU, "Menu"),
        (TYPE_DROPDOWN_MENU, "Dropdown menu"),
    ]

    label = models.CharField(max_length=255)
    path = models.CharField(max_length=255, unique=True)
    icon = models.CharField(max_length=100, blank=True, default="lucide:circle")
    type = models.CharField(max_length=32, choices=TYPE_CHOICES, default=TYPE_MENU)
    sidebar = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items",
        limit_choices_to={"type": TYPE_MINI_SIDEBAR},
    )
    description = models.TextField(blank=True, default="")
    order = models.PositiveIntegerField(default=0)
    is_enabled = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "pk"]

    def __str__(self):
        return f"{self.label} ({self.path})"

    @staticmethod
    def normalize_path(value: str) -> str:
        path = (value or "").strip()
        if not path.startswith("/"):
            path = f"/{path}"
        path = _MULTI_SLASH_RE.sub("/", path)
        if len(path) > 1:
            path = path.rstrip("/")
        return path

    def clean(self):
        super().clean()
        self.path = self.normalize_path(self.path)

        if any(ch.isspace() for ch in self.path):
            raise ValidationError({"path": "Paths cannot contain whitespace."})
        if ".." in self.path.split("/"):
            raise ValidationError({"path": "Paths cannot contain '..' segments."})
        for prefix in RESERVED_PATH_PREFIXES:
            if self.path == prefix or self.path.startswith(f"{prefix}/"):
                raise ValidationError({"path": f"Paths under {prefix} are reserved."})

        if self.sidebar_id:
            if self.type == self.TYPE_MINI_SIDEBAR:
                raise ValidationError({"sidebar": "A mini sidebar cannot belong to another sidebar."})
            if self.pk and self.sidebar_id == self.pk:
                raise ValidationError({"sidebar": "A menu cannot be its own sidebar."})
            if self.sidebar.type != self.TYPE_MINI_SIDEBAR:
                raise ValidationError({"sidebar": "Menus can only be grouped under a mini sidebar."})

    def save(self, *args, **kwargs):
        self.path = self.normalize_path(self.path)
        super().save(*args, **kwargs)


def _menu_json(menu: Menu) -> dict:
    return {
        "id": menu.pk,
        "label": menu.label,
        "path": menu.path,
        "icon": menu.icon,
        "type": menu.type,
    }


def sidebar_tree() -> list[dict]:
    """Enabled menus grouped under their mini sidebars.

    Menus without a sidebar (or whose sidebar is disabled) are listed at the
    top level after the sidebars.
    """
    menus = list(Menu.objects.filter(is_enabled=True).order_by("order", "pk"))
    sidebars = [m for m in menus if m.type == Menu.TYPE_MINI_SIDEBAR]
    sidebar_ids = {m.pk for m in sidebars}

    tree = []
    for sidebar in sidebars:
        node = _menu_json(sidebar)
        node["items"] = [
            _menu_json(m) for m in menus
            if m.sidebar_id == sidebar.pk and m.type != Menu.TYPE_MINI_SIDEBAR
        ]
        tree.append(node)

    for menu in menus:
        if menu.type == Menu.TYPE_MINI_SIDEBAR or menu.sidebar_id in sidebar_ids:
            continue
        node = _menu_json(menu)
        node["items"] = []
        tree.append(node)
    return tree
