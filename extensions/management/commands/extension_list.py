import json
from typing import Any

from django.core.management.base import BaseCommand

from extensions.models import Extension


class Command(BaseCommand):
    help = "List extensions with their type, status and linked menu."

    def add_arguments(self, parser):
        parser.add_argument("--type", choices=[Extension.TYPE_PAGE, Extension.TYPE_WIDGET], help="Only list one type.")
        parser.add_argument("--json", action="store_true", help="Emit JSON output.")

    def handle(self, *args, **options):
        extension_type = options.get("type")
        as_json = options.get("json", False)

        extensions = Extension.objects.select_related("menu")
        if extension_type:
            extensions = extensions.filter(type=extension_type)

        rows = [self._serialize_extension(extension) for extension in extensions.order_by("pk")]

        if as_json:
            self.stdout.write(json.dumps(rows))
            return

        if not rows:
            self.stdout.write("No extensions found.")
            return

        headers = ["ID", "EXTENSION_ID", "NAME", "TYPE", "VERSION", "ENABLED", "MENU"]
        keys = {
            "ID": "id",
            "EXTENSION_ID": "extension_id",
            "NAME": "name",
            "TYPE": "type",
            "VERSION": "version",
            "ENABLED": "enabled",
            "MENU": "menu",
        }
        cells = [{header: str(row[keys[header]]) for header in headers} for row in rows]
        widths = {header: len(header) for header in headers}
        for cell in cells:
            for header in headers:
                widths[header] = max(widths[header], len(cell[header]))

        format_str = "  ".join(f"{{{header}:<{widths[header]}}}" for header in headers)
        self.stdout.write(format_str.format(**{header: header for header in headers}))
        for cell in cells:
            self.stdout.write(format_str.format(**cell))

    def _serialize_extension(self, extension: Extension) -> dict[str, Any]:
        return {
            "id": extension.pk,
            "extension_id": extension.extension_id,
            "name": extension.name,
            "type": extension.type,
            "version": extension.version,
            "enabled": "yes" if extension.is_enabled else "no",
            "menu": extension.menu.path if extension.menu_id else "",
            "checksum": extension.checksum,
            "compiled_at": extension.compiled_at.isoformat() if extension.compiled_at else "",
        }
