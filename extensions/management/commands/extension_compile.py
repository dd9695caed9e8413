import logging

from django.core.management.base import BaseCommand, CommandError

from extensions.models import Extension
from extensions.validation import ExtensionCompileError, compile_source

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Recompile stored extension sources."

    def add_arguments(self, parser):
        parser.add_argument("--id", dest="pk", type=int, default=None, help="Only compile this extension id.")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Check sources without saving compiled output.",
        )

    def handle(self, *args, **options):
        pk = options["pk"]
        dry_run = options["dry_run"]

        qs = Extension.objects.order_by("pk")
        if pk is not None:
            if not qs.filter(pk=pk).exists():
                raise CommandError(f"Extension {pk} not found.")
            qs = qs.filter(pk=pk)

        compiled = 0
        failed = []
        for extension in qs:
            if dry_run:
                result = compile_source(extension.code, extension_id=extension.extension_id)
                error = None if result.is_valid else result.summary()
            else:
                try:
                    extension.recompile()
                    error = None
                except ExtensionCompileError as exc:
                    error = str(exc)

            if error:
                logger.warning("Extension %s failed to compile: %s", extension.extension_id, error)
                self.stdout.write(self.style.WARNING(f"  {extension.name} ({extension.pk}): {error}"))
                failed.append(extension.pk)
                continue
            compiled += 1

        prefix = "DRY RUN:" if dry_run else "Done."
        self.stdout.write(self.style.SUCCESS(f"{prefix} Compiled {compiled} extension(s), {len(failed)} failed."))
        if failed:
            raise CommandError(f"Extensions failed to compile: {', '.join(str(pk) for pk in failed)}")
